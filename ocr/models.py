# SPDX-License-Identifier: AGPL-3.0-only

"""
Pydantic models for the OCR pipeline.

All models are request scoped: they are built from the uploaded payload,
passed between the pipeline stages and discarded once the response is sent.
"""

import base64
import binascii
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from common.errors import ErrorKind, InvalidInput, ToolHubError, STATUS_CODES

PDF_MIME_TYPE = "application/pdf"
DEFAULT_MIME_TYPE = "image/png"


class PageInput(BaseModel):
    """One uploaded image or document, ready for OCR."""

    model_config = ConfigDict(frozen=True)

    image_bytes: bytes = Field(description="Raw image or document bytes")
    mime_type: str = Field(DEFAULT_MIME_TYPE, description="image/* or application/pdf")

    @field_validator("image_bytes")
    @classmethod
    def validate_image_bytes(cls, v):
        if not v:
            raise ValueError("image data is empty")
        return v

    @field_validator("mime_type")
    @classmethod
    def validate_mime_type(cls, v):
        mime = (v or DEFAULT_MIME_TYPE).strip().lower()
        if mime == PDF_MIME_TYPE:
            return mime
        if mime.startswith("image/") and len(mime) > len("image/"):
            return mime
        raise ValueError(f"unsupported mime type '{v}'")

    @classmethod
    def from_base64(cls, data: Optional[str], mime_type: Optional[str] = None) -> "PageInput":
        """
        Build a page from base64 text as sent by the front-end.

        A ``data:<mime>;base64,`` prefix is accepted; its mime type is used
        when ``mime_type`` is not given.

        Raises:
            InvalidInput: If the data is missing, not base64 or of an unknown type
        """
        if not isinstance(data, str) or not data.strip():
            raise InvalidInput("Please provide base64 image data")

        payload = data.strip()
        if payload.startswith("data:") and "," in payload:
            header, payload = payload.split(",", 1)
            if not mime_type:
                mime_type = header[len("data:"):].split(";", 1)[0] or None

        # line-wrapped base64 (MIME style) is accepted
        payload = "".join(payload.split())
        try:
            raw = base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError):
            raise InvalidInput("Image data is not valid base64")

        try:
            return cls(image_bytes=raw, mime_type=mime_type or DEFAULT_MIME_TYPE)
        except ValidationError as e:
            detail = e.errors()[0].get("msg", "invalid page") if e.errors() else "invalid page"
            raise InvalidInput(f"Invalid page: {detail}")

    @property
    def is_pdf(self) -> bool:
        return self.mime_type == PDF_MIME_TYPE

    @property
    def document_type(self) -> str:
        """Document tag expected by the OCR endpoint."""
        return "document_url" if self.is_pdf else "image_url"

    def data_uri(self) -> str:
        encoded = base64.b64encode(self.image_bytes).decode("ascii")
        return f"data:{self.mime_type};base64,{encoded}"


class OcrResult(BaseModel):
    """Outcome of OCR for one page."""
    page_index: int = Field(ge=0, description="Zero-based position in the request")
    text: str = Field("", description="Extracted text, empty when the page failed")
    succeeded: bool = Field(True, description="Whether the OCR call succeeded")
    error_detail: Optional[str] = Field(None, description="Last failure detail for a failed page")

    @property
    def page_number(self) -> int:
        return self.page_index + 1


class PageStatus(BaseModel):
    """Per-page status returned to the caller."""
    page: int
    succeeded: bool
    error: Optional[str] = None


class AggregatedText(BaseModel):
    """Ordered OCR results of a multi-page request."""

    PAGE_MARKER: ClassVar[str] = "--- Page {number} ---"

    results: List[OcrResult] = Field(default_factory=list)

    @property
    def text(self) -> str:
        blocks = [
            f"{self.PAGE_MARKER.format(number=r.page_number)}\n\n{r.text}"
            for r in sorted(self.results, key=lambda r: r.page_index)
        ]
        return "\n\n".join(blocks)

    @property
    def failed_pages(self) -> List[int]:
        return [r.page_number for r in self.results if not r.succeeded]

    @property
    def has_partial_failure(self) -> bool:
        return bool(self.failed_pages) and len(self.failed_pages) < len(self.results)

    @property
    def has_content(self) -> bool:
        return any(r.text.strip() for r in self.results if r.succeeded)

    def page_statuses(self) -> List[PageStatus]:
        return [
            PageStatus(page=r.page_number, succeeded=r.succeeded, error=r.error_detail)
            for r in sorted(self.results, key=lambda r: r.page_index)
        ]


class TargetShape(str, Enum):
    """Second-stage output shapes."""
    HTML = "html"
    TABULAR_JSON = "tabular_json"


class ReshapeRequest(BaseModel):
    source_text: str
    target_shape: TargetShape


class ReshapeResult(BaseModel):
    """HTML markup or tabular rows produced by the second stage."""
    kind: TargetShape
    markup: Optional[str] = None
    rows: Optional[List[Dict[str, str]]] = None


class CsvTable(BaseModel):
    """Table read straight from an image as CSV."""
    csv: str
    rows: List[List[str]] = Field(default_factory=list)

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def column_count(self) -> int:
        return len(self.rows[0]) if self.rows else 0

    def to_response(self) -> Dict[str, Any]:
        return {
            "success": True,
            "csv": self.csv,
            "preview": self.rows,
            "rowCount": self.row_count,
            "columnCount": self.column_count,
        }


class PipelineMode(str, Enum):
    """What the caller wants back from the pipeline."""
    TEXT = "text"
    HTML = "html"
    TABLE = "table"
    CSV = "csv"


class PipelineRequest(BaseModel):
    """Normalized input of the OCR pipeline facade."""
    pages: List[PageInput] = Field(min_length=1)
    mode: PipelineMode = PipelineMode.TEXT
    multi_page: bool = False

    @classmethod
    def from_payload(cls, payload: Any, mode: PipelineMode = PipelineMode.TEXT) -> "PipelineRequest":
        """
        Build a request from a boundary payload.

        Accepts ``{"base64": ..., "mimeType": ...}`` for a single page or
        ``{"images": [{"base64": ..., "mimeType": ...}, ...]}`` for several.
        """
        if not isinstance(payload, dict):
            raise InvalidInput("Request body must be a JSON object")

        if "images" in payload:
            images = payload.get("images")
            if not isinstance(images, list) or not images:
                raise InvalidInput("Please provide an array of images")
            pages = []
            for i, image in enumerate(images):
                if not isinstance(image, dict) or not image.get("base64"):
                    raise InvalidInput(f"Image at index {i} is missing base64 data")
                pages.append(PageInput.from_base64(image.get("base64"), image.get("mimeType")))
            return cls(pages=pages, mode=mode, multi_page=True)

        page = PageInput.from_base64(payload.get("base64"), payload.get("mimeType"))
        return cls(pages=[page], mode=mode, multi_page=False)


class PipelineResult(BaseModel):
    """Successful pipeline outcome."""
    mode: PipelineMode
    text: str = ""
    html: Optional[str] = None
    rows: Optional[List[Dict[str, str]]] = None
    csv_table: Optional[CsvTable] = None
    page_count: int = 1
    multi_page: bool = False
    pages: List[PageStatus] = Field(default_factory=list)

    @property
    def ocr_length(self) -> int:
        return len(self.text)

    @property
    def failed_pages(self) -> List[int]:
        return [p.page for p in self.pages if not p.succeeded]

    def to_response(self) -> Dict[str, Any]:
        """Render the JSON body for the HTTP layer."""
        if self.mode == PipelineMode.CSV and self.csv_table is not None:
            return self.csv_table.to_response()
        if self.mode == PipelineMode.TABLE:
            return {
                "success": True,
                "data": self.rows or [],
                "rowCount": len(self.rows or []),
                "ocrLength": self.ocr_length,
            }

        body: Dict[str, Any] = {"success": True, "text": self.text}
        if self.mode == PipelineMode.HTML:
            body["html"] = self.html or ""
            body["images"] = []
        if self.multi_page:
            body["pageCount"] = self.page_count
            body["pages"] = [p.model_dump() for p in self.pages]
            body["failedPages"] = self.failed_pages
            if self.failed_pages:
                body["warning"] = ErrorKind.PARTIAL_PAGE_FAILURE.value
        return body


class PipelineError(BaseModel):
    """Failed pipeline outcome, already mapped to the closed error set."""
    kind: ErrorKind
    message: str
    status_code: int

    @classmethod
    def from_exception(cls, exc: ToolHubError) -> "PipelineError":
        return cls(kind=exc.kind, message=exc.message, status_code=exc.status_code)

    @classmethod
    def of(cls, kind: ErrorKind, message: str) -> "PipelineError":
        return cls(kind=kind, message=message, status_code=STATUS_CODES[kind])

    def to_response(self) -> Dict[str, Any]:
        return {"error": self.kind.value, "message": self.message}
