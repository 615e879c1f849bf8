# SPDX-License-Identifier: AGPL-3.0-only

"""
Remote vision OCR client.

Sends one image or PDF, embedded as a data URI, to the OCR model and returns
the extracted text. The remote service paginates PDFs itself; its page
fragments are joined in the order returned.
"""

import logging
import time
from typing import Any, Dict, List, Optional

import requests

from common.errors import OcrFailure
from common.llm_client import describe_request_error, post_json
from .models import PageInput

logger = logging.getLogger(__name__)


class VisionOCRClient:
    """Client for the document OCR endpoint with a fixed-delay retry policy."""

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = "https://api.mistral.ai/v1",
        model: str = "mistral-ocr-latest",
        timeout: int = 120,
        max_attempts: int = 3,
        retry_delay: float = 2.0,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the OCR client.

        Args:
            api_key: Bearer key for the OCR endpoint
            base_url: API root, ``/ocr`` is appended
            model: OCR model name
            timeout: Wall-clock ceiling per attempt in seconds
            max_attempts: Attempts per page before giving up
            retry_delay: Fixed pause between attempts in seconds
            session: Optional requests session (tests inject a mock)
        """
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay
        self.session = session or requests.Session()

    def build_payload(self, page: PageInput) -> Dict[str, Any]:
        document_type = page.document_type
        return {
            "model": self.model,
            "document": {
                "type": document_type,
                document_type: page.data_uri(),
            },
        }

    def extract_text(self, page: PageInput) -> str:
        """
        Extract text from one page.

        Returns:
            The page fragments joined by a blank line, or "" when the service
            found nothing

        Raises:
            OcrFailure: When every attempt failed; carries the last error
        """
        if not self.api_key:
            raise OcrFailure("OCR extraction failed: MISTRAL_API_KEY not set")

        payload = self.build_payload(page)
        logger.info("OCR request: type=%s, size=%d bytes", page.document_type, len(page.image_bytes))

        last_error: Optional[Exception] = None
        for attempt in range(1, self.max_attempts + 1):
            try:
                data = self._post(payload)
                text = self._join_fragments(data)
                logger.info("OCR extracted %d characters", len(text))
                return text
            except (requests.RequestException, ValueError) as e:
                last_error = e
                logger.warning("OCR attempt %d/%d failed: %s", attempt, self.max_attempts, e)
                if attempt < self.max_attempts:
                    time.sleep(self.retry_delay)

        raise OcrFailure(
            "OCR extraction failed: " + describe_request_error(last_error),
            cause=last_error,
            timed_out=isinstance(last_error, requests.Timeout),
        )

    def _post(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        data = post_json(
            self.session,
            f"{self.base_url}/ocr",
            headers=headers,
            payload=payload,
            timeout=self.timeout,
        )
        if not isinstance(data, dict):
            raise ValueError("OCR response is not a JSON object")
        return data

    @staticmethod
    def _join_fragments(data: Dict[str, Any]) -> str:
        pages = data.get("pages") or []
        if not isinstance(pages, list):
            raise ValueError("OCR response 'pages' is not a list")
        fragments: List[str] = []
        for page in pages:
            if not isinstance(page, dict):
                raise ValueError("OCR page entry is not an object")
            markdown = page.get("markdown")
            if markdown is None:
                markdown = ""
            if not isinstance(markdown, str):
                raise ValueError(f"OCR page markdown is {type(markdown).__name__}, not text")
            fragments.append(markdown)
        return "\n\n".join(fragments)

    def describe(self) -> Dict[str, Any]:
        return {
            "model": self.model,
            "configured": bool(self.api_key),
            "max_attempts": self.max_attempts,
            "timeout": self.timeout,
        }
