# SPDX-License-Identifier: AGPL-3.0-only

"""
PDF to Word conversion with pdf2docx.
"""
import logging
import os
import re
import tempfile
from importlib.metadata import PackageNotFoundError, version
from typing import Optional, Tuple

from pdf2docx import Converter

from common.errors import ConversionFailure, InvalidInput

logger = logging.getLogger(__name__)

_PAGE_RANGE = re.compile(r"^\s*(\d+)\s*(?:-\s*(\d+)\s*)?$")

DOCX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


def parse_page_range(pages: Optional[str]) -> Tuple[int, Optional[int]]:
    """
    Parse a 1-based inclusive page range into pdf2docx start/end.

    ``"2"`` converts page 2 only, ``"1-3"`` pages 1 to 3; an empty value
    converts the whole document.

    Returns:
        (start, end) with a 0-based start and an exclusive end, or (0, None)

    Raises:
        InvalidInput: If the range is malformed
    """
    if pages is None or not pages.strip():
        return 0, None

    match = _PAGE_RANGE.match(pages)
    if not match:
        raise InvalidInput(f"Invalid page range: {pages}")

    first = int(match.group(1))
    last = int(match.group(2)) if match.group(2) else first
    if first < 1 or last < first:
        raise InvalidInput(f"Invalid page range: {pages}")

    return first - 1, last


def pdf_to_word(data: bytes, pages: Optional[str] = None) -> bytes:
    """
    Convert a PDF to a .docx document.

    Raises:
        InvalidInput: If the file is missing, not a PDF, or the range is malformed
        ConversionFailure: If the converter fails
    """
    if not data:
        raise InvalidInput("No PDF file provided")
    if not data.lstrip()[:5].startswith(b"%PDF"):
        raise InvalidInput("Please upload a valid PDF file")

    start, end = parse_page_range(pages)

    with tempfile.TemporaryDirectory() as work_dir:
        pdf_path = os.path.join(work_dir, "input.pdf")
        docx_path = os.path.join(work_dir, "output.docx")
        with open(pdf_path, "wb") as f:
            f.write(data)

        converter = None
        try:
            converter = Converter(pdf_path)
            converter.convert(docx_path, start=start, end=end)
        except Exception as e:
            logger.error("PDF to Word conversion failed: %s", e)
            raise ConversionFailure(f"Conversion failed: {e}", cause=e)
        finally:
            if converter is not None:
                converter.close()

        if not os.path.exists(docx_path):
            raise ConversionFailure("Conversion failed: no output file was produced")

        with open(docx_path, "rb") as f:
            output = f.read()

    logger.info("Converted PDF to Word (%d bytes)", len(output))
    return output


def describe_converter() -> dict:
    """Converter availability for the status endpoint."""
    try:
        converter_version = version("pdf2docx")
    except PackageNotFoundError:
        converter_version = None
    return {
        "available": converter_version is not None,
        "engine": "pdf2docx",
        "version": converter_version,
    }
