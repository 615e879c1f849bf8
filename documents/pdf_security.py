# SPDX-License-Identifier: AGPL-3.0-only

"""
PDF password protection and unlocking.
"""
import io
import logging

import PyPDF2
from PyPDF2.errors import PdfReadError

from common.errors import InvalidInput

logger = logging.getLogger(__name__)


def _open_reader(data: bytes) -> PyPDF2.PdfReader:
    if not data:
        raise InvalidInput("No file provided")
    try:
        return PyPDF2.PdfReader(io.BytesIO(data))
    except (PdfReadError, ValueError) as e:
        raise InvalidInput(f"File is not a valid PDF: {e}")


def _write(writer: PyPDF2.PdfWriter) -> bytes:
    output = io.BytesIO()
    writer.write(output)
    return output.getvalue()


def protect_pdf(data: bytes, password: str) -> bytes:
    """
    Encrypt a PDF with one password used as both user and owner password.

    Raises:
        InvalidInput: If the file or password is missing, or the file is not a PDF
    """
    if not password:
        raise InvalidInput("No password provided")

    reader = _open_reader(data)
    if reader.is_encrypted:
        raise InvalidInput("PDF is already password protected")

    writer = PyPDF2.PdfWriter()
    for page in reader.pages:
        writer.add_page(page)
    writer.encrypt(user_password=password, owner_password=password)

    logger.info("Protected PDF with %d pages", len(reader.pages))
    return _write(writer)


def unlock_pdf(data: bytes, password: str) -> bytes:
    """
    Remove password protection from a PDF.

    A PDF that is not encrypted is re-written as is.

    Raises:
        InvalidInput: If the password is wrong or the file is not a PDF
    """
    if not password:
        raise InvalidInput("No password provided")

    reader = _open_reader(data)
    if reader.is_encrypted and not reader.decrypt(password):
        raise InvalidInput("Incorrect password")

    writer = PyPDF2.PdfWriter()
    for page in reader.pages:
        writer.add_page(page)

    logger.info("Unlocked PDF with %d pages", len(reader.pages))
    return _write(writer)
