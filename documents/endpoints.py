# SPDX-License-Identifier: AGPL-3.0-only

"""
Flask endpoints for the PDF document tools.
"""
import io
import os

from flask import request, jsonify, send_file

from common.errors import InvalidInput, ToolHubError
from validators import PdfPasswordSchema, PdfToWordSchema, load_request
from .conversion import DOCX_MIME_TYPE, describe_converter, pdf_to_word
from .pdf_security import protect_pdf, unlock_pdf


def _uploaded_file(*field_names):
    """Return (filename, bytes) of the first uploaded file among field_names."""
    for name in field_names:
        upload = request.files.get(name)
        if upload is not None and upload.filename:
            return upload.filename, upload.read()
    raise InvalidInput("No file provided")


def _stem(filename: str, fallback: str) -> str:
    stem = os.path.splitext(os.path.basename(filename or ""))[0]
    return stem or fallback


def register_document_endpoints(app):
    """Register PDF protect/unlock and conversion endpoints with Flask app."""

    @app.post("/api/pdf/protect")
    def pdf_protect():
        """Add password protection to a PDF."""
        try:
            filename, data = _uploaded_file("file")
            form = load_request(PdfPasswordSchema(), request.form.to_dict())
            output = protect_pdf(data, form["password"])
        except ToolHubError as e:
            return jsonify(e.to_dict()), e.status_code

        return send_file(
            io.BytesIO(output),
            mimetype="application/pdf",
            as_attachment=True,
            download_name=f"{_stem(filename, 'document')}_protected.pdf",
        )

    @app.post("/api/pdf/unlock")
    def pdf_unlock():
        """Remove password protection from a PDF."""
        try:
            filename, data = _uploaded_file("file")
            form = load_request(PdfPasswordSchema(), request.form.to_dict())
            output = unlock_pdf(data, form["password"])
        except ToolHubError as e:
            return jsonify(e.to_dict()), e.status_code

        return send_file(
            io.BytesIO(output),
            mimetype="application/pdf",
            as_attachment=True,
            download_name=f"{_stem(filename, 'document')}_unlocked.pdf",
        )

    @app.post("/api/convert/pdf-to-word")
    def convert_pdf_to_word():
        """Convert an uploaded PDF to .docx, optionally a page range."""
        try:
            filename, data = _uploaded_file("pdf", "file")
            form = load_request(PdfToWordSchema(), request.form.to_dict())
            output = pdf_to_word(data, form["pages"])
        except ToolHubError as e:
            return jsonify(e.to_dict()), e.status_code

        return send_file(
            io.BytesIO(output),
            mimetype=DOCX_MIME_TYPE,
            as_attachment=True,
            download_name=f"{_stem(filename, 'converted')}.docx",
        )

    @app.get("/api/convert/status")
    def convert_status():
        """Check converter availability."""
        return jsonify(describe_converter())
