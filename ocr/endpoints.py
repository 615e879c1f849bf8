# SPDX-License-Identifier: AGPL-3.0-only

"""
Flask endpoints for the OCR tools.
"""
import logging

from flask import request, jsonify

from common.errors import InvalidInput
from validators import (
    ImageToCsvRequestSchema,
    ImageToTableRequestSchema,
    OcrMultiRequestSchema,
    OcrSingleRequestSchema,
    load_request,
)
from .models import PipelineError, PipelineMode
from .pipeline import OCRPipeline

logger = logging.getLogger(__name__)


def _respond(outcome):
    if isinstance(outcome, PipelineError):
        return jsonify(outcome.to_response()), outcome.status_code
    return jsonify(outcome.to_response()), 200


def register_ocr_endpoints(app, pipeline: OCRPipeline):
    """Register OCR endpoints with Flask app."""

    @app.post("/api/ocr/extract")
    def ocr_extract():
        """Extract text from several images (PDF pages), in order."""
        try:
            data = load_request(OcrMultiRequestSchema(), request.get_json(silent=True))
        except InvalidInput as e:
            return jsonify(e.to_dict()), e.status_code

        logger.info("OCR request received for %d images", len(data["images"]))
        return _respond(pipeline.process_payload(data, PipelineMode.TEXT))

    @app.post("/api/ocr/extract-single")
    def ocr_extract_single():
        """Extract text from one image/PDF; returnHtml=true adds styled HTML."""
        try:
            data = load_request(OcrSingleRequestSchema(), request.get_json(silent=True))
        except InvalidInput as e:
            return jsonify(e.to_dict()), e.status_code

        mode = PipelineMode.HTML if data["returnHtml"] else PipelineMode.TEXT
        logger.info("Single OCR request (mimeType: %s, html: %s)", data.get("mimeType"), data["returnHtml"])
        return _respond(pipeline.process_payload(data, mode))

    @app.post("/api/file/image-to-excel")
    def image_to_excel():
        """OCR an image/PDF, then infer table rows for a spreadsheet."""
        try:
            data = load_request(ImageToTableRequestSchema(), request.get_json(silent=True))
        except InvalidInput as e:
            return jsonify(e.to_dict()), e.status_code

        logger.info("Image to Excel request received (%s)", data.get("mimeType"))
        return _respond(pipeline.process_payload(data, PipelineMode.TABLE))

    @app.post("/api/file/image-to-csv")
    def image_to_csv():
        """Read a table straight from an image/PDF with a vision model."""
        try:
            data = load_request(ImageToCsvRequestSchema(), request.get_json(silent=True))
        except InvalidInput as e:
            return jsonify(e.to_dict()), e.status_code

        logger.info("Image to CSV request received (%s)", data.get("mimeType"))
        return _respond(pipeline.process_payload(data, PipelineMode.CSV))

    @app.get("/api/ocr/status")
    def ocr_status():
        """Check OCR configuration."""
        return jsonify(pipeline.describe())
