"""
ToolHub – pure API back-end

Endpoints
─────────
GET  /api/health                → {"status": "ok"}
POST /api/ocr/extract           → multi-page OCR text
POST /api/ocr/extract-single    → single page OCR text (+ styled HTML)
POST /api/file/image-to-excel   → table rows from an image/PDF
POST /api/file/image-to-csv     → CSV table read by a vision model
POST /api/ai/generate           → AI writing tools
POST /api/pdf/protect|unlock    → streams PDF
POST /api/convert/pdf-to-word   → streams .docx
(no HTML rendered; UI lives in the Angular front-end)
"""

# SPDX-License-Identifier: AGPL-3.0-only

# ── imports ──────────────────────────────────────────────────────
import logging

from flask import Flask, jsonify
from flask_cors import CORS                 # allow front-end origin
from dotenv import load_dotenv
from werkzeug.exceptions import HTTPException

# Load environment variables from .env file
load_dotenv()

from common.config import ToolHubConfig, config
from common.errors import ErrorKind, ToolHubError
from documents.endpoints import register_document_endpoints
from ocr.endpoints import register_ocr_endpoints
from ocr.pipeline import OCRPipeline, build_pipeline
from writing.endpoints import register_writing_endpoints
from writing.service import WritingService, build_writing_service

logger = logging.getLogger(__name__)


def create_app(
    settings: ToolHubConfig = None,
    pipeline: OCRPipeline = None,
    writing_service: WritingService = None,
) -> Flask:
    """
    Build the Flask application.

    Services are wired from ``settings`` unless passed in directly.
    """
    settings = settings or config
    app = Flask(__name__)

    # ── config & housekeeping ───────────────────────────────────────
    app.config["MAX_CONTENT_LENGTH"] = settings.max_content_length
    max_mb = settings.max_content_length // (1024 * 1024)

    CORS(
        app,
        resources={r"/api/*": {"origins": settings.get_cors_origins()}}
    )

    # ── ROUTES ───────────────────────────────────────────────────────
    @app.get("/api/health")
    def health():
        """Used by the front-end (and uptime checks) to verify API is alive."""
        return jsonify(status="ok"), 200

    register_ocr_endpoints(app, pipeline or build_pipeline(settings))
    register_writing_endpoints(app, writing_service or build_writing_service(settings))
    register_document_endpoints(app)

    # ── errors ───────────────────────────────────────────────────────
    @app.errorhandler(ToolHubError)
    def tool_error(e):
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(413)
    def file_too_large(e):
        return jsonify(
            error=ErrorKind.VALIDATION.value,
            message=f"File too large (max {max_mb} MB)"
        ), 413

    @app.errorhandler(Exception)
    def unexpected_error(e):
        if isinstance(e, HTTPException):
            kind = ErrorKind.VALIDATION if 400 <= (e.code or 500) < 500 else ErrorKind.UPSTREAM_FAILURE
            return jsonify(error=kind.value, message=e.description), e.code
        logger.exception("Unhandled error")
        return jsonify(
            error=ErrorKind.UPSTREAM_FAILURE.value,
            message="Internal server error"
        ), 500

    return app


logging.basicConfig(
    level=config.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = create_app()

if __name__ == "__main__":
    app.run(host="0.0.0.0", port=8000)   # change port if needed
