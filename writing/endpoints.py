# SPDX-License-Identifier: AGPL-3.0-only

"""
Flask endpoints for the AI writing tool.
"""
from flask import request, jsonify

from common.errors import ToolHubError
from validators import WritingRequestSchema, load_request
from writing.service import WritingService


def register_writing_endpoints(app, service: WritingService):
    """Register writing endpoints with Flask app."""

    @app.post("/api/ai/generate")
    def ai_generate():
        """Generate AI content based on prompt type."""
        try:
            data = load_request(WritingRequestSchema(), request.get_json(silent=True))
            text = service.generate(data["promptType"], data["text"], data["paragraphs"])
        except ToolHubError as e:
            return jsonify(e.to_dict()), e.status_code

        return jsonify({
            "success": True,
            "text": text,
            "promptType": data["promptType"]
        })

    @app.get("/api/ai/status")
    def ai_status():
        """Check writing model configuration."""
        info = service.llm_client.describe()
        info["status"] = "ready" if info["configured"] else "unconfigured"
        return jsonify(info)
