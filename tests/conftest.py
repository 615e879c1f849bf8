# SPDX-License-Identifier: AGPL-3.0-only

"""
Pytest configuration and fixtures.

This module provides shared fixtures and configuration for all tests.
"""

import base64
import io
import json

import pytest
import PyPDF2
from unittest.mock import Mock

from common.config import ToolHubConfig
from ocr.models import PageInput


def make_response(payload=None, status_code=200):
    """Build a mock requests.Response returning ``payload`` as JSON."""
    body = payload if payload is not None else {}
    response = Mock()
    response.status_code = status_code
    response.json.return_value = body
    response.content = json.dumps(body).encode("utf-8")
    response.iter_content.side_effect = lambda chunk_size=1: iter([response.content])
    response.raise_for_status.return_value = None
    return response


def chat_response(text, tokens=42):
    """Mock chat-completions response carrying ``text``."""
    return make_response({
        "choices": [{"message": {"role": "assistant", "content": text}}],
        "usage": {"total_tokens": tokens},
    })


def ocr_response(*fragments):
    """Mock OCR response with one markdown fragment per page."""
    return make_response({
        "pages": [{"index": i, "markdown": text} for i, text in enumerate(fragments)],
        "model": "mistral-ocr-latest",
    })


@pytest.fixture
def png_bytes():
    """Bytes standing in for an uploaded PNG."""
    return b"\x89PNG\r\n\x1a\nfake-image-data"


@pytest.fixture
def png_base64(png_bytes):
    """Base64 text as sent by the front-end."""
    return base64.b64encode(png_bytes).decode("ascii")


@pytest.fixture
def page(png_bytes):
    """One image page."""
    return PageInput(image_bytes=png_bytes, mime_type="image/png")


@pytest.fixture
def pages(png_bytes):
    """Three image pages."""
    return [PageInput(image_bytes=png_bytes + bytes([i]), mime_type="image/png") for i in range(3)]


@pytest.fixture
def mock_session():
    """Mock requests session."""
    return Mock()


@pytest.fixture
def settings():
    """Configuration isolated from the environment and any .env file."""
    return ToolHubConfig(
        _env_file=None,
        mistral_api_key="test-mistral-key",
        groq_api_key="test-groq-key",
        cors_origin="http://localhost:4200",
    )


@pytest.fixture
def sample_pdf():
    """A one-page blank PDF."""
    writer = PyPDF2.PdfWriter()
    writer.add_blank_page(width=200, height=200)
    output = io.BytesIO()
    writer.write(output)
    return output.getvalue()


@pytest.fixture
def sample_ocr_text():
    """OCR text of a small register page."""
    return (
        "| Name | Qty | Price |\n"
        "| --- | --- | --- |\n"
        "| Apples | 3 | 1.20 |\n"
        "| Pears | 5 | 0.80 |"
    )


# Pytest configuration
def pytest_configure(config):
    """Configure pytest."""
    # Add custom markers
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )


def pytest_collection_modifyitems(config, items):
    """Modify test collection."""
    # Add markers based on test names
    for item in items:
        if "test_" in item.name:
            if "integration" in item.name:
                item.add_marker(pytest.mark.integration)
            else:
                item.add_marker(pytest.mark.unit)
