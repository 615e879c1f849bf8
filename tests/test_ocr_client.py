# SPDX-License-Identifier: AGPL-3.0-only

import pytest
import requests
from unittest.mock import patch

from common.errors import ErrorKind, OcrFailure
from ocr.client import VisionOCRClient
from ocr.models import PageInput
from conftest import make_response, ocr_response


class TestVisionOCRClient:
    """Test suite for VisionOCRClient."""

    @pytest.fixture
    def client(self, mock_session):
        return VisionOCRClient(
            api_key="test-key",
            base_url="https://ocr.example.com/v1/",
            model="mistral-ocr-latest",
            session=mock_session,
        )

    def test_build_payload_image(self, client, page):
        payload = client.build_payload(page)
        assert payload["model"] == "mistral-ocr-latest"
        assert payload["document"]["type"] == "image_url"
        assert payload["document"]["image_url"].startswith("data:image/png;base64,")

    def test_build_payload_pdf(self, client):
        page = PageInput(image_bytes=b"%PDF-1.7 ...", mime_type="application/pdf")
        payload = client.build_payload(page)
        assert payload["document"]["type"] == "document_url"
        assert payload["document"]["document_url"].startswith("data:application/pdf;base64,")

    def test_extract_text_success(self, client, mock_session, page):
        mock_session.post.return_value = ocr_response("# Title", "Body text")

        text = client.extract_text(page)

        assert text == "# Title\n\nBody text"
        mock_session.post.assert_called_once()
        args, kwargs = mock_session.post.call_args
        assert args[0] == "https://ocr.example.com/v1/ocr"
        assert kwargs["headers"]["Authorization"] == "Bearer test-key"
        assert kwargs["timeout"] == 120

    def test_extract_text_no_pages(self, client, mock_session, page):
        mock_session.post.return_value = make_response({"pages": []})
        assert client.extract_text(page) == ""

    @patch("ocr.client.time.sleep")
    def test_retry_bound(self, mock_sleep, client, mock_session, page):
        mock_session.post.side_effect = requests.ConnectionError("connection refused")

        with pytest.raises(OcrFailure) as exc_info:
            client.extract_text(page)

        assert mock_session.post.call_count == 3
        assert mock_sleep.call_count == 2
        mock_sleep.assert_called_with(2.0)
        assert "connection refused" in exc_info.value.message
        assert exc_info.value.kind == ErrorKind.UPSTREAM_FAILURE
        assert isinstance(exc_info.value.cause, requests.ConnectionError)

    @patch("ocr.client.time.sleep")
    def test_retry_then_success(self, mock_sleep, client, mock_session, page):
        mock_session.post.side_effect = [
            requests.ConnectionError("reset"),
            ocr_response("recovered"),
        ]

        assert client.extract_text(page) == "recovered"
        assert mock_session.post.call_count == 2
        mock_sleep.assert_called_once_with(2.0)

    @patch("ocr.client.time.sleep")
    def test_timeout_maps_to_upstream_timeout(self, mock_sleep, client, mock_session, page):
        mock_session.post.side_effect = requests.Timeout("read timed out")

        with pytest.raises(OcrFailure) as exc_info:
            client.extract_text(page)

        assert exc_info.value.timed_out
        assert exc_info.value.kind == ErrorKind.UPSTREAM_TIMEOUT
        assert exc_info.value.status_code == 504

    @patch("ocr.client.time.sleep")
    def test_http_error_uses_provider_message(self, mock_sleep, client, mock_session, page):
        error_response = make_response({"message": "Invalid document"}, status_code=422)
        error_response.raise_for_status.side_effect = requests.HTTPError(
            "422 Client Error", response=error_response
        )
        mock_session.post.return_value = error_response

        with pytest.raises(OcrFailure, match="Invalid document"):
            client.extract_text(page)
        assert mock_session.post.call_count == 3

    @patch("ocr.client.time.sleep")
    def test_non_object_body_is_retried(self, mock_sleep, client, mock_session, page):
        mock_session.post.return_value = make_response(["unexpected"])

        with pytest.raises(OcrFailure):
            client.extract_text(page)
        assert mock_session.post.call_count == 3

    @patch("ocr.client.time.sleep")
    @pytest.mark.parametrize("body", [
        {"pages": [{"markdown": 123}]},
        {"pages": [{"markdown": ["a", "b"]}]},
        {"pages": ["not an object"]},
        {"pages": {"markdown": "x"}},
    ])
    def test_malformed_fragments_are_retried(self, mock_sleep, client, mock_session, page, body):
        mock_session.post.return_value = make_response(body)

        with pytest.raises(OcrFailure) as exc_info:
            client.extract_text(page)

        assert mock_session.post.call_count == 3
        assert isinstance(exc_info.value.cause, ValueError)

    def test_null_markdown_is_empty(self, client, mock_session, page):
        mock_session.post.return_value = make_response({"pages": [{"markdown": None}, {"markdown": "B"}]})
        assert client.extract_text(page) == "\n\nB"

    def test_body_is_streamed(self, client, mock_session, page):
        mock_session.post.return_value = ocr_response("text")

        client.extract_text(page)

        assert mock_session.post.call_args.kwargs["stream"] is True
        mock_session.post.return_value.close.assert_called_once()

    def test_missing_key_fails_without_calls(self, mock_session, page):
        client = VisionOCRClient(api_key=None, session=mock_session)

        with pytest.raises(OcrFailure, match="MISTRAL_API_KEY not set"):
            client.extract_text(page)
        mock_session.post.assert_not_called()

    def test_custom_attempts(self, mock_session, page):
        client = VisionOCRClient(api_key="k", max_attempts=1, session=mock_session)
        mock_session.post.side_effect = requests.ConnectionError("down")

        with patch("ocr.client.time.sleep") as mock_sleep:
            with pytest.raises(OcrFailure):
                client.extract_text(page)
            mock_sleep.assert_not_called()
        assert mock_session.post.call_count == 1

    def test_describe(self, client):
        info = client.describe()
        assert info["configured"] is True
        assert info["max_attempts"] == 3
