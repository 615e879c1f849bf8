# SPDX-License-Identifier: AGPL-3.0-only

import pytest
from unittest.mock import Mock

from common.errors import InvalidInput, UpstreamFailure
from writing.prompt_pack import PROMPT_BUILDERS, PromptType, build_system_prompt
from writing.service import WritingService, build_writing_service


class TestPromptType:
    """Test prompt type resolution."""

    @pytest.mark.parametrize("key,expected", [
        ("essay", PromptType.ESSAY),
        ("assay", PromptType.ESSAY),
        ("blogPost", PromptType.BLOG_POST),
        ("blogpost", PromptType.BLOG_POST),
        (" coldEmail ", PromptType.COLD_EMAIL),
        ("jsonToXml", PromptType.JSON_TO_XML),
        ("story", PromptType.STORY),
        ("default", PromptType.DEFAULT),
    ])
    def test_known_keys(self, key, expected):
        assert PromptType.from_key(key) == expected

    @pytest.mark.parametrize("key", ["poem", "", None, "essays"])
    def test_unknown_keys_fall_back_to_default(self, key):
        assert PromptType.from_key(key) == PromptType.DEFAULT

    def test_every_type_has_a_prompt(self):
        assert set(PROMPT_BUILDERS) == set(PromptType)
        for prompt_type in PromptType:
            assert build_system_prompt(prompt_type).strip()

    def test_essay_interpolates_paragraphs(self):
        assert "7 paragraphs" in build_system_prompt(PromptType.ESSAY, paragraphs=7)


class TestWritingService:
    """Test suite for WritingService."""

    @pytest.fixture
    def mock_llm_client(self):
        client = Mock()
        client.call.return_value = {"text": "Generated essay", "tokens": 120, "cost": 0.0}
        return client

    @pytest.fixture
    def service(self, mock_llm_client):
        return WritingService(mock_llm_client, max_tokens=2048, temperature=0.7)

    def test_generate(self, service, mock_llm_client):
        text = service.generate("assay", "The history of tea", paragraphs=4)

        assert text == "Generated essay"
        args, kwargs = mock_llm_client.call.call_args
        assert args[0] == "The history of tea"
        assert "4 paragraphs" in kwargs["system_prompt"]
        assert kwargs["max_tokens"] == 2048
        assert kwargs["temperature"] == 0.7

    def test_unknown_key_uses_default_prompt(self, service, mock_llm_client):
        service.generate("limerick", "Write about cats")

        system_prompt = mock_llm_client.call.call_args.kwargs["system_prompt"]
        assert system_prompt == build_system_prompt(PromptType.DEFAULT)

    @pytest.mark.parametrize("text", ["", "   ", None])
    def test_empty_text(self, service, mock_llm_client, text):
        with pytest.raises(InvalidInput):
            service.generate("essay", text)
        mock_llm_client.call.assert_not_called()

    def test_upstream_failure_propagates(self, service, mock_llm_client):
        mock_llm_client.call.side_effect = UpstreamFailure("GROQ_API_KEY not set")

        with pytest.raises(UpstreamFailure):
            service.generate("essay", "topic")

    def test_build_writing_service(self, settings):
        service = build_writing_service(settings)

        assert service.llm_client.provider == "groq"
        assert service.llm_client.model == settings.writing_model
        assert service.llm_client.api_key == "test-groq-key"
        assert service.max_tokens == settings.writing_max_tokens
