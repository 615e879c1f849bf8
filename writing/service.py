# SPDX-License-Identifier: AGPL-3.0-only

"""
Writing service: generates text for one of the writing prompt types.
"""
import logging
from typing import Optional

from common.config import ToolHubConfig
from common.errors import InvalidInput
from common.llm_client import LLMClient
from writing.prompt_pack import PromptType, build_system_prompt

logger = logging.getLogger(__name__)


class WritingService:
    """Service to generate essays, emails, rewrites and other writing tasks."""

    def __init__(self, llm_client: LLMClient, max_tokens: int = 4096, temperature: float = 0.7):
        self.llm_client = llm_client
        self.max_tokens = max_tokens
        self.temperature = temperature

    def generate(self, prompt_key: Optional[str], text: str, paragraphs: int = 3) -> str:
        """
        Generate content for a prompt type.

        Args:
            prompt_key: Front-end prompt type key, unknown keys use the default prompt
            text: The user's request or source text
            paragraphs: Paragraph count, used by the essay prompt

        Returns:
            Generated text

        Raises:
            InvalidInput: If text is empty
            UpstreamFailure: If the model call failed
        """
        if not text or not text.strip():
            raise InvalidInput("Please provide input text")

        prompt_type = PromptType.from_key(prompt_key)
        logger.info("Generating %s content...", prompt_type.value)

        response = self.llm_client.call(
            text,
            system_prompt=build_system_prompt(prompt_type, paragraphs),
            max_tokens=self.max_tokens,
            temperature=self.temperature,
        )
        return response["text"]


def build_writing_service(settings: ToolHubConfig) -> WritingService:
    """Wire the writing service from configuration."""
    client = LLMClient(
        provider="groq",
        model=settings.writing_model,
        api_key=settings.groq_api_key,
        base_url=settings.groq_base_url,
        max_attempts=settings.ocr_max_attempts,
        retry_delay=settings.ocr_retry_delay,
    )
    return WritingService(
        client,
        max_tokens=settings.writing_max_tokens,
        temperature=settings.writing_temperature,
    )
