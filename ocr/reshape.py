# SPDX-License-Identifier: AGPL-3.0-only

"""
Second OCR stage: reshape raw OCR text into HTML or tabular JSON.
"""

import logging
from typing import Any, Dict, List

from common.errors import NoDataFound, ReshapeFailure, UnrecoverableFormat, UpstreamFailure
from common.llm_client import LLMClient
from .models import ReshapeRequest, ReshapeResult, TargetShape
from .prompt_pack import TABLE_SYSTEM_PROMPT, build_html_prompt, build_table_prompt
from .sanitizer import parse_json, strip_code_fences

logger = logging.getLogger(__name__)


class ReshapeService:
    """Chains OCR text into a language model call that reformats it."""

    def __init__(
        self,
        html_client: LLMClient,
        table_client: LLMClient,
        html_max_tokens: int = 16000,
        table_max_tokens: int = 8192,
    ):
        """
        Initialize the reshape service.

        Args:
            html_client: Model that formats text as HTML
            table_client: Model that infers a table from register text
            html_max_tokens: Token cap for the HTML answer
            table_max_tokens: Token cap for the table answer
        """
        self.html_client = html_client
        self.table_client = table_client
        self.html_max_tokens = html_max_tokens
        self.table_max_tokens = table_max_tokens

    def reshape(self, request: ReshapeRequest) -> ReshapeResult:
        """
        Reshape OCR text into the requested target.

        Raises:
            ReshapeFailure: If the model call failed
            UnrecoverableFormat: If the table answer could not be parsed
            NoDataFound: If the table answer has no rows
        """
        if request.target_shape == TargetShape.HTML:
            return ReshapeResult(kind=TargetShape.HTML, markup=self.to_html(request.source_text))
        return ReshapeResult(kind=TargetShape.TABULAR_JSON, rows=self.to_table(request.source_text))

    def to_html(self, source_text: str) -> str:
        answer = self._call(
            self.html_client,
            build_html_prompt(source_text),
            max_tokens=self.html_max_tokens,
            temperature=0.1,
        )
        html = strip_code_fences(answer, language="html?")
        logger.info("HTML: %d chars", len(html))
        return html

    def to_table(self, source_text: str) -> List[Dict[str, str]]:
        answer = self._call(
            self.table_client,
            build_table_prompt(source_text),
            system_prompt=TABLE_SYSTEM_PROMPT,
            max_tokens=self.table_max_tokens,
            temperature=0.05,
        ).strip() or '{"table":[]}'

        parsed = parse_json(answer)
        rows = self.rows_from_envelope(parsed)
        if not rows:
            raise NoDataFound("Could not extract structured data")

        logger.info("Extracted %d rows", len(rows))
        return rows

    @staticmethod
    def rows_from_envelope(parsed: Any) -> List[Dict[str, str]]:
        """
        Accept ``{"table": [...]}``, a bare array, or a single object.

        Non-mapping and empty rows are dropped and cell values become strings.
        """
        if isinstance(parsed, dict) and "table" in parsed:
            table = parsed["table"]
            if isinstance(table, dict):
                table = [table]
            elif table is None:
                table = []
        elif isinstance(parsed, list):
            table = parsed
        elif isinstance(parsed, dict):
            table = [parsed]
        else:
            raise UnrecoverableFormat("Could not extract table data. Please try again.")

        if not isinstance(table, list):
            raise UnrecoverableFormat("Could not extract table data. Please try again.")

        return [
            {str(k): "" if v is None else str(v) for k, v in row.items()}
            for row in table
            if isinstance(row, dict) and row
        ]

    @staticmethod
    def _call(client: LLMClient, prompt: str, **kwargs) -> str:
        try:
            return client.call(prompt, **kwargs)["text"]
        except UpstreamFailure as e:
            raise ReshapeFailure(
                f"Reshape failed: {e.message}", cause=e.cause, timed_out=e.timed_out
            ) from e
