# SPDX-License-Identifier: AGPL-3.0-only

"""
Single-stage table extraction: a vision model reads the image and answers CSV.
"""

import csv
import io
import logging
from typing import List

from common.errors import NoDataFound, UpstreamFailure
from common.llm_client import LLMClient
from .models import CsvTable, PageInput
from .prompt_pack import NO_TABLE_SENTINEL, build_csv_prompt
from .sanitizer import strip_code_fences

logger = logging.getLogger(__name__)


def parse_csv(text: str) -> List[List[str]]:
    """Split CSV text into trimmed cells, dropping blank lines."""
    reader = csv.reader(io.StringIO(text))
    rows = []
    for row in reader:
        cells = [cell.strip() for cell in row]
        if any(cells):
            rows.append(cells)
    return rows


class CsvExtractionService:
    """Reads tabular data from an image with one vision call."""

    def __init__(self, vision_client: LLMClient, max_tokens: int = 4096):
        self.vision_client = vision_client
        self.max_tokens = max_tokens

    def extract(self, page: PageInput) -> CsvTable:
        """
        Extract a table from one page.

        Raises:
            UpstreamFailure: If the vision call failed
            NoDataFound: If the model found no table
        """
        try:
            answer = self.vision_client.call(
                build_csv_prompt(page.is_pdf),
                images=[page.data_uri()],
                max_tokens=self.max_tokens,
                temperature=0.1,
            )["text"]
        except UpstreamFailure as e:
            raise UpstreamFailure(
                f"Extraction failed: {e.message}", cause=e.cause, timed_out=e.timed_out
            ) from e

        csv_text = strip_code_fences(answer.strip(), language="csv")
        if not csv_text or csv_text.strip('"') == NO_TABLE_SENTINEL:
            raise NoDataFound("Could not find any table data in the file")

        rows = parse_csv(csv_text)
        if not rows:
            raise NoDataFound("Could not find any table data in the file")

        logger.info("Extracted %d CSV rows", len(rows))
        return CsvTable(csv=csv_text, rows=rows)
