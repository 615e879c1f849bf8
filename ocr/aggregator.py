# SPDX-License-Identifier: AGPL-3.0-only

"""
Multi-page OCR aggregation.

Pages are processed strictly in input order, one at a time, with a short pause
between remote calls to stay under the provider's rate limit. A page whose OCR
fails is recorded and skipped; the request only fails when every page did.
"""

import logging
import time
from typing import Optional, Sequence

from common.errors import InvalidInput, OcrFailure, UpstreamFailure
from .client import VisionOCRClient
from .models import AggregatedText, OcrResult, PageInput

logger = logging.getLogger(__name__)


class PageAggregator:
    """Drives the OCR client over an ordered set of pages."""

    def __init__(self, ocr_client: VisionOCRClient, page_delay: float = 0.5):
        self.ocr_client = ocr_client
        self.page_delay = page_delay

    def extract_pages(self, pages: Sequence[PageInput]) -> AggregatedText:
        """
        Run OCR over every page.

        Returns:
            Aggregated results in input order, one entry per page

        Raises:
            InvalidInput: If no pages were given
            UpstreamFailure: If every page failed
        """
        if not pages:
            raise InvalidInput("Please provide an array of images")

        total = len(pages)
        logger.info("Processing %d pages...", total)

        results = []
        last_failure: Optional[OcrFailure] = None
        for index, page in enumerate(pages):
            logger.info("Processing page %d/%d...", index + 1, total)
            try:
                text = self.ocr_client.extract_text(page)
                results.append(OcrResult(page_index=index, text=text, succeeded=True))
            except OcrFailure as e:
                last_failure = e
                logger.warning("Page %d/%d failed, continuing: %s", index + 1, total, e.message)
                results.append(OcrResult(page_index=index, text="", succeeded=False, error_detail=e.message))

            if index < total - 1:
                time.sleep(self.page_delay)

        aggregated = AggregatedText(results=results)

        if last_failure is not None and len(aggregated.failed_pages) == total:
            raise UpstreamFailure(
                f"OCR failed for all {total} pages: {last_failure.message}",
                cause=last_failure.cause,
                timed_out=last_failure.timed_out,
            )

        if aggregated.failed_pages:
            logger.warning("Partial page failure: pages %s failed", aggregated.failed_pages)
        logger.info("Extracted text from %d/%d pages", total - len(aggregated.failed_pages), total)
        return aggregated
