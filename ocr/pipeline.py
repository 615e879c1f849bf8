# SPDX-License-Identifier: AGPL-3.0-only

"""
OCR pipeline facade.

The single entry point used by the HTTP layer. It turns a normalized request
into OCR calls (one page or many), optionally chains the second reshape stage,
and maps every failure into the closed ``ErrorKind`` set so that no internal
exception crosses into the endpoint code.
"""

import logging
from typing import Any, List, Optional, Tuple, Union

from common.config import ToolHubConfig
from common.errors import ErrorKind, InvalidInput, NoDataFound, ToolHubError, UpstreamFailure
from common.llm_client import LLMClient
from common.metrics import RequestMetrics
from .aggregator import PageAggregator
from .client import VisionOCRClient
from .csv_extract import CsvExtractionService
from .models import (
    PageStatus,
    PipelineError,
    PipelineMode,
    PipelineRequest,
    PipelineResult,
    ReshapeRequest,
    TargetShape,
)
from .reshape import ReshapeService

logger = logging.getLogger(__name__)

PipelineOutcome = Union[PipelineResult, PipelineError]


class OCRPipeline:
    """Main pipeline for OCR extraction and reshaping."""

    def __init__(
        self,
        ocr_client: VisionOCRClient,
        reshape_service: ReshapeService,
        aggregator: Optional[PageAggregator] = None,
        csv_service: Optional[CsvExtractionService] = None,
    ):
        """
        Initialize the OCR pipeline.

        Args:
            ocr_client: Remote vision OCR client
            reshape_service: Second-stage HTML/table service
            aggregator: Multi-page driver, built around ``ocr_client`` when omitted
            csv_service: Image-to-CSV service, needed for ``PipelineMode.CSV``
        """
        self.ocr_client = ocr_client
        self.reshape_service = reshape_service
        self.aggregator = aggregator or PageAggregator(ocr_client)
        self.csv_service = csv_service

    def process_payload(self, payload: Any, mode: PipelineMode = PipelineMode.TEXT) -> PipelineOutcome:
        """Validate a boundary payload, then process it."""
        try:
            request = PipelineRequest.from_payload(payload, mode)
        except InvalidInput as e:
            return PipelineError.from_exception(e)
        return self.process(request)

    def process(self, request: PipelineRequest) -> PipelineOutcome:
        """
        Run the pipeline for one request.

        Returns:
            PipelineResult on success, PipelineError otherwise; never raises
        """
        metrics = RequestMetrics()
        logger.info(
            "OCR request received: %d page(s), mode=%s", len(request.pages), request.mode.value
        )
        try:
            return self._run(request, metrics)
        except ToolHubError as e:
            metrics.add_error(e.message)
            logger.error("OCR pipeline failed (%s): %s", e.kind.value, e.message)
            return PipelineError.from_exception(e)
        except Exception as e:
            metrics.add_error(str(e))
            logger.exception("Unexpected OCR pipeline failure")
            return PipelineError.of(ErrorKind.UPSTREAM_FAILURE, f"OCR extraction failed: {e}")
        finally:
            metrics.finish()
            logger.debug("OCR pipeline metrics: %s", metrics.to_dict())

    def _run(self, request: PipelineRequest, metrics: RequestMetrics) -> PipelineResult:
        if request.mode == PipelineMode.CSV:
            return self._run_csv(request, metrics)

        text, statuses, has_content = self._extract(request, metrics)
        metrics.mark_stage("ocr_done")

        if not has_content:
            raise NoDataFound("Could not extract text from the image")

        result = PipelineResult(
            mode=request.mode,
            text=text,
            page_count=len(request.pages),
            multi_page=request.multi_page,
            pages=statuses,
        )

        if request.mode == PipelineMode.HTML:
            reshaped = self.reshape_service.reshape(
                ReshapeRequest(source_text=text, target_shape=TargetShape.HTML)
            )
            metrics.add_remote_call()
            result.html = reshaped.markup
        elif request.mode == PipelineMode.TABLE:
            reshaped = self.reshape_service.reshape(
                ReshapeRequest(source_text=text, target_shape=TargetShape.TABULAR_JSON)
            )
            metrics.add_remote_call()
            result.rows = reshaped.rows
        metrics.mark_stage("reshape_done")

        return result

    def _run_csv(self, request: PipelineRequest, metrics: RequestMetrics) -> PipelineResult:
        if self.csv_service is None:
            raise UpstreamFailure("CSV extraction is not configured")
        table = self.csv_service.extract(request.pages[0])
        metrics.add_remote_call()
        metrics.record_pages(1)
        metrics.mark_stage("csv_done")
        return PipelineResult(mode=PipelineMode.CSV, text=table.csv, csv_table=table)

    def _extract(self, request: PipelineRequest, metrics: RequestMetrics) -> Tuple[str, List[PageStatus], bool]:
        if request.multi_page or len(request.pages) > 1:
            aggregated = self.aggregator.extract_pages(request.pages)
            metrics.add_remote_call(len(request.pages))
            metrics.record_pages(len(request.pages), len(aggregated.failed_pages))
            for page in aggregated.failed_pages:
                metrics.add_error(f"page {page} failed")
            return aggregated.text, aggregated.page_statuses(), aggregated.has_content

        text = self.ocr_client.extract_text(request.pages[0])
        metrics.add_remote_call()
        metrics.record_pages(1)
        return text, [PageStatus(page=1, succeeded=True)], bool(text.strip())

    def describe(self) -> dict:
        """Status information for the OCR tool group."""
        return {
            "status": "ready" if self.ocr_client.api_key else "unconfigured",
            "ocr": self.ocr_client.describe(),
            "html_formatter": self.reshape_service.html_client.describe(),
            "table_extractor": self.reshape_service.table_client.describe(),
            "csv_extractor": self.csv_service.vision_client.describe() if self.csv_service else None,
            "capabilities": ["text extraction", "document OCR", "multi-page processing", "html formatting", "table extraction", "csv extraction"],
        }


def build_pipeline(settings: ToolHubConfig) -> OCRPipeline:
    """Wire the pipeline from configuration."""
    ocr_client = VisionOCRClient(**settings.get_ocr_config())

    reshape_config = settings.get_reshape_config()
    keys = settings.get_provider_keys()
    clients = {}
    for target in ("html", "table", "csv"):
        target_config = reshape_config[target]
        provider = target_config["provider"]
        clients[target] = LLMClient(
            provider=provider,
            model=target_config["model"],
            api_key=keys[provider]["api_key"],
            base_url=keys[provider]["base_url"],
            timeout=reshape_config["timeout"],
            max_attempts=settings.ocr_max_attempts,
            retry_delay=settings.ocr_retry_delay,
        )

    reshape_service = ReshapeService(
        html_client=clients["html"],
        table_client=clients["table"],
        html_max_tokens=reshape_config["html"]["max_tokens"],
        table_max_tokens=reshape_config["table"]["max_tokens"],
    )
    csv_service = CsvExtractionService(clients["csv"], max_tokens=reshape_config["csv"]["max_tokens"])
    aggregator = PageAggregator(ocr_client, page_delay=settings.page_delay)
    return OCRPipeline(ocr_client, reshape_service, aggregator, csv_service)
