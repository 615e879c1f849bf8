# SPDX-License-Identifier: AGPL-3.0-only

"""
Error taxonomy shared by every tool.

Services raise the exceptions below; the OCR pipeline facade and the endpoint
layer translate them into the ``{"error": kind, "message": detail}`` shape.
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Closed set of error kinds surfaced to the HTTP layer."""
    VALIDATION = "ValidationError"
    UPSTREAM_TIMEOUT = "UpstreamTimeout"
    UPSTREAM_FAILURE = "UpstreamFailure"
    UNRECOVERABLE_FORMAT = "UnrecoverableFormat"
    NO_DATA_FOUND = "NoDataFound"
    PARTIAL_PAGE_FAILURE = "PartialPageFailure"


STATUS_CODES = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.UNRECOVERABLE_FORMAT: 400,
    ErrorKind.NO_DATA_FOUND: 400,
    ErrorKind.UPSTREAM_FAILURE: 500,
    ErrorKind.UPSTREAM_TIMEOUT: 504,
    # warning only, never returned as a failure
    ErrorKind.PARTIAL_PAGE_FAILURE: 200,
}


class ToolHubError(Exception):
    """Base class for all errors raised by ToolHub services."""

    default_kind = ErrorKind.UPSTREAM_FAILURE

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def kind(self) -> ErrorKind:
        return self.default_kind

    @property
    def status_code(self) -> int:
        return STATUS_CODES[self.kind]

    def to_dict(self) -> dict:
        return {"error": self.kind.value, "message": self.message}


class InvalidInput(ToolHubError):
    """Caller input is missing or malformed. Never retried."""
    default_kind = ErrorKind.VALIDATION


class UpstreamFailure(ToolHubError):
    """A remote call failed or exceeded its time budget."""

    def __init__(self, message: str, cause: Optional[BaseException] = None, timed_out: bool = False):
        super().__init__(message)
        self.cause = cause
        self.timed_out = timed_out

    @property
    def kind(self) -> ErrorKind:
        return ErrorKind.UPSTREAM_TIMEOUT if self.timed_out else ErrorKind.UPSTREAM_FAILURE


class OcrFailure(UpstreamFailure):
    """The vision OCR call failed after all attempts."""


class ReshapeFailure(UpstreamFailure):
    """The second-stage language model call failed."""


class ConversionFailure(UpstreamFailure):
    """A document conversion tool failed."""


class UnrecoverableFormat(ToolHubError):
    """Model output could not be coerced into the expected shape."""
    default_kind = ErrorKind.UNRECOVERABLE_FORMAT

    def __init__(self, message: str = "Could not parse AI response. Please try again.", preview: str = ""):
        super().__init__(message)
        self.preview = preview


class NoDataFound(ToolHubError):
    """The pipeline completed but produced no usable rows or text."""
    default_kind = ErrorKind.NO_DATA_FOUND
