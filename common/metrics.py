# SPDX-License-Identifier: AGPL-3.0-only

"""
Per-request accounting for the OCR pipeline.

Timings use a monotonic clock; nothing here is shared between requests.
"""
import time
from typing import Dict, Any, List, Optional


class RequestMetrics:
    """Stage timings, remote call count and page outcomes of one request."""

    def __init__(self, clock=time.monotonic):
        self._clock = clock
        self._started = clock()
        self._last_mark = self._started
        self._finished: Optional[float] = None
        self.stage_seconds: Dict[str, float] = {}
        self.remote_calls = 0
        self.pages_total = 0
        self.pages_failed = 0
        self.errors: List[str] = []

    def mark_stage(self, stage_name: str) -> float:
        """Close a stage and return its duration in seconds."""
        now = self._clock()
        elapsed = now - self._last_mark
        self.stage_seconds[stage_name] = elapsed
        self._last_mark = now
        return elapsed

    def add_remote_call(self, count: int = 1):
        self.remote_calls += count

    def record_pages(self, total: int, failed: int = 0):
        self.pages_total = total
        self.pages_failed = failed

    def add_error(self, error: str):
        self.errors.append(error)

    def finish(self):
        if self._finished is None:
            self._finished = self._clock()

    def duration(self) -> float:
        end = self._finished if self._finished is not None else self._clock()
        return end - self._started

    def to_dict(self) -> Dict[str, Any]:
        return {
            "duration_seconds": round(self.duration(), 3),
            "stages": {k: round(v, 3) for k, v in self.stage_seconds.items()},
            "remote_calls": self.remote_calls,
            "pages": {"total": self.pages_total, "failed": self.pages_failed},
            "errors": list(self.errors),
        }
