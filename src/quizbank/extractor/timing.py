"""
Module: extractor.timing

Purpose:
    Timing instrumentation for the extraction pipeline: document-level
    stages and per-page durations.

Key Classes:
    - TimingLog: Collects stage and page timing metrics

Key Functions:
    - timed_phase: Context manager for timing code blocks

Used By:
    - extractor.pipeline: Main extraction orchestrator
"""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, Generator, Optional

logger = logging.getLogger(__name__)


@dataclass
class TimingLog:
    """
    Timing metrics for one extraction run.

    Attributes:
        stage_timings: Dict of stage_name -> duration_seconds
        page_timings: Dict of page_number -> duration_seconds

    Example:
        >>> log = TimingLog()
        >>> log.log_stage("loading", 0.12)
        >>> log.log_page(1, 2.4)
        >>> print(log.summary())
    """
    stage_timings: Dict[str, float] = field(default_factory=dict)
    page_timings: Dict[int, float] = field(default_factory=dict)

    def log_stage(self, stage: str, duration: float) -> None:
        """Log a document-level timing metric."""
        self.stage_timings[stage] = duration

    def log_page(self, page_number: int, duration: float) -> None:
        """Log a page timing metric."""
        self.page_timings[page_number] = duration

    @property
    def total(self) -> float:
        return sum(self.stage_timings.values())

    def slowest_page(self) -> Optional[tuple]:
        """(page_number, seconds) of the slowest page, or None."""
        if not self.page_timings:
            return None
        return max(self.page_timings.items(), key=lambda x: x[1])

    def summary(self) -> str:
        """Generate human-readable timing summary."""
        lines = ["=== Extraction Timing Summary ==="]
        for stage, duration in self.stage_timings.items():
            lines.append(f"  {stage:15s} {duration:.3f}s")

        if self.page_timings:
            avg = sum(self.page_timings.values()) / len(self.page_timings)
            page, slowest = self.slowest_page()
            lines.append(f"  pages: {len(self.page_timings)}, avg {avg:.3f}s, slowest p{page} {slowest:.3f}s")
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Dict]:
        return {
            "stage_timings": dict(self.stage_timings),
            "page_timings": {str(k): v for k, v in self.page_timings.items()},
        }


@contextmanager
def timed_phase(log: TimingLog, stage: str) -> Generator[None, None, None]:
    """
    Context manager that records the duration of a stage.

    Example:
        >>> with timed_phase(log, "parsing"):
        ...     segment_questions(text, base_id)
    """
    start = time.perf_counter()
    try:
        yield
    finally:
        log.log_stage(stage, time.perf_counter() - start)
