"""
Progress reporting for one extraction run.

Stages report their own 0..1 progress; `ProgressReporter.stage()` rescales it
into the slot the orchestrator gave that stage. Values never go backwards
within a run, so a fallback after a failed stage simply continues from where
the bar already is.
"""

from typing import Callable, Optional

from logging_config import configure_logging
from parser.models import ExtractionProgress

logger = configure_logging(name="progress")


class ProgressReporter:
    def __init__(self, callback: Optional[Callable[[ExtractionProgress], None]] = None):
        self.callback = callback
        self.last = 0.0

    def report(self, status: str, progress: float):
        value = min(1.0, max(self.last, float(progress)))
        self.last = value
        logger.debug(f"[PROGRESS] {int(value * 100)}% {status}")
        if self.callback:
            self.callback(ExtractionProgress(status, value))

    def stage(self, start: float, end: float) -> Callable[[ExtractionProgress], None]:
        span = end - start

        def forward(p: ExtractionProgress):
            self.report(p.status, start + span * max(0.0, min(1.0, p.progress)))

        return forward
