"""
Analysis progress observers.

The extractor and classifier report integer percentages to a
``ProgressReporter``. Observers are advisory: they may coalesce values, and
an observer that raises never interrupts the analysis.
"""

from abc import ABC, abstractmethod
from typing import Callable, List, Optional

from ..utils.logging import get_logger

logger = get_logger(__name__)


class ProgressReporter(ABC):
    """Receives fractional completion of an analysis pass, in percent."""

    @abstractmethod
    def report(self, progress: int) -> None:
        pass


class NullProgressReporter(ProgressReporter):
    """Discards every report."""

    def report(self, progress: int) -> None:
        return None


class CallbackProgressReporter(ProgressReporter):
    """Forwards reports to a plain callable."""

    def __init__(self, callback: Callable[[int], None]):
        self.callback = callback

    def report(self, progress: int) -> None:
        self.callback(progress)


class RecordingProgressReporter(ProgressReporter):
    """Keeps every reported value, mostly useful for headless runs and tests."""

    def __init__(self):
        self.values: List[int] = []

    def report(self, progress: int) -> None:
        self.values.append(progress)

    @property
    def last(self) -> Optional[int]:
        return self.values[-1] if self.values else None


class LoggingProgressReporter(ProgressReporter):
    """Logs progress every ``step`` percent."""

    def __init__(self, description: str = "Beat analysis", step: int = 10):
        self.description = description
        self.step = max(1, step)
        self._last_logged = -1

    def report(self, progress: int) -> None:
        bucket = progress // self.step
        if bucket == self._last_logged:
            return
        self._last_logged = bucket
        logger.info(f"{self.description}: {progress}%")


class GuardedProgressReporter(ProgressReporter):
    """
    Wraps another reporter so the pipeline can report unconditionally.

    Values are clamped to [0, 100], repeated values are coalesced, and
    exceptions raised by the wrapped observer are logged instead of
    propagated.
    """

    def __init__(self, reporter: Optional[ProgressReporter] = None):
        self.reporter = reporter or NullProgressReporter()
        self.last_value: Optional[int] = None

    def report(self, progress: int) -> None:
        value = min(100, max(0, int(progress)))
        if value == self.last_value:
            return
        self.last_value = value
        try:
            self.reporter.report(value)
        except Exception as e:
            logger.warning(f"Progress observer failed at {value}%: {e}")


def guard(reporter: Optional[ProgressReporter]) -> GuardedProgressReporter:
    """Return ``reporter`` wrapped in a GuardedProgressReporter (idempotent)."""
    if isinstance(reporter, GuardedProgressReporter):
        return reporter
    return GuardedProgressReporter(reporter)
