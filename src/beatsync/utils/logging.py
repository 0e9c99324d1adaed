"""
Logging configuration for BeatSync.
"""

import logging
import sys
from typing import Optional

from .exceptions import ConfigurationError

LEVEL_NAMES = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


def resolve_level(level: str) -> int:
    """
    Map a level name to its numeric value.

    Raises:
        ConfigurationError: If the name is not a standard logging level
    """
    name = str(level).upper()
    if name not in LEVEL_NAMES:
        raise ConfigurationError(
            f"Unknown log level {level!r}, expected one of {', '.join(LEVEL_NAMES)}"
        )
    return getattr(logging, name)


def setup_logging(level: str = "INFO", format_string: Optional[str] = None) -> logging.Logger:
    """
    Set up logging for the application and quiet the decoder backends.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_string: Custom format string for log messages

    Returns:
        The ``beatsync`` package logger

    Raises:
        ConfigurationError: If ``level`` is not a known level name
    """
    numeric_level = resolve_level(level)
    if format_string is None:
        format_string = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

    logging.basicConfig(level=numeric_level, format=format_string, stream=sys.stdout)

    logger = logging.getLogger('beatsync')
    logger.setLevel(numeric_level)

    # Decoder backends are chatty at INFO
    for name in ('librosa', 'numba', 'audioread'):
        logging.getLogger(name).setLevel(logging.WARNING)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the ``beatsync`` namespace (usually for ``__name__``)."""
    if name.startswith('beatsync.') or name == 'beatsync':
        return logging.getLogger(name)
    return logging.getLogger(f'beatsync.{name}')


class AnalysisLogger(logging.LoggerAdapter):
    """
    Logs the phases of one analysis generation.

    Every message is prefixed with ``Analysis #<generation>`` so interleaved
    loads can be told apart. Progress percentages are logged at DEBUG only
    when they cross a ``step`` boundary.
    """

    def __init__(self, logger: logging.Logger, generation: int, step: int = 10):
        super().__init__(logger, {'generation': generation})
        self.generation = generation
        self.step = max(1, step)
        self._last_bucket = -1

    def process(self, msg, kwargs):
        return f"Analysis #{self.generation}: {msg}", kwargs

    def phase(self, name: str, progress: int):
        """Log entry into a pipeline phase at its starting percentage."""
        self.info(f"{name} ({progress}%)")

    def progress(self, progress: int):
        bucket = progress // self.step
        if bucket > self._last_bucket:
            self._last_bucket = bucket
            self.debug(f"{progress}%")

    def finished(self, beat_count: int):
        self.info(f"{beat_count} beats (100%)")

    def superseded(self):
        self.info("superseded, result discarded")

    def failed(self, error: BaseException):
        self.error(f"failed: {error}")
