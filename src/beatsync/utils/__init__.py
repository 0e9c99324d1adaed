"""
Utility functions and helper classes.
"""

from .logging import setup_logging, get_logger, AnalysisLogger
from .validators import validate_audio_file, validate_analysis_parameters
from .exceptions import BeatSyncError, DecodeError, ValidationError, AnalysisError

__all__ = [
    "setup_logging",
    "get_logger",
    "AnalysisLogger",
    "validate_audio_file",
    "validate_analysis_parameters",
    "BeatSyncError",
    "DecodeError",
    "ValidationError",
    "AnalysisError",
]
