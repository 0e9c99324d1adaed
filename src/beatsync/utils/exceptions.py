"""
Custom exceptions for BeatSync.
"""


class BeatSyncError(Exception):
    """Base exception for all BeatSync errors."""
    pass


class ValidationError(BeatSyncError):
    """Error during input validation."""
    pass


class ConfigurationError(BeatSyncError):
    """Error in configuration or settings."""
    pass


class DecodeError(BeatSyncError):
    """Audio bytes are malformed or in an unsupported format."""
    pass


class AnalysisError(BeatSyncError):
    """Error during beat analysis."""
    pass


class InsufficientSamplesError(AnalysisError):
    """Fewer samples than a single analysis window."""

    def __init__(self, sample_count: int, window_size: int):
        super().__init__(
            f"Need at least {window_size} samples for one window, got {sample_count}"
        )
        self.sample_count = sample_count
        self.window_size = window_size


class AnalysisCancelledError(AnalysisError):
    """Analysis was superseded by a newer session."""
    pass
