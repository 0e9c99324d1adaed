"""
Energy profile extraction.

Slides a fixed window over one channel of samples and emits one combined
energy value per hop. The combined value adds a weighted "spectral" term
computed over the upper three quarters of each window's sample indices. This
is a cheap time-domain stand-in for high-frequency emphasis, not a true
frequency-domain measure.
"""

from typing import Iterator, List, Optional

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

from ..config.settings import Settings, get_settings
from ..config.constants import EXTRACTION_PROGRESS_SHARE
from ..utils.exceptions import InsufficientSamplesError
from ..utils.validators import validate_analysis_parameters
from ..utils.logging import get_logger
from .models import EnergyWindow, SampleBuffer
from .progress import ProgressReporter, guard

logger = get_logger(__name__)


def window_starts(sample_count: int, window_size: int, hop_size: int) -> np.ndarray:
    """Start index of every full window, i.e. each ``i`` with ``i + window_size <= sample_count``."""
    if sample_count < window_size:
        return np.array([], dtype=np.int64)
    return np.arange(0, sample_count - window_size + 1, hop_size, dtype=np.int64)


def combined_energies(frames: np.ndarray, spectral_weight: float) -> np.ndarray:
    """
    Combined energy of each row of ``frames``.

    Args:
        frames: Array of shape (n_windows, window_size)
        spectral_weight: Weight of the upper-window energy term

    Returns:
        Array of shape (n_windows,)
    """
    window_size = frames.shape[1]
    squares = frames * frames
    energy = squares.sum(axis=1) / window_size
    # Offsets strictly greater than a quarter of the window
    spectral = squares[:, window_size // 4 + 1:].sum(axis=1) / (window_size * 0.75)
    return energy + spectral * spectral_weight


class EnergyProfileExtractor:
    """
    Computes the energy profile of a sample buffer.

    Extraction owns the first half of overall analysis progress, so reported
    values run from 0 to 50.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.window_size = self.settings.analysis.window_size
        self.hop_size = self.settings.analysis.hop_size
        self.spectral_weight = self.settings.analysis.spectral_weight
        self.chunk_windows = max(1, self.settings.analysis.chunk_windows)

    def iter_chunks(self,
                    buffer: SampleBuffer,
                    window_size: Optional[int] = None,
                    hop_size: Optional[int] = None,
                    reporter: Optional[ProgressReporter] = None) -> Iterator[List[EnergyWindow]]:
        """
        Yield the energy profile in chunks of whole windows.

        Callers that need to share a scheduler can suspend between chunks; a
        window is never split across two chunks.

        Args:
            buffer: Samples to analyze
            window_size: Samples per window (defaults to settings)
            hop_size: Samples between window starts (defaults to settings)
            reporter: Progress observer

        Yields:
            Lists of consecutive EnergyWindow values
        """
        window_size = self.window_size if window_size is None else window_size
        hop_size = self.hop_size if hop_size is None else hop_size
        validate_analysis_parameters(window_size, hop_size)
        reporter = guard(reporter)

        samples = buffer.samples
        sample_count = len(samples)
        starts = window_starts(sample_count, window_size, hop_size)

        if len(starts) == 0:
            logger.info(
                f"Buffer of {sample_count} samples is shorter than one window ({window_size})"
            )
            reporter.report(EXTRACTION_PROGRESS_SHARE)
            return

        frames_view = sliding_window_view(samples, window_size)
        span = sample_count - window_size

        for offset in range(0, len(starts), self.chunk_windows):
            chunk_starts = starts[offset:offset + self.chunk_windows]
            energies = combined_energies(frames_view[chunk_starts], self.spectral_weight)

            yield [
                EnergyWindow(time=int(start) / buffer.sample_rate, energy=float(energy))
                for start, energy in zip(chunk_starts, energies)
            ]

            if span > 0:
                for value in np.unique(np.floor(chunk_starts / span * EXTRACTION_PROGRESS_SHARE)):
                    reporter.report(int(value))

        reporter.report(EXTRACTION_PROGRESS_SHARE)

    def extract(self,
                buffer: SampleBuffer,
                window_size: Optional[int] = None,
                hop_size: Optional[int] = None,
                reporter: Optional[ProgressReporter] = None,
                strict: bool = False) -> List[EnergyWindow]:
        """
        Compute the full energy profile of a buffer.

        Args:
            buffer: Samples to analyze
            window_size: Samples per window (defaults to settings)
            hop_size: Samples between window starts (defaults to settings)
            reporter: Progress observer
            strict: Raise instead of returning an empty profile when the
                buffer is shorter than one window

        Returns:
            Time-ordered list of EnergyWindow values

        Raises:
            InsufficientSamplesError: If strict and the buffer is too short
            ValidationError: If window or hop size is not positive
        """
        effective_window = self.window_size if window_size is None else window_size
        validate_analysis_parameters(effective_window, self.hop_size if hop_size is None else hop_size)
        if strict and len(buffer) < effective_window:
            raise InsufficientSamplesError(len(buffer), effective_window)

        profile: List[EnergyWindow] = []
        for chunk in self.iter_chunks(buffer, window_size, hop_size, reporter):
            profile.extend(chunk)

        logger.debug(f"Extracted {len(profile)} energy windows")
        return profile
