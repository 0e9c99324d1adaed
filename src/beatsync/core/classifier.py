"""
Adaptive beat classification over an energy profile.
"""

from typing import List, Optional, Sequence, Tuple

import numpy as np

from ..config.settings import Settings, get_settings
from ..config.constants import PEAK_MARGIN, STATISTICS_PROGRESS, COMPLETE_PROGRESS
from ..utils.validators import validate_min_spacing
from ..utils.logging import get_logger
from .models import Beat, BeatCategory, EnergyWindow, ProfileStatistics
from .progress import ProgressReporter, guard

logger = get_logger(__name__)


def beat_sequence(beats: Sequence[Beat]) -> Tuple[Beat, ...]:
    """Keep only regular and strong beats, preserving time order."""
    return tuple(beat for beat in beats if beat.is_beat)


def is_local_peak(energies: Sequence[float], index: int, margin: int = PEAK_MARGIN) -> bool:
    """True if ``energies[index]`` strictly exceeds every neighbour within ``margin``."""
    current = energies[index]
    for offset in range(1, margin + 1):
        if not (current > energies[index - offset] and current > energies[index + offset]):
            return False
    return True


class AdaptiveBeatClassifier:
    """
    Labels local energy maxima as strong or regular beats.

    Thresholds are derived from the profile itself (mean plus a multiple of
    the population standard deviation), so quiet and loud recordings are
    calibrated independently.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.min_spacing = self.settings.analysis.min_spacing
        self.strong_factor = self.settings.analysis.strong_factor
        self.regular_factor = self.settings.analysis.regular_factor

    def compute_statistics(self, profile: Sequence[EnergyWindow]) -> ProfileStatistics:
        """
        Compute global statistics and thresholds.

        Args:
            profile: Non-empty energy profile

        Returns:
            ProfileStatistics for the profile
        """
        energies = np.fromiter((window.energy for window in profile), dtype=np.float64,
                               count=len(profile))
        mean = float(np.mean(energies))
        std_dev = float(np.std(energies))

        return ProfileStatistics(
            max_energy=float(np.max(energies)),
            mean_energy=mean,
            std_dev=std_dev,
            strong_threshold=mean + std_dev * self.strong_factor,
            regular_threshold=mean + std_dev * self.regular_factor,
        )

    def categorize(self, energy: float, stats: ProfileStatistics) -> BeatCategory:
        """Category of a peak with the given energy; strong takes precedence."""
        if energy >= stats.strong_threshold:
            return BeatCategory.STRONG
        if energy >= stats.regular_threshold:
            return BeatCategory.REGULAR
        return BeatCategory.NONE

    def classify(self,
                 profile: Sequence[EnergyWindow],
                 min_spacing: Optional[float] = None,
                 reporter: Optional[ProgressReporter] = None) -> List[Beat]:
        """
        Label every window of an energy profile.

        Args:
            profile: Time-ordered energy profile
            min_spacing: Minimum seconds between accepted beats (defaults to settings)
            reporter: Progress observer

        Returns:
            One Beat per input window, in input order
        """
        min_spacing = self.min_spacing if min_spacing is None else min_spacing
        validate_min_spacing(min_spacing)
        reporter = guard(reporter)

        beats = [Beat.from_window(window) for window in profile]
        if not beats:
            logger.info("Empty energy profile, no beats to classify")
            reporter.report(COMPLETE_PROGRESS)
            return beats

        stats = self.compute_statistics(profile)
        reporter.report(STATISTICS_PROGRESS)
        logger.debug(
            f"Profile statistics: mean={stats.mean_energy:.6g} std={stats.std_dev:.6g} "
            f"max={stats.max_energy:.6g}"
        )

        energies = [beat.energy for beat in beats]
        last_beat_time = -min_spacing

        for i in range(PEAK_MARGIN, len(beats) - PEAK_MARGIN):
            if not is_local_peak(energies, i):
                continue
            current = beats[i]
            if current.time - last_beat_time < min_spacing:
                continue

            category = self.categorize(current.energy, stats)
            if category is BeatCategory.NONE:
                continue

            beats[i] = current.with_category(category)
            last_beat_time = current.time

        reporter.report(COMPLETE_PROGRESS)

        accepted = beat_sequence(beats)
        if not accepted:
            logger.info("No beats detected in energy profile")
        else:
            strong = sum(1 for beat in accepted if beat.is_strong)
            logger.info(f"Detected {len(accepted)} beats ({strong} strong)")

        return beats
