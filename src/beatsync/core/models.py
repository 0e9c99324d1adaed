"""
Value types shared by the analysis pipeline and the playback synchronizer.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Optional, Sequence, Tuple

import numpy as np

from ..utils.validators import validate_sample_rate


class BeatCategory(str, Enum):
    """Rhythmic label assigned to an energy window."""
    NONE = 'none'
    REGULAR = 'regular'
    STRONG = 'strong'


@dataclass(frozen=True, eq=False)
class SampleBuffer:
    """
    One channel of decoded audio.

    The sample array is copied to a read-only float array on construction so
    that the analysis pass can share it without synchronization.
    """
    samples: np.ndarray
    sample_rate: int

    def __post_init__(self):
        object.__setattr__(self, 'sample_rate', validate_sample_rate(self.sample_rate))
        samples = np.array(self.samples, dtype=np.float64).reshape(-1)
        samples.setflags(write=False)
        object.__setattr__(self, 'samples', samples)

    def __len__(self) -> int:
        return len(self.samples)

    @property
    def duration(self) -> float:
        return len(self.samples) / self.sample_rate


@dataclass(frozen=True)
class EnergyWindow:
    """Combined energy of the window starting at ``time`` seconds."""
    time: float
    energy: float


@dataclass(frozen=True)
class Beat:
    """A classified energy window."""
    time: float
    energy: float
    category: BeatCategory = BeatCategory.NONE

    @classmethod
    def from_window(cls, window: EnergyWindow) -> 'Beat':
        return cls(time=window.time, energy=window.energy)

    def with_category(self, category: BeatCategory) -> 'Beat':
        return replace(self, category=category)

    @property
    def is_beat(self) -> bool:
        return self.category is not BeatCategory.NONE

    @property
    def is_strong(self) -> bool:
        return self.category is BeatCategory.STRONG

    @property
    def is_regular(self) -> bool:
        return self.category is BeatCategory.REGULAR

    def to_dict(self) -> Dict[str, Any]:
        return {
            'time': self.time,
            'energy': self.energy,
            'category': self.category.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Beat':
        return cls(
            time=float(data['time']),
            energy=float(data['energy']),
            category=BeatCategory(data.get('category', BeatCategory.NONE.value)),
        )


@dataclass(frozen=True)
class ProfileStatistics:
    """Global statistics of an energy profile and the thresholds derived from them."""
    max_energy: float
    mean_energy: float
    std_dev: float
    strong_threshold: float
    regular_threshold: float


@dataclass(frozen=True)
class BeatSummary:
    """Beat counts for display consumers."""
    strong: int = 0
    regular: int = 0

    @property
    def total(self) -> int:
        return self.strong + self.regular

    @classmethod
    def of(cls, beats: Sequence[Beat]) -> 'BeatSummary':
        return cls(
            strong=sum(1 for beat in beats if beat.is_strong),
            regular=sum(1 for beat in beats if beat.is_regular),
        )


@dataclass(frozen=True)
class AnalysisSession:
    """
    Snapshot of one decode and classify run.

    Sessions are immutable; the engine publishes a new snapshot for every
    state change so readers never observe a partially built beat sequence.
    """
    generation: int = 0
    progress: int = 0
    analyzing: bool = False
    cancelled: bool = False
    beats: Tuple[Beat, ...] = field(default_factory=tuple)
    error: Optional[str] = None

    def update(self, **changes) -> 'AnalysisSession':
        return replace(self, **changes)

    @property
    def summary(self) -> BeatSummary:
        return BeatSummary.of(self.beats)
