"""
Core beat analysis and playback synchronization components.
"""

from .models import AnalysisSession, Beat, BeatCategory, EnergyWindow, SampleBuffer
from .progress import ProgressReporter
from .energy import EnergyProfileExtractor
from .classifier import AdaptiveBeatClassifier, beat_sequence
from .playback import PlaybackCursor, PlaybackEvent, PlaybackState
from .synchronizer import PlaybackSynchronizer, active_index
from .engine import BeatSyncEngine

__all__ = [
    "AnalysisSession",
    "Beat",
    "BeatCategory",
    "EnergyWindow",
    "SampleBuffer",
    "ProgressReporter",
    "EnergyProfileExtractor",
    "AdaptiveBeatClassifier",
    "beat_sequence",
    "PlaybackCursor",
    "PlaybackEvent",
    "PlaybackState",
    "PlaybackSynchronizer",
    "active_index",
    "BeatSyncEngine",
]
