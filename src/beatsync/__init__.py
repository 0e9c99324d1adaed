"""
BeatSync - Beat Detection and Playback Synchronization

Detects strong and regular beats in decoded audio using an adaptive energy
classifier, and resolves the active beat while the audio is playing.
"""

__version__ = "1.0.0"
__author__ = "BeatSync Team"

from .core.engine import BeatSyncEngine
from .config.settings import Settings

__all__ = [
    "BeatSyncEngine",
    "Settings",
]
