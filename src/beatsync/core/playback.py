"""
Playback clock model.

The host owns the real clock (an audio element, a sound device stream, a
timer). This module only describes what the core reads from it: a cursor
snapshot and the transitions that force the synchronizer to react.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional


class PlaybackEvent(str, Enum):
    """Transitions reported by the playback clock."""
    LOADED = 'loaded'
    STARTED = 'started'
    PAUSED = 'paused'
    ENDED = 'ended'
    SOUGHT = 'sought'


@dataclass(frozen=True)
class PlaybackCursor:
    """Read-only view of the playback position."""
    current_time: float = 0.0
    is_playing: bool = False
    duration: Optional[float] = None


class PlaybackState:
    """
    Tracks a PlaybackCursor across clock transitions.

    Hosts without their own clock object can drive the synchronizer through
    this class; ``ended`` stops playback and rewinds to zero.
    """

    def __init__(self, duration: Optional[float] = None):
        self.cursor = PlaybackCursor(duration=duration)

    def apply(self,
              event: PlaybackEvent,
              time: Optional[float] = None,
              duration: Optional[float] = None) -> PlaybackCursor:
        """
        Apply a clock transition and return the new cursor.

        Args:
            event: Transition that occurred
            time: Playback position after the transition, when known
            duration: Track duration, for ``loaded``
        """
        cursor = self.cursor
        if event is PlaybackEvent.LOADED:
            cursor = PlaybackCursor(duration=duration)
        elif event is PlaybackEvent.STARTED:
            cursor = replace(cursor, is_playing=True)
        elif event is PlaybackEvent.PAUSED:
            cursor = replace(cursor, is_playing=False)
        elif event is PlaybackEvent.ENDED:
            cursor = replace(cursor, is_playing=False, current_time=0.0)
        elif event is PlaybackEvent.SOUGHT:
            cursor = replace(cursor, current_time=max(0.0, time or 0.0))

        if time is not None and event in (PlaybackEvent.STARTED, PlaybackEvent.PAUSED):
            cursor = replace(cursor, current_time=time)

        self.cursor = cursor
        return cursor

    def advance(self, current_time: float) -> PlaybackCursor:
        """Record a new position reported by the clock while playing."""
        self.cursor = replace(self.cursor, current_time=current_time)
        return self.cursor
