"""
Playback synchronization.

Resolves which beat is active for a playback position. The pure
``active_index`` function is what a host calls on every display refresh;
``PlaybackSynchronizer`` wraps it with the state a player needs across
clock transitions (pause retains the index, ended resets it, seek and load
recompute it).
"""

from typing import Callable, List, Optional, Sequence, Tuple

from ..config.settings import Settings, get_settings
from ..config.constants import SYNC_LOOKAHEAD
from ..utils.logging import get_logger
from .models import Beat
from .playback import PlaybackCursor, PlaybackEvent

logger = get_logger(__name__)

IndexListener = Callable[[int], None]


def active_index(beats: Sequence[Beat], current_time: float, lookahead: float = SYNC_LOOKAHEAD) -> int:
    """
    Index of the last beat with ``time <= current_time + lookahead``.

    Beats must be sorted by time. Uses a binary search, so the result equals
    a backward linear scan but costs O(log n).

    Args:
        beats: Beat sequence in ascending time order
        current_time: Playback position in seconds
        lookahead: Forward tolerance in seconds

    Returns:
        Zero-based index of the active beat, or -1 if no beat is active yet
    """
    limit = current_time + lookahead
    lo, hi = 0, len(beats)
    while lo < hi:
        mid = (lo + hi) // 2
        if beats[mid].time <= limit:
            lo = mid + 1
        else:
            hi = mid
    return lo - 1


class PlaybackSynchronizer:
    """
    Keeps the active beat index in step with a playback clock.

    Call ``tick`` once per scheduler tick with the latest cursor and
    ``handle_event`` for every clock transition. Listeners are notified only
    when the index changes.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.lookahead = self.settings.sync.lookahead
        self._beats: Tuple[Beat, ...] = ()
        self._index = -1
        self._listeners: List[IndexListener] = []

    @property
    def beats(self) -> Tuple[Beat, ...]:
        return self._beats

    @property
    def active_index(self) -> int:
        return self._index

    @property
    def active_beat(self) -> Optional[Beat]:
        if self._index < 0:
            return None
        return self._beats[self._index]

    def subscribe(self, listener: IndexListener) -> Callable[[], None]:
        """
        Register a listener for index changes.

        Returns:
            A callable that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def set_beats(self, beats: Sequence[Beat], cursor: Optional[PlaybackCursor] = None) -> int:
        """
        Replace the beat sequence wholesale.

        Regular and strong beats are kept in time order; the index resets and
        is recomputed immediately when a cursor is given.
        """
        self._beats = tuple(beat for beat in beats if beat.is_beat)
        self._set_index(-1)
        if cursor is not None:
            return self.resolve(cursor.current_time)
        return self._index

    def resolve(self, current_time: float) -> int:
        """Recompute the index for ``current_time`` regardless of play state."""
        self._set_index(active_index(self._beats, current_time, self.lookahead))
        return self._index

    def tick(self, cursor: PlaybackCursor) -> int:
        """
        Update from the latest cursor; a paused cursor keeps the last index.

        Returns:
            The active beat index after the tick
        """
        if cursor.is_playing:
            return self.resolve(cursor.current_time)
        return self._index

    def handle_event(self, event: PlaybackEvent, cursor: PlaybackCursor) -> int:
        """
        React to a playback clock transition.

        Args:
            event: Transition reported by the clock
            cursor: Cursor after the transition

        Returns:
            The active beat index after the transition
        """
        if event is PlaybackEvent.ENDED:
            self._set_index(-1)
        elif event in (PlaybackEvent.SOUGHT, PlaybackEvent.LOADED, PlaybackEvent.STARTED):
            self.resolve(cursor.current_time)
        return self._index

    def reset(self):
        """Drop the beat sequence, e.g. when the session ends."""
        self._beats = ()
        self._set_index(-1)

    def _set_index(self, index: int):
        if index == self._index:
            return
        self._index = index
        for listener in list(self._listeners):
            try:
                listener(index)
            except Exception as e:
                logger.warning(f"Beat index listener failed: {e}")
