"""
Beat analysis engine that ties decoding, analysis and playback sync together.
"""

import asyncio
from typing import Callable, List, Optional, Tuple

from ..config.settings import Settings, get_settings
from ..config.constants import EXTRACTION_PROGRESS_SHARE
from ..audio.decoder import AudioDecoder, DecodedAudio
from ..utils.exceptions import AnalysisCancelledError, DecodeError, ValidationError
from ..utils.validators import validate_audio_bytes, validate_audio_file
from ..utils.logging import get_logger, AnalysisLogger
from .models import AnalysisSession, Beat, SampleBuffer
from .energy import EnergyProfileExtractor
from .classifier import AdaptiveBeatClassifier, beat_sequence
from .progress import ProgressReporter, guard
from .playback import PlaybackCursor, PlaybackEvent
from .synchronizer import PlaybackSynchronizer

logger = get_logger(__name__)

SessionListener = Callable[[AnalysisSession], None]


class _SessionProgress(ProgressReporter):
    """Routes pipeline progress into the engine's session snapshot."""

    def __init__(self, engine: 'BeatSyncEngine', generation: int, log: AnalysisLogger):
        self.engine = engine
        self.generation = generation
        self.log = log

    def report(self, progress: int) -> None:
        self.log.progress(progress)
        self.engine._publish_progress(self.generation, progress)


class BeatSyncEngine:
    """
    Owns the analysis session and the playback synchronizer for one player.

    Loading a file starts a new session generation. Only the most recent
    generation may publish results; an older analysis still in flight is
    discarded at its next checkpoint, so a reader never sees beats from two
    files mixed together.
    """

    def __init__(self,
                 settings: Optional[Settings] = None,
                 decoder: Optional[AudioDecoder] = None,
                 reporter: Optional[ProgressReporter] = None):
        """
        Initialize the engine.

        Args:
            settings: Application settings (uses global settings if None)
            decoder: Decoder handle; one is created on first load if None
            reporter: Extra progress observer notified alongside the session
        """
        self.settings = settings or get_settings()
        self.extractor = EnergyProfileExtractor(self.settings)
        self.classifier = AdaptiveBeatClassifier(self.settings)
        self.synchronizer = PlaybackSynchronizer(self.settings)
        self.reporter = guard(reporter)

        self._decoder = decoder
        self._owns_decoder = decoder is None
        self._session = AnalysisSession()
        self._listeners: List[SessionListener] = []
        self._cursor = PlaybackCursor()

    @property
    def session(self) -> AnalysisSession:
        return self._session

    @property
    def beats(self) -> Tuple[Beat, ...]:
        return self._session.beats

    @property
    def analyzing(self) -> bool:
        return self._session.analyzing

    @property
    def progress(self) -> int:
        return self._session.progress

    @property
    def active_index(self) -> int:
        return self.synchronizer.active_index

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """
        Register a listener for session snapshots.

        Returns:
            A callable that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def analyze_samples(self,
                        buffer: SampleBuffer,
                        reporter: Optional[ProgressReporter] = None) -> Tuple[Beat, ...]:
        """
        Run extraction and classification synchronously.

        This does not touch the engine's session; it is the headless form of
        the pipeline.

        Args:
            buffer: Samples of the analyzed channel
            reporter: Progress observer

        Returns:
            Regular and strong beats in ascending time order
        """
        reporter = guard(reporter)
        profile = self.extractor.extract(buffer, reporter=reporter)
        beats = self.classifier.classify(profile, reporter=reporter)
        return beat_sequence(beats)

    async def load(self, data: bytes) -> AnalysisSession:
        """
        Decode and analyze a new audio file, superseding any analysis in flight.

        Args:
            data: Encoded audio file contents

        Returns:
            The session snapshot this load ended with. If a newer load
            superseded it, the snapshot is marked cancelled and nothing was
            published.

        Raises:
            DecodeError: If the data cannot be decoded. An empty or non-bytes
                buffer is rejected before the session changes; a decoding
                failure after that leaves an empty, failed session.
            BeatSyncError: Any other failure of the current load, e.g.
                invalid analysis settings, also leaves a failed session.
        """
        try:
            data = validate_audio_bytes(data)
        except ValidationError as e:
            raise DecodeError(str(e))

        generation = self._session.generation + 1
        self._set_session(AnalysisSession(generation=generation, analyzing=True))
        self.synchronizer.reset()
        log = AnalysisLogger(logger, generation)

        try:
            log.phase("Decoding audio", 0)
            decoded = await self._decode(data)
            self._check_current(generation)

            log.phase("Extracting energy profile", 0)
            reporter = guard(_SessionProgress(self, generation, log))
            profile = []
            for chunk in self.extractor.iter_chunks(decoded.primary, reporter=reporter):
                profile.extend(chunk)
                await asyncio.sleep(0)
                self._check_current(generation)

            log.phase("Classifying beats", EXTRACTION_PROGRESS_SHARE)
            beats = beat_sequence(self.classifier.classify(profile, reporter=reporter))
            self._check_current(generation)

        except AnalysisCancelledError:
            log.superseded()
            return AnalysisSession(generation=generation, cancelled=True)

        except asyncio.CancelledError:
            if self._is_current(generation):
                self._set_session(self._session.update(analyzing=False, cancelled=True))
            raise

        except Exception as e:
            # A failure that lands after a newer load started belongs to nobody
            if not self._is_current(generation):
                log.superseded()
                return AnalysisSession(generation=generation, cancelled=True)
            log.failed(e)
            self._set_session(self._session.update(analyzing=False, progress=0, error=str(e)))
            raise

        session = self._session.update(beats=beats, progress=100, analyzing=False)
        self._set_session(session)
        self.synchronizer.set_beats(beats, self._cursor)
        log.finished(len(beats))
        return session

    async def load_file(self, file_path: str) -> AnalysisSession:
        """Read an audio file from disk and ``load`` it."""
        file_path = validate_audio_file(file_path)
        with open(file_path, 'rb') as f:
            data = f.read()
        return await self.load(data)

    def cancel(self):
        """Invalidate the analysis in flight, if any, without starting a new one."""
        if not self._session.analyzing:
            return
        self._set_session(AnalysisSession(generation=self._session.generation + 1, cancelled=True))

    def tick(self, cursor: PlaybackCursor) -> int:
        """Advance the synchronizer with the clock's latest cursor."""
        self._cursor = cursor
        return self.synchronizer.tick(cursor)

    def handle_playback_event(self, event: PlaybackEvent, cursor: PlaybackCursor) -> int:
        """Forward a playback clock transition to the synchronizer."""
        self._cursor = cursor
        return self.synchronizer.handle_event(event, cursor)

    def close(self):
        """End the session: discard beats, invalidate analysis, release the decoder."""
        self._set_session(AnalysisSession(generation=self._session.generation + 1))
        self.synchronizer.reset()
        if self._decoder is not None and self._owns_decoder:
            self._decoder.close()
            self._decoder = None

    async def __aenter__(self) -> 'BeatSyncEngine':
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        self.close()

    async def _decode(self, data: bytes) -> DecodedAudio:
        if self._decoder is None:
            self._decoder = AudioDecoder(self.settings)
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._decoder.decode, data)

    def _is_current(self, generation: int) -> bool:
        return self._session.generation == generation

    def _check_current(self, generation: int):
        if not self._is_current(generation):
            raise AnalysisCancelledError(f"Analysis #{generation} was superseded")

    def _publish_progress(self, generation: int, progress: int):
        if not self._is_current(generation):
            return
        self.reporter.report(progress)
        self._set_session(self._session.update(progress=progress))

    def _set_session(self, session: AnalysisSession):
        self._session = session
        for listener in list(self._listeners):
            try:
                listener(session)
            except Exception as e:
                logger.warning(f"Session listener failed: {e}")
