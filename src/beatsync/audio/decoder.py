"""
Audio decoding from raw byte buffers.
"""

import io
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

import numpy as np
import librosa
import soundfile as sf

from ..config.settings import Settings, get_settings
from ..core.models import SampleBuffer
from ..utils.exceptions import DecodeError, ValidationError
from ..utils.validators import validate_audio_bytes, validate_audio_file
from ..utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class DecodedAudio:
    """Per-channel samples produced by the decoder."""
    channels: Tuple[SampleBuffer, ...]
    sample_rate: int

    @property
    def primary(self) -> SampleBuffer:
        """The channel the analysis runs on."""
        if not self.channels:
            raise DecodeError("Decoded audio has no channels")
        return self.channels[0]

    @property
    def duration(self) -> float:
        return self.primary.duration if self.channels else 0.0


class AudioDecoder:
    """
    Turns encoded audio bytes into per-channel float samples.

    A decoder is a lifecycle-scoped handle: construct it when the first file
    is loaded and ``close`` it when the session is torn down. libsndfile
    handles the formats it knows; anything else is handed to librosa, which
    can use audioread backends for compressed formats.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.dtype = self.settings.decoder.dtype
        self.librosa_fallback = self.settings.decoder.librosa_fallback
        self.closed = False

    def __enter__(self) -> 'AudioDecoder':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self):
        """Release the decoder. Further decode calls fail."""
        if not self.closed:
            logger.debug("Audio decoder closed")
        self.closed = True

    def decode(self, data: bytes) -> DecodedAudio:
        """
        Decode an encoded audio buffer.

        Args:
            data: Encoded audio file contents

        Returns:
            DecodedAudio with one SampleBuffer per channel

        Raises:
            DecodeError: If the data is empty, corrupt or in an unsupported format
        """
        if self.closed:
            raise DecodeError("Audio decoder has been closed")

        try:
            data = validate_audio_bytes(data)
        except ValidationError as e:
            raise DecodeError(str(e))

        try:
            audio, sample_rate = sf.read(io.BytesIO(data), dtype=self.dtype, always_2d=True)
            channels = audio.T
        except (RuntimeError, TypeError) as e:
            if not self.librosa_fallback:
                raise DecodeError(f"Unsupported or corrupt audio data: {e}")
            logger.info(f"libsndfile could not decode buffer ({e}), trying librosa")
            channels, sample_rate = self._decode_with_librosa(data)

        if channels.shape[-1] == 0:
            raise DecodeError("Decoded audio contains no samples")

        decoded = DecodedAudio(
            channels=tuple(SampleBuffer(channel, int(sample_rate)) for channel in channels),
            sample_rate=int(sample_rate),
        )
        logger.info(
            f"Decoded {len(decoded.channels)} channel(s), "
            f"{decoded.duration:.1f}s at {decoded.sample_rate}Hz"
        )
        return decoded

    def decode_file(self, file_path: str) -> DecodedAudio:
        """
        Read and decode an audio file.

        Raises:
            ValidationError: If the path does not exist or has an unsupported extension
            DecodeError: If decoding fails
        """
        file_path = validate_audio_file(file_path)
        logger.info(f"Loading audio file: {file_path}")
        return self.decode(Path(file_path).read_bytes())

    def _decode_with_librosa(self, data: bytes) -> Tuple[np.ndarray, int]:
        # audioread backends need a real path
        fd, tmp_path = tempfile.mkstemp(suffix='.audio')
        try:
            with os.fdopen(fd, 'wb') as f:
                f.write(data)
            audio, sample_rate = librosa.load(tmp_path, sr=None, mono=False, dtype=np.dtype(self.dtype))
        except Exception as e:
            raise DecodeError(f"Unsupported or corrupt audio data: {e}")
        finally:
            try:
                os.unlink(tmp_path)
            except OSError as e:
                logger.debug(f"Could not remove temporary file {tmp_path}: {e}")

        return np.atleast_2d(audio), sample_rate
