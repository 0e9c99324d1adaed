"""
Pytest configuration and fixtures for beatsync tests.
"""

import io
import pytest
import numpy as np
import soundfile as sf
from pathlib import Path
from typing import List, Sequence

# Add src to path for testing
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from beatsync.config.settings import Settings, AnalysisSettings
from beatsync.core.models import EnergyWindow, SampleBuffer


IMPULSE_SAMPLE_RATE = 44100
# Hop-aligned start of the burst, 4.992s
IMPULSE_START = 430 * 512


@pytest.fixture
def settings():
    """Default settings."""
    return Settings()


@pytest.fixture
def fast_settings():
    """Small windows and chunks so async tests interleave quickly."""
    return Settings(
        analysis=AnalysisSettings(window_size=256, hop_size=64, chunk_windows=16)
    )


@pytest.fixture
def impulse_buffer():
    """10 seconds of silence with one 2048-sample burst near t=5.0s."""
    return SampleBuffer(make_impulse_audio(), IMPULSE_SAMPLE_RATE)


@pytest.fixture
def silence_buffer():
    """Three seconds of digital silence."""
    return SampleBuffer(np.zeros(3 * 22050, dtype=np.float32), 22050)


@pytest.fixture
def noise_buffer():
    """Five seconds of seeded noise at 8kHz."""
    rng = np.random.default_rng(1234)
    return SampleBuffer(rng.normal(0.0, 0.3, 5 * 8000).astype(np.float32), 8000)


@pytest.fixture
def impulse_wav_bytes():
    """The impulse signal encoded as a float WAV file."""
    return encode_wav(make_impulse_audio(), IMPULSE_SAMPLE_RATE)


@pytest.fixture
def impulse_wav_file(tmp_path, impulse_wav_bytes):
    path = tmp_path / "impulse.wav"
    path.write_bytes(impulse_wav_bytes)
    return str(path)


# Test utilities
def make_impulse_audio(duration: float = 10.0,
                       sample_rate: int = IMPULSE_SAMPLE_RATE,
                       start: int = IMPULSE_START,
                       length: int = 2048) -> np.ndarray:
    audio = np.zeros(int(duration * sample_rate), dtype=np.float32)
    audio[start:start + length] = 1.0
    return audio


def encode_wav(audio: np.ndarray, sample_rate: int) -> bytes:
    buf = io.BytesIO()
    sf.write(buf, audio, sample_rate, format='WAV', subtype='FLOAT')
    return buf.getvalue()


def make_profile(energies: Sequence[float], step: float = 0.01) -> List[EnergyWindow]:
    """Energy profile with windows ``step`` seconds apart."""
    return [EnergyWindow(time=i * step, energy=float(e)) for i, e in enumerate(energies)]


def assert_beat_sequence_valid(beats, min_spacing: float = 0.08):
    """Assert ordering and spacing of an exported beat sequence."""
    for beat in beats:
        assert beat.is_beat
    for prev, cur in zip(beats, beats[1:]):
        assert cur.time > prev.time
        assert cur.time - prev.time >= min_spacing - 1e-12
