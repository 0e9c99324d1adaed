"""
Validation utilities for BeatSync.
"""

import numbers
import os
from pathlib import Path
from typing import Any

from ..config.constants import SUPPORTED_AUDIO_FORMATS
from .exceptions import ValidationError


def validate_audio_file(file_path: str) -> str:
    """
    Validate that an audio file exists and has a supported format.

    Args:
        file_path: Path to the audio file

    Returns:
        Absolute path to the validated file

    Raises:
        ValidationError: If file doesn't exist or has unsupported format
    """
    if not os.path.exists(file_path):
        raise ValidationError(f"Audio file not found: {file_path}")

    file_ext = Path(file_path).suffix.lower()

    if file_ext not in SUPPORTED_AUDIO_FORMATS:
        raise ValidationError(
            f"Unsupported audio format: {file_ext}. "
            f"Supported formats: {', '.join(SUPPORTED_AUDIO_FORMATS)}"
        )

    return os.path.abspath(file_path)


def validate_audio_bytes(data: Any) -> bytes:
    """
    Validate a raw audio byte buffer before decoding.

    Raises:
        ValidationError: If the buffer is not bytes-like or is empty
    """
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise ValidationError(
            f"Audio data must be bytes-like, got {type(data).__name__}"
        )
    data = bytes(data)
    if not data:
        raise ValidationError("Audio data is empty")
    return data


def validate_sample_rate(sample_rate: Any) -> int:
    """Validate that a sample rate is a positive integer, numpy integers included."""
    if not _is_integer(sample_rate) or sample_rate <= 0:
        raise ValidationError(f"Sample rate must be a positive integer, got {sample_rate!r}")
    return int(sample_rate)


def validate_analysis_parameters(window_size: Any, hop_size: Any, min_spacing: Any = 0.0) -> None:
    """
    Validate windowing and debounce parameters.

    Args:
        window_size: Samples per analysis window
        hop_size: Samples between consecutive window starts
        min_spacing: Minimum seconds between two accepted beats

    Raises:
        ValidationError: If any parameter is out of range
    """
    for name, value in (('Window size', window_size), ('Hop size', hop_size)):
        if not _is_integer(value) or value <= 0:
            raise ValidationError(f"{name} must be a positive integer, got {value!r}")

    validate_min_spacing(min_spacing)


def validate_min_spacing(min_spacing: Any) -> float:
    """Validate the minimum time between two accepted beats."""
    if isinstance(min_spacing, bool) or not isinstance(min_spacing, (int, float)) or min_spacing < 0:
        raise ValidationError(f"Minimum beat spacing must be a non-negative number, got {min_spacing!r}")
    return float(min_spacing)


def _is_integer(value: Any) -> bool:
    return isinstance(value, numbers.Integral) and not isinstance(value, bool)
