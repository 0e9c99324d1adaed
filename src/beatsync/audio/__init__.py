"""
Audio decoding components.
"""

from .decoder import AudioDecoder, DecodedAudio

__all__ = [
    "AudioDecoder",
    "DecodedAudio",
]
