"""Audio sources feeding the streaming session."""

from .audio_pub import AudioPublisher
from .file_reader import AudioFileReader

__all__ = [
    'AudioPublisher',
    'AudioFileReader'
]
