"""Event models for the pub/sub audio pipeline."""

from dataclasses import dataclass


@dataclass
class AudioEvent:
    """Audio chunk event with metadata."""
    chunk_id: str
    audio_data: bytes
    timestamp: float  # Unix timestamp when the chunk was read
    sequence_number: int
    final: bool = False  # True if this is the last chunk of the source
