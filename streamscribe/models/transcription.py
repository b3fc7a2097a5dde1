"""Transcription-related data models."""

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class WordInfo:
    """Timing and confidence for a single recognized word."""
    word: str
    start_time: Optional[float] = None  # Seconds from start of audio
    end_time: Optional[float] = None
    confidence: Optional[float] = None


@dataclass(frozen=True)
class Alternative:
    """One recognition hypothesis for an utterance."""
    transcript: str
    confidence: Optional[float] = None
    words: Tuple[WordInfo, ...] = ()


@dataclass(frozen=True)
class TranscriptionUnit:
    """One recognized utterance at a fixed position of the transcript.

    Units are immutable. When the service revises an utterance the whole
    unit at that position is replaced by a new one.
    """
    text: str
    confidence: Optional[float] = None
    final: bool = False
    words: Tuple[WordInfo, ...] = ()
    alternatives: Tuple[Alternative, ...] = ()

    @classmethod
    def placeholder(cls) -> "TranscriptionUnit":
        """Create an empty interim unit for a position the service has not sent yet."""
        return cls(text="", confidence=None, final=False)

    @property
    def is_placeholder(self) -> bool:
        return not self.final and not self.text and not self.alternatives

    def __str__(self) -> str:
        status = "final" if self.final else "interim"
        return f"TranscriptionUnit({status}: {self.text})"


# Snapshots handed to consumers are tuples so they cannot be mutated
Transcript = Tuple[TranscriptionUnit, ...]
