"""Decoded wire messages pushed by the speech service."""

from dataclasses import dataclass
from typing import Optional, Tuple, Union

from .session import SessionState
from .transcription import TranscriptionUnit


@dataclass(frozen=True)
class StateUpdate:
    """Recognition phase reported by the service, e.g. ``{"state": "listening"}``.

    ``name`` is kept as sent; ``state`` is None for phases this client does not model.
    """
    name: str

    @property
    def state(self) -> Optional[SessionState]:
        try:
            return SessionState(self.name.lower())
        except ValueError:
            return None


@dataclass(frozen=True)
class ResultBatch:
    """New or revised units to apply from ``result_index`` forward."""
    result_index: int
    results: Tuple[TranscriptionUnit, ...] = ()

    def __len__(self) -> int:
        return len(self.results)


@dataclass(frozen=True)
class ServiceErrorMessage:
    """Recognition error reported by the service, e.g. ``{"error": "..."}``."""
    error: str


ServerMessage = Union[StateUpdate, ResultBatch, ServiceErrorMessage]
