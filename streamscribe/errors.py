"""Error types reported by the streaming client.

Every error carries a ``domain`` tag and a human readable ``description`` so
that a single failure callback can tell them apart.
"""

from typing import Optional


class SpeechToTextError(Exception):
    """Base class for all errors surfaced through the failure callback."""

    domain = "speech_to_text"

    def __init__(self, description: str, cause: Optional[BaseException] = None):
        super().__init__(description)
        self.description = description
        self.cause = cause

    def __str__(self) -> str:
        return f"[{self.domain}] {self.description}"


class ConstructionError(SpeechToTextError):
    """The connection parameters could not be resolved into a usable destination."""

    domain = "construction"


class DecodeError(SpeechToTextError):
    """An inbound text frame could not be decoded into a known message."""

    domain = "decode"


class ServiceError(SpeechToTextError):
    """The service reported a recognition error."""

    domain = "service"


class TransportError(SpeechToTextError):
    """Socket-level failure of the underlying connection."""

    domain = "transport"


class ReconciliationError(SpeechToTextError):
    """A result batch was rejected by the transcript gap policy."""

    domain = "reconciliation"
