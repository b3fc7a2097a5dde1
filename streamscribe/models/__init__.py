"""Data models for the StreamScribe client."""

from .transcription import WordInfo, Alternative, TranscriptionUnit, Transcript
from .messages import StateUpdate, ResultBatch, ServiceErrorMessage, ServerMessage
from .session import SessionState, SessionInfo
from .events import AudioEvent

__all__ = [
    "WordInfo",
    "Alternative",
    "TranscriptionUnit",
    "Transcript",
    # Wire messages
    "StateUpdate",
    "ResultBatch",
    "ServiceErrorMessage",
    "ServerMessage",
    # Session
    "SessionState",
    "SessionInfo",
    "AudioEvent",
]
