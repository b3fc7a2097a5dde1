"""Session-related data models."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class SessionState(Enum):
    """Connection and recognition phase of a streaming session."""
    CONNECTING = "connecting"
    LISTENING = "listening"
    PROCESSING = "processing"
    CLOSED = "closed"
    ERRORED = "errored"


@dataclass
class SessionInfo:
    """Information about a recognition session."""
    session_id: str
    start_time: datetime
    duration_seconds: float
    audio_file: str
    content_type: str
    model: Optional[str] = None
    total_chunks: int = 0
    total_results: int = 0
