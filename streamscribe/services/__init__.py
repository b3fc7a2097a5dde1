"""Services layer for StreamScribe application logic."""

from .streaming_service import StreamingService

__all__ = [
    "StreamingService",
]
