"""Transport layer: the byte-stream connection to the speech service."""

from .base import AbstractTransport, TransportListener
from .websocket import WebSocketTransport

__all__ = [
    "AbstractTransport",
    "TransportListener",
    "WebSocketTransport",
]
