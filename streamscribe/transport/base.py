"""Abstract transport and the listener interface it reports to."""

from abc import ABC, abstractmethod
from typing import Optional, Protocol, Union


class TransportListener(Protocol):
    """Receives inbound frames and lifecycle events from a transport."""

    def on_open(self) -> None:
        ...

    def on_text_frame(self, text: str) -> None:
        ...

    def on_binary_frame(self, data: bytes) -> None:
        ...

    def on_error(self, error: BaseException) -> None:
        ...

    def on_close(self, error: Optional[BaseException]) -> None:
        ...


class AbstractTransport(ABC):
    """One bidirectional connection to the remote service.

    The owner registers itself with ``attach`` before connecting; every
    inbound frame and lifecycle event is then delivered to that listener.
    """

    def __init__(self):
        self.listener: Optional[TransportListener] = None

    def attach(self, listener: TransportListener) -> None:
        """Register the listener that receives frames and events."""
        self.listener = listener

    @abstractmethod
    async def connect(self) -> bool:
        """Open the connection.

        Returns:
            True if the connection was opened, False if it failed (the
            failure is also reported through ``listener.on_error``)
        """
        pass

    @abstractmethod
    def send(self, data: Union[bytes, str]) -> None:
        """Queue a binary or text frame without waiting for it to be written."""
        pass

    @abstractmethod
    def send_ping(self, data: bytes = b"") -> None:
        """Queue a ping frame."""
        pass

    @abstractmethod
    async def close(self, timeout: Optional[float] = None) -> None:
        """Close the connection, forcing it after ``timeout`` seconds if given."""
        pass
