"""WebSocket transport built on aiohttp."""

import asyncio
import logging
from typing import Dict, List, Optional, Tuple, Union

import aiohttp

from .base import AbstractTransport

logger = logging.getLogger(__name__)

_TEXT = "text"
_BINARY = "binary"
_PING = "ping"

Frame = Tuple[str, Union[str, bytes]]


class WebSocketTransport(AbstractTransport):
    """Client WebSocket connection with a single reader and a queued writer.

    Inbound frames are read by one task and delivered to the listener in
    order. Outbound frames go through a queue drained by a writer task, so
    ``send`` never blocks and may be called from any thread. Frames sent
    before the connection opens are held and written once it does.
    """

    def __init__(self, url, headers: Optional[Dict[str, str]] = None,
                 connect_timeout: float = 30.0):
        """Initialize the transport.

        Args:
            url: ws:// or wss:// URL of the service endpoint
            headers: Extra headers for the upgrade request (e.g. auth token)
            connect_timeout: Seconds to wait for the connection to open
        """
        super().__init__()
        self.url = url
        self.headers = headers or {}
        self.connect_timeout = connect_timeout

        self._session: Optional[aiohttp.ClientSession] = None
        self._ws: Optional[aiohttp.ClientWebSocketResponse] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._outbound: Optional[asyncio.Queue] = None
        self._pending: List[Frame] = []
        self._reader_task: Optional[asyncio.Task] = None
        self._writer_task: Optional[asyncio.Task] = None
        self._closing = False
        self._closed = False
        self._close_notified = False

    @property
    def is_connected(self) -> bool:
        return self._ws is not None and not self._ws.closed

    async def connect(self) -> bool:
        """Open the WebSocket and start the reader and writer tasks."""
        if self.listener is None:
            raise RuntimeError("No listener attached to transport")
        if self.is_connected:
            logger.warning("Transport already connected")
            return True

        self._loop = asyncio.get_running_loop()
        self._outbound = asyncio.Queue()
        for frame in self._pending:
            self._outbound.put_nowait(frame)
        self._pending.clear()
        self._closing = False
        self._closed = False
        self._close_notified = False

        logger.info(f"Connecting to {self.url}")
        self._session = aiohttp.ClientSession(
            timeout=aiohttp.ClientTimeout(total=None, sock_connect=self.connect_timeout))
        try:
            self._ws = await self._session.ws_connect(self.url, headers=self.headers)
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
            logger.error(f"WebSocket connection to {self.url} failed: {e}")
            await self._release_session()
            self._closed = True
            self.listener.on_error(e)
            return False

        logger.info("WebSocket connected")
        self.listener.on_open()
        self._reader_task = self._loop.create_task(self._read_loop())
        self._writer_task = self._loop.create_task(self._write_loop())
        return True

    def send(self, data: Union[bytes, str]) -> None:
        if isinstance(data, str):
            self._enqueue((_TEXT, data))
        else:
            self._enqueue((_BINARY, bytes(data)))

    def send_ping(self, data: bytes = b"") -> None:
        self._enqueue((_PING, bytes(data)))

    def _enqueue(self, frame: Frame) -> None:
        if self._closing or self._closed:
            logger.warning(f"Dropping {frame[0]} frame: transport is closed")
            return
        if self._loop is None:
            self._pending.append(frame)
            return

        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is self._loop:
            self._outbound.put_nowait(frame)
        else:
            self._loop.call_soon_threadsafe(self._outbound.put_nowait, frame)

    async def _write_loop(self) -> None:
        while True:
            kind, payload = await self._outbound.get()
            try:
                if kind == _TEXT:
                    await self._ws.send_str(payload)
                elif kind == _BINARY:
                    await self._ws.send_bytes(payload)
                else:
                    await self._ws.ping(payload)
            except (aiohttp.ClientError, ConnectionError, RuntimeError) as e:
                logger.error(f"Failed to write {kind} frame: {e}")
                self.listener.on_error(e)
            finally:
                self._outbound.task_done()

    async def _read_loop(self) -> None:
        # Errors reported through on_error here are not passed to on_close again.
        error_reported = False
        try:
            async for msg in self._ws:
                if msg.type == aiohttp.WSMsgType.TEXT:
                    self.listener.on_text_frame(msg.data)
                elif msg.type == aiohttp.WSMsgType.BINARY:
                    self.listener.on_binary_frame(msg.data)
                elif msg.type == aiohttp.WSMsgType.ERROR:
                    error = self._ws.exception() or ConnectionError(
                        "WebSocket reported an error without details")
                    logger.error(f"WebSocket error: {error}")
                    error_reported = True
                    self.listener.on_error(error)
        except (aiohttp.ClientError, ConnectionError) as e:
            logger.error(f"WebSocket read failed: {e}")
            error_reported = True
            self.listener.on_error(e)

        close_code = self._ws.close_code
        close_error: Optional[BaseException] = None
        if not error_reported and not self._closing and close_code not in (None, 1000):
            close_error = ConnectionError(f"WebSocket closed by peer with code {close_code}")
        logger.info(f"WebSocket reader finished (close code {close_code})")

        # Nothing drains the queue once the writer is gone.
        self._closing = True
        if self._writer_task is not None:
            self._writer_task.cancel()
        self._notify_close(close_error)

    def _notify_close(self, error: Optional[BaseException]) -> None:
        if self._close_notified:
            return
        self._close_notified = True
        self.listener.on_close(error)

    async def close(self, timeout: Optional[float] = None) -> None:
        """Close the connection.

        Queued frames are flushed before the close handshake. With a timeout,
        flush and handshake together may take at most that long; after that
        the connection is aborted.
        """
        if self._closed:
            return
        self._closing = True

        if self._ws is not None:
            try:
                await asyncio.wait_for(self._graceful_close(), timeout)
            except asyncio.TimeoutError:
                logger.warning(f"Close handshake did not finish within {timeout}s, aborting connection")

        for task in (self._writer_task, self._reader_task):
            if task is not None and not task.done():
                task.cancel()
        for task in (self._writer_task, self._reader_task):
            if task is not None:
                try:
                    await task
                except asyncio.CancelledError:
                    pass

        await self._release_session()
        self._closed = True
        if self.listener is not None:
            self._notify_close(None)
        logger.info("WebSocket transport closed")

    async def _graceful_close(self) -> None:
        if self._writer_task is not None and not self._writer_task.done():
            await self._outbound.join()
        await self._ws.close()
        if self._reader_task is not None:
            await asyncio.shield(self._reader_task)

    async def _release_session(self) -> None:
        if self._session is not None:
            await self._session.close()
            self._session = None
