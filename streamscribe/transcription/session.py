"""Streaming recognition session: decode, reconcile and notify."""

import logging
import threading
from typing import Any, Callable, Dict, Optional, Union

from ..errors import (
    ReconciliationError,
    ServiceError,
    SpeechToTextError,
    TransportError,
)
from ..models.messages import ResultBatch, ServiceErrorMessage, StateUpdate
from ..models.session import SessionState
from ..models.transcription import Transcript
from ..transport.base import AbstractTransport
from ..transport.websocket import WebSocketTransport
from .decoder import WireMessageDecoder
from .reconciler import GapPolicy, ResultReconciler
from .settings import STOP_COMMAND, RecognitionSettings, encode_command

logger = logging.getLogger(__name__)

ResultCallback = Callable[[Transcript], None]
FailureCallback = Callable[[SpeechToTextError], None]
StateCallback = Callable[[SessionState], None]


class SpeechToTextSession:
    """Streams audio to the speech service and maintains the reconciled transcript.

    Every result batch received from the service is merged into the
    transcript and ``on_result`` is called with the complete transcript.
    Every error (malformed frame, service error, socket failure) goes to
    ``on_failure``. A failure never discards the transcript.

    Usage:
        session = SpeechToTextSession(settings, on_result=print, on_failure=log_error)
        await session.connect()
        session.start_recognition()
        session.send_audio(chunk)
        session.stop_recognition()
        await session.close(timeout=5.0)
    """

    def __init__(self,
                 settings: RecognitionSettings,
                 on_result: ResultCallback,
                 on_failure: Optional[FailureCallback] = None,
                 on_state: Optional[StateCallback] = None,
                 transport: Optional[AbstractTransport] = None,
                 gap_policy: GapPolicy = GapPolicy.PAD):
        """Initialize the session.

        Args:
            settings: Connection parameters and recognition options
            on_result: Called with the full transcript after each result batch
            on_failure: Called with every error reaching the session
            on_state: Called when the service reports a state change
            transport: Transport to use (defaults to a WebSocketTransport for the settings)
            gap_policy: How result batches that skip ahead of the transcript are handled

        Raises:
            ConstructionError: If the service URL cannot be resolved
        """
        self.settings = settings
        self.url = settings.websocket_url()
        self.on_result = on_result
        self.on_failure = on_failure
        self.on_state = on_state

        self.transport = transport or WebSocketTransport(self.url, headers=settings.headers())
        self.transport.attach(self)

        self.decoder = WireMessageDecoder()
        self.reconciler = ResultReconciler(gap_policy)
        self._state = SessionState.CONNECTING
        self._lock = threading.RLock()

        logger.info(f"SpeechToTextSession created for {self.url} "
                    f"(content type {settings.content_type.value}, gap policy {gap_policy.value})")

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def transcript(self) -> Transcript:
        """Snapshot of the current transcript."""
        with self._lock:
            return self.reconciler.snapshot()

    # Outbound operations

    async def connect(self) -> bool:
        """Open the connection to the service.

        Returns:
            True if connected; on failure the error is also reported via ``on_failure``
        """
        self._state = SessionState.CONNECTING
        return await self.transport.connect()

    def send_audio(self, data: bytes) -> None:
        """Forward audio bytes to the service unmodified."""
        self.transport.send(bytes(data))

    def send_text(self, text: str) -> None:
        """Forward a text frame to the service verbatim."""
        self.transport.send(text)

    def send_control_command(self, command: Union[str, Dict[str, Any]]) -> None:
        """Send a protocol command, either pre-encoded or as a dict."""
        if not isinstance(command, str):
            command = encode_command(command)
        logger.debug(f"Sending control command: {command}")
        self.send_text(command)

    def send_ping(self, data: bytes = b"") -> None:
        self.transport.send_ping(data)

    def start_recognition(self) -> None:
        """Send the start command built from the session settings."""
        self.send_control_command(self.settings.start_command())

    def stop_recognition(self) -> None:
        """Tell the service that no more audio follows."""
        self.send_control_command(STOP_COMMAND)

    async def close(self, timeout: Optional[float] = None) -> None:
        """Close the connection; the transcript stays available."""
        logger.info(f"Closing session (timeout={timeout})")
        await self.transport.close(timeout)
        self._state = SessionState.CLOSED

    # Transport events

    def on_open(self) -> None:
        logger.info("Connection to speech service opened")

    def on_text_frame(self, text: str) -> None:
        with self._lock:
            try:
                message = self.decoder.decode(text)
            except SpeechToTextError as e:
                logger.warning(f"Could not decode text frame: {e.description}")
                self._report_failure(e)
                return

            if isinstance(message, StateUpdate):
                self._on_state_update(message)
            elif isinstance(message, ResultBatch):
                self._on_result_batch(message)
            elif isinstance(message, ServiceErrorMessage):
                self._on_service_error(message)
            else:
                raise TypeError(f"Unhandled message type: {type(message).__name__}")

    def on_binary_frame(self, data: bytes) -> None:
        logger.debug(f"Ignoring {len(data)} bytes of binary data from speech service")

    def on_error(self, error: BaseException) -> None:
        if isinstance(error, SpeechToTextError):
            failure = error
        else:
            failure = TransportError(str(error) or type(error).__name__, cause=error)
        logger.error(f"Transport error: {failure.description}")
        self._state = SessionState.ERRORED
        self._report_failure(failure)

    def on_close(self, error: Optional[BaseException]) -> None:
        if error is not None:
            self.on_error(error)
        elif self._state is not SessionState.ERRORED:
            self._state = SessionState.CLOSED
        logger.info(f"Connection closed; transcript has {len(self.reconciler)} units")

    # Dispatch helpers

    def _on_state_update(self, message: StateUpdate) -> None:
        if message.state is None:
            logger.info(f"Service reported state {message.name!r}; keeping {self._state.value}")
            return

        previous = self._state
        self._state = message.state
        logger.info(f"Service state: {previous.value} -> {message.state.value}")
        if self.on_state:
            try:
                self.on_state(message.state)
            except Exception as e:
                logger.error(f"Error in state callback: {e}", exc_info=True)

    def _on_result_batch(self, batch: ResultBatch) -> None:
        if self._state is not SessionState.LISTENING and self._state is not SessionState.PROCESSING:
            logger.debug(f"Result batch received while in state {self._state.value}")
        self._state = SessionState.PROCESSING

        if not self.reconciler.apply(batch):
            self._report_failure(ReconciliationError(
                f"Result batch at index {batch.result_index} skips past the transcript end "
                f"({len(self.reconciler)} units)"))
            return

        transcript = self.reconciler.snapshot()
        try:
            self.on_result(transcript)
        except Exception as e:
            logger.error(f"Error in result callback: {e}", exc_info=True)

    def _on_service_error(self, message: ServiceErrorMessage) -> None:
        logger.error(f"Speech service reported an error: {message.error}")
        self._report_failure(ServiceError(message.error))

    def _report_failure(self, error: SpeechToTextError) -> None:
        if not self.on_failure:
            return
        try:
            self.on_failure(error)
        except Exception as e:
            logger.error(f"Error in failure callback: {e}", exc_info=True)

    def __repr__(self) -> str:
        return f"SpeechToTextSession({self.url}, state={self._state.value}, {len(self.reconciler)} units)"
