"""Streaming service that runs one complete recognition of an audio file."""

import asyncio
import logging
import time
from datetime import datetime
from typing import Any, Dict, List, Optional

from pubsub import pub

from ..audio.audio_pub import AudioPublisher
from ..audio.file_reader import AudioFileReader
from ..config import StreamScribeConfig
from ..errors import ServiceError, SpeechToTextError, TransportError
from ..models.events import AudioEvent
from ..models.session import SessionInfo, SessionState
from ..storage.file_manager import FileManager
from ..transcription.publisher import TranscriptPublisher
from ..transcription.reconciler import GapPolicy
from ..transcription.session import SpeechToTextSession
from ..transcription.settings import RecognitionSettings

logger = logging.getLogger(__name__)


class StreamingService:
    """Connects, streams an audio file, waits for final results and closes.

    The recognition flow follows the service protocol: send the start
    command, wait for ``listening``, stream the audio, send the stop command
    and wait for the next ``listening`` state, which the service sends once
    every result is final.
    """

    def __init__(self, config: StreamScribeConfig,
                 audio_topic: str = "audio.chunk",
                 transcript_topic: str = "transcript.update"):
        """Initialize streaming service.

        Args:
            config: Application configuration
            audio_topic: Pub/sub topic carrying audio chunks
            transcript_topic: Pub/sub topic receiving transcript snapshots
        """
        self.config = config
        self.audio_topic = audio_topic
        self.transcript_topic = transcript_topic
        self.listening_timeout = config.get('service.listening_timeout_seconds', 30.0)
        self.close_timeout = config.get('service.close_timeout_seconds', 5.0)

        self.session: Optional[SpeechToTextSession] = None
        self.failures: List[SpeechToTextError] = []
        self._fatal: Optional[SpeechToTextError] = None
        self._wakeup: Optional[asyncio.Event] = None

    def create_session(self) -> SpeechToTextSession:
        """Create a session wired to the transcript topic and this service's callbacks."""
        settings = RecognitionSettings.from_config(self.config)
        gap_policy = GapPolicy(self.config.get('recognition.gap_policy', GapPolicy.PAD.value))
        publisher = TranscriptPublisher(self.transcript_topic)
        return SpeechToTextSession(
            settings,
            on_result=publisher.get_callback(),
            on_failure=self._on_failure,
            on_state=self._on_state,
            gap_policy=gap_policy,
        )

    async def transcribe_file(self, audio_path: str, save: bool = False) -> Dict[str, Any]:
        """Stream an audio file to the service and collect the final transcript.

        Args:
            audio_path: Path to an audio file encoded as the configured content type
            save: Whether to store the transcript under the data directory

        Returns:
            Result dictionary with success status, transcript and failures
        """
        self.failures = []
        self._fatal = None
        self._wakeup = asyncio.Event()
        start_time = datetime.now()
        started = time.monotonic()

        self.session = self.create_session()
        reader = AudioFileReader(
            audio_path,
            callback=AudioPublisher(self.audio_topic).publish_audio_event,
            chunk_size=self.config.get('audio.chunk_size', 8192),
            chunk_interval_seconds=self.config.get('audio.chunk_interval_seconds', 0.0),
        )

        success = False
        pub.subscribe(self._on_audio_chunk, self.audio_topic)
        try:
            if not await self.session.connect():
                return self._result(False, None)

            self._wakeup.clear()
            self.session.start_recognition()
            await self._wait_for_listening()

            await asyncio.to_thread(reader.stream)

            self._wakeup.clear()
            self.session.stop_recognition()
            await self._wait_for_listening()
            success = True
        except SpeechToTextError as e:
            logger.error(f"Recognition of {audio_path} failed: {e}")
            reader.stop()
        finally:
            pub.unsubscribe(self._on_audio_chunk, self.audio_topic)
            await self.session.close(timeout=self.close_timeout)

        transcript_file = None
        if save:
            transcript_file = self._save(audio_path, start_time, time.monotonic() - started,
                                         reader.total_chunks)
        return self._result(success, transcript_file)

    def _on_audio_chunk(self, event: AudioEvent) -> None:
        self.session.send_audio(event.audio_data)
        if event.final:
            logger.debug(f"Last audio chunk {event.chunk_id} sent")

    def _on_state(self, state: SessionState) -> None:
        if state is SessionState.LISTENING and self._wakeup is not None:
            self._wakeup.set()

    def _on_failure(self, error: SpeechToTextError) -> None:
        self.failures.append(error)
        logger.warning(f"Session failure: {error}")
        if isinstance(error, (ServiceError, TransportError)):
            self._fatal = error
            if self._wakeup is not None:
                self._wakeup.set()

    async def _wait_for_listening(self) -> None:
        try:
            await asyncio.wait_for(self._wakeup.wait(), self.listening_timeout)
        except asyncio.TimeoutError:
            raise TransportError(
                f"Service did not report 'listening' within {self.listening_timeout}s")
        if self._fatal is not None:
            raise self._fatal

    def _save(self, audio_path: str, start_time: datetime, duration: float, total_chunks: int) -> str:
        file_manager = FileManager(self.config.get_data_directory())
        session_info = SessionInfo(
            session_id=file_manager.create_session_directory(),
            start_time=start_time,
            duration_seconds=duration,
            audio_file=str(audio_path),
            content_type=self.session.settings.content_type.value,
            model=self.session.settings.model,
            total_chunks=total_chunks,
            total_results=self.session.reconciler.batches_applied,
        )
        return file_manager.save_transcript(session_info, self.session.transcript)

    def _result(self, success: bool, transcript_file: Optional[str]) -> Dict[str, Any]:
        return {
            "success": success,
            "transcript": self.session.transcript,
            "failures": list(self.failures),
            "transcript_file": transcript_file,
        }
