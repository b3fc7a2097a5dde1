"""Chunked reader that turns an encoded audio file into AudioEvents."""

import logging
import threading
import time
from pathlib import Path
from typing import Callable, Iterator, Optional

from ..models.events import AudioEvent

logger = logging.getLogger(__name__)


class AudioFileReader:
    """Reads an already encoded audio file in fixed-size chunks.

    The bytes are passed on untouched; encoding is the job of whatever
    produced the file.
    """

    def __init__(self,
                 file_path: str,
                 callback: Callable[[AudioEvent], None],
                 chunk_size: int = 8192,
                 chunk_interval_seconds: float = 0.0):
        """Initialize the reader.

        Args:
            file_path: Path to the audio file
            callback: Called with each AudioEvent
            chunk_size: Bytes per chunk
            chunk_interval_seconds: Pause between chunks to pace the stream (0 = as fast as possible)
        """
        self.file_path = Path(file_path)
        if not self.file_path.exists():
            raise FileNotFoundError(f"Audio file not found: {self.file_path}")
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")

        self.callback = callback
        self.chunk_size = chunk_size
        self.chunk_interval_seconds = chunk_interval_seconds
        self.stop_event = threading.Event()
        self.total_chunks = 0
        self.total_bytes = 0

    def read_chunks(self) -> Iterator[bytes]:
        """Yield the file contents chunk by chunk."""
        with open(self.file_path, 'rb') as f:
            while True:
                chunk = f.read(self.chunk_size)
                if not chunk:
                    break
                yield chunk

    def stream(self) -> int:
        """Publish every chunk of the file, marking the last one as final.

        Returns:
            Number of chunks published
        """
        logger.info(f"Streaming {self.file_path} in {self.chunk_size}-byte chunks")
        self.stop_event.clear()
        self.total_chunks = 0
        self.total_bytes = 0

        previous: Optional[bytes] = None
        for chunk in self.read_chunks():
            if self.stop_event.is_set():
                logger.info("Audio streaming stopped early")
                break
            # Hold one chunk back so the last one can be flagged final
            if previous is not None:
                self._publish(previous, final=False)
                if self.chunk_interval_seconds > 0:
                    self.stop_event.wait(self.chunk_interval_seconds)
            previous = chunk

        if previous is not None and not self.stop_event.is_set():
            self._publish(previous, final=True)

        logger.info(f"Streamed {self.total_chunks} chunks ({self.total_bytes} bytes)")
        return self.total_chunks

    def stop(self) -> None:
        self.stop_event.set()

    def _publish(self, data: bytes, final: bool) -> None:
        event = AudioEvent(
            chunk_id=f"chunk_{self.total_chunks}",
            audio_data=data,
            timestamp=time.time(),
            sequence_number=self.total_chunks,
            final=final,
        )
        self.total_chunks += 1
        self.total_bytes += len(data)
        self.callback(event)
