"""Transcript publisher for pub/sub fan-out of transcript snapshots."""

import logging
from typing import Callable

from pubsub import pub

from ..models.transcription import Transcript

logger = logging.getLogger(__name__)


class TranscriptPublisher:
    """Publishes transcript snapshots using pubsub.pub."""

    def __init__(self, topic: str):
        """Initialize transcript publisher.

        Args:
            topic: Pub/sub topic name for transcript snapshots
        """
        self.topic = topic
        logger.info(f"TranscriptPublisher initialized with topic: {topic}")

    def publish_transcript(self, transcript: Transcript) -> None:
        """Publish a transcript snapshot to the pub/sub topic.

        Args:
            transcript: Full transcript after the latest result batch
        """
        pub.sendMessage(self.topic, transcript=transcript)
        logger.debug(f"Published transcript with {len(transcript)} units")

    def get_callback(self) -> Callable[[Transcript], None]:
        """Get a callback suitable for SpeechToTextSession's on_result.

        Returns:
            Callback function that publishes transcript snapshots
        """
        return self.publish_transcript
