"""Recognition settings, WebSocket URL resolution and control commands."""

import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from yarl import URL

from ..errors import ConstructionError

logger = logging.getLogger(__name__)

DEFAULT_SERVICE_URL = "wss://stream.watsonplatform.net/speech-to-text/api/v1/recognize"
AUTH_TOKEN_HEADER = "X-Watson-Authorization-Token"
STOP_COMMAND: Dict[str, Any] = {"action": "stop"}


class AudioContentType(Enum):
    """Audio formats accepted by the service."""
    OGG_OPUS = "audio/ogg;codecs=opus"
    FLAC = "audio/flac"
    PCM = "audio/l16;rate=16000"
    WAV = "audio/wav"


@dataclass
class RecognitionSettings:
    """Connection parameters and recognition options for one session."""
    service_url: str = DEFAULT_SERVICE_URL
    content_type: AudioContentType = AudioContentType.FLAC
    model: Optional[str] = None
    auth_token: Optional[str] = None
    learning_opt_out: bool = False
    interim_results: bool = True
    continuous: bool = True
    inactivity_timeout: int = 30
    max_alternatives: int = 1
    word_confidence: bool = False
    timestamps: bool = False

    @classmethod
    def from_config(cls, config) -> "RecognitionSettings":
        """Build settings from a StreamScribeConfig.

        Args:
            config: Loaded application configuration

        Returns:
            RecognitionSettings with config values over the defaults
        """
        content_type = config.get('recognition.content_type', AudioContentType.FLAC.value)
        try:
            content_type = AudioContentType(content_type)
        except ValueError:
            raise ValueError(f"Unsupported audio content type in configuration: {content_type}")

        return cls(
            service_url=config.get('service.url', DEFAULT_SERVICE_URL),
            content_type=content_type,
            model=config.get('recognition.model'),
            auth_token=config.get('service.auth_token'),
            learning_opt_out=config.get('service.learning_opt_out', False),
            interim_results=config.get('recognition.interim_results', True),
            continuous=config.get('recognition.continuous', True),
            inactivity_timeout=config.get('recognition.inactivity_timeout', 30),
            max_alternatives=config.get('recognition.max_alternatives', 1),
            word_confidence=config.get('recognition.word_confidence', False),
            timestamps=config.get('recognition.timestamps', False),
        )

    def websocket_url(self) -> URL:
        """Resolve the recognize endpoint for these settings.

        Raises:
            ConstructionError: If the service URL is not a usable ws:// or wss:// destination
        """
        try:
            url = URL(self.service_url)
        except (TypeError, ValueError) as e:
            raise ConstructionError(f"Invalid service URL {self.service_url!r}: {e}", cause=e) from e

        if url.scheme not in ("ws", "wss"):
            raise ConstructionError(
                f"Service URL must use ws:// or wss://, got {self.service_url!r}")
        if not url.host:
            raise ConstructionError(f"Service URL has no host: {self.service_url!r}")

        query = {}
        if self.model:
            query["model"] = self.model
        if self.learning_opt_out:
            query["x-watson-learning-opt-out"] = "true"
        if query:
            url = url.update_query(query)
        return url

    def headers(self) -> Dict[str, str]:
        """HTTP headers for the WebSocket upgrade request."""
        if self.auth_token:
            return {AUTH_TOKEN_HEADER: self.auth_token}
        return {}

    def start_command(self) -> Dict[str, Any]:
        """The ``start`` action that opens a recognition request."""
        return {
            "action": "start",
            "content-type": self.content_type.value,
            "interim_results": self.interim_results,
            "continuous": self.continuous,
            "inactivity_timeout": self.inactivity_timeout,
            "max_alternatives": self.max_alternatives,
            "word_confidence": self.word_confidence,
            "timestamps": self.timestamps,
        }


def encode_command(command: Dict[str, Any]) -> str:
    """Serialize a control command into a text frame."""
    return json.dumps(command)
