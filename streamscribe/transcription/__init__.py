"""Transcription module: wire decoding, result reconciliation and the streaming session."""

from .reconciler import GapPolicy, ResultReconciler
from .decoder import WireMessageDecoder
from .settings import AudioContentType, RecognitionSettings, STOP_COMMAND
from .session import SpeechToTextSession
from .publisher import TranscriptPublisher
from .aggregator import TranscriptAggregator

__all__ = [
    "GapPolicy",
    "ResultReconciler",
    "WireMessageDecoder",
    "AudioContentType",
    "RecognitionSettings",
    "STOP_COMMAND",
    "SpeechToTextSession",
    "TranscriptPublisher",
    "TranscriptAggregator",
]
