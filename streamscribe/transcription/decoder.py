"""Wire message decoder for text frames pushed by the speech service.

A text frame is a JSON object of one of three kinds:

    {"state": "listening"}
    {"error": "No speech detected for 30s."}
    {"result_index": 0, "results": [...]}

Each entry of ``results`` is either the flat form
``{"text": ..., "confidence": ..., "final": ...}`` or the service form
``{"final": ..., "alternatives": [{"transcript": ..., "confidence": ...,
"timestamps": [[word, start, end], ...], "word_confidence": [[word, c], ...]}]}``.
"""

import json
import logging
from typing import List, Optional, Tuple

from pydantic import BaseModel, Field, ValidationError, model_validator

from ..errors import DecodeError
from ..models.messages import ResultBatch, ServerMessage, ServiceErrorMessage, StateUpdate
from ..models.transcription import Alternative, TranscriptionUnit, WordInfo

logger = logging.getLogger(__name__)


class WireAlternative(BaseModel):
    transcript: str
    confidence: Optional[float] = None
    timestamps: List[Tuple[str, float, float]] = Field(default_factory=list)
    word_confidence: List[Tuple[str, float]] = Field(default_factory=list)


class WireResult(BaseModel):
    final: bool = False
    text: Optional[str] = None
    confidence: Optional[float] = None
    alternatives: List[WireAlternative] = Field(default_factory=list)

    @model_validator(mode="after")
    def _require_text(self) -> "WireResult":
        if self.text is None and not self.alternatives:
            raise ValueError("result has neither 'text' nor 'alternatives'")
        return self


class WireResultBatch(BaseModel):
    result_index: int = Field(ge=0)
    results: List[WireResult]


class WireState(BaseModel):
    state: str


class WireError(BaseModel):
    error: str


class WireMessageDecoder:
    """Converts raw text frames into StateUpdate, ResultBatch or ServiceErrorMessage."""

    def decode(self, text: str) -> ServerMessage:
        """Decode one text frame.

        Args:
            text: Raw text frame from the transport

        Returns:
            The decoded message

        Raises:
            DecodeError: If the frame is not valid JSON or matches no known message
        """
        try:
            data = json.loads(text)
        except (TypeError, ValueError) as e:
            raise DecodeError(f"Could not parse text frame as JSON: {e}", cause=e) from e

        if not isinstance(data, dict):
            raise DecodeError(f"Expected a JSON object, got {type(data).__name__}")

        try:
            if "error" in data:
                return ServiceErrorMessage(error=WireError.model_validate(data).error)
            if "state" in data:
                return StateUpdate(name=WireState.model_validate(data).state)
            if "results" in data:
                return self._decode_results(WireResultBatch.model_validate(data))
        except ValidationError as e:
            raise DecodeError(f"Malformed message: {e}", cause=e) from e

        raise DecodeError(f"Unrecognized message with keys {sorted(data)}")

    def _decode_results(self, message: WireResultBatch) -> ResultBatch:
        units = tuple(self._to_unit(result) for result in message.results)
        return ResultBatch(result_index=message.result_index, results=units)

    def _to_unit(self, result: WireResult) -> TranscriptionUnit:
        if not result.alternatives:
            return TranscriptionUnit(text=result.text, confidence=result.confidence,
                                     final=result.final)

        alternatives = tuple(
            Alternative(transcript=alt.transcript, confidence=alt.confidence,
                        words=_words(alt))
            for alt in result.alternatives
        )
        best = alternatives[0]
        return TranscriptionUnit(
            text=best.transcript,
            confidence=best.confidence,
            final=result.final,
            words=best.words,
            alternatives=alternatives,
        )


def _words(alternative: WireAlternative) -> Tuple[WordInfo, ...]:
    """Merge word timestamps and word confidences, which the service sends as parallel lists."""
    if alternative.timestamps:
        confidences = alternative.word_confidence
        words = []
        for i, (word, start, end) in enumerate(alternative.timestamps):
            confidence = None
            if i < len(confidences) and confidences[i][0] == word:
                confidence = confidences[i][1]
            words.append(WordInfo(word=word, start_time=start, end_time=end, confidence=confidence))
        return tuple(words)
    return tuple(WordInfo(word=word, confidence=confidence)
                 for word, confidence in alternative.word_confidence)
