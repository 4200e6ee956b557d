"""
SpeechService - request handling for text-to-speech conversion.

Architecture:
    Request → Validate → SynthesisClient → Metrics (duration, wpm) → Outcome

The service turns a failed SynthesisResult into a GatewayError so the
API layer can render every failure through the same exception handler:

    SYNTHESIS_FAILED  → SynthesisError (500)
    NETWORK_ERROR     → NetworkError (500)

Example:
    >>> service = SpeechService(SynthesisClient(config.speech))
    >>> outcome = await service.convert("Hello there", prosody_rate=-5)
    >>> outcome.word_count, outcome.wpm
    (2, 150.0)
"""
from __future__ import annotations

from dataclasses import dataclass

from speech_gateway.core.errors import ErrorCode, NetworkError, SynthesisError
from speech_gateway.core.logging import get_logger, info, success
from speech_gateway.services.validators import validate_text
from speech_gateway.synthesis.client import SynthesisClient, SynthesisResult

_LOG = get_logger("speech-gateway.service")


@dataclass(frozen=True)
class SynthesisOutcome:
    """
    Successful conversion handed back to the route.

    Attributes:
        audio_data: Encoded audio bytes.
        duration_seconds: Audio duration in seconds.
        wpm: Words per minute of output audio (0 when duration is 0).
        word_count: Words in the request text.
        message: Status message for the caller.
    """
    audio_data: bytes
    duration_seconds: float
    wpm: float
    word_count: int
    message: str = "Conversion completed successfully"


def compute_wpm(word_count: int, duration_seconds: float) -> float:
    """Words per minute; 0 when there is no audio duration."""
    if duration_seconds <= 0:
        return 0.0
    return word_count / (duration_seconds / 60)


def raise_for_result(result: SynthesisResult) -> None:
    """Raise the GatewayError matching a failed SynthesisResult."""
    if result.success:
        return
    if result.error_code == ErrorCode.NETWORK_ERROR:
        raise NetworkError(result.message)
    raise SynthesisError(result.message, code=result.error_code)


class SpeechService:
    """Validate, synthesize and measure one conversion request."""

    def __init__(self, client: SynthesisClient):
        self.client = client

    async def convert(self, text: str, prosody_rate: int = 0) -> SynthesisOutcome:
        """
        Convert text to speech.

        Raises:
            InvalidInputError: Text is empty or blank.
            TextTooLongError: Text exceeds the word ceiling.
            SynthesisError: The speech service failed (NetworkError if unreachable).
        """
        word_count = validate_text(text)
        info(_LOG, "convert", word_count=word_count, prosody_rate=prosody_rate)

        result = await self.client.synthesize(text, prosody_rate)
        raise_for_result(result)
        assert result.audio_data is not None

        wpm = compute_wpm(word_count, result.duration_seconds)
        success(
            _LOG,
            "converted",
            word_count=word_count,
            duration_s=round(result.duration_seconds, 3),
            wpm=round(wpm, 1),
        )
        return SynthesisOutcome(
            audio_data=result.audio_data,
            duration_seconds=result.duration_seconds,
            wpm=wpm,
            word_count=word_count,
        )
