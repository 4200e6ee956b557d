"""
speech-gateway Services Layer.

This package holds the request-handling logic between the API layer and
the synthesis client.

Components:
    - speech_service.py: SpeechService (validate, synthesize, measure)
    - validators.py: Text validation and word counting
"""
from speech_gateway.core.errors import (
    ErrorCode,
    GatewayError,
    InvalidInputError,
    NetworkError,
    SynthesisError,
    TextTooLongError,
)

from .speech_service import SpeechService, SynthesisOutcome, compute_wpm
from .validators import MAX_WORD_COUNT, count_words, validate_text

__all__ = [
    "SpeechService",
    "SynthesisOutcome",
    "compute_wpm",
    "count_words",
    "validate_text",
    "MAX_WORD_COUNT",
    "ErrorCode",
    "GatewayError",
    "InvalidInputError",
    "TextTooLongError",
    "SynthesisError",
    "NetworkError",
]
