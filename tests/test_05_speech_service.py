"""Tests for SpeechService: validation, metrics and failure mapping."""
from __future__ import annotations

import asyncio

import pytest

from speech_gateway.core.errors import (
    ErrorCode,
    InvalidInputError,
    NetworkError,
    SynthesisError,
    TextTooLongError,
)
from speech_gateway.services.speech_service import SpeechService, compute_wpm
from speech_gateway.synthesis.client import SynthesisClient, SynthesisResult
from speech_gateway.synthesis.transport import VendorRejectedError, VendorUnreachableError

from conftest import FakeTransport


def _service(speech_config, **kwargs):
    transport = FakeTransport(speech_config, **kwargs)
    return SpeechService(SynthesisClient(speech_config, transport=transport)), transport


class TestComputeWpm:
    """Tests for compute_wpm()."""

    def test_words_per_minute(self):
        """2 words in 2.0 seconds is 60 wpm."""
        assert compute_wpm(2, 2.0) == 60.0

    def test_zero_duration_is_zero(self):
        assert compute_wpm(5, 0.0) == 0.0


class TestConvert:
    """Tests for SpeechService.convert()."""

    def test_success_outcome(self, speech_config):
        service, transport = _service(speech_config)
        outcome = asyncio.run(service.convert("Hello world", 10))

        assert outcome.word_count == 2
        assert outcome.duration_seconds == 2.0
        assert outcome.wpm == 60.0
        assert outcome.message == "Conversion completed successfully"
        assert len(transport.calls) == 1

    def test_zero_length_audio_gives_zero_wpm(self, speech_config):
        service, _ = _service(speech_config, audio=b"")
        outcome = asyncio.run(service.convert("Hello world"))

        assert outcome.duration_seconds == 0.0
        assert outcome.wpm == 0

    def test_empty_text_never_reaches_vendor(self, speech_config):
        service, transport = _service(speech_config)
        with pytest.raises(InvalidInputError):
            asyncio.run(service.convert("   "))
        assert transport.calls == []

    def test_too_many_words_never_reaches_vendor(self, speech_config):
        service, transport = _service(speech_config)
        with pytest.raises(TextTooLongError):
            asyncio.run(service.convert("word " * 201))
        assert transport.calls == []

    def test_vendor_failure_raises_synthesis_error(self, speech_config):
        service, _ = _service(speech_config, error=VendorRejectedError(401, "Unauthorized", "bad key"))
        with pytest.raises(SynthesisError) as exc_info:
            asyncio.run(service.convert("Hello"))

        assert exc_info.value.status_code == 500
        assert exc_info.value.code == ErrorCode.SYNTHESIS_FAILED
        assert exc_info.value.message == "Speech synthesis failed: 401 Unauthorized. bad key"

    def test_network_failure_raises_network_error(self, speech_config):
        service, _ = _service(speech_config, error=VendorUnreachableError("ConnectError: refused"))
        with pytest.raises(NetworkError) as exc_info:
            asyncio.run(service.convert("Hello"))

        assert exc_info.value.code == ErrorCode.NETWORK_ERROR
        assert "Network error contacting speech service" in exc_info.value.message


class TestSynthesisResult:
    """Tests for SynthesisResult helpers."""

    def test_failed_defaults(self):
        result = SynthesisResult.failed("nope")
        assert result.success is False
        assert result.audio_data is None
        assert result.duration_seconds == 0.0
        assert result.error_code == ErrorCode.SYNTHESIS_FAILED
