"""
Tests for SynthesisClient and the vendor transports.

Tests cover:
- REST transport request shape (URL, headers, SSML body)
- Vendor rejections, network failures and unexpected errors as results
- Duration resolution (estimated for REST, reported for SDK)
- SDK transport result mapping with a stand-in SDK module
- Startup refusal without a speech key
"""
from __future__ import annotations

import asyncio
import sys
from datetime import timedelta
from types import SimpleNamespace

import httpx
import pytest

from speech_gateway.core.config import SpeechConfig
from speech_gateway.core.errors import ConfigurationError, ErrorCode
from speech_gateway.synthesis.client import SynthesisClient, SynthesisResult
from speech_gateway.synthesis.transports import RestTransport, create_transport
from speech_gateway.synthesis.transports.rest_transport import MAX_ERROR_DETAIL_CHARS
from speech_gateway.synthesis.transports.sdk_transport import SdkTransport

from conftest import TWO_SECONDS_OF_AUDIO, FakeTransport


def _rest_client(config: SpeechConfig, handler) -> SynthesisClient:
    transport = RestTransport(config, transport=httpx.MockTransport(handler))
    return SynthesisClient(config, transport=transport)


def _run(client: SynthesisClient, text: str = "Hello world", rate: int = 0) -> SynthesisResult:
    async def _go() -> SynthesisResult:
        await client.start()
        try:
            return await client.synthesize(text, rate)
        finally:
            await client.close()

    return asyncio.run(_go())


class TestRestTransport:
    """Tests for the REST transport through SynthesisClient."""

    def test_success_returns_audio_and_estimated_duration(self, speech_config):
        """32000 bytes of 128 kbit/s MP3 should report 2.0 seconds."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["headers"] = request.headers
            seen["body"] = request.content.decode("utf-8")
            return httpx.Response(200, content=TWO_SECONDS_OF_AUDIO)

        result = _run(_rest_client(speech_config, handler), "Hello world", 10)

        assert result.success is True
        assert result.audio_data == TWO_SECONDS_OF_AUDIO
        assert result.duration_seconds == 2.0
        assert result.error_code is None
        assert result.message == "Synthesis completed successfully"

        assert seen["url"] == "https://westus.tts.speech.microsoft.com/cognitiveservices/v1"
        assert seen["headers"]["Ocp-Apim-Subscription-Key"] == "test-key-1234"
        assert seen["headers"]["Content-Type"] == "application/ssml+xml"
        assert seen["headers"]["X-Microsoft-OutputFormat"] == "audio-16khz-128kbitrate-mono-mp3"
        assert seen["headers"]["User-Agent"].startswith("speech-gateway/")
        assert "<prosody rate='+10%'>Hello world</prosody>" in seen["body"]
        assert "<voice name='en-US-AriaNeural'>" in seen["body"]

    def test_vendor_rejection_becomes_failed_result(self, speech_config):
        """A 401 from the vendor should be a result, not an exception."""
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, text="Access denied due to invalid subscription key.")

        result = _run(_rest_client(speech_config, handler))

        assert result.success is False
        assert result.audio_data is None
        assert result.error_code == ErrorCode.SYNTHESIS_FAILED
        assert "401" in result.message
        assert "invalid subscription key" in result.message

    def test_vendor_error_detail_truncated(self, speech_config):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, text="x" * 5000)

        result = _run(_rest_client(speech_config, handler))

        assert result.success is False
        assert result.message.count("x") <= MAX_ERROR_DETAIL_CHARS

    def test_connect_error_is_network_error(self, speech_config):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("name resolution failed", request=request)

        result = _run(_rest_client(speech_config, handler))

        assert result.success is False
        assert result.error_code == ErrorCode.NETWORK_ERROR
        assert result.message.startswith("Network error contacting speech service:")

    def test_timeout_is_network_error(self, speech_config):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        result = _run(_rest_client(speech_config, handler))

        assert result.error_code == ErrorCode.NETWORK_ERROR

    def test_single_outbound_call(self, speech_config):
        """Failures are never retried."""
        calls = {"n": 0}

        def handler(request: httpx.Request) -> httpx.Response:
            calls["n"] += 1
            return httpx.Response(503, text="busy")

        _run(_rest_client(speech_config, handler))

        assert calls["n"] == 1

    def test_estimated_strategy_with_rest(self):
        config = SpeechConfig(key="k", duration_strategy="estimated")

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"\x00" * 8000)

        assert _run(_rest_client(config, handler)).duration_seconds == 0.5


class TestSynthesisClient:
    """Tests for SynthesisClient error folding and configuration."""

    def test_missing_key_refuses_to_start(self):
        with pytest.raises(ConfigurationError) as exc_info:
            SynthesisClient(SpeechConfig(key=""))
        assert exc_info.value.code == ErrorCode.CONFIGURATION_ERROR

    def test_unexpected_exception_becomes_failed_result(self, speech_config):
        transport = FakeTransport(speech_config, error=RuntimeError("kaput"))
        result = _run(SynthesisClient(speech_config, transport=transport))

        assert result.success is False
        assert result.error_code == ErrorCode.SYNTHESIS_FAILED
        assert result.message == "Error during synthesis: kaput"

    def test_cancellation_propagates(self, speech_config):
        transport = FakeTransport(speech_config, error=asyncio.CancelledError())
        with pytest.raises(asyncio.CancelledError):
            _run(SynthesisClient(speech_config, transport=transport))

    def test_reported_duration_used(self, speech_config):
        transport = FakeTransport(speech_config, duration=1.5)
        result = _run(SynthesisClient(speech_config, transport=transport))
        assert result.duration_seconds == 1.5

    def test_text_passed_through_escaped(self, speech_config):
        transport = FakeTransport(speech_config)
        _run(SynthesisClient(speech_config, transport=transport), "Fish & chips", -5)

        assert len(transport.calls) == 1
        assert "<prosody rate='-5%'>Fish &amp; chips</prosody>" in transport.calls[0]

    def test_start_and_close_delegate(self, speech_config):
        transport = FakeTransport(speech_config)
        _run(SynthesisClient(speech_config, transport=transport))
        assert transport.started and transport.closed

    def test_default_transport_is_rest(self, speech_config):
        client = SynthesisClient(speech_config)
        assert isinstance(client.transport, RestTransport)


class _Reason:
    SynthesizingAudioCompleted = "completed"
    Canceled = "canceled"


def _fake_sdk(result):
    """Stand-in for azure.cognitiveservices.speech with a canned result."""
    sdk = SimpleNamespace(spoken=[], configs=[])

    class SpeechConfig_:
        def __init__(self, subscription, region):
            self.subscription = subscription
            self.region = region
            self.speech_synthesis_voice_name = None
            self.output_format = None
            sdk.configs.append(self)

        def set_speech_synthesis_output_format(self, fmt):
            self.output_format = fmt

    class Synthesizer:
        def __init__(self, speech_config, audio_config):
            self.speech_config = speech_config

        def speak_ssml_async(self, ssml):
            sdk.spoken.append(ssml)
            return SimpleNamespace(get=lambda: result)

    sdk.SpeechConfig = SpeechConfig_
    sdk.SpeechSynthesizer = Synthesizer
    sdk.SpeechSynthesisOutputFormat = SimpleNamespace(Audio16Khz128KBitRateMonoMp3="mp3-16k-128")
    sdk.ResultReason = _Reason
    return sdk


def _cancelled(error_code: str, details: str):
    return SimpleNamespace(
        reason=_Reason.Canceled,
        cancellation_details=SimpleNamespace(
            reason=SimpleNamespace(name="Error"),
            error_code=SimpleNamespace(name=error_code),
            error_details=details,
        ),
    )


class TestSdkTransport:
    """Tests for SdkTransport with a stand-in SDK module."""

    def test_completed_result_reports_duration(self, speech_config):
        sdk = _fake_sdk(SimpleNamespace(
            reason=_Reason.SynthesizingAudioCompleted,
            audio_data=b"\x01" * 1000,
            audio_duration=timedelta(milliseconds=1250),
        ))
        transport = SdkTransport(speech_config, sdk=sdk)
        result = _run(SynthesisClient(speech_config, transport=transport), "Hi there", 10)

        assert result.success is True
        assert result.audio_data == b"\x01" * 1000
        assert result.duration_seconds == 1.25
        assert "<prosody rate='+10%'>Hi there</prosody>" in sdk.spoken[0]

        config = sdk.configs[0]
        assert config.subscription == "test-key-1234"
        assert config.region == "westus"
        assert config.speech_synthesis_voice_name == "en-US-AriaNeural"
        assert config.output_format == "mp3-16k-128"

    def test_cancellation_is_failed_result(self, speech_config):
        sdk = _fake_sdk(_cancelled("AuthenticationFailure", "WebSocket upgrade failed: 401"))
        transport = SdkTransport(speech_config, sdk=sdk)
        result = _run(SynthesisClient(speech_config, transport=transport))

        assert result.success is False
        assert result.error_code == ErrorCode.SYNTHESIS_FAILED
        assert "AuthenticationFailure" in result.message
        assert "401" in result.message

    def test_connection_failure_is_network_error(self, speech_config):
        sdk = _fake_sdk(_cancelled("ConnectionFailure", "Connection was closed"))
        transport = SdkTransport(speech_config, sdk=sdk)
        result = _run(SynthesisClient(speech_config, transport=transport))

        assert result.error_code == ErrorCode.NETWORK_ERROR

    def test_duration_source_follows_transport_and_strategy(self, speech_config):
        """Only a duration-reporting transport with the reported strategy uses vendor values."""
        sdk = _fake_sdk(None)
        estimated = SpeechConfig(key="k", duration_strategy="estimated")

        assert SynthesisClient(speech_config, transport=SdkTransport(speech_config, sdk=sdk)).duration_source == "vendor"
        assert SynthesisClient(speech_config, transport=RestTransport(speech_config)).duration_source == "estimate"
        assert SynthesisClient(estimated, transport=SdkTransport(estimated, sdk=sdk)).duration_source == "estimate"


class TestCreateTransport:
    """Tests for the transport factory."""

    def test_rest_selected(self, speech_config):
        assert isinstance(create_transport(speech_config), RestTransport)

    def test_sdk_missing_raises_configuration_error(self, monkeypatch):
        monkeypatch.setitem(sys.modules, "azure.cognitiveservices.speech", None)
        with pytest.raises(ConfigurationError) as exc_info:
            create_transport(SpeechConfig(key="k", transport="sdk"))
        assert "speech-gateway[sdk]" in exc_info.value.message
