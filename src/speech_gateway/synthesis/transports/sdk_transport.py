"""
Speech SDK transport.

Uses the Azure Speech SDK (azure-cognitiveservices-speech), which reports
the exact audio duration. The SDK call blocks, so it runs in a worker
thread to keep the event loop free.

Requires the optional "sdk" extra:
    pip install speech-gateway[sdk]
"""
from __future__ import annotations

import asyncio
from typing import Any, Optional

from speech_gateway.core.config import SpeechConfig
from speech_gateway.core.errors import ConfigurationError
from speech_gateway.core.logging import verbose
from speech_gateway.synthesis.transport import (
    BaseTransport,
    VendorAudio,
    VendorRejectedError,
    VendorUnreachableError,
)

# output_format -> SpeechSynthesisOutputFormat member name
SDK_OUTPUT_FORMATS = {
    "audio-16khz-32kbitrate-mono-mp3": "Audio16Khz32KBitRateMonoMp3",
    "audio-16khz-64kbitrate-mono-mp3": "Audio16Khz64KBitRateMonoMp3",
    "audio-16khz-128kbitrate-mono-mp3": "Audio16Khz128KBitRateMonoMp3",
    "audio-24khz-48kbitrate-mono-mp3": "Audio24Khz48KBitRateMonoMp3",
    "audio-24khz-96kbitrate-mono-mp3": "Audio24Khz96KBitRateMonoMp3",
    "audio-24khz-160kbitrate-mono-mp3": "Audio24Khz160KBitRateMonoMp3",
    "audio-48khz-96kbitrate-mono-mp3": "Audio48Khz96KBitRateMonoMp3",
    "audio-48khz-192kbitrate-mono-mp3": "Audio48Khz192KBitRateMonoMp3",
    "riff-16khz-16bit-mono-pcm": "Riff16Khz16BitMonoPcm",
    "riff-24khz-16bit-mono-pcm": "Riff24Khz16BitMonoPcm",
    "riff-48khz-16bit-mono-pcm": "Riff48Khz16BitMonoPcm",
}

# Cancellation error codes that mean the service was never reached
_UNREACHABLE_CODES = {"ConnectionFailure", "ServiceTimeout"}


def _load_sdk() -> Any:
    try:
        import azure.cognitiveservices.speech as speechsdk
    except ImportError as e:
        raise ConfigurationError(
            "speech.transport is 'sdk' but the Azure Speech SDK is not installed. "
            "Install with: pip install speech-gateway[sdk]"
        ) from e
    return speechsdk


def _enum_name(value: Any) -> str:
    return getattr(value, "name", None) or str(value).rsplit(".", 1)[-1]


class SdkTransport(BaseTransport):
    """Synthesize with SpeechSynthesizer.speak_ssml_async()."""

    name = "sdk"
    reports_duration = True

    def __init__(self, config: SpeechConfig, sdk: Optional[Any] = None):
        super().__init__(config)
        self._sdk = sdk if sdk is not None else _load_sdk()
        self._speech_config = self._build_speech_config()

    def _build_speech_config(self) -> Any:
        sdk = self._sdk
        speech_config = sdk.SpeechConfig(subscription=self.config.key, region=self.config.region)
        speech_config.speech_synthesis_voice_name = self.config.voice_name
        fmt = getattr(sdk.SpeechSynthesisOutputFormat, SDK_OUTPUT_FORMATS[self.config.output_format])
        speech_config.set_speech_synthesis_output_format(fmt)
        return speech_config

    def _speak(self, ssml: str) -> Any:
        # audio_config=None keeps the audio in memory instead of playing it
        synthesizer = self._sdk.SpeechSynthesizer(speech_config=self._speech_config, audio_config=None)
        return synthesizer.speak_ssml_async(ssml).get()

    async def synthesize(self, ssml: str) -> VendorAudio:
        result = await asyncio.to_thread(self._speak, ssml)
        reason = self._sdk.ResultReason

        if result.reason == reason.SynthesizingAudioCompleted:
            duration = result.audio_duration.total_seconds() if result.audio_duration else None
            verbose(self.logger, "vendor_response", bytes=len(result.audio_data), duration_s=duration)
            return VendorAudio(audio_data=bytes(result.audio_data), duration_seconds=duration)

        if result.reason == reason.Canceled:
            details = result.cancellation_details
            error_code = _enum_name(getattr(details, "error_code", ""))
            if error_code in _UNREACHABLE_CODES:
                raise VendorUnreachableError(f"{error_code}: {details.error_details}")
            raise VendorRejectedError(
                f"Canceled ({_enum_name(details.reason)})",
                error_code,
                details.error_details or "",
            )

        raise VendorRejectedError(_enum_name(result.reason), "unexpected result reason")
