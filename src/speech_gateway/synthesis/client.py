"""
SynthesisClient - one outbound synthesis call per request.

Pipeline:
    text + prosody rate → SSML → transport (REST or SDK) → duration → result

The client never raises for synthesis failures. Every vendor rejection,
network failure or unexpected error is folded into a SynthesisResult with
success=False, an ErrorCode and a human-readable message. Task
cancellation is the only thing that propagates.

The only exception the client raises is ConfigurationError from its
constructor when no vendor key is configured.

Example:
    >>> config = load_config()
    >>> client = SynthesisClient(config.speech)
    >>> await client.start()
    >>> result = await client.synthesize("Hello world", prosody_rate=10)
    >>> result.success, result.duration_seconds
    (True, 1.152)
"""
from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Optional

from speech_gateway.core.config import SpeechConfig
from speech_gateway.core.errors import ConfigurationError, ErrorCode
from speech_gateway.core.logging import error, fail, get_logger, info, success, verbose
from speech_gateway.synthesis.duration import DurationStrategy, get_duration_strategy
from speech_gateway.synthesis.ssml import build_ssml
from speech_gateway.synthesis.transport import (
    BaseTransport,
    VendorRejectedError,
    VendorUnreachableError,
)
from speech_gateway.synthesis.transports import create_transport

_LOG = get_logger("speech-gateway.client")


@dataclass(frozen=True)
class SynthesisResult:
    """
    Outcome of one synthesis call.

    Attributes:
        success: Whether audio was produced.
        audio_data: Encoded audio, present only on success.
        duration_seconds: Audio duration (0.0 on failure).
        message: Human-readable status or failure description.
        error_code: ErrorCode value on failure, None on success.
    """
    success: bool
    audio_data: Optional[bytes] = None
    duration_seconds: float = 0.0
    message: str = ""
    error_code: Optional[str] = None

    @classmethod
    def failed(cls, message: str, error_code: str = ErrorCode.SYNTHESIS_FAILED) -> "SynthesisResult":
        return cls(success=False, message=message, error_code=error_code)


class SynthesisClient:
    """
    Vendor client shared by all requests.

    Args:
        config: Speech configuration (key, region, voice, transport...).
        transport: Transport to use instead of the configured one.

    Raises:
        ConfigurationError: No vendor key is configured.
    """

    def __init__(self, config: SpeechConfig, transport: Optional[BaseTransport] = None):
        if not config.key:
            fail(_LOG, "speech_key_missing", region=config.region)
            raise ConfigurationError(
                "Speech key is not configured. Set speech.key, SPEECH_GW_SPEECH_KEY "
                "or the AzureSpeech--Key vault secret."
            )
        self.config = config
        self.transport = transport if transport is not None else create_transport(config)
        self.duration: DurationStrategy = get_duration_strategy(config)

        info(
            _LOG,
            "client_ready",
            transport=self.transport.name,
            region=config.region,
            voice=config.voice_name,
            key=config.masked_key,
            duration_source=self.duration_source,
        )

    @property
    def duration_source(self) -> str:
        """Where reported durations come from: "vendor" or "estimate"."""
        if self.transport.reports_duration and self.duration.name == "reported":
            return "vendor"
        return "estimate"

    async def start(self) -> None:
        await self.transport.start()

    async def close(self) -> None:
        await self.transport.close()

    async def synthesize(self, text: str, prosody_rate: int = 0) -> SynthesisResult:
        """
        Synthesize text with the configured voice.

        Args:
            text: Text to speak. Passed to the vendor unmodified (escaped).
            prosody_rate: Signed percentage speed offset (10 -> "+10%").

        Returns:
            SynthesisResult; never raises for synthesis failures.
        """
        ssml = build_ssml(
            text,
            voice_name=self.config.voice_name,
            prosody_rate=prosody_rate,
            language=self.config.language,
        )
        info(_LOG, "synthesis_start", chars=len(text), prosody_rate=prosody_rate)

        t0 = time.perf_counter()
        try:
            audio = await self.transport.synthesize(ssml)
        except VendorRejectedError as e:
            fail(_LOG, "synthesis_rejected", status=e.status, seconds=time.perf_counter() - t0)
            return SynthesisResult.failed(f"Speech synthesis failed: {e.describe()}")
        except VendorUnreachableError as e:
            fail(_LOG, "synthesis_unreachable", reason=str(e), seconds=time.perf_counter() - t0)
            return SynthesisResult.failed(
                f"Network error contacting speech service: {e}",
                ErrorCode.NETWORK_ERROR,
            )
        except Exception as e:
            error(_LOG, "synthesis_error", exc_info=True, error_type=type(e).__name__)
            return SynthesisResult.failed(f"Error during synthesis: {e}")

        elapsed = time.perf_counter() - t0
        duration = self.duration.resolve(audio.audio_data, audio.duration_seconds)
        verbose(
            _LOG,
            "duration_resolved",
            strategy=self.duration.name,
            reported=audio.duration_seconds,
            duration_s=round(duration, 3),
        )
        success(
            _LOG,
            "synthesis_done",
            bytes=len(audio.audio_data),
            duration_s=round(duration, 3),
            seconds=elapsed,
        )
        return SynthesisResult(
            success=True,
            audio_data=audio.audio_data,
            duration_seconds=duration,
            message="Synthesis completed successfully",
        )
