"""
Audio duration strategies.

The Speech SDK reports the exact audio duration; the REST API does not,
so its duration is estimated from the byte length and the fixed bitrate
of the output format. Both are kept behind one interface:

    reported   vendor duration when present, otherwise the estimate
    estimated  always the estimate, even when the vendor reports one

For the default 128 kbit/s mono MP3 profile the byte rate is 16000 B/s,
so 32000 bytes estimate to 2.0 seconds.
"""
from __future__ import annotations

from typing import Optional

from speech_gateway.core.config import ConfigValidationError, SpeechConfig


class DurationStrategy:
    """Base class: derive the audio duration for a successful synthesis."""

    name: str = "base"

    def __init__(self, bytes_per_second: int):
        if bytes_per_second <= 0:
            raise ConfigValidationError(
                f"bytes_per_second must be positive, got {bytes_per_second}"
            )
        self.bytes_per_second = bytes_per_second

    def estimate(self, audio_data: bytes) -> float:
        """Estimate seconds of audio from its byte length."""
        return len(audio_data) / self.bytes_per_second

    def resolve(self, audio_data: bytes, reported_seconds: Optional[float]) -> float:
        raise NotImplementedError


class ReportedDuration(DurationStrategy):
    """Prefer the vendor-reported duration; estimate when it is missing."""

    name = "reported"

    def resolve(self, audio_data: bytes, reported_seconds: Optional[float]) -> float:
        if reported_seconds is not None and reported_seconds > 0:
            return float(reported_seconds)
        return self.estimate(audio_data)


class EstimatedDuration(DurationStrategy):
    """Always estimate from the byte length."""

    name = "estimated"

    def resolve(self, audio_data: bytes, reported_seconds: Optional[float]) -> float:
        return self.estimate(audio_data)


_STRATEGIES = {
    ReportedDuration.name: ReportedDuration,
    EstimatedDuration.name: EstimatedDuration,
}


def get_duration_strategy(config: SpeechConfig) -> DurationStrategy:
    """Create the duration strategy selected by speech.duration_strategy."""
    try:
        cls = _STRATEGIES[config.duration_strategy]
    except KeyError:
        raise ConfigValidationError(
            f"Unknown duration strategy: {config.duration_strategy!r}. "
            f"Available: {', '.join(_STRATEGIES)}"
        ) from None
    return cls(config.bytes_per_second)
