"""
Vendor Transport Base Class.

A transport performs exactly one outbound synthesis call for an SSML
document. It returns a VendorAudio on success and raises:

    VendorRejectedError   the service answered but refused or failed
                          (non-2xx status, SDK cancellation)
    VendorUnreachableError the service could not be reached
                          (connect error, timeout, DNS failure)

Anything else propagating out of a transport is a bug in the transport
and is reported by the client as a generic synthesis failure.

Implementations:
    - transports/rest_transport.py: HTTP POST via a shared httpx pool
    - transports/sdk_transport.py: Azure Speech SDK

Implementing a New Transport:
    1. Create transports/<name>_transport.py
    2. Inherit from BaseTransport and implement synthesize()
    3. Register it in transports/__init__.py
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from speech_gateway.core.config import SpeechConfig
from speech_gateway.core.logging import get_logger


@dataclass(frozen=True)
class VendorAudio:
    """
    Audio returned by the vendor.

    Attributes:
        audio_data: Encoded audio bytes in the configured output format.
        duration_seconds: Vendor-reported duration, None when not reported.
    """
    audio_data: bytes
    duration_seconds: Optional[float] = None


class VendorRejectedError(Exception):
    """
    The speech service answered with a failure.

    Attributes:
        status: HTTP status code or SDK reason name.
        reason: Short reason phrase.
        detail: Vendor's textual error detail (already truncated).
    """

    def __init__(self, status: int | str, reason: str = "", detail: str = ""):
        self.status = status
        self.reason = reason
        self.detail = detail
        super().__init__(self.describe())

    def describe(self) -> str:
        head = f"{self.status} {self.reason}".strip()
        return f"{head}. {self.detail}".strip() if self.detail else head


class VendorUnreachableError(Exception):
    """The speech service could not be reached."""


class BaseTransport:
    """
    Abstract base class for vendor transports.

    Attributes:
        name: Transport identifier ("rest", "sdk").
        reports_duration: Whether the vendor returns an audio duration.
    """
    name: str = "base"
    reports_duration: bool = False

    def __init__(self, config: SpeechConfig):
        self.config = config
        self.logger = get_logger(f"speech-gateway.transport.{self.name}")

    async def start(self) -> None:
        """Acquire shared resources (connection pools). Default: nothing."""

    async def close(self) -> None:
        """Release shared resources. Default: nothing."""

    async def synthesize(self, ssml: str) -> VendorAudio:
        """
        Send one SSML document to the vendor.

        Raises:
            VendorRejectedError: The vendor refused or failed the request.
            VendorUnreachableError: The vendor could not be reached.
        """
        raise NotImplementedError
