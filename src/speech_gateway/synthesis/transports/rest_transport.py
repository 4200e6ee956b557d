"""
REST transport for the Azure Speech text-to-speech endpoint.

POSTs the SSML document to
    https://{region}.tts.speech.microsoft.com/cognitiveservices/v1
with the subscription key in Ocp-Apim-Subscription-Key and the output
encoding in X-Microsoft-OutputFormat. The response body is the audio.

One httpx.AsyncClient (and so one connection pool) is shared by all
requests; it is opened by start() and closed by close(). The pool is
safe for concurrent use.
"""
from __future__ import annotations

from typing import Optional

import httpx

from speech_gateway import __version__
from speech_gateway.core.config import SpeechConfig
from speech_gateway.core.logging import debug, verbose
from speech_gateway.synthesis.transport import (
    BaseTransport,
    VendorAudio,
    VendorRejectedError,
    VendorUnreachableError,
)

# Vendor error bodies are reduced to this many characters
MAX_ERROR_DETAIL_CHARS = 500


class RestTransport(BaseTransport):
    """Thin async wrapper around the Speech REST synthesis endpoint."""

    name = "rest"
    reports_duration = False

    def __init__(
        self,
        config: SpeechConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(config)
        self._url = config.rest_endpoint
        self._timeout = httpx.Timeout(config.timeout_s, connect=5.0)
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def start(self) -> None:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                transport=self._transport,
            )

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    def _headers(self) -> dict[str, str]:
        return {
            "Ocp-Apim-Subscription-Key": self.config.key,
            "Content-Type": "application/ssml+xml",
            "X-Microsoft-OutputFormat": self.config.output_format,
            "User-Agent": f"speech-gateway/{__version__}",
        }

    async def synthesize(self, ssml: str) -> VendorAudio:
        if self._client is None:
            await self.start()
        assert self._client is not None

        debug(self.logger, "vendor_request", url=self._url, output_format=self.config.output_format)
        try:
            resp = await self._client.post(
                self._url,
                content=ssml.encode("utf-8"),
                headers=self._headers(),
            )
        except httpx.TransportError as e:
            raise VendorUnreachableError(f"{type(e).__name__}: {e}") from e

        verbose(self.logger, "vendor_response", status=resp.status_code, bytes=len(resp.content))

        if not resp.is_success:
            raise VendorRejectedError(
                resp.status_code,
                resp.reason_phrase,
                resp.text[:MAX_ERROR_DETAIL_CHARS].strip(),
            )

        return VendorAudio(audio_data=resp.content)
