"""Shared fixtures for speech-gateway tests."""
from __future__ import annotations

import os

# Set before any speech_gateway import: main.py builds an app at import time
os.environ.setdefault("SPEECH_GW_SPEECH_KEY", "test-key-0000")
os.environ["SPEECH_GW_NO_COLOR"] = "1"
os.environ.pop("SPEECH_GW_VAULT_URI", None)

from typing import Any, Dict, Optional

import pytest
from fastapi.testclient import TestClient

from speech_gateway.api.auth import TokenVerifier
from speech_gateway.core.config import CorsConfig, GatewayConfig, IdentityConfig, SpeechConfig
from speech_gateway.core.errors import UnauthenticatedError
from speech_gateway.synthesis.transport import BaseTransport, VendorAudio

# 2 seconds of 128 kbit/s MP3
TWO_SECONDS_OF_AUDIO = b"\xff" * 32000

VALID_TOKEN = "valid-token"
NO_SCOPE_TOKEN = "no-scope-token"


class FakeTransport(BaseTransport):
    """Records SSML documents and replies with canned audio or an error."""

    name = "fake"

    def __init__(
        self,
        config: SpeechConfig,
        audio: bytes = TWO_SECONDS_OF_AUDIO,
        duration: Optional[float] = None,
        error: Optional[Exception] = None,
    ):
        super().__init__(config)
        self.audio = audio
        self.duration = duration
        self.error = error
        self.calls: list[str] = []
        self.started = False
        self.closed = False

    async def start(self) -> None:
        self.started = True

    async def close(self) -> None:
        self.closed = True

    async def synthesize(self, ssml: str) -> VendorAudio:
        self.calls.append(ssml)
        if self.error is not None:
            raise self.error
        return VendorAudio(audio_data=self.audio, duration_seconds=self.duration)


class FakeVerifier(TokenVerifier):
    """Maps known token strings to claims."""

    def __init__(self, tokens: Dict[str, Dict[str, Any]]):
        self.tokens = tokens

    def __call__(self, token: str) -> Dict[str, Any]:
        if token not in self.tokens:
            raise UnauthenticatedError("Invalid bearer token")
        return self.tokens[token]


@pytest.fixture
def speech_config() -> SpeechConfig:
    return SpeechConfig(key="test-key-1234", region="westus", voice_name="en-US-AriaNeural")


@pytest.fixture
def gateway_config(speech_config) -> GatewayConfig:
    return GatewayConfig(
        speech=speech_config,
        identity=IdentityConfig(
            tenant_id="tenant-id",
            client_id="client-id",
            audience="api://speech-gateway",
        ),
        cors=CorsConfig(allowed_origins=("https://app.example.com",)),
    )


@pytest.fixture
def fake_transport(speech_config) -> FakeTransport:
    return FakeTransport(speech_config)


@pytest.fixture
def fake_verifier() -> FakeVerifier:
    return FakeVerifier({
        VALID_TOKEN: {"scp": "tts.convert", "name": "Ada", "oid": "oid-1"},
        NO_SCOPE_TOKEN: {"scp": "user.read", "name": "Bob", "oid": "oid-2"},
    })


@pytest.fixture
def client(gateway_config, fake_transport, fake_verifier):
    from speech_gateway.main import create_app

    app = create_app(gateway_config, transport=fake_transport, verifier=fake_verifier)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def auth_headers() -> Dict[str, str]:
    return {"Authorization": f"Bearer {VALID_TOKEN}"}
