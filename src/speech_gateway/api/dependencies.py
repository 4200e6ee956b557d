"""
FastAPI Dependency Injection Providers.

Shared resources are created once by create_app() (main.py) and stored on
app.state; these providers hand them to route handlers:

    get_identity_config() -> IdentityConfig (from the GatewayConfig)
    get_speech_service()  -> SpeechService (wraps the shared SynthesisClient)
    get_token_verifier()  -> TokenVerifier used by the auth guard

Tests can replace any of them with app.dependency_overrides.

Usage in Route Handlers:
    from fastapi import Depends
    from speech_gateway.api.dependencies import get_speech_service

    @router.post("/synthesize")
    async def synthesize(
        req: SynthesizeRequest,
        service: SpeechService = Depends(get_speech_service),
    ):
        return await service.convert(req.text, req.prosody_rate)
"""
from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import Request

from speech_gateway.core.config import IdentityConfig
from speech_gateway.services.speech_service import SpeechService

if TYPE_CHECKING:
    from speech_gateway.api.auth import TokenVerifier


def get_identity_config(request: Request) -> IdentityConfig:
    return request.app.state.config.identity


def get_speech_service(request: Request) -> SpeechService:
    """
    Get the SpeechService bound to this application.

    All requests share one service and so one SynthesisClient and one
    outbound connection pool.
    """
    return request.app.state.speech_service


def get_token_verifier(request: Request) -> "TokenVerifier":
    return request.app.state.token_verifier
