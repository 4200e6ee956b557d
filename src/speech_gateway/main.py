"""
FastAPI Application Entry Point.

This module creates and configures the FastAPI application for the
speech-gateway service: configuration, logging, the shared synthesis
client, the token verifier, CORS and the error handler.

Startup fails fast: a missing speech key or invalid configuration raises
ConfigurationError from create_app(), before any request is served.

Usage:
    # Run with uvicorn
    uvicorn speech_gateway.main:app --host 0.0.0.0 --port 8000

    # Or through the CLI
    speech-gateway serve --port 8000
"""

from __future__ import annotations

import uuid
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from speech_gateway import __version__
from speech_gateway.api.auth import TokenVerifier, create_token_verifier
from speech_gateway.api.routes import router
from speech_gateway.core.config import GatewayConfig, load_config
from speech_gateway.core.errors import GatewayError
from speech_gateway.core.logging import (
    configure_logging,
    fail,
    get_logger,
    info,
    set_request_id,
    success,
    warn,
)
from speech_gateway.services.speech_service import SpeechService
from speech_gateway.synthesis.client import SynthesisClient
from speech_gateway.synthesis.transport import BaseTransport

_LOG = get_logger("speech-gateway.main")

PROBLEM_JSON = "application/problem+json"


async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
    """Render a GatewayError as RFC 7807 problem details."""
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    if exc.status_code >= 500:
        fail(_LOG, "request_failed", code=exc.code, status=exc.status_code, path=request.url.path)
    else:
        warn(_LOG, "request_rejected", code=exc.code, status=exc.status_code, path=request.url.path)
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_problem(),
        headers=headers,
        media_type=PROBLEM_JSON,
    )


def create_app(
    config: Optional[GatewayConfig] = None,
    *,
    transport: Optional[BaseTransport] = None,
    verifier: Optional[TokenVerifier] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        config: Validated configuration; loaded from YAML/env/vault if None.
        transport: Vendor transport override (tests, custom endpoints).
        verifier: Token verifier override; built from config.identity if None.

    Returns:
        FastAPI: Configured application instance ready to serve requests.

    Raises:
        ConfigurationError: Missing speech key or invalid configuration.
    """
    if config is None:
        config = load_config()
    configure_logging(config.logging.level, force=True, settings=config.logging.as_dict())

    client = SynthesisClient(config.speech, transport=transport)
    if verifier is None:
        verifier = create_token_verifier(config.identity)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        await client.start()
        success(
            _LOG,
            "startup",
            version=__version__,
            transport=client.transport.name,
            origins=len(config.cors.allowed_origins),
        )
        try:
            yield
        finally:
            await client.close()
            info(_LOG, "shutdown")

    app = FastAPI(title="speech-gateway", version=__version__, lifespan=lifespan)

    app.state.config = config
    app.state.synthesis_client = client
    app.state.speech_service = SpeechService(client)
    app.state.token_verifier = verifier

    app.add_exception_handler(GatewayError, gateway_error_handler)

    @app.middleware("http")
    async def bind_request_id(request: Request, call_next):
        rid = str(uuid.uuid4())[:12]
        set_request_id(rid)
        response = await call_next(request)
        response.headers["X-Request-Id"] = rid
        return response

    # Added last so it wraps everything, including error responses
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(config.cors.allowed_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["*"],
    )

    app.include_router(router)

    return app


# Global application instance for ASGI servers (uvicorn, gunicorn, etc.)
app = create_app()
