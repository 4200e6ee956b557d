"""
Speech API Routes.

Endpoints:
    POST /api/speech/synthesize  - Text to base64 audio (scope tts.convert)
    GET  /api/speech/health      - Liveness probe (anonymous)

Request Flow:
    1. Request id bound to the logging context (middleware in main.py)
    2. Bearer token verified and scope checked (auth.require_scope)
    3. SpeechService validates, synthesizes and measures
    4. Audio base64-encoded into SynthesizeResponse

Error Handling:
    Failures are raised as GatewayError subclasses and rendered by the
    handler in main.py as problem details (application/problem+json):
    {
        "type": "about:blank",
        "title": "Invalid input",
        "status": 400,
        "detail": "Text cannot be empty",
        "code": "INVALID_INPUT"
    }

Example Usage:
    curl -X POST http://localhost:8000/api/speech/synthesize \\
        -H "Authorization: Bearer $TOKEN" \\
        -H "Content-Type: application/json" \\
        -d '{"text": "Hello world", "prosodyRate": 10}'
"""
from __future__ import annotations

import base64
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Depends

from speech_gateway.api.auth import require_scope
from speech_gateway.api.dependencies import get_speech_service
from speech_gateway.api.schemas import HealthResponse, SynthesizeRequest, SynthesizeResponse
from speech_gateway.services.speech_service import SpeechService

router = APIRouter(prefix="/api/speech", tags=["speech"])


@router.post("/synthesize", response_model=SynthesizeResponse)
async def synthesize(
    req: SynthesizeRequest,
    claims: Dict[str, Any] = Depends(require_scope),
    service: SpeechService = Depends(get_speech_service),
) -> SynthesizeResponse:
    """
    Convert text to speech.

    Returns:
        SynthesizeResponse with base64 audio, duration, wpm and word count.

    Raises:
        401: Missing or invalid bearer token
        403: Token lacks the tts.convert scope
        400: Empty text or more than 200 words
        500: Speech service failed or was unreachable
    """
    outcome = await service.convert(req.text or "", req.prosody_rate)
    return SynthesizeResponse(
        success=True,
        message=outcome.message,
        audio_data_base64=base64.b64encode(outcome.audio_data).decode("ascii"),
        duration_seconds=outcome.duration_seconds,
        wpm=outcome.wpm,
        word_count=outcome.word_count,
    )


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(status="healthy", timestamp=datetime.now(timezone.utc))
