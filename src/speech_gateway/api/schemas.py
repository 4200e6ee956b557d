"""
API Request/Response Schemas.

Pydantic models for the /api/speech endpoints. JSON uses camelCase field
names; Python code uses the snake_case attributes.

Models:
    SynthesizeRequest: Body of POST /api/speech/synthesize
    SynthesizeResponse: Successful synthesis result
    HealthResponse: Body of GET /api/speech/health

Example Request:
    {
        "text": "Hello, how are you?",
        "prosodyRate": 10
    }

Example Response:
    {
        "success": true,
        "message": "Conversion completed successfully",
        "audioDataBase64": "SUQzBAAAAAAA...",
        "durationSeconds": 1.44,
        "wpm": 208.3,
        "wordCount": 5
    }

Text emptiness and word count are checked by services/validators.py so
that violations come back as problem details, not as 422 responses.
"""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class SynthesizeRequest(BaseModel):
    """
    Speech synthesis request.

    Attributes:
        text: Text to synthesize. Missing or null is treated as empty.
        prosody_rate: Signed percentage speed offset (10 -> "+10%",
            -5 -> "-5%"). Sent as "prosodyRate".
    """
    model_config = ConfigDict(populate_by_name=True)

    text: Optional[str] = Field(default="", description="Text to synthesize (max 200 words)")
    prosody_rate: int = Field(
        default=0,
        alias="prosodyRate",
        description="Speaking rate offset in percent",
    )


class SynthesizeResponse(BaseModel):
    """Successful synthesis: base64 audio plus derived metrics."""
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    message: str
    audio_data_base64: str = Field(alias="audioDataBase64")
    duration_seconds: float = Field(alias="durationSeconds")
    wpm: float
    word_count: int = Field(alias="wordCount")


class HealthResponse(BaseModel):
    status: str = "healthy"
    timestamp: datetime
