"""
FastAPI REST API Layer for speech-gateway.

This package defines all HTTP endpoints:
    - routes.py: /api/speech/synthesize and /api/speech/health
    - auth.py: Bearer-token verification and scope guard
    - schemas.py: Request/response Pydantic models
    - dependencies.py: FastAPI dependency injection
"""
