"""
Speech Synthesis Components.

This package wraps the third-party speech service:
    - ssml.py: SSML document construction and escaping
    - duration.py: Reported/estimated audio duration strategies
    - transport.py: Transport base class and vendor error types
    - transports/: REST (httpx) and SDK transports
    - client.py: SynthesisClient, the never-raising facade
"""
from .client import SynthesisClient, SynthesisResult
from .ssml import build_ssml, escape_xml, format_prosody_rate

__all__ = [
    "SynthesisClient",
    "SynthesisResult",
    "build_ssml",
    "escape_xml",
    "format_prosody_rate",
]
