"""
speech-gateway: Authenticated Text-to-Speech Gateway.

A small FastAPI service that accepts text, forwards it to the Azure
Cognitive Services Speech API and returns the synthesized audio together
with derived metrics (duration, words-per-minute).

Key Features:
    - Bearer-token authentication with a required scope (tts.convert)
    - SSML construction with a prosody rate adjustment
    - Pluggable vendor transport (REST or Speech SDK)
    - Duration reported by the vendor or estimated from the bitrate
    - Problem-details JSON for every failure

Example Usage:
    >>> from speech_gateway.core.config import load_config
    >>> from speech_gateway.synthesis import SynthesisClient
    >>>
    >>> config = load_config()
    >>> client = SynthesisClient(config.speech)
    >>> result = await client.synthesize("Hello world", prosody_rate=10)
    >>> result.duration_seconds
    1.2
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
