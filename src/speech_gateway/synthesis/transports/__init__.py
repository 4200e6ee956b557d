"""
Transport registry.

Maps speech.transport values to transport classes:
    rest -> RestTransport (default)
    sdk  -> SdkTransport (requires the "sdk" extra)
"""
from __future__ import annotations

from speech_gateway.core.config import ConfigValidationError, SpeechConfig
from speech_gateway.synthesis.transport import BaseTransport

from .rest_transport import RestTransport


def create_transport(config: SpeechConfig) -> BaseTransport:
    """
    Create the transport selected by configuration.

    Raises:
        ConfigValidationError: Unknown transport name.
        ConfigurationError: The SDK transport is selected but not installed.
    """
    if config.transport == "rest":
        return RestTransport(config)
    if config.transport == "sdk":
        from .sdk_transport import SdkTransport
        return SdkTransport(config)
    raise ConfigValidationError(f"Unknown transport: {config.transport!r}. Available: rest, sdk")


__all__ = ["create_transport", "RestTransport"]
