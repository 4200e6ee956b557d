"""
Core Infrastructure for speech-gateway.

This package provides foundational components:
    - config.py: Configuration loading and validation
    - secrets.py: Optional secret-vault overlay
    - errors.py: Error codes and the GatewayError hierarchy
    - logging/: Structured logging with numeric levels
"""
