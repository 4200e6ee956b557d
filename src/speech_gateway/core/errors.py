"""
Error Codes and Exceptions for speech-gateway.

Every failure the gateway reports to a caller is a GatewayError. Each
subclass pins the machine-readable code, the HTTP status and the
problem-details title, so the API layer renders all of them through a
single exception handler.

Error Taxonomy:
    InvalidInputError     INVALID_INPUT        400  empty or blank text
    TextTooLongError      TEXT_TOO_LONG        400  word ceiling exceeded
    UnauthenticatedError  UNAUTHENTICATED      401  missing/invalid token
    UnauthorizedError     UNAUTHORIZED         403  token lacks the scope
    SynthesisError        SYNTHESIS_FAILED     500  vendor rejected the call
    NetworkError          NETWORK_ERROR        500  vendor unreachable
    ConfigurationError    CONFIGURATION_ERROR  -    fatal at startup

Problem Details Format (RFC 7807):
    {
        "type": "about:blank",
        "title": "Text too long",
        "status": 400,
        "detail": "Maximum word count is 200, but got 201 words.",
        "code": "TEXT_TOO_LONG"
    }
"""
from __future__ import annotations

from typing import Any, Dict, Optional


class ErrorCode:
    """
    Standardized error codes for API responses.

    Returned as the `code` extension member of problem-details bodies
    and carried by failed SynthesisResult objects.
    """
    INVALID_INPUT = "INVALID_INPUT"             # Empty or blank text
    TEXT_TOO_LONG = "TEXT_TOO_LONG"             # Word count over the ceiling
    UNAUTHENTICATED = "UNAUTHENTICATED"         # Missing or invalid bearer token
    UNAUTHORIZED = "UNAUTHORIZED"               # Token lacks the required scope
    SYNTHESIS_FAILED = "SYNTHESIS_FAILED"       # Vendor rejected or errored
    NETWORK_ERROR = "NETWORK_ERROR"             # Transport failure reaching vendor
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR" # Missing/invalid startup config


class GatewayError(Exception):
    """
    Base exception for gateway errors.

    Attributes:
        message: Human-readable error message (the problem `detail`).
        code: Error code from ErrorCode.
        status_code: HTTP status used when rendered as a response.
        title: Short problem-details title.
        details: Optional dictionary with additional context.
    """
    status_code: int = 500
    title: str = "Internal error"
    default_code: str = ErrorCode.SYNTHESIS_FAILED

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}
        super().__init__(message)

    def to_problem(self) -> Dict[str, Any]:
        """Convert to a problem-details dict for the API."""
        problem: Dict[str, Any] = {
            "type": "about:blank",
            "title": self.title,
            "status": self.status_code,
            "detail": self.message,
            "code": self.code,
        }
        if self.details:
            problem["details"] = self.details
        return problem


class InvalidInputError(GatewayError):
    """Raised when the text to synthesize is empty or whitespace only."""
    status_code = 400
    title = "Invalid input"
    default_code = ErrorCode.INVALID_INPUT


class TextTooLongError(GatewayError):
    """Raised when the text exceeds the word-count ceiling."""
    status_code = 400
    title = "Text too long"
    default_code = ErrorCode.TEXT_TOO_LONG


class UnauthenticatedError(GatewayError):
    """Raised when no bearer token is present or it fails verification."""
    status_code = 401
    title = "Unauthorized"
    default_code = ErrorCode.UNAUTHENTICATED


class UnauthorizedError(GatewayError):
    """Raised when a verified token lacks the required scope."""
    status_code = 403
    title = "Forbidden"
    default_code = ErrorCode.UNAUTHORIZED


class SynthesisError(GatewayError):
    """Raised when the speech service rejects or fails a synthesis call."""
    status_code = 500
    title = "Speech synthesis failed"
    default_code = ErrorCode.SYNTHESIS_FAILED


class NetworkError(SynthesisError):
    """Raised when the speech service cannot be reached."""
    default_code = ErrorCode.NETWORK_ERROR


class ConfigurationError(GatewayError):
    """
    Raised when required configuration is missing or invalid.

    Fatal: the process must not start serving requests.
    """
    title = "Configuration error"
    default_code = ErrorCode.CONFIGURATION_ERROR
