"""
Bearer-token authentication and scope authorization.

Tokens are issued by Microsoft Entra ID. The gateway only verifies them:

    1. Extract "Authorization: Bearer <token>" (HTTPBearer, auto_error off)
    2. Verify signature, expiry, issuer and audience (TokenVerifier)
    3. Check the required scope on the verified claims (has_scope)

Failures:
    no token / bad token         -> UnauthenticatedError (401)
    valid token, missing scope   -> UnauthorizedError (403)

Neither reaches the route handler. Scopes are read from the "scp" claim
(space-delimited, delegated tokens), "scope", or the long-form
http://schemas.microsoft.com/identity/claims/scope claim.
"""
from __future__ import annotations

import asyncio
from typing import Any, Dict, Iterable, List, Optional

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from speech_gateway.api.dependencies import get_identity_config, get_token_verifier
from speech_gateway.core.config import IdentityConfig
from speech_gateway.core.errors import UnauthenticatedError, UnauthorizedError
from speech_gateway.core.logging import get_logger, verbose, warn

_LOG = get_logger("speech-gateway.auth")

SCOPE_CLAIMS = (
    "scp",
    "scope",
    "http://schemas.microsoft.com/identity/claims/scope",
)

bearer_scheme = HTTPBearer(auto_error=False, description="Entra ID access token")


class TokenVerifier:
    """Verify a raw bearer token and return its claims."""

    def __call__(self, token: str) -> Dict[str, Any]:
        """
        Raises:
            UnauthenticatedError: The token is not acceptable.
        """
        raise NotImplementedError


class JwksTokenVerifier(TokenVerifier):
    """
    Verify RS256 tokens against the identity provider's signing keys.

    Args:
        identity: Tenant, client id and audience to validate against.
        jwks_client: Key source; defaults to a caching PyJWKClient for
            the tenant's JWKS document.
    """

    algorithms = ["RS256"]

    def __init__(self, identity: IdentityConfig, jwks_client: Optional[Any] = None):
        self.identity = identity
        self.jwks_client = jwks_client or jwt.PyJWKClient(identity.jwks_uri, cache_keys=True)
        self.audiences: List[str] = list(identity.valid_audiences)
        self.issuers: List[str] = [
            identity.authority,
            f"https://sts.windows.net/{identity.tenant_id}/",
        ]

    def __call__(self, token: str) -> Dict[str, Any]:
        try:
            signing_key = self.jwks_client.get_signing_key_from_jwt(token)
            return jwt.decode(
                token,
                signing_key.key,
                algorithms=self.algorithms,
                audience=self.audiences,
                issuer=self.issuers,
                options={"require": ["exp", "iss", "aud"]},
            )
        except jwt.PyJWTError as e:
            verbose(_LOG, "token_rejected", reason=type(e).__name__)
            raise UnauthenticatedError(f"Invalid bearer token: {e}") from e


class RejectAllVerifier(TokenVerifier):
    """Used when no identity provider is configured: every token fails."""

    def __call__(self, token: str) -> Dict[str, Any]:
        raise UnauthenticatedError("Token validation is not configured")


def create_token_verifier(identity: IdentityConfig) -> TokenVerifier:
    if not identity.configured:
        warn(_LOG, "identity_not_configured", hint="set identity.tenant_id and identity.client_id")
        return RejectAllVerifier()
    return JwksTokenVerifier(identity)


def _scope_values(value: Any) -> Iterable[str]:
    if isinstance(value, str):
        return value.split()
    if isinstance(value, (list, tuple, set)):
        return [s for item in value for s in str(item).split()]
    return ()


def has_scope(claims: Dict[str, Any], scope: str) -> bool:
    """Whether the verified claims grant the given scope."""
    return any(scope in _scope_values(claims.get(name)) for name in SCOPE_CLAIMS)


async def authenticate(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    verifier: TokenVerifier = Depends(get_token_verifier),
) -> Dict[str, Any]:
    """Return the verified claims of the request's bearer token."""
    if credentials is None or not credentials.credentials:
        raise UnauthenticatedError("Bearer token is missing")

    # JWKS lookups may hit the network
    claims = await asyncio.to_thread(verifier, credentials.credentials)
    verbose(_LOG, "caller", name=claims.get("name"), oid=claims.get("oid"))
    return claims


async def require_scope(
    claims: Dict[str, Any] = Depends(authenticate),
    identity: IdentityConfig = Depends(get_identity_config),
) -> Dict[str, Any]:
    """Guard: the caller must hold identity.required_scope (tts.convert)."""
    if not has_scope(claims, identity.required_scope):
        raise UnauthorizedError(f"Token is missing required scope '{identity.required_scope}'")
    return claims
