"""
Request identity. Auth0 access tokens (RS256, JWKS) when FF_USE_AUTH0 is on,
a fixed local user when it is off.

Every store is keyed by AuthenticatedUser.user_id, which is the token's
`sub` claim.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Optional

import httpx
from jose import jwt, JWTError

from .config import get_settings
from .flags import get_flags

logger = logging.getLogger(__name__)

JWKS_TTL_SECONDS = 600


@dataclass
class AuthenticatedUser:
    user_id: str
    email: str = ""
    name: str = ""
    roles: list[str] = field(default_factory=list)


DEV_USER = AuthenticatedUser(
    user_id="dev-user",
    email="dev@local",
    name="Dev User",
    roles=["admin"],
)


def parse_bearer(authorization: str) -> str:
    """Token from an "Authorization: Bearer <token>" header value."""
    if not authorization:
        raise PermissionError("Missing Authorization header")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise PermissionError("Invalid Authorization header. Use: Bearer <token>")
    return token.strip()


def _signing_key(jwks: dict, kid: Optional[str]) -> dict:
    for key in jwks.get("keys", []):
        if key.get("kid") == kid:
            return {name: key[name] for name in ("kty", "kid", "use", "n", "e") if name in key}
    raise JWTError(f"No signing key for kid={kid!r}")


def _user_from_claims(claims: dict) -> AuthenticatedUser:
    return AuthenticatedUser(
        user_id=claims.get("sub", ""),
        email=claims.get("email", ""),
        name=claims.get("name", ""),
        roles=list(claims.get("permissions", [])),
    )


class TokenVerifier:
    """Verifies Auth0 tokens against the tenant's JWKS (cached for JWKS_TTL_SECONDS)."""

    def __init__(self):
        self._jwks: Optional[dict] = None
        self._fetched_at = 0.0

    async def _jwks_for(self, domain: str) -> dict:
        if self._jwks is not None and time.time() - self._fetched_at < JWKS_TTL_SECONDS:
            return self._jwks

        async with httpx.AsyncClient(timeout=10) as client:
            resp = await client.get(f"https://{domain}/.well-known/jwks.json")
            resp.raise_for_status()
            self._jwks = resp.json()
        self._fetched_at = time.time()
        logger.info("Fetched JWKS for %s", domain)
        return self._jwks

    async def verify(self, token: str) -> AuthenticatedUser:
        settings = get_settings()
        jwks = await self._jwks_for(settings.auth0_domain)
        key = _signing_key(jwks, jwt.get_unverified_header(token).get("kid"))
        claims = jwt.decode(
            token,
            key,
            algorithms=[settings.auth0_algorithm],
            audience=settings.auth0_audience,
            issuer=f"https://{settings.auth0_domain}/",
        )
        return _user_from_claims(claims)


_verifier = TokenVerifier()


async def get_current_user(authorization: str = "") -> AuthenticatedUser:
    """Resolve the caller. Raises PermissionError when the token is missing or invalid."""
    if not get_flags().use_auth0:
        return DEV_USER

    token = parse_bearer(authorization)
    try:
        user = await _verifier.verify(token)
    except (JWTError, httpx.HTTPError) as e:
        raise PermissionError(f"Invalid token: {e}") from e

    if not user.user_id:
        raise PermissionError("Token missing sub claim")
    return user
