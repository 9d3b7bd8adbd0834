"""Bearer-token authentication against the configured Auth0 tenant.

Tokens must be RS256-signed by a key published in the tenant's JWKS document
and carry the expected issuer and audience. The ``sub`` claim becomes the
user id every favorites query is scoped by. Any failure is a 401.
"""

from __future__ import annotations

import logging
from functools import lru_cache

import jwt
from fastapi import Header, HTTPException, status
from jwt import PyJWKClient

from movie_explorer.settings import AppSettings, get_settings

logger = logging.getLogger(__name__)

ALGORITHMS = ["RS256"]


def _unauthorized(detail: str = "Unauthorized") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _bearer_token(authorization: str | None) -> str:
    raw = (authorization or "").strip()
    scheme, _, token = raw.partition(" ")
    if scheme.lower() != "bearer":
        return ""
    return token.strip()


@lru_cache(maxsize=4)
def get_jwk_client(jwks_url: str) -> PyJWKClient:
    return PyJWKClient(jwks_url, cache_keys=True)


def verify_token(token: str, settings: AppSettings) -> str:
    """Validate ``token`` and return its subject.

    Raises ``HTTPException(401)`` when the tenant is not configured, the key
    cannot be resolved, the signature/issuer/audience/expiry checks fail or
    the token has no ``sub``.
    """

    jwks_url = settings.auth0_jwks_url
    if not jwks_url:
        logger.error("Rejecting request: AUTH0_DOMAIN is not configured")
        raise _unauthorized()

    try:
        signing_key = get_jwk_client(jwks_url).get_signing_key_from_jwt(token)
        claims = jwt.decode(
            token,
            signing_key.key,
            algorithms=ALGORITHMS,
            audience=settings.resolved_auth0_audience,
            issuer=settings.auth0_issuer,
            options={"require": ["exp", "iss", "aud", "sub"]},
        )
    except jwt.PyJWTError as exc:
        logger.info("Rejected bearer token: %s", exc)
        raise _unauthorized("Invalid token") from exc

    subject = claims.get("sub")
    if not isinstance(subject, str) or not subject.strip():
        raise _unauthorized("Invalid token: missing subject")
    return subject


def get_current_user_id(authorization: str | None = Header(default=None)) -> str:
    """FastAPI dependency resolving the authenticated user's id."""

    token = _bearer_token(authorization)
    if not token:
        raise _unauthorized()
    return verify_token(token, get_settings())


__all__ = ["ALGORITHMS", "get_current_user_id", "get_jwk_client", "verify_token"]
