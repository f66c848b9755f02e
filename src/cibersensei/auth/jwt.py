"""
HS256 JWT verification for identity-provider tokens.

The identity provider signs access tokens with a shared secret; `sub` is the
learner id (a UUID). `create_access_token` mints the same shape for local
runs and tests.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from cibersensei.config import get_settings


def create_access_token(user_id: str, expires_in: timedelta | None = None) -> str:
    """
    Create an access token for `user_id`.

    Args:
        user_id: The learner's id.
        expires_in: Lifetime; defaults to the configured expiry.

    Returns:
        Encoded JWT string.
    """
    settings = get_settings()
    now = datetime.now(timezone.utc)
    if expires_in is None:
        expires_in = timedelta(minutes=settings.jwt_access_token_expire_minutes)
    payload: dict[str, Any] = {
        "sub": str(user_id),
        "iat": now,
        "exp": now + expires_in,
    }
    if settings.jwt_audience:
        payload["aud"] = settings.jwt_audience
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_token(token: str) -> dict[str, Any]:
    """
    Verify and decode an access token.

    Returns:
        Decoded payload dictionary with `sub` normalised to a UUID string.

    Raises:
        jwt.InvalidTokenError: If the token is invalid, expired, or its subject is not a UUID.
    """
    settings = get_settings()
    try:
        payload: dict[str, Any] = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
            options={"require": ["exp", "sub"], "verify_aud": settings.jwt_audience is not None},
        )
    except jwt.ExpiredSignatureError:
        msg = "Token has expired"
        raise jwt.InvalidTokenError(msg) from None

    try:
        payload["sub"] = str(uuid.UUID(str(payload["sub"])))
    except ValueError:
        msg = "Token subject is not a valid learner id"
        raise jwt.InvalidTokenError(msg) from None

    return payload
