"""FastAPI authentication dependencies."""

from __future__ import annotations

from dataclasses import dataclass

import jwt
from fastapi import Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from cibersensei.auth.jwt import verify_token
from cibersensei.errors import Unauthenticated

_bearer = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Identity:
    """The authenticated learner. Passed explicitly into every service call."""

    user_id: str


async def get_current_identity(
    credentials: HTTPAuthorizationCredentials | None = Security(_bearer),
) -> Identity:
    """
    Extract and verify the bearer JWT.

    The learner's profile is not required to exist yet: registration itself
    is an authenticated call.
    """
    if credentials is None:
        raise Unauthenticated("Missing bearer token")
    try:
        payload = verify_token(credentials.credentials)
    except jwt.InvalidTokenError as e:
        raise Unauthenticated(str(e)) from e
    return Identity(user_id=payload["sub"])
