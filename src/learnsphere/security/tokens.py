"""HS256 access tokens for LearnSphere.

Tokens carry the user id (``sub``), the role and an expiry. They are
issued on register/login and checked on every protected route.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt
from jose.exceptions import ExpiredSignatureError

from learnsphere.config import settings


class InvalidTokenError(Exception):
    """Token is missing, malformed, expired or badly signed."""

    pass


@dataclass(frozen=True)
class User:
    """Authenticated principal decoded from a token."""

    sub: str  # user id
    role: str = "user"

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


def create_access_token(
    user_id: str,
    role: str,
    secret: str | None = None,
    algorithm: str | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """Sign a token for a user."""
    expire = datetime.now(UTC) + (expires_delta or timedelta(days=settings.jwt_expire_days))
    claims = {"sub": user_id, "role": role, "exp": expire}
    return jwt.encode(
        claims,
        secret or settings.jwt_secret,
        algorithm=algorithm or settings.jwt_algorithm,
    )


def decode_access_token(
    token: str, secret: str | None = None, algorithm: str | None = None
) -> User:
    """Verify a token and return its principal.

    Raises:
        InvalidTokenError: If the token cannot be trusted
    """
    try:
        payload = jwt.decode(
            token,
            secret or settings.jwt_secret,
            algorithms=[algorithm or settings.jwt_algorithm],
            options={"verify_exp": True},
        )
    except ExpiredSignatureError as e:
        raise InvalidTokenError("Token has expired") from e
    except JWTError as e:
        raise InvalidTokenError(f"Invalid token: {e}") from e

    sub = payload.get("sub")
    if not sub:
        raise InvalidTokenError("Token has no subject")
    return User(sub=str(sub), role=str(payload.get("role", "user")))
