"""FastAPI security dependencies.

- get_current_user: Decode the bearer token (401 if absent or invalid)
- get_optional_user: Same, but None for anonymous callers
- require_admin: Additionally require the admin role (403)

Usage:
    @router.post("/branches")
    async def create_branch(user: User = Depends(require_admin)):
        ...
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Header, Request

from learnsphere.api.errors import ForbiddenError, UnauthorizedError
from learnsphere.observability.logging import user_id_var
from learnsphere.security.tokens import InvalidTokenError, User, decode_access_token


async def get_current_user(
    request: Request,
    authorization: Annotated[str | None, Header()] = None,
) -> User:
    """Extract and validate the user from the Authorization header."""
    if authorization is None:
        raise UnauthorizedError("Not authorized, no token")

    if not authorization.startswith("Bearer "):
        raise UnauthorizedError("Invalid authorization header format")

    token = authorization[7:]

    try:
        user = decode_access_token(token)
    except InvalidTokenError as e:
        raise UnauthorizedError(f"Not authorized, {e}") from e

    request.state.user = user
    user_id_var.set(user.sub)
    return user


async def require_admin(
    user: Annotated[User, Depends(get_current_user)],
) -> User:
    """Require the admin role.

    Raises 403 for authenticated non-admins.
    """
    if not user.is_admin:
        raise ForbiddenError()
    return user


async def get_optional_user(
    request: Request,
    authorization: Annotated[str | None, Header()] = None,
) -> User | None:
    """Like get_current_user, but anonymous callers get None.

    A header that is present but invalid is still a 401.
    """
    if authorization is None:
        return None
    return await get_current_user(request, authorization)
