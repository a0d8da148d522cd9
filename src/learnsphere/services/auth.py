"""Registration and login with failed-attempt lockout."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from learnsphere.api.errors import (
    ConflictError,
    ForbiddenError,
    LockedOutError,
    NotFoundError,
    UnauthorizedError,
)
from learnsphere.core.models import AuthResponse, UserOut
from learnsphere.persistence import UserRepository, UserRole, UserTable
from learnsphere.security.lockout import LoginAttemptTracker
from learnsphere.security.passwords import hash_password, verify_password
from learnsphere.security.tokens import User, create_access_token

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"


def _with_token(user: UserTable) -> dict[str, Any]:
    token = create_access_token(user.id, user.role)
    return AuthResponse(
        id=user.id, username=user.username, email=user.email, role=user.role, token=token
    ).dump()


class AuthService:
    def __init__(self, session: AsyncSession, tracker: LoginAttemptTracker):
        self.session = session
        self.tracker = tracker
        self.users = UserRepository(session)

    async def register(
        self,
        username: str,
        email: str,
        password: str,
        role: str = UserRole.USER.value,
        registered_by: User | None = None,
    ) -> dict[str, Any]:
        """Create an account and return it with a token.

        Only an authenticated admin (``registered_by``) may create another
        admin; anonymous sign-ups are always plain users.
        """
        if role == UserRole.ADMIN.value and (registered_by is None or not registered_by.is_admin):
            raise ForbiddenError("Only an admin can register an admin account")
        if await self.users.get_by_email(email) is not None:
            raise ConflictError("User already exists")
        try:
            user = await self.users.create(username, email, hash_password(password), role)
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            raise ConflictError("User already exists") from e
        logger.info(f"Registered user {user.id}")
        return _with_token(user)

    async def login(self, email: str, password: str) -> dict[str, Any]:
        """Authenticate, enforcing the lockout before touching the password.

        Raises:
            LockedOutError: While the identity is locked
            UnauthorizedError: On unknown email or wrong password
        """
        status = await self.tracker.check_lockout(email)
        if not status.allowed:
            raise LockedOutError(status.retry_after_seconds)

        user = await self.users.get_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            locked = await self.tracker.track_failed_login(email)
            if locked:
                logger.warning("Login failure threshold reached")
            raise UnauthorizedError(INVALID_CREDENTIALS)

        await self.tracker.reset_login_attempts(email)
        return _with_token(user)

    async def me(self, user_id: str) -> dict[str, Any]:
        user = await self.users.get(user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        return UserOut.model_validate(user).dump()
