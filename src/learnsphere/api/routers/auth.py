"""Registration, login and current-user endpoints."""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Depends, status

from learnsphere.api.deps import get_auth_service
from learnsphere.core.models import LoginRequest, RegisterRequest
from learnsphere.security.deps import get_current_user, get_optional_user
from learnsphere.security.tokens import User
from learnsphere.services import AuthService

router = APIRouter(prefix="/api/auth", tags=["Auth"])

AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    body: RegisterRequest,
    service: AuthServiceDep,
    caller: Annotated[User | None, Depends(get_optional_user)],
) -> dict[str, Any]:
    """Open sign-up. ``role: admin`` needs an admin bearer token (403 otherwise)."""
    return await service.register(
        body.username, body.email, body.password, body.role.value, registered_by=caller
    )


@router.post("/login")
async def login(body: LoginRequest, service: AuthServiceDep) -> dict[str, Any]:
    """Returns 429 with Retry-After while the email is locked out."""
    return await service.login(body.email, body.password)


@router.get("/me")
async def me(
    user: Annotated[User, Depends(get_current_user)], service: AuthServiceDep
) -> dict[str, Any]:
    return await service.me(user.sub)
