"""Admin endpoints. Every route requires the admin role."""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query, status

from learnsphere.api.deps import get_admin_service, get_analytics_service
from learnsphere.core.models import (
    AdminBroadcast,
    BranchCreate,
    ContentCreate,
    ProgressUpdate,
    SubjectCreate,
)
from learnsphere.security.deps import require_admin
from learnsphere.security.tokens import User
from learnsphere.services import AdminService, AnalyticsService

router = APIRouter(prefix="/api/admin", tags=["Admin"], dependencies=[Depends(require_admin)])

AdminServiceDep = Annotated[AdminService, Depends(get_admin_service)]
AdminUser = Annotated[User, Depends(require_admin)]


@router.get("/branches")
async def list_branches(service: AdminServiceDep) -> list[dict[str, Any]]:
    return await service.list_branches()


@router.post("/branches", status_code=status.HTTP_201_CREATED)
async def create_branch(body: BranchCreate, service: AdminServiceDep) -> dict[str, Any]:
    return await service.create_branch(body.name, body.years)


@router.delete("/branches/{branch_id}")
async def delete_branch(branch_id: str, service: AdminServiceDep) -> dict[str, Any]:
    return await service.delete_branch(branch_id)


@router.post("/subjects", status_code=status.HTTP_201_CREATED)
async def create_subject(
    body: SubjectCreate, user: AdminUser, service: AdminServiceDep
) -> dict[str, Any]:
    return await service.create_subject(body.name, body.year, body.branch_id, created_by=user.sub)


@router.post("/content", status_code=status.HTTP_201_CREATED)
async def add_content(
    body: ContentCreate, user: AdminUser, service: AdminServiceDep
) -> dict[str, Any]:
    return await service.add_content(
        body.subject_id, body.title, body.category.value, body.link, added_by=user.sub
    )


@router.put("/subjects/progress/{subject_id}")
async def update_progress(
    subject_id: str, body: ProgressUpdate, service: AdminServiceDep
) -> dict[str, Any]:
    return await service.update_progress(subject_id, body.percentage)


@router.post("/broadcast")
async def broadcast(
    body: AdminBroadcast, user: AdminUser, service: AdminServiceDep
) -> dict[str, Any]:
    """Send to ``admin_<adminId>``, defaulting to the caller's own topic."""
    return await service.broadcast_admin_message(body.admin_id or user.sub, body.message, body.data)


@router.get("/analytics")
async def analytics(
    service: Annotated[AnalyticsService, Depends(get_analytics_service)],
) -> dict[str, Any]:
    return await service.summary()


@router.get("/analytics/growth")
async def analytics_growth(
    service: Annotated[AnalyticsService, Depends(get_analytics_service)],
    months: int = Query(default=12, ge=1, le=120),
) -> dict[str, Any]:
    return await service.growth(months)


@router.get("/analytics/engagement")
async def analytics_engagement(
    service: Annotated[AnalyticsService, Depends(get_analytics_service)],
) -> dict[str, Any]:
    return await service.engagement()
