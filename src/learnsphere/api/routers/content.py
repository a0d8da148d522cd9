"""Public content endpoints."""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Depends

from learnsphere.api.deps import get_admin_service, get_content_service
from learnsphere.services import AdminService, ContentService

router = APIRouter(prefix="/api/content", tags=["Content"])

ContentServiceDep = Annotated[ContentService, Depends(get_content_service)]


@router.get("/subjects")
async def list_subjects(service: ContentServiceDep) -> list[dict[str, Any]]:
    return await service.list_subjects()


@router.get("/subject/{subject_id}")
async def get_subject_content(subject_id: str, service: ContentServiceDep) -> dict[str, Any]:
    return await service.get_subject_content(subject_id)


@router.get("/branches")
async def list_branches(
    service: Annotated[AdminService, Depends(get_admin_service)],
) -> list[dict[str, Any]]:
    return await service.list_branches()


@router.get("/access-count")
async def access_count(service: ContentServiceDep) -> dict[str, int]:
    return {"count": await service.access_count()}
