"""Search endpoints."""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query

from learnsphere.api.deps import get_search_service
from learnsphere.persistence import ContentCategory
from learnsphere.services import SearchService, SearchType

router = APIRouter(prefix="/api/search", tags=["Search"])

SearchServiceDep = Annotated[SearchService, Depends(get_search_service)]


@router.get("/global")
async def global_search(
    service: SearchServiceDep,
    q: str | None = Query(default=None, description="Search text, at least 2 characters"),
    type: SearchType = Query(default=SearchType.ALL),
    branch: str | None = Query(default=None, description="Restrict subjects to a branch id"),
    limit: int | None = Query(default=None, ge=1, le=200),
) -> dict[str, Any]:
    return await service.global_search(q, type, branch, limit)


@router.get("/suggestions")
async def suggestions(
    service: SearchServiceDep, q: str | None = Query(default=None)
) -> list[dict[str, str]]:
    return await service.suggestions(q)


@router.get("/filter")
async def filter_subjects(
    service: SearchServiceDep,
    branch: str | None = Query(default=None),
    year: str | None = Query(default=None),
    category: ContentCategory | None = Query(default=None),
    limit: int | None = Query(default=None, ge=1, le=200),
) -> list[dict[str, Any]]:
    return await service.filter_subjects(
        branch_id=branch,
        year=year,
        category=category.value if category else None,
        limit=limit,
    )
