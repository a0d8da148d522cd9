"""Pydantic v2 request and response models.

Request models reject unknown fields. Response models are built from ORM
rows (``from_attributes``) and serialized with the wire names the web
client expects (``_id``, camelCase, ``branch``/``subject`` for foreign
keys) via ``dump()``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, StringConstraints

from learnsphere.persistence.tables import ContentCategory, UserRole

NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class StrictModel(BaseModel):
    """Base for request bodies."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class ReadModel(BaseModel):
    """Base for responses built from ORM rows."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    def dump(self) -> dict[str, Any]:
        """JSON-safe dict with wire aliases."""
        return self.model_dump(mode="json", by_alias=True)


# -----------------------------------------------------------------------------
# Requests
# -----------------------------------------------------------------------------


class BranchCreate(StrictModel):
    name: NonEmptyStr
    years: list[NonEmptyStr] = Field(min_length=1)


class SubjectCreate(StrictModel):
    name: NonEmptyStr
    year: NonEmptyStr
    branch_id: NonEmptyStr = Field(alias="branchId")


class ContentCreate(StrictModel):
    subject_id: NonEmptyStr = Field(alias="subjectId")
    title: NonEmptyStr
    category: ContentCategory
    link: NonEmptyStr


class ProgressUpdate(StrictModel):
    # Range is checked by the handler so the message matches other 400s
    percentage: float | None = None


class AdminBroadcast(StrictModel):
    admin_id: str | None = Field(default=None, alias="adminId")
    message: NonEmptyStr
    data: dict[str, Any] = Field(default_factory=dict)


class RegisterRequest(StrictModel):
    username: NonEmptyStr
    email: NonEmptyStr
    password: str = Field(min_length=6)
    role: UserRole = UserRole.USER


class LoginRequest(StrictModel):
    email: NonEmptyStr
    password: str = Field(min_length=1)


# -----------------------------------------------------------------------------
# Responses
# -----------------------------------------------------------------------------


class BranchOut(ReadModel):
    id: str = Field(serialization_alias="_id")
    name: str
    years: list[str]


class SubjectSummary(ReadModel):
    id: str = Field(serialization_alias="_id")
    name: str
    year: str
    branch_id: str = Field(serialization_alias="branch")
    completion_percentage: float = Field(serialization_alias="completionPercentage")


class SubjectOut(SubjectSummary):
    created_by: str | None = Field(default=None, serialization_alias="createdBy")
    created_at: datetime | None = Field(default=None, serialization_alias="createdAt")
    updated_at: datetime | None = Field(default=None, serialization_alias="updatedAt")


class ContentOut(ReadModel):
    id: str = Field(serialization_alias="_id")
    subject_id: str = Field(serialization_alias="subject")
    title: str
    category: str
    link: str
    added_by: str | None = Field(default=None, serialization_alias="addedBy")
    created_at: datetime | None = Field(default=None, serialization_alias="createdAt")


class SubjectDetail(SubjectOut):
    content: list[ContentOut] = Field(default_factory=list)


class UserOut(ReadModel):
    id: str = Field(serialization_alias="_id")
    username: str
    email: str
    role: str


class AuthResponse(UserOut):
    token: str
