"""SQLAlchemy ORM models for LearnSphere.

Branch -> Subject -> Content. A subject is unique per (branch, year,
name); deleting a subject deletes its content (enforced by the repository
as well as the foreign key, since not every backend enforces FKs).
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from uuid import uuid4

from sqlalchemy import (
    JSON,
    DateTime,
    Float,
    ForeignKey,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


def new_id() -> str:
    return str(uuid4())


class ContentCategory(str, Enum):
    """Fixed set of content classifications."""

    SYLLABUS = "syllabus"
    REFERENCE_VIDEO = "reference_video"
    NOTES = "notes"
    GENERAL_INFO = "general_info"


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"


def utcnow() -> datetime:
    return datetime.now(UTC)


class TimestampMixin:
    # Client-side defaults so timestamps are populated without a refresh
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )


class BranchTable(TimestampMixin, Base):
    """Academic programme with its ordered year labels."""

    __tablename__ = "branches"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(200), unique=True, nullable=False, index=True)
    years: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)


class SubjectTable(TimestampMixin, Base):
    """Course instance scoped to one branch and one year label."""

    __tablename__ = "subjects"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    branch_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("branches.id"), nullable=False, index=True
    )
    year: Mapped[str] = mapped_column(String(50), nullable=False)
    completion_percentage: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    created_by: Mapped[str | None] = mapped_column(String(36), nullable=True)

    __table_args__ = (
        UniqueConstraint("branch_id", "year", "name", name="uq_subject_branch_year_name"),
    )


class ContentTable(TimestampMixin, Base):
    """A titled link belonging to one subject."""

    __tablename__ = "contents"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    subject_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    category: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    link: Mapped[str] = mapped_column(Text, nullable=False)
    added_by: Mapped[str | None] = mapped_column(String(36), nullable=True)


class UserTable(TimestampMixin, Base):
    """Account used for JWT authentication."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    username: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(200), nullable=False)
    role: Mapped[str] = mapped_column(String(16), nullable=False, default=UserRole.USER.value)
