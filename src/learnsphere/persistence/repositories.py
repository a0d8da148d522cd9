"""Repository pattern for LearnSphere persistence.

Each repository wraps one AsyncSession and only flushes; committing is the
caller's decision, so a write handler can commit once and then run its
post-commit side effects.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import delete, distinct, extract, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from learnsphere.persistence.tables import (
    BranchTable,
    ContentTable,
    SubjectTable,
    UserTable,
)


def _contains(column: Any, query: str) -> Any:
    """Case-insensitive substring match with LIKE wildcards escaped."""
    return func.lower(column).contains(query.lower(), autoescape=True)


async def _created_per_month(
    session: AsyncSession, table: type[SubjectTable] | type[ContentTable], months: int
) -> list[tuple[int, int, int]]:
    """(year, month, rows created) for the latest ``months`` months with rows, oldest first."""
    year = extract("year", table.created_at)
    month = extract("month", table.created_at)
    stmt = (
        select(year, month, func.count(table.id))
        .group_by(year, month)
        .order_by(year.desc(), month.desc())
        .limit(months)
    )
    result = await session.execute(stmt)
    return [(int(y), int(m), int(count)) for y, m, count in reversed(result.all())]


class BaseRepository:
    """Base repository holding the session."""

    def __init__(self, session: AsyncSession):
        self.session = session


class BranchRepository(BaseRepository):
    """Branch CRUD."""

    async def list_all(self) -> list[BranchTable]:
        result = await self.session.execute(select(BranchTable).order_by(BranchTable.name))
        return list(result.scalars().all())

    async def get(self, branch_id: str) -> BranchTable | None:
        return await self.session.get(BranchTable, branch_id)

    async def name_exists(self, name: str) -> bool:
        stmt = select(BranchTable.id).where(BranchTable.name == name)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def create(self, name: str, years: list[str]) -> BranchTable:
        row = BranchTable(name=name, years=list(years))
        self.session.add(row)
        await self.session.flush()
        return row

    async def delete(self, branch_id: str) -> BranchTable | None:
        """Delete the branch row only. Returns the deleted row or None."""
        row = await self.get(branch_id)
        if row is None:
            return None
        await self.session.delete(row)
        await self.session.flush()
        return row

    async def search(self, query: str, limit: int) -> list[BranchTable]:
        stmt = (
            select(BranchTable)
            .where(_contains(BranchTable.name, query))
            .order_by(BranchTable.name)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count(self) -> int:
        result = await self.session.execute(select(func.count()).select_from(BranchTable))
        return int(result.scalar_one())


class SubjectRepository(BaseRepository):
    """Subject CRUD plus the subject -> content cascade."""

    async def list_all(self) -> list[SubjectTable]:
        stmt = select(SubjectTable).order_by(SubjectTable.year, SubjectTable.name)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get(self, subject_id: str) -> SubjectTable | None:
        return await self.session.get(SubjectTable, subject_id)

    async def list_by_branch(self, branch_id: str) -> list[SubjectTable]:
        stmt = select(SubjectTable).where(SubjectTable.branch_id == branch_id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def exists(self, branch_id: str, year: str, name: str) -> bool:
        stmt = select(SubjectTable.id).where(
            SubjectTable.branch_id == branch_id,
            SubjectTable.year == year,
            SubjectTable.name == name,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def create(
        self, name: str, year: str, branch_id: str, created_by: str | None = None
    ) -> SubjectTable:
        row = SubjectTable(name=name, year=year, branch_id=branch_id, created_by=created_by)
        self.session.add(row)
        await self.session.flush()
        return row

    async def update_progress(self, subject_id: str, percentage: float) -> SubjectTable | None:
        row = await self.get(subject_id)
        if row is None:
            return None
        row.completion_percentage = percentage
        await self.session.flush()
        return row

    async def delete(self, subject: SubjectTable) -> int:
        """Delete a subject and its content. Returns the content rows removed."""
        result = await self.session.execute(
            delete(ContentTable).where(ContentTable.subject_id == subject.id)
        )
        await self.session.delete(subject)
        await self.session.flush()
        return int(result.rowcount or 0)

    async def search(self, query: str, branch_id: str | None, limit: int) -> list[SubjectTable]:
        stmt = select(SubjectTable).where(
            or_(_contains(SubjectTable.name, query), _contains(SubjectTable.year, query))
        )
        if branch_id:
            stmt = stmt.where(SubjectTable.branch_id == branch_id)
        result = await self.session.execute(stmt.order_by(SubjectTable.name).limit(limit))
        return list(result.scalars().all())

    async def filter(
        self,
        branch_id: str | None = None,
        year: str | None = None,
        category: str | None = None,
        limit: int = 50,
    ) -> list[SubjectTable]:
        """Subjects matching every given criterion.

        ``category`` keeps subjects owning at least one item of that category.
        """
        stmt = select(SubjectTable)
        if branch_id:
            stmt = stmt.where(SubjectTable.branch_id == branch_id)
        if year:
            stmt = stmt.where(SubjectTable.year == year)
        if category:
            has_category = (
                select(ContentTable.id)
                .where(ContentTable.subject_id == SubjectTable.id)
                .where(ContentTable.category == category)
                .exists()
            )
            stmt = stmt.where(has_category)
        result = await self.session.execute(stmt.order_by(SubjectTable.name).limit(limit))
        return list(result.scalars().all())

    async def count(self) -> int:
        result = await self.session.execute(select(func.count()).select_from(SubjectTable))
        return int(result.scalar_one())

    async def completion_stats(self) -> dict[str, float]:
        stmt = select(
            func.avg(SubjectTable.completion_percentage),
            func.max(SubjectTable.completion_percentage),
            func.min(SubjectTable.completion_percentage),
        )
        avg, high, low = (await self.session.execute(stmt)).one()
        return {
            "avgCompletion": float(avg or 0),
            "maxCompletion": float(high or 0),
            "minCompletion": float(low or 0),
        }

    async def count_by_branch(self) -> list[tuple[str, int]]:
        """(branch name, subject count) for every branch with subjects."""
        stmt = (
            select(BranchTable.name, func.count(SubjectTable.id))
            .join(BranchTable, BranchTable.id == SubjectTable.branch_id)
            .group_by(BranchTable.name)
            .order_by(BranchTable.name)
        )
        result = await self.session.execute(stmt)
        return [(name, int(count)) for name, count in result.all()]

    async def content_per_branch(self) -> list[tuple[str, int, int]]:
        """(branch name, subject count, content count) for every branch with subjects."""
        stmt = (
            select(
                BranchTable.name,
                func.count(distinct(SubjectTable.id)),
                func.count(ContentTable.id),
            )
            .select_from(SubjectTable)
            .join(BranchTable, BranchTable.id == SubjectTable.branch_id)
            .outerjoin(ContentTable, ContentTable.subject_id == SubjectTable.id)
            .group_by(BranchTable.name)
            .order_by(BranchTable.name)
        )
        result = await self.session.execute(stmt)
        return [(name, int(subjects), int(content)) for name, subjects, content in result.all()]

    async def created_per_month(self, months: int = 12) -> list[tuple[int, int, int]]:
        return await _created_per_month(self.session, SubjectTable, months)


class ContentRepository(BaseRepository):
    """Content CRUD."""

    async def list_for_subject(self, subject_id: str) -> list[ContentTable]:
        stmt = (
            select(ContentTable)
            .where(ContentTable.subject_id == subject_id)
            .order_by(ContentTable.created_at)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def create(
        self,
        subject_id: str,
        title: str,
        category: str,
        link: str,
        added_by: str | None = None,
    ) -> ContentTable:
        row = ContentTable(
            subject_id=subject_id,
            title=title,
            category=category,
            link=link,
            added_by=added_by,
        )
        self.session.add(row)
        await self.session.flush()
        return row

    async def search(self, query: str, limit: int) -> list[tuple[ContentTable, str]]:
        """Content matching title or category, with the owning subject's name."""
        stmt = (
            select(ContentTable, SubjectTable.name)
            .join(SubjectTable, SubjectTable.id == ContentTable.subject_id)
            .where(
                or_(_contains(ContentTable.title, query), _contains(ContentTable.category, query))
            )
            .order_by(ContentTable.title)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return [(content, subject_name) for content, subject_name in result.all()]

    async def count(self) -> int:
        result = await self.session.execute(select(func.count()).select_from(ContentTable))
        return int(result.scalar_one())

    async def count_by_category(self) -> dict[str, int]:
        stmt = select(ContentTable.category, func.count(ContentTable.id)).group_by(
            ContentTable.category
        )
        result = await self.session.execute(stmt)
        return {category: int(count) for category, count in result.all()}

    async def created_per_month(self, months: int = 12) -> list[tuple[int, int, int]]:
        return await _created_per_month(self.session, ContentTable, months)


class UserRepository(BaseRepository):
    """User accounts, keyed by lower-cased email."""

    async def get(self, user_id: str) -> UserTable | None:
        return await self.session.get(UserTable, user_id)

    async def get_by_email(self, email: str) -> UserTable | None:
        stmt = select(UserTable).where(UserTable.email == email.strip().lower())
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, username: str, email: str, password_hash: str, role: str) -> UserTable:
        row = UserTable(
            username=username,
            email=email.strip().lower(),
            password_hash=password_hash,
            role=role,
        )
        self.session.add(row)
        await self.session.flush()
        return row

    async def count_by_role(self, role: str) -> int:
        stmt = select(func.count()).select_from(UserTable).where(UserTable.role == role)
        result = await self.session.execute(stmt)
        return int(result.scalar_one())
