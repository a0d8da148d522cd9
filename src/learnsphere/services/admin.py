"""Admin write path: branches, subjects, content and progress.

Every write follows the same order:

1. validate input (request models, plus the range/exists checks here)
2. mutate and commit the database
3. invalidate the cache keys the operation affects
4. publish the notification for the operation
5. return the result

Steps 3 and 4 run as PostCommitHooks, so a cache or transport failure is
logged and never rolls back step 2 or changes the response.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from learnsphere.api.errors import BadRequestError, ConflictError, NotFoundError
from learnsphere.cache import CacheKeys, ContentCache, WriteOperation, invalidation_keys
from learnsphere.config import settings
from learnsphere.core.models import BranchOut, ContentOut, SubjectOut
from learnsphere.events import (
    NotificationEvent,
    NotificationFanout,
    PostCommitHooks,
    admin_message_event,
    new_content_event,
    new_subject_event,
    progress_update_event,
    publish_notification,
)
from learnsphere.persistence import BranchRepository, ContentRepository, SubjectRepository

logger = logging.getLogger(__name__)


class AdminService:
    """Write-path handlers for the admin API."""

    def __init__(
        self,
        session: AsyncSession,
        cache: ContentCache,
        fanout: NotificationFanout | None,
    ):
        self.session = session
        self.cache = cache
        self.fanout = fanout
        self.branches = BranchRepository(session)
        self.subjects = SubjectRepository(session)
        self.contents = ContentRepository(session)

    # -------------------------------------------------------------------------
    # Side effects
    # -------------------------------------------------------------------------

    def _invalidate(self, hooks: PostCommitHooks, name: str, keys: list[str]) -> None:
        async def effect() -> int:
            return await self.cache.invalidate(*keys)

        hooks.add(name, effect)

    def _notify(self, hooks: PostCommitHooks, event: NotificationEvent) -> None:
        async def effect() -> int:
            return await publish_notification(event, self.fanout)

        hooks.add(f"notify:{event.type.value}", effect)

    def _side_effects(
        self,
        operation: WriteOperation,
        subject_id: str | None = None,
        event: NotificationEvent | None = None,
    ) -> PostCommitHooks:
        """Invalidation first, then the notification."""
        hooks = PostCommitHooks()
        self._invalidate(
            hooks, f"invalidate:{operation.value}", invalidation_keys(operation, subject_id)
        )
        if event is not None:
            self._notify(hooks, event)
        return hooks

    async def _rollback_conflict(self, error: IntegrityError, text: str) -> ConflictError:
        await self.session.rollback()
        logger.info(f"Unique constraint rejected write: {error.orig}")
        return ConflictError(text)

    # -------------------------------------------------------------------------
    # Branches
    # -------------------------------------------------------------------------

    async def list_branches(self) -> list[dict[str, Any]]:
        """All branches, read-through on ``branches_cache``."""

        async def load() -> list[dict[str, Any]]:
            rows = await self.branches.list_all()
            return [BranchOut.model_validate(row).dump() for row in rows]

        return await self.cache.read_through(
            CacheKeys.branches(), load, settings.branches_cache_ttl
        )

    async def create_branch(self, name: str, years: list[str]) -> dict[str, Any]:
        if await self.branches.name_exists(name):
            raise ConflictError(f"Branch '{name}' already exists")

        try:
            row = await self.branches.create(name, years)
            await self.session.commit()
        except IntegrityError as e:
            raise await self._rollback_conflict(e, f"Branch '{name}' already exists") from e

        branch = BranchOut.model_validate(row).dump()
        await self._side_effects(WriteOperation.CREATE_BRANCH).run()
        logger.info(f"Created branch {row.id} ({name})")
        return branch

    async def delete_branch(self, branch_id: str) -> dict[str, Any]:
        """Delete a branch, every subject in it, and their content.

        Subjects are deleted one at a time and committed together with the
        branch. A failure part way through rolls the session back, but a
        process crash between statements on a backend without transactions
        is not recovered.
        """
        branch = await self.branches.get(branch_id)
        if branch is None:
            raise NotFoundError("Branch", branch_id)
        name = branch.name

        subjects = await self.subjects.list_by_branch(branch_id)
        subject_ids = [subject.id for subject in subjects]
        deleted_content = 0
        for subject in subjects:
            deleted_content += await self.subjects.delete(subject)

        await self.branches.delete(branch_id)
        await self.session.commit()

        hooks = PostCommitHooks()
        subject_keys = [
            key
            for subject_id in subject_ids
            for key in invalidation_keys(WriteOperation.DELETE_SUBJECT, subject_id)
        ]
        if subject_keys:
            self._invalidate(hooks, "invalidate:delete_subject", subject_keys)
        self._invalidate(
            hooks, "invalidate:delete_branch", invalidation_keys(WriteOperation.DELETE_BRANCH)
        )
        await hooks.run()

        logger.info(
            f"Deleted branch {branch_id} with {len(subject_ids)} subjects "
            f"and {deleted_content} content items"
        )
        return {
            "message": (
                f"Branch '{name}' and {len(subject_ids)} subjects/content deleted successfully."
            ),
            "deletedSubjects": len(subject_ids),
            "deletedContent": deleted_content,
        }

    # -------------------------------------------------------------------------
    # Subjects and content
    # -------------------------------------------------------------------------

    async def create_subject(
        self, name: str, year: str, branch_id: str, created_by: str | None = None
    ) -> dict[str, Any]:
        branch = await self.branches.get(branch_id)
        if branch is None:
            raise NotFoundError("Branch", branch_id)

        conflict = f"Subject '{name}' already exists for {year} in {branch.name}"
        if await self.subjects.exists(branch_id, year, name):
            raise ConflictError(conflict)

        try:
            row = await self.subjects.create(name, year, branch_id, created_by)
            await self.session.commit()
        except IntegrityError as e:
            raise await self._rollback_conflict(e, conflict) from e

        subject = SubjectOut.model_validate(row).dump()
        event = new_subject_event(
            branch_id,
            {
                "_id": row.id,
                "name": row.name,
                "year": row.year,
                "branch": branch_id,
                "branchName": branch.name,
            },
        )
        await self._side_effects(WriteOperation.CREATE_SUBJECT, event=event).run()
        return subject

    async def add_content(
        self,
        subject_id: str,
        title: str,
        category: str,
        link: str,
        added_by: str | None = None,
    ) -> dict[str, Any]:
        subject = await self.subjects.get(subject_id)
        if subject is None:
            raise NotFoundError("Subject", subject_id)

        row = await self.contents.create(subject_id, title, category, link, added_by)
        await self.session.commit()

        content = ContentOut.model_validate(row).dump()
        event = new_content_event(
            subject_id,
            {"_id": row.id, "title": row.title, "category": row.category, "link": row.link},
        )
        await self._side_effects(WriteOperation.ADD_CONTENT, subject_id, event).run()
        return content

    async def update_progress(self, subject_id: str, percentage: float | None) -> dict[str, Any]:
        if percentage is None or not 0 <= percentage <= 100:
            raise BadRequestError("Percentage must be between 0 and 100.")

        row = await self.subjects.update_progress(subject_id, percentage)
        if row is None:
            raise NotFoundError("Subject", subject_id)
        await self.session.commit()

        subject = SubjectOut.model_validate(row).dump()
        event = progress_update_event(subject_id, percentage)
        await self._side_effects(WriteOperation.UPDATE_PROGRESS, subject_id, event).run()
        return subject

    # -------------------------------------------------------------------------
    # Broadcast
    # -------------------------------------------------------------------------

    async def broadcast_admin_message(
        self, admin_id: str, message: str, data: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        """Push an operator message to ``admin_<id>``. No database write."""
        event = admin_message_event(admin_id, message, data)
        delivered = await publish_notification(event, self.fanout)
        return {"topic": event.topic.name, "delivered": delivered}
