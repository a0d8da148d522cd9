"""Constructors for the four notification events.

Example:
    event = new_content_event(subject_id, {"_id": cid, "title": "Lecture 1", ...})
    await publish_notification(event, fanout)
"""

from __future__ import annotations

from typing import Any

from learnsphere.events.schemas import NotificationEvent, NotificationType, Topic


def new_content_event(subject_id: str, content: dict[str, Any]) -> NotificationEvent:
    """Content added to a subject, sent to ``subject_<id>``.

    Args:
        subject_id: Owning subject
        content: ``{_id, title, category, link}``
    """
    return NotificationEvent(
        type=NotificationType.NEW_CONTENT,
        topic=Topic.subject(subject_id),
        message=f"New {content.get('category')} added: {content.get('title')}",
        payload={"content": content},
    )


def new_subject_event(branch_id: str, subject: dict[str, Any]) -> NotificationEvent:
    """Subject created in a branch, sent to ``branch_<id>``.

    Args:
        branch_id: Owning branch
        subject: ``{_id, name, year, branch, branchName}``
    """
    return NotificationEvent(
        type=NotificationType.NEW_SUBJECT,
        topic=Topic.branch(branch_id),
        message=f"New subject created: {subject.get('name')}",
        payload={"subject": subject},
    )


def progress_update_event(subject_id: str, percentage: float) -> NotificationEvent:
    """Completion percentage changed, sent to ``subject_<id>``."""
    return NotificationEvent(
        type=NotificationType.PROGRESS_UPDATE,
        topic=Topic.subject(subject_id),
        message=f"Subject completion updated to {percentage:g}%",
        payload={"percentage": percentage},
    )


def admin_message_event(
    admin_id: str, message: str, data: dict[str, Any] | None = None
) -> NotificationEvent:
    """Operator broadcast, sent to ``admin_<id>``."""
    return NotificationEvent(
        type=NotificationType.ADMIN_MESSAGE,
        topic=Topic.admin(admin_id),
        message=message,
        payload={"data": data or {}},
    )
