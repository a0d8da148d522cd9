"""Notification schemas for LearnSphere.

Topics are a closed set of kinds plus an entity id, formatted by one
function so publishers and joiners can never disagree on a room name.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any
from uuid import uuid4

import orjson


class TopicKind(str, Enum):
    """Entity kinds that own a notification topic."""

    SUBJECT = "subject"
    BRANCH = "branch"
    ADMIN = "admin"


class NotificationType(str, Enum):
    """Event names pushed to subscribers."""

    NEW_CONTENT = "new_content"
    NEW_SUBJECT = "new_subject"
    PROGRESS_UPDATE = "progress_update"
    ADMIN_MESSAGE = "admin_message"


@dataclass(frozen=True, slots=True)
class Topic:
    """An addressable notification channel, e.g. ``subject_<id>``."""

    kind: TopicKind
    id: str

    def __post_init__(self) -> None:
        if not str(self.id):
            raise ValueError("Topic id must not be empty")

    @property
    def name(self) -> str:
        return topic_name(self.kind, self.id)

    @classmethod
    def subject(cls, subject_id: str) -> "Topic":
        return cls(TopicKind.SUBJECT, str(subject_id))

    @classmethod
    def branch(cls, branch_id: str) -> "Topic":
        return cls(TopicKind.BRANCH, str(branch_id))

    @classmethod
    def admin(cls, admin_id: str) -> "Topic":
        return cls(TopicKind.ADMIN, str(admin_id))

    def __str__(self) -> str:
        return self.name


def topic_name(kind: TopicKind, entity_id: str) -> str:
    """Format a topic name as ``<kind>_<id>``."""
    return f"{kind.value}_{entity_id}"


@dataclass(frozen=True, slots=True)
class NotificationEvent:
    """A transient event pushed once to a topic's current subscribers.

    ``payload`` is merged into the pushed ``data`` object next to
    ``message`` and ``timestamp``.
    """

    type: NotificationType
    topic: Topic
    message: str
    payload: dict[str, Any] = field(default_factory=dict)
    event_id: str = field(default_factory=lambda: str(uuid4()))
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def to_envelope(self) -> dict[str, Any]:
        """Wire shape: ``{"event": <type>, "data": {...}}``."""
        data: dict[str, Any] = {"message": self.message, **self.payload}
        data["timestamp"] = self.timestamp.isoformat()
        return {"event": self.type.value, "data": data}

    def to_bytes(self) -> bytes:
        return orjson.dumps(self.to_envelope())
