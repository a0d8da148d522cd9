"""Real-time notifications for LearnSphere.

- NotificationFanout: topic join/leave and best-effort push
- NotificationEvent / Topic: typed events addressed to ``<kind>_<id>``
- PostCommitHooks: isolated side effects after a database write
- runtime slot: publishing is a no-op until the transport is installed
"""

from learnsphere.events.fanout import Connection, NotificationFanout, Subscriber
from learnsphere.events.hooks import HookOutcome, PostCommitHooks
from learnsphere.events.publisher import (
    admin_message_event,
    new_content_event,
    new_subject_event,
    progress_update_event,
)
from learnsphere.events.runtime import get_fanout, publish_notification, set_fanout
from learnsphere.events.schemas import (
    NotificationEvent,
    NotificationType,
    Topic,
    TopicKind,
    topic_name,
)

__all__ = [
    # Schemas
    "NotificationEvent",
    "NotificationType",
    "Topic",
    "TopicKind",
    "topic_name",
    # Fanout
    "Connection",
    "NotificationFanout",
    "Subscriber",
    "get_fanout",
    "set_fanout",
    "publish_notification",
    # Publishers
    "new_content_event",
    "new_subject_event",
    "progress_update_event",
    "admin_message_event",
    # Hooks
    "HookOutcome",
    "PostCommitHooks",
]
