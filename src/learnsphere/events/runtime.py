"""Process-wide slot for the notification fanout.

Handlers receive the fanout explicitly; this slot only exists so the
application lifespan can install one and request dependencies can find
it. Until it is installed, publishing is a logged no-op.
"""

from __future__ import annotations

import logging

from learnsphere.events.fanout import NotificationFanout
from learnsphere.events.schemas import NotificationEvent

logger = logging.getLogger(__name__)

_fanout: NotificationFanout | None = None


def set_fanout(fanout: NotificationFanout | None) -> None:
    """Install (or clear, with None) the process fanout."""
    global _fanout
    _fanout = fanout


def get_fanout() -> NotificationFanout | None:
    """Get the installed fanout, or None before startup."""
    return _fanout


async def publish_notification(
    event: NotificationEvent, fanout: NotificationFanout | None
) -> int:
    """Publish without ever raising.

    Returns the number of deliveries, 0 if the fanout is missing or failed.
    """
    if fanout is None:
        logger.warning(
            f"Notification transport not initialized, dropping {event.type.value} "
            f"for {event.topic.name}"
        )
        return 0
    try:
        return await fanout.publish(event)
    except Exception:
        logger.exception(f"Error publishing {event.type.value} to {event.topic.name}")
        return 0
