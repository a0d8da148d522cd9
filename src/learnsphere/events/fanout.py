"""In-process notification fanout over topic-scoped subscriber groups.

Delivery is at-most-once and best-effort: an event reaches exactly the
subscribers joined to its topic when publish runs, with no retry and no
queueing for anyone who is offline. The topic map is only mutated from
the event loop, so it is not locked; publish snapshots the recipients
before awaiting any send.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Protocol
from uuid import uuid4

from learnsphere.events.schemas import NotificationEvent, Topic

logger = logging.getLogger(__name__)


class Connection(Protocol):
    """Anything that can receive a pushed frame (e.g. a WebSocket)."""

    async def send_bytes(self, data: bytes) -> None: ...


@dataclass(eq=False)
class Subscriber:
    """A live connection, hashed by identity."""

    connection: Connection
    connection_id: str = field(default_factory=lambda: uuid4().hex[:12])


class NotificationFanout:
    """Tracks which subscribers joined which topics and pushes events."""

    def __init__(self) -> None:
        self._topics: dict[str, set[Subscriber]] = {}
        self._memberships: dict[Subscriber, set[str]] = {}

    def connect(self, subscriber: Subscriber) -> None:
        """Register a connection with no topics."""
        self._memberships.setdefault(subscriber, set())
        logger.info(
            f"Connection {subscriber.connection_id} registered (total: {self.connection_count})"
        )

    def disconnect(self, subscriber: Subscriber) -> None:
        """Drop a connection and every topic it joined."""
        for name in self._memberships.pop(subscriber, set()):
            self._discard(name, subscriber)
        logger.info(
            f"Connection {subscriber.connection_id} removed (remaining: {self.connection_count})"
        )

    def join(self, subscriber: Subscriber, topic: Topic) -> bool:
        """Subscribe to a topic. Returns False if already joined."""
        topics = self._memberships.setdefault(subscriber, set())
        if topic.name in topics:
            return False
        topics.add(topic.name)
        self._topics.setdefault(topic.name, set()).add(subscriber)
        logger.debug(f"Connection {subscriber.connection_id} joined {topic.name}")
        return True

    def leave(self, subscriber: Subscriber, topic: Topic) -> bool:
        """Unsubscribe from a topic. Leaving an unjoined topic is a no-op."""
        topics = self._memberships.get(subscriber)
        if not topics or topic.name not in topics:
            return False
        topics.discard(topic.name)
        self._discard(topic.name, subscriber)
        logger.debug(f"Connection {subscriber.connection_id} left {topic.name}")
        return True

    def _discard(self, name: str, subscriber: Subscriber) -> None:
        members = self._topics.get(name)
        if members is None:
            return
        members.discard(subscriber)
        if not members:
            del self._topics[name]

    async def publish(self, event: NotificationEvent) -> int:
        """Push an event to the topic's current subscribers.

        Returns the number of successful sends.
        """
        recipients = list(self._topics.get(event.topic.name, ()))
        if not recipients:
            logger.debug(f"No subscribers for {event.topic.name}, dropping {event.type.value}")
            return 0

        frame = event.to_bytes()
        delivered = 0
        for subscriber in recipients:
            try:
                await subscriber.connection.send_bytes(frame)
                delivered += 1
            except Exception as e:
                logger.debug(f"Failed to push to connection {subscriber.connection_id}: {e}")

        logger.info(
            f"Notified {event.topic.name} about {event.type.value} "
            f"({delivered}/{len(recipients)} delivered)"
        )
        return delivered

    def topics_of(self, subscriber: Subscriber) -> frozenset[str]:
        return frozenset(self._memberships.get(subscriber, ()))

    def subscriber_count(self, topic: Topic) -> int:
        return len(self._topics.get(topic.name, ()))

    @property
    def connection_count(self) -> int:
        return len(self._memberships)
