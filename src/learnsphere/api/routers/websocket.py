"""WebSocket transport for notifications.

Clients connect to ``/ws`` and manage topic membership with JSON frames:

    {"event": "join_subject", "data": "<subjectId>"}
    {"event": "leave_branch", "data": "<branchId>"}

Supported events are ``join_``/``leave_`` + ``subject``/``branch``/
``admin``. Each is acknowledged with ``{"event": "joined"|"left",
"data": {"topic": "<kind>_<id>"}}``. The text frame ``ping`` is answered
with ``pong``; binary frames get an ``error`` reply. Notifications are
pushed as

    {"event": "<type>", "data": {"message": ..., ..., "timestamp": ...}}

Closing the socket drops every subscription it held.
"""

from __future__ import annotations

import logging
from typing import Any

import orjson
from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status

from learnsphere.events import NotificationFanout, Subscriber, Topic, TopicKind, get_fanout
from learnsphere.observability import LogContext

logger = logging.getLogger(__name__)

router = APIRouter(tags=["WebSocket"])

_ACTIONS = ("join", "leave")


def parse_command(message: str) -> tuple[str, Topic]:
    """Parse a membership frame into (action, topic).

    Raises:
        ValueError: If the frame is not a known membership command
    """
    try:
        frame: Any = orjson.loads(message)
    except orjson.JSONDecodeError as e:
        raise ValueError("Message is not valid JSON") from e
    if not isinstance(frame, dict):
        raise ValueError("Message must be a JSON object")

    action, _, kind = str(frame.get("event", "")).partition("_")
    if action not in _ACTIONS:
        raise ValueError(f"Unknown event: {frame.get('event')}")
    try:
        topic_kind = TopicKind(kind)
    except ValueError as e:
        raise ValueError(f"Unknown event: {frame.get('event')}") from e

    topic_id = frame.get("data")
    if isinstance(topic_id, dict):
        topic_id = topic_id.get("id")
    if not isinstance(topic_id, str) or not topic_id:
        raise ValueError("Event data must be a non-empty id")
    return action, Topic(topic_kind, topic_id)


async def _reply(websocket: WebSocket, event: str, data: dict[str, Any]) -> None:
    await websocket.send_bytes(orjson.dumps({"event": event, "data": data}))


async def handle_message(
    websocket: WebSocket, fanout: NotificationFanout, subscriber: Subscriber, message: str
) -> None:
    if message == "ping":
        await websocket.send_text("pong")
        return

    try:
        action, topic = parse_command(message)
    except ValueError as e:
        await _reply(websocket, "error", {"message": str(e)})
        return

    if action == "join":
        fanout.join(subscriber, topic)
        await _reply(websocket, "joined", {"topic": topic.name})
    else:
        fanout.leave(subscriber, topic)
        await _reply(websocket, "left", {"topic": topic.name})


@router.websocket("/ws")
async def notifications(websocket: WebSocket) -> None:
    """Notification stream with client-managed topic membership."""
    fanout = get_fanout()
    if fanout is None:
        await websocket.close(code=status.WS_1013_TRY_AGAIN_LATER)
        return

    await websocket.accept()
    subscriber = Subscriber(connection=websocket)
    fanout.connect(subscriber)
    try:
        with LogContext(request_id=subscriber.connection_id):
            while True:
                frame = await websocket.receive()
                if frame["type"] == "websocket.disconnect":
                    break
                text = frame.get("text")
                if text is None:
                    await _reply(websocket, "error", {"message": "Only text frames are accepted"})
                    continue
                await handle_message(websocket, fanout, subscriber, text)
    except WebSocketDisconnect:
        # Client went away while a reply was being sent
        pass
    finally:
        fanout.disconnect(subscriber)
