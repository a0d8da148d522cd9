"""Website visit counter.

Increments ``website_access_count`` once per browser page view. API
calls, the WebSocket endpoint and static assets are not counted. Redis
being unavailable never affects the request.
"""

from __future__ import annotations

import logging

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from learnsphere.cache import CacheClient, CacheKeys, CacheUnavailableError, get_redis

logger = logging.getLogger(__name__)

_STATIC_SUFFIXES = (
    ".js", ".css", ".map", ".png", ".jpg", ".jpeg", ".gif", ".svg", ".ico",
    ".woff", ".woff2", ".ttf", ".json", ".txt",
)
_SKIPPED_PREFIXES = ("/api", "/ws", "/docs", "/openapi", "/redoc")


def is_page_visit(request: Request) -> bool:
    """True for a browser GET of an HTML page."""
    if request.method != "GET":
        return False
    path = request.url.path
    if path.startswith(_SKIPPED_PREFIXES):
        return False
    if path.lower().endswith(_STATIC_SUFFIXES):
        return False
    return "text/html" in request.headers.get("accept", "")


class AccessCounterMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if is_page_visit(request):
            try:
                client = CacheClient(await get_redis())
                await client.incr(CacheKeys.access_count())
            except CacheUnavailableError as e:
                logger.debug(f"Visit not counted: {e}")
        return await call_next(request)
