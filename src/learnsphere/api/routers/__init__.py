"""API routers for LearnSphere."""

from learnsphere.api.routers import admin, auth, content, health, search, websocket

__all__ = ["admin", "auth", "content", "health", "search", "websocket"]
