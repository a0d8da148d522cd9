"""Request handlers behind the HTTP routes."""

from learnsphere.services.admin import AdminService
from learnsphere.services.analytics import AnalyticsService
from learnsphere.services.auth import AuthService
from learnsphere.services.content import ContentService
from learnsphere.services.search import SearchService, SearchType

__all__ = [
    "AdminService",
    "AnalyticsService",
    "AuthService",
    "ContentService",
    "SearchService",
    "SearchType",
]
