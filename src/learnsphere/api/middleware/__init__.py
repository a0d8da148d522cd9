"""Middleware for the LearnSphere API.

- Correlation context for request tracing
- Website visit counter

Note: For CORS, use FastAPI's built-in CORSMiddleware from starlette.middleware.cors
"""

from learnsphere.api.middleware.access_counter import AccessCounterMiddleware, is_page_visit
from learnsphere.api.middleware.correlation import CorrelationMiddleware

__all__ = [
    "AccessCounterMiddleware",
    "CorrelationMiddleware",
    "is_page_visit",
]
