"""Persistence layer for LearnSphere.

SQLAlchemy 2.0 async ORM with a repository per entity.
"""

from learnsphere.persistence.db import close_db, get_session, init_db, session_context
from learnsphere.persistence.repositories import (
    BranchRepository,
    ContentRepository,
    SubjectRepository,
    UserRepository,
)
from learnsphere.persistence.tables import (
    Base,
    BranchTable,
    ContentCategory,
    ContentTable,
    SubjectTable,
    UserRole,
    UserTable,
)

__all__ = [
    "Base",
    "BranchTable",
    "SubjectTable",
    "ContentTable",
    "UserTable",
    "ContentCategory",
    "UserRole",
    "BranchRepository",
    "SubjectRepository",
    "ContentRepository",
    "UserRepository",
    "get_session",
    "session_context",
    "init_db",
    "close_db",
]
