"""Authentication and login protection."""

from learnsphere.security.lockout import LockoutStatus, LoginAttemptTracker
from learnsphere.security.passwords import hash_password, verify_password
from learnsphere.security.tokens import (
    InvalidTokenError,
    User,
    create_access_token,
    decode_access_token,
)

__all__ = [
    "InvalidTokenError",
    "LockoutStatus",
    "LoginAttemptTracker",
    "User",
    "create_access_token",
    "decode_access_token",
    "hash_password",
    "verify_password",
]
