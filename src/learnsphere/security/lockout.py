"""Failed-login lockout backed by the cache.

One counter per identity (lower-cased email) under ``login_fail:<email>``.
The first failure opens a window of ``lockout_seconds``; reaching
``max_attempts`` within the window refreshes the TTL to a full window and
locks the identity until the key expires or a successful login deletes it.

Every cache failure fails open: the check allows, tracking reports
"not locked", and a failed reset is only logged.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from learnsphere.cache.keys import CacheKeys
from learnsphere.cache.redis import CacheClient, CacheUnavailableError

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 1
DEFAULT_LOCKOUT_SECONDS = 30 * 60


@dataclass(frozen=True)
class LockoutStatus:
    """Result of a lockout check."""

    allowed: bool
    retry_after_seconds: int = 0

    @property
    def retry_after_minutes(self) -> int:
        """Remaining lockout rounded up to whole minutes."""
        return -(-self.retry_after_seconds // 60)


ALLOW = LockoutStatus(allowed=True)


class LoginAttemptTracker:
    """Counts failed logins per identity and enforces the lockout window."""

    def __init__(
        self,
        cache: CacheClient,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        lockout_seconds: int = DEFAULT_LOCKOUT_SECONDS,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if lockout_seconds < 1:
            raise ValueError("lockout_seconds must be positive")
        self.cache = cache
        self.max_attempts = max_attempts
        self.lockout_seconds = lockout_seconds

    async def check_lockout(self, identity: str) -> LockoutStatus:
        """Authoritative lockout status for an identity.

        Denies while the counter is at or over the threshold and its key
        still has time to live.
        """
        key = CacheKeys.login_failures(identity)
        try:
            raw_attempts = await self.cache.get(key)
            if raw_attempts is None:
                return ALLOW
            ttl = await self.cache.ttl(key)
        except CacheUnavailableError as e:
            logger.warning(f"Skipping lockout check, cache unavailable: {e}")
            return ALLOW

        if int(raw_attempts) >= self.max_attempts and ttl > 0:
            return LockoutStatus(allowed=False, retry_after_seconds=ttl)
        return ALLOW

    async def track_failed_login(self, identity: str) -> bool:
        """Record a failed attempt.

        Returns True only for the attempt that reaches the threshold.
        Later attempts return False even though the identity is locked;
        use check_lockout for the real status.
        """
        key = CacheKeys.login_failures(identity)
        try:
            attempts = await self.cache.incr(key)
            if attempts == 1:
                await self.cache.expire(key, self.lockout_seconds)

            if attempts >= self.max_attempts:
                await self.cache.expire(key, self.lockout_seconds)
                if attempts == self.max_attempts:
                    logger.warning(
                        f"Login locked for {self.lockout_seconds}s after {attempts} failures",
                        extra={"lockout_key": key},
                    )
                    return True
            return False
        except CacheUnavailableError as e:
            logger.error(f"Failed to track login failure: {e}")
            return False

    async def reset_login_attempts(self, identity: str) -> None:
        """Clear the counter after a successful login."""
        key = CacheKeys.login_failures(identity)
        try:
            await self.cache.delete(key)
        except CacheUnavailableError as e:
            logger.error(f"Failed to reset login attempts: {e}")
