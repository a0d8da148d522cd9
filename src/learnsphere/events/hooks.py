"""Best-effort side effects that run after a write commits.

A write handler queues cache invalidations and notifications, commits its
database change, then runs the hooks in order. Each hook is isolated: a
failure is logged and the next hook still runs. Nothing here can roll back
the write or change the response.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

logger = logging.getLogger(__name__)

SideEffect = Callable[[], Awaitable[object]]


@dataclass(frozen=True)
class HookOutcome:
    """Result of one side effect."""

    name: str
    ok: bool
    error: str | None = None


class PostCommitHooks:
    """Ordered list of named side effects."""

    def __init__(self) -> None:
        self._hooks: list[tuple[str, SideEffect]] = []

    def add(self, name: str, effect: SideEffect) -> None:
        self._hooks.append((name, effect))

    def __len__(self) -> int:
        return len(self._hooks)

    async def run(self) -> list[HookOutcome]:
        """Run every hook once, in insertion order, then clear the list."""
        outcomes: list[HookOutcome] = []
        hooks, self._hooks = self._hooks, []
        for name, effect in hooks:
            try:
                await effect()
                outcomes.append(HookOutcome(name=name, ok=True))
            except Exception as e:
                logger.exception(f"Post-commit hook '{name}' failed")
                outcomes.append(HookOutcome(name=name, ok=False, error=str(e)))
        return outcomes
