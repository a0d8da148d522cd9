"""Tests for post-commit side effects."""

from unittest.mock import AsyncMock

import pytest

from learnsphere.events import PostCommitHooks


class TestPostCommitHooks:
    """Test ordering and isolation."""

    @pytest.mark.asyncio
    async def test_runs_in_order(self) -> None:
        calls: list[str] = []

        async def first() -> None:
            calls.append("invalidate")

        async def second() -> None:
            calls.append("notify")

        hooks = PostCommitHooks()
        hooks.add("invalidate", first)
        hooks.add("notify", second)

        outcomes = await hooks.run()

        assert calls == ["invalidate", "notify"]
        assert [o.ok for o in outcomes] == [True, True]

    @pytest.mark.asyncio
    async def test_failure_is_isolated(self) -> None:
        """A failing hook does not stop the next one or raise."""
        later = AsyncMock()
        hooks = PostCommitHooks()
        hooks.add("boom", AsyncMock(side_effect=ConnectionError("cache down")))
        hooks.add("later", later)

        outcomes = await hooks.run()

        later.assert_awaited_once()
        assert outcomes[0].ok is False
        assert outcomes[0].error == "cache down"
        assert outcomes[1].ok is True

    @pytest.mark.asyncio
    async def test_run_clears_hooks(self) -> None:
        effect = AsyncMock()
        hooks = PostCommitHooks()
        hooks.add("once", effect)
        assert len(hooks) == 1

        await hooks.run()
        await hooks.run()

        assert len(hooks) == 0
        effect.assert_awaited_once()
