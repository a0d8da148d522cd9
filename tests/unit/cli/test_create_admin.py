"""Tests for the create-admin command."""

import asyncio
from pathlib import Path

import pytest
from typer.testing import CliRunner

from learnsphere.cli import app
from learnsphere.config import settings
from learnsphere.persistence import UserRepository
from learnsphere.persistence import db as db_module
from learnsphere.persistence.db import close_db, session_context
from learnsphere.security.passwords import verify_password

runner = CliRunner()


@pytest.fixture
def sqlite_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    path = tmp_path / "cli.db"
    monkeypatch.setattr(settings, "database_url", f"sqlite+aiosqlite:///{path}")
    monkeypatch.setattr(db_module, "_engine", None)
    monkeypatch.setattr(db_module, "_session_factory", None)
    return path


async def _load(email: str):
    try:
        async with session_context() as session:
            return await UserRepository(session).get_by_email(email)
    finally:
        await close_db()


class TestCreateAdmin:
    """Test bootstrapping an admin account."""

    def test_creates_admin(self, sqlite_file: Path) -> None:
        result = runner.invoke(
            app, ["create-admin", "root", "Root@Example.com", "--password", "s3cret!"]
        )

        assert result.exit_code == 0, result.output
        assert "Created admin" in result.output
        user = asyncio.run(_load("root@example.com"))
        assert user.role == "admin"
        assert verify_password("s3cret!", user.password_hash)

    def test_existing_email_fails(self, sqlite_file: Path) -> None:
        args = ["create-admin", "root", "root@example.com", "--password", "s3cret!"]
        assert runner.invoke(app, args).exit_code == 0

        result = runner.invoke(app, args)

        assert result.exit_code == 1
        assert "already exists" in result.output

    def test_short_password_rejected(self, sqlite_file: Path) -> None:
        result = runner.invoke(app, ["create-admin", "root", "r@example.com", "--password", "abc"])

        assert result.exit_code == 1
        assert not sqlite_file.exists()
