"""CLI command for creating an admin account.

The HTTP sign-up only creates admins for callers that already hold an admin
token, so the first admin of a fresh install is created here.

Usage:
    learnsphere create-admin root root@example.com
    learnsphere create-admin root root@example.com --password s3cret!
"""

from __future__ import annotations

import asyncio

import typer


async def _create_admin(username: str, email: str, password: str) -> str:
    from learnsphere.persistence import UserRepository, UserRole
    from learnsphere.persistence.db import close_db, init_db, session_context
    from learnsphere.security.passwords import hash_password

    await init_db()
    try:
        async with session_context() as session:
            users = UserRepository(session)
            if await users.get_by_email(email) is not None:
                raise ValueError(f"User {email} already exists")
            user = await users.create(
                username, email, hash_password(password), UserRole.ADMIN.value
            )
            return user.id
    finally:
        await close_db()


def create_admin(
    username: str = typer.Argument(..., help="Display name"),
    email: str = typer.Argument(..., help="Login email"),
    password: str = typer.Option(
        ..., "--password", prompt=True, hide_input=True, confirmation_prompt=True
    ),
) -> None:
    """Create an admin account directly in the database."""
    if len(password) < 6:
        typer.echo("Error: password must be at least 6 characters", err=True)
        raise typer.Exit(1)

    try:
        user_id = asyncio.run(_create_admin(username, email, password))
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from e

    typer.echo(f"Created admin {email} ({user_id})")
