"""CLI commands for LearnSphere.

Provides command-line interface using Typer:
- learnsphere serve: Run the API server
- learnsphere create-admin: Create an admin account

Usage:
    learnsphere --help
    learnsphere serve --port 5000
"""

import typer

from learnsphere.cli.admin_cmd import create_admin
from learnsphere.cli.serve import app as serve_app

app = typer.Typer(
    name="learnsphere",
    help="LearnSphere: course content platform",
    no_args_is_help=True,
)

app.add_typer(serve_app, name="serve")
app.command("create-admin")(create_admin)


@app.callback()
def callback() -> None:
    """LearnSphere: course content platform."""
    pass


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
