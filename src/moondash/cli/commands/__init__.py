"""CLI command modules for moondash."""

from __future__ import annotations

import typer

from . import auth, config_cmd, rover
from .dashboard import dashboard


def register_commands(app: typer.Typer) -> None:
    """Attach all commands and command groups to the root app."""
    for command in (auth.status, auth.login, auth.signup, auth.logout, dashboard):
        app.command()(command)
    app.add_typer(rover.app, name="rover")
    app.add_typer(config_cmd.app, name="config")


__all__ = ["register_commands"]
