"""MoonDash terminal front end."""

from __future__ import annotations

import typer

from .commands import register_commands
from .runtime import configure_logging

app = typer.Typer(
    name="moondash",
    help="MoonDash: cosmic cravings, delivered at light speed.",
    add_completion=False,
    no_args_is_help=True,
)


@app.callback()
def callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging on stderr"),
) -> None:
    configure_logging(verbose)


register_commands(app)


def main() -> None:
    app()


__all__ = ["app", "main"]
