"""Dashboard command: render the role view for the logged-in user."""

from __future__ import annotations

import typer

from ..runtime import require_authenticated, run, started_shell
from ..ui import console, render_banner, render_header, render_view


def dashboard() -> None:
    """Show outposts and orders, rover and deliveries, or the operator roster."""

    async def _dashboard() -> None:
        async with started_shell() as shell:
            require_authenticated(shell)
            render_banner(shell)
            render_header(shell.context.user)

            if shell.dispatcher.last_error is not None:
                console.print(f"[yellow]⚠️  Failed to load data: {shell.dispatcher.last_error}[/yellow]")
            if shell.view is not None:
                render_view(shell.view)
            console.print(f"[dim]Admin console: {shell.admin_console_url}[/dim]")

    run(_dashboard)


__all__ = ["dashboard"]
