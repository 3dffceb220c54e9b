"""Configuration commands."""

from __future__ import annotations

import typer

from moondash.config import BACKEND_URL_ENV_VAR, MoonDashConfig

from ..ui import console

app = typer.Typer(help="Client configuration")


@app.command()
def show() -> None:
    """Show the gateway base address in use."""
    config = MoonDashConfig()
    console.print(f"Backend URL:   {config.get_base_url()}")
    console.print(f"Admin console: {config.admin_console_url()}")
    console.print(f"[dim]Override with {BACKEND_URL_ENV_VAR} or 'moondash config set-url'.[/dim]")


@app.command("set-url")
def set_url(url: str = typer.Argument(..., help="Backend base URL")) -> None:
    """Persist the gateway base address in ~/.moondash/config.toml."""
    config = MoonDashConfig()
    config.set_base_url(url)
    console.print(f"✅ Backend URL set to: {config.get_base_url()}")


__all__ = ["app"]
