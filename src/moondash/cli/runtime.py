"""Helpers that run one shell session per CLI invocation."""

from __future__ import annotations

import asyncio
import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable, TypeVar

import typer

from moondash.config import MoonDashConfig
from moondash.errors import MoonDashError
from moondash.gateway import HttpGateway
from moondash.shell import AppShell

from .ui import console, render_banner

logger = logging.getLogger(__name__)

T = TypeVar("T")


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_gateway(config: MoonDashConfig) -> HttpGateway:
    return HttpGateway(config.get_base_url())


@asynccontextmanager
async def started_shell() -> AsyncIterator[AppShell]:
    """Start a shell (probe, restore, load) and close the gateway afterwards."""
    config = MoonDashConfig()
    gateway = build_gateway(config)
    try:
        shell = AppShell(gateway, config)
        await shell.start()
        yield shell
    finally:
        await gateway.aclose()


def run(main: Callable[[], Awaitable[T]]) -> T:
    """Run a command body; any client error becomes a red message and exit code 1."""
    try:
        return asyncio.run(main())
    except MoonDashError as e:
        logger.debug("Command failed", exc_info=True)
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


def require_connected(shell: AppShell) -> None:
    if not shell.context.connected:
        render_banner(shell)
        console.print("   Cannot reach the lunar network. Check the backend URL and reload.")
        raise typer.Exit(1)


def require_authenticated(shell: AppShell) -> None:
    require_connected(shell)
    if not shell.context.authenticated:
        console.print("❌ Not logged in")
        console.print("   Run 'moondash login' to authenticate.")
        raise typer.Exit(1)
