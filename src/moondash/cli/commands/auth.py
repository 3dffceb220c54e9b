"""Session commands: status, login, signup, logout."""

from __future__ import annotations

from typing import Optional

import typer

from ..runtime import require_connected, run, started_shell
from ..ui import console, render_banner


def status() -> None:
    """Show connectivity and the current session."""

    async def _status() -> bool:
        async with started_shell() as shell:
            render_banner(shell)
            if not shell.context.connected:
                return False

            user = shell.context.user
            if user is None:
                console.print("❌ Not logged in")
                console.print("   Run 'moondash login' to authenticate.")
            else:
                console.print("✅ Authenticated")
                console.print(f"   Name:  {user.name}")
                console.print(f"   Email: {user.email}")
                console.print(f"   Role:  {user.role.value}")
            console.print(f"   Admin console: {shell.admin_console_url}")
            return True

    if not run(_status):
        raise typer.Exit(1)


def login(
    email: Optional[str] = typer.Option(None, "--email", "-e", help="Account email"),
    password: Optional[str] = typer.Option(None, "--password", "-p", hide_input=True, help="Account password"),
    force: bool = typer.Option(False, "--force", "-f", help="Re-authenticate even if already logged in"),
) -> None:
    """Log in to the lunar network."""
    if not email:
        email = typer.prompt("Email")
    if not password:
        password = typer.prompt("Password", hide_input=True)

    async def _login() -> bool:
        async with started_shell() as shell:
            require_connected(shell)
            if shell.context.authenticated and not force:
                console.print("✅ Already authenticated.")
                console.print("Use --force to re-authenticate or 'moondash logout' first.")
                return True

            if not await shell.login(email, password):
                console.print(f"❌ {shell.form_error}")
                return False

            console.print("✅ Login successful!")
            console.print(f"   Logged in as: {shell.context.user.email}")
            return True

    if not run(_login):
        raise typer.Exit(1)


def signup(
    email: str = typer.Option(..., "--email", "-e", prompt=True, help="Account email"),
    password: str = typer.Option(
        ..., "--password", "-p", prompt=True, hide_input=True, confirmation_prompt=True, help="Account password"
    ),
    name: str = typer.Option(..., "--name", "-n", prompt="Callsign (name)", help="Display name"),
    address: str = typer.Option(..., "--address", "-a", prompt="Lunar address", help="Delivery address"),
) -> None:
    """Create a customer account and log in."""

    async def _signup() -> bool:
        async with started_shell() as shell:
            require_connected(shell)
            if not await shell.signup(email, password, name, address):
                console.print(f"❌ {shell.form_error}")
                return False

            console.print("✅ Welcome aboard!")
            console.print(f"   Logged in as: {shell.context.user.email}")
            return True

    if not run(_signup):
        raise typer.Exit(1)


def logout() -> None:
    """Log out and clear the stored session."""

    async def _logout() -> None:
        async with started_shell() as shell:
            was_logged_in = shell.context.user is not None
            # Always clear, a stale token may be left over from an expired session.
            await shell.logout()
            if was_logged_in:
                console.print("✅ Logged out successfully.")
            else:
                console.print("ℹ️  No active session. Already logged out.")

    run(_logout)


__all__ = ["status", "login", "signup", "logout"]
