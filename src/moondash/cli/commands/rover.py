"""Rover commands for drivers and admins."""

from __future__ import annotations

import typer

from moondash.dispatcher import DriverView
from moondash.errors import ValidationError
from moondash.models import Role
from moondash.rovers import ROVER_STATUSES, validate_rover_status

from ..runtime import require_authenticated, run, started_shell
from ..ui import console, render_rover

app = typer.Typer(help="Rover control commands")


def _parse_operator_id(value: str) -> int | str:
    value = value.strip()
    return int(value) if value.isdigit() else value


@app.command("status")
def set_status(
    new_status: str = typer.Argument(..., help=f"One of: {', '.join(ROVER_STATUSES)}"),
) -> None:
    """Set the status of your rover (drivers)."""
    try:
        validate_rover_status(new_status)
    except ValidationError as exc:
        console.print(f"❌ {exc}")
        raise typer.Exit(1)

    async def _set_status() -> bool:
        async with started_shell() as shell:
            require_authenticated(shell)
            if shell.context.user.role != Role.DRIVER:
                console.print("❌ Only drivers can change a rover's status.")
                return False
            view = shell.view
            if not isinstance(view, DriverView):
                console.print(f"❌ Failed to load your rover: {shell.dispatcher.last_error}")
                return False
            if not view.assigned:
                console.print("❌ No rover assigned.")
                return False

            if not await shell.set_rover_status(new_status):
                console.print(f"❌ {shell.action_error}")
                return False

            render_rover(shell.view.rover)
            return True

    if not run(_set_status):
        raise typer.Exit(1)


@app.command()
def deploy(
    name: str = typer.Option("", "--name", "-n", help="Rover name, e.g. Rover-01"),
    operator: str = typer.Option("", "--operator", "-o", help="ID of the driver operating the rover"),
) -> None:
    """Deploy a new rover bound to a driver (admins)."""

    async def _deploy() -> bool:
        async with started_shell() as shell:
            require_authenticated(shell)
            if shell.context.user.role != Role.ADMIN:
                console.print("❌ Only admins can deploy rovers.")
                return False

            shell.rover_form.name = name
            shell.rover_form.operator_id = _parse_operator_id(operator) if operator.strip() else None
            if not await shell.deploy_rover():
                console.print(f"❌ {shell.action_error}")
                return False

            console.print(f"✅ Rover '{name}' deployed.")
            console.print("   Run 'moondash dashboard' to refresh.")
            return True

    if not run(_deploy):
        raise typer.Exit(1)


__all__ = ["app"]
