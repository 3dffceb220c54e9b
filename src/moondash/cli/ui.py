"""Rich rendering of shell state for the terminal."""

from __future__ import annotations

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from moondash.dispatcher import AdminView, CustomerView, DriverView, RoleView
from moondash.models import Rover, User
from moondash.orders import StatusBadge
from moondash.rovers import rover_badge
from moondash.shell import AppShell

console = Console()

BADGE_STYLES: dict[str, str] = {
    "info": "bold blue",
    "pending": "bold yellow",
    "transit": "bold magenta",
    "success": "bold green",
    "danger": "bold red",
    "neutral": "bold white on grey37",
    "active": "bold white on blue",
    "warning": "bold black on yellow",
}


def badge_text(badge: StatusBadge) -> Text:
    return Text(badge.label, style=BADGE_STYLES.get(badge.category, ""))


def render_banner(shell: AppShell) -> None:
    if shell.context.connected:
        console.print(f"[green]✅ {shell.banner}[/green]")
    else:
        console.print(f"[red]❌ {shell.banner}[/red]")


def render_header(user: User) -> None:
    address = user.lunar_address or "-"
    console.print(
        Panel(
            f"[bold]{user.name or user.email}[/bold]\n[dim]{user.role.value.upper()} | {address}[/dim]",
            border_style="cyan",
        )
    )


def render_customer(view: CustomerView) -> None:
    outposts = Table(title="Lunar Outposts", title_style="bold cyan")
    outposts.add_column("Name")
    outposts.add_column("Cuisine", style="cyan")
    outposts.add_column("Menu", style="dim")
    for card in view.outpost_cards:
        outposts.add_row(card.name, card.cuisine, card.image_url)
    if view.outposts:
        console.print(outposts)
    else:
        console.print("No outposts found.")

    if not view.orders:
        console.print("You haven't placed any orders yet.")
        return

    orders = Table(title="My Orders", title_style="bold cyan")
    orders.add_column("Order")
    orders.add_column("Total", justify="right")
    orders.add_column("Rover")
    orders.add_column("Status")
    for card in view.order_cards:
        orders.add_row(f"Order {card.reference}", card.total, card.rover_name, badge_text(card.badge))
    console.print(orders)


def render_rover(rover: Rover) -> None:
    line = Text(f"Rover Control: {rover.name}  ", style="bold cyan")
    line.append_text(badge_text(rover_badge(rover.status)))
    console.print(line)


def render_driver(view: DriverView) -> None:
    if view.rover is None:
        console.print("No rover assigned. Ask an admin to assign you a rover.")
        return

    render_rover(view.rover)
    if not view.deliveries:
        console.print("No deliveries assigned.")
        return

    deliveries = Table(title="My Deliveries", title_style="bold cyan")
    deliveries.add_column("Order")
    deliveries.add_column("To")
    deliveries.add_column("Address", style="dim")
    deliveries.add_column("Status")
    for card in view.delivery_cards:
        deliveries.add_row(card.reference, card.customer_name, card.customer_address, badge_text(card.badge))
    console.print(deliveries)


def render_admin(view: AdminView) -> None:
    if not view.drivers:
        console.print("No drivers available for rover assignment.")
        return

    drivers = Table(title="Available Operators", title_style="bold cyan")
    drivers.add_column("ID")
    drivers.add_column("Name")
    drivers.add_column("Email", style="dim")
    for driver in view.drivers:
        drivers.add_row(str(driver.id), driver.name, driver.email)
    console.print(drivers)
    console.print("[dim]Deploy a rover with: moondash rover deploy --name NAME --operator ID[/dim]")


def render_view(view: RoleView) -> None:
    if isinstance(view, CustomerView):
        render_customer(view)
    elif isinstance(view, DriverView):
        render_driver(view)
    elif isinstance(view, AdminView):
        render_admin(view)
