"""Read-only order projections for customers and drivers.

The client never writes ``Order.status``; it only maps whatever the backend
reports onto a display badge.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from .models import Order, OrderStatus, Outpost

DEFAULT_CATEGORY = "default"
PLACEHOLDER_IMAGE_URL = "https://via.placeholder.com/400x200"
UNASSIGNED = "unassigned"
UNKNOWN_CUSTOMER = "Unknown customer"
UNKNOWN_ADDRESS = "No address on file"

ORDER_STATUS_CATEGORIES: dict[str, str] = {
    OrderStatus.PLACED: "info",
    OrderStatus.PREPARING: "pending",
    OrderStatus.IN_TRANSIT: "transit",
    OrderStatus.DELIVERED: "success",
    OrderStatus.CANCELLED: "danger",
}


@dataclass(frozen=True)
class StatusBadge:
    label: str
    category: str

    @property
    def styled(self) -> bool:
        return self.category != DEFAULT_CATEGORY


def order_badge(status: str | None) -> StatusBadge:
    """Badge for an order status. Unknown values get the unstyled default."""
    value = (status or "").strip()
    category = ORDER_STATUS_CATEGORIES.get(value, DEFAULT_CATEGORY)
    return StatusBadge(label=value.upper() or "UNKNOWN", category=category)


def short_reference(record_id: object) -> str:
    return f"#{str(record_id)[:8]}"


def format_price(amount: float | None) -> str:
    if amount is None:
        return "-"
    return f"${amount:,.2f}"


@dataclass(frozen=True)
class OrderCard:
    """An order as seen by the customer who placed it."""

    reference: str
    total: str
    badge: StatusBadge
    rover_name: str


@dataclass(frozen=True)
class DeliveryCard:
    """An order as seen by the driver delivering it."""

    reference: str
    customer_name: str
    customer_address: str
    badge: StatusBadge


@dataclass(frozen=True)
class OutpostCard:
    name: str
    cuisine: str
    image_url: str


def customer_order_cards(orders: Iterable[Order]) -> list[OrderCard]:
    return [
        OrderCard(
            reference=short_reference(order.id),
            total=format_price(order.total_price),
            badge=order_badge(order.status),
            rover_name=order.rover.name if order.rover is not None and order.rover.name else UNASSIGNED,
        )
        for order in orders
    ]


def delivery_cards(orders: Iterable[Order]) -> list[DeliveryCard]:
    cards = []
    for order in orders:
        customer = order.customer
        cards.append(
            DeliveryCard(
                reference=short_reference(order.id),
                customer_name=(customer.name if customer and customer.name else UNKNOWN_CUSTOMER),
                customer_address=(
                    customer.lunar_address if customer and customer.lunar_address else UNKNOWN_ADDRESS
                ),
                badge=order_badge(order.status),
            )
        )
    return cards


def outpost_cards(outposts: Iterable[Outpost]) -> list[OutpostCard]:
    return [
        OutpostCard(
            name=outpost.name,
            cuisine=outpost.cuisine or "",
            image_url=outpost.image_url or PLACEHOLDER_IMAGE_URL,
        )
        for outpost in outposts
    ]
