"""Role-based data loading.

``RoleDispatcher.load_for_role`` picks exactly one loading strategy from the
user's role and returns a tagged view carrying only that role's data:

- customer: outposts, plus the customer's orders with ``rover`` attached
- driver: the driver's rover (first match wins), plus its orders with
  ``customer`` attached; no order query when the driver has no rover
- admin: users with role ``driver`` (candidate rover operators)

A view is committed only when every query of the cycle succeeded, so a
failure never leaves a half-loaded view behind.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from typing import Literal, Optional, Union

from .errors import MoonDashError
from .gateway.base import DataGateway
from .models import (
    ORDERS,
    OUTPOSTS,
    ROVERS,
    USERS,
    Order,
    Outpost,
    Role,
    Rover,
    User,
    parse_records,
)
from .orders import (
    DeliveryCard,
    OrderCard,
    OutpostCard,
    customer_order_cards,
    delivery_cards,
    outpost_cards,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CustomerView:
    outposts: tuple[Outpost, ...] = ()
    orders: tuple[Order, ...] = ()
    role: Literal[Role.CUSTOMER] = Role.CUSTOMER

    @property
    def outpost_cards(self) -> list[OutpostCard]:
        return outpost_cards(self.outposts)

    @property
    def order_cards(self) -> list[OrderCard]:
        return customer_order_cards(self.orders)


@dataclass(frozen=True)
class DriverView:
    rover: Optional[Rover] = None
    deliveries: tuple[Order, ...] = ()
    role: Literal[Role.DRIVER] = Role.DRIVER

    @property
    def assigned(self) -> bool:
        return self.rover is not None

    @property
    def delivery_cards(self) -> list[DeliveryCard]:
        return delivery_cards(self.deliveries)

    def with_rover(self, rover: Rover) -> DriverView:
        """Copy of this view with the rover overwritten by ``rover``."""
        return dataclasses.replace(self, rover=rover)


@dataclass(frozen=True)
class AdminView:
    drivers: tuple[User, ...] = ()
    role: Literal[Role.ADMIN] = Role.ADMIN


RoleView = Union[CustomerView, DriverView, AdminView]


class RoleDispatcher:
    """Loads the role-specific view for an authenticated user.

    Attributes:
        view: Last successfully committed view (None before the first load).
        loading: True while a load cycle is running.
        last_error: Failure of the most recent cycle, or None if it succeeded.
    """

    def __init__(self, gateway: DataGateway):
        self.gateway = gateway
        self.view: Optional[RoleView] = None
        self.loading = False
        self.last_error: Optional[MoonDashError] = None

    async def load_for_role(self, user: User) -> Optional[RoleView]:
        """Run one load cycle for ``user`` and return the committed view.

        Query failures are logged and recorded in ``last_error``; the
        previously committed view is returned unchanged.
        """
        self.loading = True
        try:
            view = await self._load(user)
        except MoonDashError as exc:
            logger.warning(f"Failed to load data for {user.role} {user.id}: {exc}")
            self.last_error = exc
        else:
            self.view = view
            self.last_error = None
        finally:
            self.loading = False
        return self.view

    def patch_rover(self, rover: Rover) -> None:
        """Overwrite the driver's rover in the committed view."""
        if isinstance(self.view, DriverView):
            self.view = self.view.with_rover(rover)

    def reset(self) -> None:
        """Drop the committed view (used on logout)."""
        self.view = None
        self.last_error = None

    async def _load(self, user: User) -> RoleView:
        if user.role == Role.CUSTOMER:
            return await self._load_customer(user)
        elif user.role == Role.DRIVER:
            return await self._load_driver(user)
        elif user.role == Role.ADMIN:
            return await self._load_admin()
        raise ValueError(f"Unsupported role: {user.role}")

    async def _load_customer(self, user: User) -> CustomerView:
        outposts = parse_records(Outpost, await self.gateway.find(OUTPOSTS))
        orders = parse_records(
            Order,
            await self.gateway.find(ORDERS, filter={"customerId": user.id}, relations=["rover"]),
        )
        return CustomerView(outposts=outposts, orders=orders)

    async def _load_driver(self, user: User) -> DriverView:
        rovers = parse_records(
            Rover, await self.gateway.find(ROVERS, filter={"operatorId": user.id}, limit=1)
        )
        if not rovers:
            logger.info(f"Driver {user.id} has no rover assigned")
            return DriverView()

        if len(rovers) > 1:
            logger.warning(f"Driver {user.id} has {len(rovers)} rovers; using the first")
        rover = rovers[0]
        deliveries = parse_records(
            Order,
            await self.gateway.find(ORDERS, filter={"roverId": rover.id}, relations=["customer"]),
        )
        return DriverView(rover=rover, deliveries=deliveries)

    async def _load_admin(self) -> AdminView:
        drivers = parse_records(
            User, await self.gateway.find(USERS, filter={"role": Role.DRIVER.value})
        )
        return AdminView(drivers=drivers)
