"""Domain records for the lunar delivery marketplace.

Records arrive from the gateway as camelCase JSON objects. The models expose
snake_case attributes, accept either spelling, and ignore unknown fields.
Relations (``Order.rover``, ``Order.customer``, ``Outpost.menu_image``) are
optional everywhere: the backend owns referential integrity and the client
renders whatever it receives.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any, Iterable, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from .errors import QueryFailure

RecordId = Union[int, str]


class Role(StrEnum):
    """User roles. Only ``customer`` can be created from this client."""

    CUSTOMER = "customer"
    DRIVER = "driver"
    ADMIN = "admin"


class RoverStatus(StrEnum):
    IDLE = "idle"
    DELIVERING = "delivering"
    CHARGING = "charging"


class OrderStatus(StrEnum):
    """Order lifecycle states, advanced by the backend only."""

    PLACED = "placed"
    PREPARING = "preparing"
    IN_TRANSIT = "in_transit"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


# Collection slugs on the gateway
USERS = "user"
OUTPOSTS = "lunarOutpost"
ROVERS = "lunarRover"
ORDERS = "order"


class _Record(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class User(_Record):
    id: RecordId
    email: str
    name: str = ""
    role: Role
    lunar_address: str | None = Field(None, alias="lunarAddress")


class ImageRef(_Record):
    url: str | None = None


class Outpost(_Record):
    id: RecordId
    name: str
    cuisine: str | None = None
    menu_image: ImageRef | None = Field(None, alias="menuImage")

    @property
    def image_url(self) -> str | None:
        if self.menu_image is None:
            return None
        return self.menu_image.url


class Rover(_Record):
    id: RecordId
    name: str
    # Kept as a plain string so an unexpected value from the backend still renders.
    status: str = RoverStatus.IDLE.value
    operator_id: RecordId | None = Field(None, alias="operatorId")


class CustomerRef(_Record):
    """A customer expanded into an order. The backend may send a partial record."""

    id: RecordId | None = None
    name: str | None = None
    email: str | None = None
    lunar_address: str | None = Field(None, alias="lunarAddress")


class RoverRef(_Record):
    id: RecordId | None = None
    name: str | None = None
    status: str | None = None


class Order(_Record):
    id: RecordId
    customer_id: RecordId | None = Field(None, alias="customerId")
    rover_id: RecordId | None = Field(None, alias="roverId")
    total_price: float | None = Field(None, alias="totalPrice")
    status: str = OrderStatus.PLACED.value
    rover: RoverRef | None = None
    customer: CustomerRef | None = None


ModelT = TypeVar("ModelT", bound=BaseModel)


def parse_record(model: type[ModelT], data: Any) -> ModelT:
    """Validate one gateway record, translating schema errors to QueryFailure."""
    try:
        return model.model_validate(data)
    except PydanticValidationError as exc:
        raise QueryFailure(
            f"Malformed {model.__name__} record: {exc.error_count()} validation error(s)"
        ) from exc


def parse_records(model: type[ModelT], rows: Iterable[Any]) -> tuple[ModelT, ...]:
    """Validate a list of gateway records, preserving their order."""
    return tuple(parse_record(model, row) for row in rows)


__all__ = [
    "RecordId",
    "Role",
    "RoverStatus",
    "OrderStatus",
    "USERS",
    "OUTPOSTS",
    "ROVERS",
    "ORDERS",
    "User",
    "ImageRef",
    "Outpost",
    "Rover",
    "CustomerRef",
    "RoverRef",
    "Order",
    "parse_record",
    "parse_records",
]
