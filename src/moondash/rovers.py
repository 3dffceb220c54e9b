"""Rover lifecycle: driver status changes and admin provisioning.

Rover status is a fully connected graph over ``idle``, ``delivering`` and
``charging``; only membership is checked, never ordering. Mutations return
the record echoed by the backend and callers overwrite their copy with it.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Optional

from .errors import RequestInFlightError, ValidationError
from .gateway.base import DataGateway
from .models import ROVERS, RecordId, Rover, RoverStatus, parse_record
from .orders import DEFAULT_CATEGORY, StatusBadge

logger = logging.getLogger(__name__)

ROVER_STATUSES: tuple[str, ...] = tuple(status.value for status in RoverStatus)

ROVER_STATUS_CATEGORIES: dict[str, str] = {
    RoverStatus.IDLE: "neutral",
    RoverStatus.DELIVERING: "active",
    RoverStatus.CHARGING: "warning",
}


def rover_badge(status: str | None) -> StatusBadge:
    value = (status or "").strip()
    return StatusBadge(
        label=value.replace("_", " ").upper() or "UNKNOWN",
        category=ROVER_STATUS_CATEGORIES.get(value, DEFAULT_CATEGORY),
    )


def validate_rover_status(status: str) -> RoverStatus:
    """Return the status as a ``RoverStatus`` or raise ``ValidationError``."""
    try:
        return RoverStatus(status)
    except ValueError as exc:
        raise ValidationError(
            f"Invalid rover status '{status}'. Expected one of: {', '.join(ROVER_STATUSES)}",
            ("status",),
        ) from exc


@dataclass
class RoverForm:
    """Admin draft for a new rover."""

    name: str = ""
    operator_id: Optional[RecordId] = None

    def reset(self) -> None:
        self.name = ""
        self.operator_id = None


class RoverController:
    """Issues rover mutations, one at a time."""

    def __init__(self, gateway: DataGateway):
        self.gateway = gateway
        self._in_flight = False

    @property
    def busy(self) -> bool:
        """True while a mutation is pending; UIs disable re-submission on it."""
        return self._in_flight

    @asynccontextmanager
    async def _exclusive(self) -> AsyncIterator[None]:
        if self._in_flight:
            raise RequestInFlightError("A rover request is already in progress")
        self._in_flight = True
        try:
            yield
        finally:
            self._in_flight = False

    async def update_status(self, rover: Rover, new_status: str) -> Rover:
        """
        Change a rover's status and return the backend's copy of the rover.

        Raises:
            ValidationError: If ``new_status`` is not a rover status (no request is made)
            RequestInFlightError: If another rover request is pending
            QueryFailure: If the backend rejects the update
        """
        status = validate_rover_status(new_status)
        async with self._exclusive():
            record = await self.gateway.update(ROVERS, rover.id, {"status": status.value})
        updated = parse_record(Rover, record)
        logger.info(f"Rover {updated.id} status {rover.status} -> {updated.status}")
        return updated

    async def create_rover(self, name: str, operator_id: Optional[RecordId]) -> Rover:
        """
        Provision a rover bound to a driver.

        The new rover is not merged into any loaded list; a refresh shows it.

        Raises:
            ValidationError: If the name is empty or no operator is selected
                (no request is made)
            RequestInFlightError: If another rover request is pending
        """
        missing = []
        if not name or not name.strip():
            missing.append("name")
        if operator_id is None or operator_id == "":
            missing.append("operatorId")
        if missing:
            raise ValidationError("Please provide a name and select an operator.", tuple(missing))

        async with self._exclusive():
            record = await self.gateway.create(ROVERS, {"name": name, "operatorId": operator_id})
        created = parse_record(Rover, record)
        logger.info(f"Deployed rover {created.id} for operator {operator_id}")
        return created
