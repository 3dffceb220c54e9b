"""Records and gateway doubles shared by the moondash tests."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, MagicMock

from moondash.errors import NoActiveSessionError
from moondash.gateway.base import DataGateway

GATEWAY_METHODS = (
    "probe",
    "find",
    "create",
    "update",
    "login",
    "logout",
    "signup",
    "current_identity",
)

CUSTOMER = {
    "id": 1,
    "email": "valentina@moon.example",
    "name": "Cmdr. Valentina",
    "role": "customer",
    "lunarAddress": "Tranquility Base, Sector 7",
}
DRIVER = {
    "id": 7,
    "email": "buzz@moon.example",
    "name": "Buzz",
    "role": "driver",
    "lunarAddress": "Shackleton Crater Depot",
}
ADMIN = {
    "id": 99,
    "email": "ops@moon.example",
    "name": "Ops",
    "role": "admin",
    "lunarAddress": "Mission Control",
}
ROVER = {"id": "rv-1", "name": "Rover-01", "status": "idle", "operatorId": 7}
OUTPOST = {
    "id": "op-1",
    "name": "Crater Ramen",
    "cuisine": "Ramen",
    "menuImage": {"url": "https://img.example/ramen.png"},
}


def make_gateway() -> MagicMock:
    """Mock DataGateway: reachable, no active session, empty collections."""
    gateway = MagicMock(spec=DataGateway)
    for name in GATEWAY_METHODS:
        setattr(gateway, name, AsyncMock())
    gateway.probe.return_value = True
    gateway.find.return_value = []
    gateway.current_identity.side_effect = NoActiveSessionError("No stored session")
    return gateway


def route_find(gateway: MagicMock, responses: dict[str, Any]) -> None:
    """Answer ``find`` per collection; a value may be a list or an exception."""

    def _find(collection: str, *args: Any, **kwargs: Any) -> Any:
        result = responses.get(collection, [])
        if isinstance(result, Exception):
            raise result
        return [dict(row) for row in result]

    gateway.find.side_effect = _find


def find_collections(gateway: MagicMock) -> list[str]:
    """Collections queried through ``find``, in call order."""
    return [call.args[0] for call in gateway.find.await_args_list]
