"""Session lifecycle: connectivity probe, restore, login, signup, logout.

Phase state machine::

    checking ──> disconnected            (terminal, manual restart required)
    checking ──> landing | dashboard
    landing  <─> dashboard

``SessionContext`` is the explicit session object handed to consumers. It is
only ever written by ``SessionManager``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import Optional

from .errors import (
    ConnectivityError,
    MoonDashError,
    NoActiveSessionError,
    ValidationError,
)
from .gateway.base import DataGateway
from .models import USERS, Role, User, parse_record

logger = logging.getLogger(__name__)


class Phase(StrEnum):
    CHECKING = "checking"
    DISCONNECTED = "disconnected"
    LANDING = "landing"
    DASHBOARD = "dashboard"


ALLOWED_TRANSITIONS: frozenset[tuple[str, str]] = frozenset(
    {
        ("checking", "disconnected"),
        ("checking", "landing"),
        ("checking", "dashboard"),
        ("landing", "dashboard"),
        ("dashboard", "landing"),
        ("landing", "landing"),
        ("dashboard", "dashboard"),
    }
)


class InvalidTransitionError(MoonDashError):
    """Raised on a phase change the state machine does not allow."""


@dataclass
class SessionContext:
    """Current identity and connectivity for one client session."""

    phase: Phase = Phase.CHECKING
    user: Optional[User] = None
    connected: bool = False
    loading: bool = True

    @property
    def authenticated(self) -> bool:
        return self.user is not None and self.phase == Phase.DASHBOARD


_SIGNUP_FIELDS = ("email", "password", "name", "lunarAddress")


def _require_fields(values: dict[str, Optional[str]]) -> None:
    missing = tuple(name for name, value in values.items() if not value or not value.strip())
    if missing:
        raise ValidationError(f"Missing required field(s): {', '.join(missing)}", missing)


class SessionManager:
    """Owns the authentication lifecycle for a ``SessionContext``."""

    def __init__(self, gateway: DataGateway, context: Optional[SessionContext] = None):
        self.gateway = gateway
        self.context = context or SessionContext()

    def _transition(self, to_phase: Phase) -> None:
        from_phase = self.context.phase
        if (from_phase.value, to_phase.value) not in ALLOWED_TRANSITIONS:
            raise InvalidTransitionError(f"Illegal session transition {from_phase} -> {to_phase}")
        self.context.phase = to_phase
        logger.debug(f"Session phase {from_phase} -> {to_phase}")

    def _require_connected(self) -> None:
        if self.context.phase in (Phase.CHECKING, Phase.DISCONNECTED):
            raise ConnectivityError("Backend is not connected")

    async def initialize(self) -> Optional[User]:
        """Startup sequence: probe once, then try to restore the session.

        Never raises for the expected outcomes (backend down, not logged in);
        the result is reflected in ``context``.
        """
        self.context.loading = True
        try:
            logger.info("Checking backend connectivity")
            self.context.connected = await self.gateway.probe()
            if not self.context.connected:
                logger.error("Backend connection failed")
                self._transition(Phase.DISCONNECTED)
                return None

            logger.info("Backend connection successful")
            return await self.restore_session()
        finally:
            self.context.loading = False

    async def restore_session(self) -> Optional[User]:
        """Resolve an existing session without credentials.

        Any failure routes to the landing phase with no user; this is the
        normal not-logged-in path, not an error.
        """
        try:
            user = await self._resolve_identity()
        except NoActiveSessionError:
            logger.info("No active session found")
            return self._to_landing()
        except MoonDashError as exc:
            logger.warning(f"Session restore failed: {exc}")
            return self._to_landing()

        self.context.user = user
        self._transition(Phase.DASHBOARD)
        return user

    async def login(self, email: str, password: str) -> User:
        """
        Authenticate, then resolve the current user.

        Raises:
            AuthenticationError: If the credentials are rejected
            ConnectivityError: If the backend is not connected
            QueryFailure: If the user record cannot be resolved; the new
                token is discarded
        """
        self._require_connected()
        _require_fields({"email": email, "password": password})

        await self.gateway.login(email, password)
        try:
            user = await self._resolve_identity()
        except MoonDashError:
            await self._discard_credentials()
            raise
        self.context.user = user
        self._transition(Phase.DASHBOARD)
        logger.info(f"Logged in as {user.email} ({user.role})")
        return user

    async def signup(self, email: str, password: str, name: str, address: str) -> User:
        """
        Create a customer account, then log in with the same credentials.

        The role is always ``customer``; drivers and admins are provisioned
        out-of-band.

        Raises:
            ValidationError: If a field is missing or rejected by the backend
            AuthenticationError: If the follow-up login fails
        """
        self._require_connected()
        values = dict(zip(_SIGNUP_FIELDS, (email, password, name, address)))
        _require_fields(values)

        await self.gateway.signup(USERS, {**values, "role": Role.CUSTOMER.value})
        return await self.login(email, password)

    async def logout(self) -> None:
        """Invalidate the session. Local identity is cleared even if the gateway fails."""
        try:
            await self.gateway.logout()
        except MoonDashError as exc:
            logger.warning(f"Remote logout failed, clearing local session anyway: {exc}")
        finally:
            self.context.user = None
            if self.context.phase in (Phase.LANDING, Phase.DASHBOARD):
                self._transition(Phase.LANDING)

    async def _discard_credentials(self) -> None:
        """Drop a token whose identity could not be resolved."""
        try:
            await self.gateway.logout()
        except MoonDashError as exc:
            logger.warning(f"Could not discard credentials: {exc}")

    async def _resolve_identity(self) -> User:
        record = await self.gateway.current_identity()
        return parse_record(User, record)

    def _to_landing(self) -> None:
        self.context.user = None
        self._transition(Phase.LANDING)
        return None
