"""Application shell.

Wires the session manager into the role dispatcher and owns everything a
front end needs to render: connectivity banner, loading flag, the current
role view, and inline error messages for the action that failed.
"""

from __future__ import annotations

import logging
from typing import Optional

from .config import MoonDashConfig
from .dispatcher import DriverView, RoleDispatcher, RoleView
from .errors import MoonDashError
from .gateway.base import DataGateway
from .rovers import RoverController, RoverForm
from .session import Phase, SessionContext, SessionManager

logger = logging.getLogger(__name__)

DEFAULT_FORM_ERROR = "An error occurred. Please check your credentials."
BANNER_CONNECTED = "Backend Connected"
BANNER_DISCONNECTED = "Backend Disconnected"


class AppShell:
    """Top-level state holder for one client session."""

    def __init__(self, gateway: DataGateway, config: Optional[MoonDashConfig] = None):
        self.gateway = gateway
        self.config = config or MoonDashConfig()
        self.session = SessionManager(gateway)
        self.dispatcher = RoleDispatcher(gateway)
        self.rovers = RoverController(gateway)
        self.rover_form = RoverForm()
        self.form_error: Optional[str] = None
        self.action_error: Optional[str] = None
        # The exception behind action_error, e.g. ValidationError vs QueryFailure.
        self.action_failure: Optional[MoonDashError] = None

    @property
    def context(self) -> SessionContext:
        return self.session.context

    @property
    def view(self) -> Optional[RoleView]:
        return self.dispatcher.view

    @property
    def loading(self) -> bool:
        return self.context.loading or self.dispatcher.loading

    @property
    def banner(self) -> str:
        return BANNER_CONNECTED if self.context.connected else BANNER_DISCONNECTED

    @property
    def screen(self) -> Phase:
        return self.context.phase

    @property
    def admin_console_url(self) -> str:
        return self.config.admin_console_url()

    async def start(self) -> None:
        """Probe, restore the session, then load the role view if logged in."""
        await self.session.initialize()
        if self.context.authenticated:
            await self.refresh()

    async def refresh(self) -> Optional[RoleView]:
        user = self.context.user
        if user is None:
            return None
        return await self.dispatcher.load_for_role(user)

    async def login(self, email: str, password: str) -> bool:
        self.form_error = None
        try:
            await self.session.login(email, password)
        except MoonDashError as exc:
            logger.info(f"Authentication form rejected: {exc}")
            self.form_error = str(exc) or DEFAULT_FORM_ERROR
            return False
        await self.refresh()
        return True

    async def signup(self, email: str, password: str, name: str, address: str) -> bool:
        self.form_error = None
        try:
            await self.session.signup(email, password, name, address)
        except MoonDashError as exc:
            logger.info(f"Authentication form rejected: {exc}")
            self.form_error = str(exc) or DEFAULT_FORM_ERROR
            return False
        await self.refresh()
        return True

    async def logout(self) -> None:
        try:
            await self.session.logout()
        finally:
            self.dispatcher.reset()
            self.rover_form.reset()
            self.form_error = None
            self._clear_action_error()

    async def set_rover_status(self, status: str) -> bool:
        """Driver action. Overwrites the loaded rover with the backend's echo."""
        self._clear_action_error()
        view = self.view
        if not isinstance(view, DriverView) or view.rover is None:
            return False

        try:
            updated = await self.rovers.update_status(view.rover, status)
        except MoonDashError as exc:
            logger.warning(f"Rover status update failed: {exc}")
            self._fail_action(exc)
            return False

        self.dispatcher.patch_rover(updated)
        return True

    async def deploy_rover(self) -> bool:
        """Admin action. Submits ``rover_form`` and resets it on success."""
        self._clear_action_error()
        try:
            await self.rovers.create_rover(self.rover_form.name, self.rover_form.operator_id)
        except MoonDashError as exc:
            logger.warning(f"Rover deployment failed: {exc}")
            self._fail_action(exc)
            return False

        self.rover_form.reset()
        return True

    def _fail_action(self, exc: MoonDashError) -> None:
        self.action_failure = exc
        self.action_error = str(exc)

    def _clear_action_error(self) -> None:
        self.action_failure = None
        self.action_error = None
