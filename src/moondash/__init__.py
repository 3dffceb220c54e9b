"""MoonDash client: session and domain-state controller for lunar food delivery."""

from .dispatcher import AdminView, CustomerView, DriverView, RoleDispatcher
from .errors import (
    AuthenticationError,
    ConnectivityError,
    MoonDashError,
    NoActiveSessionError,
    QueryFailure,
    RequestInFlightError,
    ValidationError,
)
from .rovers import RoverController
from .session import Phase, SessionContext, SessionManager
from .shell import AppShell

__version__ = "0.1.0"

__all__ = [
    "AppShell",
    "SessionManager",
    "SessionContext",
    "Phase",
    "RoleDispatcher",
    "CustomerView",
    "DriverView",
    "AdminView",
    "RoverController",
    "MoonDashError",
    "ConnectivityError",
    "NoActiveSessionError",
    "AuthenticationError",
    "ValidationError",
    "QueryFailure",
    "RequestInFlightError",
]
