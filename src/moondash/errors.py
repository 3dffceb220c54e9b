"""Error taxonomy for the MoonDash client.

Startup and session-restore failures (``ConnectivityError``,
``NoActiveSessionError``) are handled by the session layer and only change
state. Everything else is surfaced next to the action that triggered it.
"""

from __future__ import annotations


class MoonDashError(Exception):
    """Base class for all client errors."""


class ConnectivityError(MoonDashError):
    """Raised when the backend cannot be reached."""


class NoActiveSessionError(MoonDashError):
    """Raised when no authenticated session exists. Not a user-facing error."""


class AuthenticationError(MoonDashError):
    """Raised when credentials are rejected."""


class ValidationError(MoonDashError):
    """Raised when required fields are missing or invalid.

    Attributes:
        fields: Names of the offending fields, in declaration order.
    """

    def __init__(self, message: str, fields: tuple[str, ...] = ()) -> None:
        super().__init__(message)
        self.fields = fields


class QueryFailure(MoonDashError):
    """Raised when a data load or mutation fails after authentication."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RequestInFlightError(MoonDashError):
    """Raised when a mutation is submitted while the previous one is pending."""


__all__ = [
    "MoonDashError",
    "ConnectivityError",
    "NoActiveSessionError",
    "AuthenticationError",
    "ValidationError",
    "QueryFailure",
    "RequestInFlightError",
]
