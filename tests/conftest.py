"""Shared fixtures for moondash tests."""

from __future__ import annotations

from typing import Callable
from unittest.mock import MagicMock

import pytest

from moondash.config import MoonDashConfig
from tests.helpers import make_gateway


@pytest.fixture
def gateway() -> MagicMock:
    """Mock DataGateway: reachable, no active session, empty collections."""
    return make_gateway()


@pytest.fixture
def logged_in_as(gateway: MagicMock) -> Callable[[dict], MagicMock]:
    """Make ``current_identity`` resolve to the given user record."""

    def _set(user: dict) -> MagicMock:
        gateway.current_identity.side_effect = None
        gateway.current_identity.return_value = dict(user)
        return gateway

    return _set


@pytest.fixture
def config(tmp_path, monkeypatch) -> MoonDashConfig:
    """Config rooted in tmp_path with no environment override."""
    monkeypatch.delenv("MOONDASH_BACKEND_URL", raising=False)
    return MoonDashConfig(config_dir=tmp_path / ".moondash")
