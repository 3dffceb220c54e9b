"""Bearer token persistence for the HTTP gateway."""

from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

import toml
from filelock import FileLock, Timeout

from moondash.config import MOONDASH_DIR
from moondash.errors import MoonDashError

logger = logging.getLogger(__name__)

CREDENTIALS_PATH = MOONDASH_DIR / "credentials"
LOCK_TIMEOUT_SECONDS = 10


class TokenStore:
    """Stores the session token in TOML format, keyed to the server it came from."""

    def __init__(self, credentials_path: Path | None = None):
        self.credentials_path = credentials_path or CREDENTIALS_PATH
        self.lock_path = self.credentials_path.with_suffix(".lock")

    @contextmanager
    def _locked(self) -> Iterator[None]:
        """Hold the credentials lock, reporting contention as a MoonDashError."""
        try:
            with FileLock(self.lock_path, timeout=LOCK_TIMEOUT_SECONDS):
                yield
        except Timeout as exc:
            raise MoonDashError(
                f"Timed out waiting for {self.lock_path}. "
                "Another moondash process may be logging in or out."
            ) from exc

    def load(self) -> Optional[dict]:
        """Stored session data, or None when there is no readable token file."""
        if not self.credentials_path.exists():
            return None

        try:
            with self._locked():
                return toml.loads(self.credentials_path.read_text())
        except (toml.TomlDecodeError, OSError, MoonDashError) as exc:
            logger.debug(f"Ignoring unreadable token file {self.credentials_path}: {exc}")
            return None

    def save(self, token: str, email: str, server_url: str):
        """Write the token file, readable by the owner only."""
        self.credentials_path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
        data = {
            "session": {"token": token},
            "user": {"email": email},
            "server": {"url": server_url},
        }

        with self._locked():
            self.credentials_path.write_text(toml.dumps(data))
            if os.name != "nt":
                os.chmod(self.credentials_path, 0o600)

    def clear(self):
        with self._locked():
            self.credentials_path.unlink(missing_ok=True)

    def get_token(self, server_url: str | None = None) -> Optional[str]:
        """Get the stored token, or None if absent or issued by another server."""
        data = self.load()
        if not data or "session" not in data:
            return None

        if server_url is not None and data.get("server", {}).get("url") != server_url:
            return None

        token = data["session"].get("token")
        return token or None

    def get_email(self) -> Optional[str]:
        data = self.load()
        if not data or "user" not in data:
            return None
        return data["user"].get("email")

    def get_server_url(self) -> Optional[str]:
        data = self.load()
        if not data or "server" not in data:
            return None
        return data["server"].get("url")
