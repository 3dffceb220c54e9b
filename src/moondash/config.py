"""Gateway configuration management"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import toml  # type: ignore[import-untyped]

DEFAULT_BACKEND_URL = "http://localhost:1111"
BACKEND_URL_ENV_VAR = "MOONDASH_BACKEND_URL"
MOONDASH_DIR = Path.home() / ".moondash"


class MoonDashConfig:
    """Manage the gateway base address.

    Precedence: ``MOONDASH_BACKEND_URL``, then ``[gateway] base_url`` in
    ``~/.moondash/config.toml``, then ``DEFAULT_BACKEND_URL``.
    """

    def __init__(self, config_dir: Path | None = None) -> None:
        self.config_dir = config_dir or MOONDASH_DIR
        self.config_file = self.config_dir / "config.toml"

    def get_base_url(self) -> str:
        """Get the gateway base address"""
        from_env = os.environ.get(BACKEND_URL_ENV_VAR, "").strip()
        if from_env:
            return from_env.rstrip("/")

        if not self.config_file.exists():
            return DEFAULT_BACKEND_URL

        config: dict[str, Any] = toml.load(self.config_file)
        gateway_section = config.get("gateway")
        if isinstance(gateway_section, dict):
            base_url = gateway_section.get("base_url")
            if isinstance(base_url, str) and base_url.strip():
                return base_url.strip().rstrip("/")
        return DEFAULT_BACKEND_URL

    def set_base_url(self, url: str) -> None:
        """Persist the gateway base address in config.toml"""
        self.config_dir.mkdir(parents=True, exist_ok=True)

        config: dict[str, Any] = {}
        if self.config_file.exists():
            config = toml.load(self.config_file)

        gateway_section = config.get("gateway")
        if not isinstance(gateway_section, dict):
            gateway_section = {}
            config["gateway"] = gateway_section

        gateway_section["base_url"] = url.strip().rstrip("/")

        with open(self.config_file, "w", encoding="utf-8") as f:
            toml.dump(config, f)

    def admin_console_url(self) -> str:
        """Static link to the backend's admin console."""
        return f"{self.get_base_url()}/admin"
