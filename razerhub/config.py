"""Configuration for the device manager."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path

from razerhub.devices.catalog import default_catalog_dir

logger = logging.getLogger(__name__)


@dataclass
class ManagerConfig:
    """Device manager configuration, loaded from config.json and/or env."""

    devices_dir: str = ""  # empty = catalog bundled with the package
    refresh_throttle_ms: int = 2000
    backend: str = "hid"  # hid | mock

    @classmethod
    def load(cls, path: str | Path) -> ManagerConfig:
        path = Path(path)
        if path.exists():
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
            known = {f.name for f in fields(cls)}
            filtered = {k: v for k, v in data.items() if k in known}
            return cls(**filtered)
        logger.warning("Config not found at %s, using defaults", path)
        return cls()

    @classmethod
    def from_env(cls, base: ManagerConfig | None = None) -> ManagerConfig:
        """Apply ``RAZERHUB_*`` environment overrides on top of *base*."""
        config = base or cls()
        if "RAZERHUB_DEVICES_DIR" in os.environ:
            config.devices_dir = os.environ["RAZERHUB_DEVICES_DIR"]
        if "RAZERHUB_REFRESH_THROTTLE_MS" in os.environ:
            config.refresh_throttle_ms = int(os.environ["RAZERHUB_REFRESH_THROTTLE_MS"])
        if "RAZERHUB_BACKEND" in os.environ:
            config.backend = os.environ["RAZERHUB_BACKEND"]
        return config

    @property
    def refresh_throttle_s(self) -> float:
        return self.refresh_throttle_ms / 1000

    def catalog_dir(self) -> Path:
        """Effective device catalog directory."""
        return Path(self.devices_dir) if self.devices_dir else default_catalog_dir()
