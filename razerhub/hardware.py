"""Hardware access layer for attached Razer peripherals.

The reconciliation core only needs a narrow slice of the hardware layer:
  - a snapshot of attached devices (internal id + raw product id)
  - opening a handle for one device during its ``init()``
  - closing every open handle at once

Uses hidapi (``import hid``) for the real backend; a MockHardwareLayer is
provided for tests and headless runs.
"""

from __future__ import annotations

import logging
import math
import os
import re
from dataclasses import dataclass
from typing import Any, Protocol

logger = logging.getLogger(__name__)

RAZER_VID = 0x1532

# ASCII digits only: no sign, no underscores.
_HEX_STRING = re.compile(r"0x[0-9a-f]+", re.ASCII)
_DEC_STRING = re.compile(r"[0-9]+", re.ASCII)


# ── Data model ────────────────────────────────────────────────────


@dataclass(frozen=True)
class DiscoveredDevice:
    """One attached device as reported by the hardware layer."""

    internal_device_id: Any
    product_id: Any  # int, "0x00C7", "199", or whatever the backend hands us


# ── Product id helpers ────────────────────────────────────────────


def normalize_product_id(raw: Any) -> int | None:
    """Return *raw* as a non-negative int, or ``None`` if it is not one.

    Accepts ints, integral floats, ``"0x..."`` hex strings and decimal
    strings, so ``199``, ``"0x00C7"`` and ``"199"`` all give ``199``.
    """
    if raw is None or isinstance(raw, bool):
        return None

    if isinstance(raw, int):
        return raw if raw >= 0 else None

    if isinstance(raw, float):
        if not math.isfinite(raw) or not raw.is_integer() or raw < 0:
            return None
        return int(raw)

    if isinstance(raw, str):
        s = raw.strip().lower()
        if _HEX_STRING.fullmatch(s):
            return int(s[2:], 16)
        if _DEC_STRING.fullmatch(s):
            return int(s, 10)
        return None

    return None


def format_product_id(value: Any) -> str:
    """Format a product id as ``0x`` + four upper-case hex digits."""
    if not isinstance(value, int) or isinstance(value, bool):
        return str(value)
    return f"0x{value:04X}"


# ── Hardware abstraction ──────────────────────────────────────────


class HardwareLayer(Protocol):
    """Protocol for the device access layer (hidapi or mock)."""

    def get_all_devices(self) -> list[DiscoveredDevice]:
        ...

    def open_device(self, internal_id: Any) -> Any:
        ...

    def close_all_devices(self) -> None:
        ...


class HidHardwareLayer:
    """Real backend using hidapi.

    HID enumeration returns one entry per interface/usage page. Entries are
    grouped by ``(serial, product string, pid)`` so each physical device is
    reported once, keyed by the path of its first interface. When the same
    ``(interface, usage page, usage)`` shows up twice under one key, the
    second entry belongs to another unit of the same model (Razer devices
    often report an empty serial), so it starts a new group.
    """

    def __init__(self, vendor_id: int = RAZER_VID) -> None:
        self.vendor_id = vendor_id
        self._paths: dict[str, bytes] = {}
        self._handles: dict[str, Any] = {}

    def get_all_devices(self) -> list[DiscoveredDevice]:
        import hid

        groups: dict[tuple, list[set[tuple]]] = {}
        found: list[DiscoveredDevice] = []
        paths: dict[str, bytes] = {}
        seen_paths: set[Any] = set()
        for entry in hid.enumerate(self.vendor_id, 0x0):
            try:
                pid = entry["product_id"]
                path = entry["path"]
            except (KeyError, TypeError) as e:
                logger.warning("Skipping malformed HID entry: %s", e)
                continue
            if path in seen_paths:
                continue
            seen_paths.add(path)

            key = (entry.get("serial_number"), entry.get("product_string"), pid)
            interface = (entry.get("interface_number"), entry.get("usage_page"), entry.get("usage"))
            units = groups.setdefault(key, [])
            unit = next((u for u in units if interface not in u), None)
            if unit is not None:
                unit.add(interface)
                continue

            units.append({interface})
            internal_id = path.decode("utf-8", "replace") if isinstance(path, bytes) else str(path)
            found.append(DiscoveredDevice(internal_device_id=internal_id, product_id=pid))
            paths[internal_id] = path

        self._paths = paths
        logger.debug("HID enumeration: %d device(s) for vendor 0x%04X", len(found), self.vendor_id)
        return found

    def open_device(self, internal_id: Any) -> Any:
        import hid

        key = str(internal_id)
        if key in self._handles:
            return self._handles[key]
        path = self._paths.get(key, key.encode("utf-8"))
        dev = hid.device()
        dev.open_path(path)
        self._handles[key] = dev
        return dev

    def close_all_devices(self) -> None:
        handles, self._handles = self._handles, {}
        for key, dev in handles.items():
            try:
                dev.close()
            except OSError as e:
                logger.warning("Failed to close HID handle %s: %s", key, e)


class MockHardwareLayer:
    """In-memory hardware layer returning pre-configured devices."""

    def __init__(
        self,
        devices: list[DiscoveredDevice] | None = None,
        failing_ids: set[Any] | None = None,
    ) -> None:
        self.devices = list(devices or [])
        self.failing_ids = set(failing_ids or ())
        self.enumerations = 0
        self.close_calls = 0
        self.opened: list[Any] = []

    def get_all_devices(self) -> list[DiscoveredDevice]:
        self.enumerations += 1
        return list(self.devices)

    def open_device(self, internal_id: Any) -> Any:
        if internal_id in self.failing_ids:
            raise OSError(f"open failed for device {internal_id!r}")
        self.opened.append(internal_id)
        return object()

    def close_all_devices(self) -> None:
        self.close_calls += 1
        self.opened.clear()


_BACKENDS = {
    "hid": HidHardwareLayer,
    "mock": MockHardwareLayer,
}


def get_hardware_layer(backend: str | None = None) -> HardwareLayer:
    """Return a hardware layer instance.

    If *backend* is omitted, reads ``RAZERHUB_BACKEND`` from the environment
    (default: ``"hid"``).
    """
    if backend is None:
        backend = os.environ.get("RAZERHUB_BACKEND", "hid")

    backend = backend.lower().strip()
    cls = _BACKENDS.get(backend)
    if cls is None:
        raise ValueError(
            f"Unknown hardware backend '{backend}'. "
            f"Choose from: {list(_BACKENDS)}"
        )
    return cls()
