"""Device manager — reconciles attached hardware with the device catalog.

A refresh cycle:
  1. drop the call if it comes within the throttle window of the last one,
     or while another refresh is still initializing devices
  2. close the current device set
  3. enumerate attached devices, normalize product ids, match the catalog
  4. build one device per match and initialize them all concurrently
  5. keep the devices that initialized, sorted by category then name

This is the main entry point that a UI layer uses.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any

from razerhub.config import ManagerConfig
from razerhub.devices.base import RazerDevice
from razerhub.devices.catalog import DeviceCatalog
from razerhub.devices.factory import DeviceProperties, create_device
from razerhub.devices.types import category_rank
from razerhub.hardware import (
    DiscoveredDevice,
    HardwareLayer,
    format_product_id,
    normalize_product_id,
)

logger = logging.getLogger(__name__)

DeviceFactory = Callable[[HardwareLayer, Any, Any, DeviceProperties], RazerDevice]


class ManagerDestroyedError(RuntimeError):
    """Raised when a destroyed DeviceManager is asked to refresh."""


@dataclass
class RefreshReport:
    """Outcome of one non-throttled refresh."""

    devices: list[RazerDevice] = field(default_factory=list)
    invalid: list[DiscoveredDevice] = field(default_factory=list)
    unmatched: list[int] = field(default_factory=list)
    failed: list[tuple[Any, str]] = field(default_factory=list)  # (internal_id, error)


def is_throttled(now: float, last_refresh: float | None, window: float) -> bool:
    """True if *now* falls within *window* seconds of *last_refresh*."""
    return last_refresh is not None and now < last_refresh + window


def sort_devices(devices: Iterable[RazerDevice]) -> list[RazerDevice]:
    """Order devices by category priority, then name. Stable for ties."""
    return sorted(devices, key=lambda d: (category_rank(d.main_type), d.name))


class DeviceManager:
    """Owns the set of active devices and the refresh cycle.

    Args:
        hardware:         Hardware access layer.
        catalog:          Device profiles; defaults to the configured catalog.
        settings_manager: Opaque settings store handed to every device.
        state_manager:    Opaque state store handed to every device.
        config:           Manager configuration (throttle window, catalog dir).
        device_factory:   Builds an uninitialized device from properties.
        clock:            Monotonic time source in seconds.
    """

    def __init__(
        self,
        hardware: HardwareLayer,
        catalog: DeviceCatalog | None = None,
        settings_manager: Any = None,
        state_manager: Any = None,
        *,
        config: ManagerConfig | None = None,
        device_factory: DeviceFactory = create_device,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config or ManagerConfig()
        self.hardware: HardwareLayer | None = hardware
        self.catalog = catalog if catalog is not None else DeviceCatalog.from_directory(self.config.catalog_dir())
        self.settings_manager = settings_manager
        self.state_manager = state_manager
        self._device_factory = device_factory
        self._clock = clock
        self._last_refresh: float | None = None
        self._active: list[RazerDevice] | None = None
        self._refreshing = False

    # ── Refresh ────────────────────────────────────────────────────

    async def refresh(self) -> RefreshReport | None:
        """Rebuild the active device set from the attached hardware.

        Returns ``None`` without touching anything when called within the
        throttle window of the previous refresh, or while another refresh is
        still running. Hardware-layer errors propagate; per-device build or
        init failures only exclude that device.
        """
        if self.hardware is None:
            raise ManagerDestroyedError("DeviceManager has been destroyed")

        if self._refreshing:
            logger.debug("refresh already in progress")
            return None

        now = self._clock()
        if is_throttled(now, self._last_refresh, self.config.refresh_throttle_s):
            logger.debug("refresh throttled")
            return None
        self._last_refresh = now
        self._refreshing = True
        try:
            return await self._reconcile()
        finally:
            self._refreshing = False

    async def _reconcile(self) -> RefreshReport | None:
        hardware = self.hardware
        self._teardown()
        found = hardware.get_all_devices()
        logger.debug(
            "hardware devices: %s",
            [
                (d.internal_device_id, d.product_id, format_product_id(normalize_product_id(d.product_id)))
                for d in found
            ],
        )

        report = RefreshReport()
        pending: list[RazerDevice] = []
        for discovered in found:
            device = self._build_device(discovered, report)
            if device is not None:
                pending.append(device)

        results = await asyncio.gather(*(self._init_device(d, report) for d in pending))
        devices = [d for d in results if d is not None]

        if self.hardware is None:
            logger.info("manager destroyed during refresh; discarding %d device(s)", len(devices))
            for device in devices:
                device.destroy()
            hardware.close_all_devices()
            return None

        self._active = sort_devices(devices)
        report.devices = list(self._active)
        logger.info(
            "refresh complete: %d active, %d invalid, %d unmatched, %d failed",
            len(report.devices), len(report.invalid), len(report.unmatched), len(report.failed),
        )
        return report

    def _build_device(self, discovered: DiscoveredDevice, report: RefreshReport) -> RazerDevice | None:
        product_id = normalize_product_id(discovered.product_id)
        if product_id is None:
            logger.warning("skipping device with invalid productId: %r", discovered)
            report.invalid.append(discovered)
            return None

        profile = self.catalog.find(product_id)
        if profile is None:
            logger.warning(
                "no profile for productId %s (%d); known: %s",
                format_product_id(product_id),
                product_id,
                ", ".join(format_product_id(pid) for pid in self.catalog.product_ids),
            )
            report.unmatched.append(product_id)
            return None

        properties = DeviceProperties.from_profile(profile, product_id, discovered.internal_device_id)
        try:
            return self._device_factory(self.hardware, self.settings_manager, self.state_manager, properties)
        except Exception as e:
            logger.warning(
                "could not build device %r (%s): %s", discovered.internal_device_id, profile.name, e,
                exc_info=True,
            )
            report.failed.append((discovered.internal_device_id, str(e)))
            return None

    async def _init_device(self, device: RazerDevice, report: RefreshReport) -> RazerDevice | None:
        try:
            return await device.init()
        except Exception as e:
            logger.warning("init failed for %r: %s", device, e, exc_info=True)
            report.failed.append((device.internal_id, str(e)))
            device.destroy()
            return None

    # ── Registry ───────────────────────────────────────────────────

    @property
    def active_devices(self) -> list[RazerDevice]:
        """Snapshot of the active devices in display order."""
        return list(self._active or [])

    def get_by_internal_id(self, internal_id: Any) -> RazerDevice | None:
        """Return the active device with *internal_id*, or ``None``."""
        for device in self._active or []:
            if device.internal_id == internal_id:
                return device
        return None

    def close_all(self) -> None:
        """Close all hardware handles and forget the active set.

        No-op when nothing is active.
        """
        if self._active is None or self.hardware is None:
            return
        self.hardware.close_all_devices()
        self._active = None

    def destroy(self) -> None:
        """Tear down every device and release the hardware layer.

        The manager cannot be refreshed afterwards.
        """
        self._teardown()
        self.hardware = None

    def _teardown(self) -> None:
        for device in self._active or []:
            device.destroy()
        self.close_all()
