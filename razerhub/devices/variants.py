"""Per-category device classes."""

from __future__ import annotations

from razerhub import features as ft
from razerhub.devices.base import RazerDevice
from razerhub.devices.types import DeviceType


class KeyboardDevice(RazerDevice):
    device_type = DeviceType.KEYBOARD

    @property
    def supports_brightness(self) -> bool:
        return self.has_feature(ft.BRIGHTNESS)


class MouseDevice(RazerDevice):
    device_type = DeviceType.MOUSE

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.dpi_range: tuple[int, int] | None = None
        self.poll_rates: list[int] = []

    async def _setup(self) -> None:
        dpi = self.get_feature(ft.MOUSE_DPI)
        if dpi is not None:
            config = dpi.configuration
            self.dpi_range = (int(config.get("minDpi", 100)), int(config.get("maxDpi", 16000)))
        poll = self.get_feature(ft.POLL_RATE)
        if poll is not None:
            self.poll_rates = sorted(int(r) for r in poll.configuration.get("rates", []))


class MouseDockDevice(RazerDevice):
    device_type = DeviceType.MOUSEDOCK


class MouseMatDevice(RazerDevice):
    device_type = DeviceType.MOUSEMAT


class EgpuDevice(RazerDevice):
    device_type = DeviceType.EGPU


class HeadphoneDevice(RazerDevice):
    device_type = DeviceType.HEADPHONE


class AccessoryDevice(RazerDevice):
    device_type = DeviceType.ACCESSORY
