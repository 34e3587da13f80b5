"""Device categories ("main types") as spelled in the device catalog."""

from __future__ import annotations

from enum import Enum
from typing import Any


class DeviceType(str, Enum):
    KEYBOARD = "keyboard"
    MOUSE = "mouse"
    MOUSEDOCK = "mousedock"
    MOUSEMAT = "mousemat"
    EGPU = "egpu"
    HEADPHONE = "headphone"
    ACCESSORY = "accessory"

    @classmethod
    def parse(cls, value: Any) -> DeviceType | None:
        """Return the matching category, or ``None`` for unknown values."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except (TypeError, ValueError):
            return None


# Display priority used when sorting active devices.
DEVICE_ORDER: tuple[DeviceType, ...] = (
    DeviceType.KEYBOARD,
    DeviceType.MOUSE,
    DeviceType.MOUSEDOCK,
    DeviceType.MOUSEMAT,
    DeviceType.EGPU,
    DeviceType.HEADPHONE,
    DeviceType.ACCESSORY,
)


def category_rank(main_type: Any) -> int:
    """Position of *main_type* in DEVICE_ORDER; unknown categories rank last."""
    device_type = DeviceType.parse(main_type)
    if device_type is None:
        return len(DEVICE_ORDER)
    return DEVICE_ORDER.index(device_type)
