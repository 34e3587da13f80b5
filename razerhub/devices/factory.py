"""Device factory — picks the category class and assembles features."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from razerhub.devices.base import RazerDevice
from razerhub.devices.catalog import DeviceProfile
from razerhub.devices.types import DeviceType
from razerhub.devices.variants import (
    AccessoryDevice,
    EgpuDevice,
    HeadphoneDevice,
    KeyboardDevice,
    MouseDevice,
    MouseDockDevice,
    MouseMatDevice,
)
from razerhub.features import assemble_features
from razerhub.hardware import HardwareLayer


@dataclass
class DeviceProperties:
    """Everything needed to build one device: profile fields + internal id."""

    name: str
    product_id: int
    internal_id: Any
    main_type: Any
    image: str | None = None
    features: tuple[Any, ...] | None = None
    features_missing: tuple[str, ...] | None = None
    features_config: Mapping[str, Mapping[str, Any]] | None = None

    @classmethod
    def from_profile(cls, profile: DeviceProfile, product_id: int, internal_id: Any) -> DeviceProperties:
        return cls(
            name=profile.name,
            product_id=product_id,
            internal_id=internal_id,
            main_type=profile.main_type,
            image=profile.image,
            features=profile.features,
            features_missing=profile.features_missing,
            features_config=profile.features_config,
        )


def device_class_for(main_type: Any) -> type[RazerDevice]:
    """Return the device class for a category; unknown categories get the base class."""
    match DeviceType.parse(main_type):
        case DeviceType.KEYBOARD:
            return KeyboardDevice
        case DeviceType.MOUSE:
            return MouseDevice
        case DeviceType.MOUSEDOCK:
            return MouseDockDevice
        case DeviceType.MOUSEMAT:
            return MouseMatDevice
        case DeviceType.EGPU:
            return EgpuDevice
        case DeviceType.HEADPHONE:
            return HeadphoneDevice
        case DeviceType.ACCESSORY:
            return AccessoryDevice
        case _:
            return RazerDevice


def create_device(
    hardware: HardwareLayer,
    settings_manager: Any,
    state_manager: Any,
    properties: DeviceProperties,
) -> RazerDevice:
    """Build an uninitialized device for *properties*.

    The returned device has its own freshly assembled feature list; call
    ``await device.init()`` before using it.
    """
    device_cls = device_class_for(properties.main_type)
    main_type = DeviceType.parse(properties.main_type) or properties.main_type
    features = assemble_features(
        properties.main_type,
        properties.features,
        properties.features_missing,
        properties.features_config,
    )
    return device_cls(
        hardware,
        settings_manager,
        state_manager,
        name=properties.name,
        product_id=properties.product_id,
        internal_id=properties.internal_id,
        main_type=main_type,
        image=properties.image,
        features=features,
    )
