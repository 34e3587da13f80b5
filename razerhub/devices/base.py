"""Base device instance shared by every category."""

from __future__ import annotations

import logging
from typing import Any

from razerhub.features import FeatureDescriptor
from razerhub.hardware import HardwareLayer, format_product_id

logger = logging.getLogger(__name__)


class RazerDevice:
    """A configured, attached Razer device.

    Constructing a device never touches the hardware; :meth:`init` opens the
    device handle and runs the category-specific setup. Categories without a
    dedicated class fall back to this one, which exposes no extra behaviour.
    """

    def __init__(
        self,
        hardware: HardwareLayer,
        settings_manager: Any,
        state_manager: Any,
        name: str,
        product_id: int,
        internal_id: Any,
        main_type: Any,
        image: str | None = None,
        features: list[FeatureDescriptor] | None = None,
    ) -> None:
        self.hardware = hardware
        self.settings_manager = settings_manager
        self.state_manager = state_manager
        self.name = name
        self.product_id = product_id
        self.internal_id = internal_id
        self.main_type = main_type
        self.image = image
        self.features: list[FeatureDescriptor] = features or []
        self._handle: Any = None
        self._closed = True

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(name={self.name!r}, "
            f"product_id={format_product_id(self.product_id)}, internal_id={self.internal_id!r})"
        )

    # ── Lifecycle ──────────────────────────────────────────────────

    async def init(self) -> RazerDevice:
        """Open the hardware handle and prepare the device for use."""
        self._handle = self.hardware.open_device(self.internal_id)
        self._closed = False
        await self._setup()
        logger.debug("Initialized %r", self)
        return self

    async def _setup(self) -> None:
        """Category-specific initialization hook."""

    def destroy(self) -> None:
        """Release the device. Safe to call on an already closed device."""
        if self._closed:
            return
        self._handle = None
        self._closed = True
        logger.debug("Destroyed %r", self)

    @property
    def is_open(self) -> bool:
        return not self._closed

    # ── Features ───────────────────────────────────────────────────

    def get_feature(self, identifier: str) -> FeatureDescriptor | None:
        for feature in self.features:
            if feature.feature_identifier == identifier:
                return feature
        return None

    def has_feature(self, identifier: str) -> bool:
        return self.get_feature(identifier) is not None

    def to_dict(self) -> dict:
        """Serialize for CLI/JSON output."""
        main_type = getattr(self.main_type, "value", self.main_type)
        return {
            "name": self.name,
            "productId": format_product_id(self.product_id),
            "internalId": self.internal_id,
            "mainType": main_type,
            "image": self.image,
            "features": [
                {"featureIdentifier": f.feature_identifier, "configuration": f.configuration}
                for f in self.features
            ],
        }
