"""Device profile catalog — static per-model configuration loaded from JSON.

Each ``*.json`` file under the catalog directory describes one device model::

    {
      "name": "Razer DeathAdder V2",
      "productId": "0x0084",
      "mainType": "mouse",
      "image": "https://...",
      "features": ["none", "static", {"mouseDpi": {"maxDpi": 20000}}],
      "featuresMissing": ["waveSimple"],
      "featuresConfig": [{"mouseDpi": {"minDpi": 200}}]
    }

``features`` omitted means "category defaults". The catalog is loaded once
and never mutated afterwards.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any

from razerhub.features import FeatureError, create_feature_from, normalize_overrides
from razerhub.hardware import format_product_id

logger = logging.getLogger(__name__)


class CatalogError(ValueError):
    """Raised for a catalog entry that cannot be turned into a DeviceProfile."""


@dataclass(frozen=True)
class DeviceProfile:
    """Static configuration of one device model.

    Construction validates and freezes the feature fields, so a profile that
    exists can always be assembled into a feature list.
    """

    name: str
    product_id: int
    main_type: str
    features: tuple[Any, ...] | None = None
    features_missing: tuple[str, ...] | None = None
    features_config: Mapping[str, Mapping[str, Any]] | None = None
    image: str | None = None
    source: Path | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.product_id, int) or isinstance(self.product_id, bool) or self.product_id < 0:
            raise CatalogError(f"Invalid productId: {self.product_id!r}")

        features = self.features
        if features is not None:
            if isinstance(features, (str, Mapping)) or not isinstance(features, (list, tuple)):
                raise CatalogError("'features' must be a list")
            features = tuple(features)

        missing = self.features_missing
        if missing is not None:
            if not isinstance(missing, (list, tuple)) or not all(isinstance(m, str) for m in missing):
                raise CatalogError("'featuresMissing' must be a list of identifiers")
            missing = tuple(missing)

        overrides = self.features_config
        if overrides is not None and (isinstance(overrides, str) or not isinstance(overrides, (Mapping, list, tuple))):
            raise CatalogError("'featuresConfig' must be a list of objects")
        try:
            for entry in features or ():
                create_feature_from(entry)
            if overrides is not None:
                overrides = MappingProxyType(normalize_overrides(overrides))
        except FeatureError as e:
            raise CatalogError(str(e)) from e

        object.__setattr__(self, "features", features)
        object.__setattr__(self, "features_missing", missing)
        object.__setattr__(self, "features_config", overrides)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], source: Path | None = None) -> DeviceProfile:
        """Validate a raw catalog entry and build a profile from it."""
        if not isinstance(data, Mapping):
            raise CatalogError(f"Catalog entry must be an object, got {type(data).__name__}")
        for key in ("name", "productId", "mainType"):
            if key not in data:
                raise CatalogError(f"Catalog entry is missing '{key}'")

        return cls(
            name=str(data["name"]),
            product_id=parse_catalog_product_id(data["productId"]),
            main_type=data["mainType"],
            features=data.get("features"),
            features_missing=data.get("featuresMissing"),
            features_config=data.get("featuresConfig"),
            image=data.get("image"),
            source=source,
        )


_HEX_ID = re.compile(r"(?:0x)?[0-9a-f]+", re.ASCII)


def parse_catalog_product_id(value: Any) -> int:
    """Parse the catalog's hex product id (``"0x00C7"`` or ``"00C7"``)."""
    if isinstance(value, int) and not isinstance(value, bool):
        if value < 0:
            raise CatalogError(f"Negative productId: {value}")
        return value
    if isinstance(value, str):
        s = value.strip().lower()
        if not _HEX_ID.fullmatch(s):
            raise CatalogError(f"Invalid productId: {value!r}")
        return int(s.removeprefix("0x"), 16)
    raise CatalogError(f"Invalid productId: {value!r}")


def default_catalog_dir() -> Path:
    """Directory of the device profiles bundled with the package."""
    return Path(__file__).parent / "data"


class DeviceCatalog:
    """Ordered, read-only collection of device profiles.

    Lookups are first-match: when two profiles share a product id the one
    loaded first wins (a warning is logged at load time).
    """

    def __init__(self, profiles: Iterable[DeviceProfile] = ()) -> None:
        self._profiles: tuple[DeviceProfile, ...] = tuple(profiles)
        self._by_id: dict[int, DeviceProfile] = {}
        for profile in self._profiles:
            first = self._by_id.get(profile.product_id)
            if first is not None:
                logger.warning(
                    "Duplicate productId %s: keeping '%s', ignoring '%s'",
                    format_product_id(profile.product_id), first.name, profile.name,
                )
                continue
            self._by_id[profile.product_id] = profile

    @classmethod
    def from_profiles(cls, profiles: Iterable[DeviceProfile | Mapping[str, Any]]) -> DeviceCatalog:
        """Build a catalog from profiles or raw catalog dicts."""
        return cls(
            p if isinstance(p, DeviceProfile) else DeviceProfile.from_dict(p)
            for p in profiles
        )

    @classmethod
    def from_directory(cls, directory: str | Path | None = None) -> DeviceCatalog:
        """Load every ``*.json`` file below *directory* (recursively).

        Files are read in sorted path order. Unreadable or malformed files
        are skipped with a warning.
        """
        directory = Path(directory) if directory else default_catalog_dir()
        if not directory.is_dir():
            logger.warning("Device catalog directory not found: %s", directory)
            return cls()

        profiles: list[DeviceProfile] = []
        for path in sorted(directory.rglob("*.json")):
            try:
                with open(path, encoding="utf-8") as f:
                    data = json.load(f)
                profiles.append(DeviceProfile.from_dict(data, source=path))
            except (OSError, json.JSONDecodeError, CatalogError) as e:
                logger.warning("Skipping device profile %s: %s", path, e)

        logger.info("Loaded %d device profile(s) from %s", len(profiles), directory)
        return cls(profiles)

    # ------------------------------------------------------------------ #
    # Queries                                                              #
    # ------------------------------------------------------------------ #

    def find(self, product_id: int) -> DeviceProfile | None:
        """Return the profile for *product_id*, or ``None``."""
        return self._by_id.get(product_id)

    @property
    def product_ids(self) -> list[int]:
        """Known product ids, sorted ascending."""
        return sorted(self._by_id)

    def __len__(self) -> int:
        return len(self._profiles)

    def __iter__(self) -> Iterator[DeviceProfile]:
        return iter(self._profiles)
