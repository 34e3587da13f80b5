"""razerhub.features — feature descriptors and per-device feature assembly.

A device's feature set is built from its catalog profile:

  1. the profile's explicit ``features`` list, or the category defaults
  2. minus every identifier in ``featuresMissing``
  3. with ``featuresConfig`` overrides deep-merged into the survivors

Every descriptor returned here is freshly built, so two devices assembled
from the same profile never share configuration dicts.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from razerhub.devices.types import DeviceType

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Feature identifiers (catalog spelling)
# ---------------------------------------------------------------------------

NONE = "none"
STATIC = "static"
WAVE_SIMPLE = "waveSimple"
WAVE_EXTENDED = "waveExtended"
SPECTRUM = "spectrum"
REACTIVE = "reactive"
BREATHE = "breathe"
STARLIGHT = "starlight"
RIPPLE = "ripple"
WHEEL = "wheel"
BRIGHTNESS = "brightness"
MOUSE_BRIGHTNESS = "mouseBrightness"
MOUSE_DPI = "mouseDpi"
POLL_RATE = "pollRate"
BATTERY = "battery"

DEFAULT_CONFIGURATIONS: dict[str, dict[str, Any]] = {
    NONE: {},
    STATIC: {},
    WAVE_SIMPLE: {},
    WAVE_EXTENDED: {},
    SPECTRUM: {},
    REACTIVE: {"speeds": [1, 2, 3]},
    BREATHE: {"single": True, "dual": True, "random": True},
    STARLIGHT: {"speeds": [1, 2, 3]},
    RIPPLE: {},
    WHEEL: {},
    BRIGHTNESS: {"min": 0, "max": 100},
    MOUSE_BRIGHTNESS: {
        "enabledMatrix": True,
        "enabledLogo": True,
        "enabledScroll": True,
        "enabledLeft": False,
        "enabledRight": False,
    },
    MOUSE_DPI: {"minDpi": 100, "maxDpi": 16000},
    POLL_RATE: {"rates": [125, 500, 1000]},
    BATTERY: {},
}

DEFAULT_FEATURES: dict[DeviceType, list[str]] = {
    DeviceType.KEYBOARD: [
        NONE, STATIC, WAVE_EXTENDED, SPECTRUM, REACTIVE,
        BREATHE, STARLIGHT, RIPPLE, WHEEL, BRIGHTNESS,
    ],
    DeviceType.MOUSE: [
        NONE, STATIC, WAVE_SIMPLE, SPECTRUM, REACTIVE,
        BREATHE, MOUSE_BRIGHTNESS, MOUSE_DPI, POLL_RATE,
    ],
    DeviceType.MOUSEDOCK: [NONE, STATIC, WAVE_SIMPLE, SPECTRUM, BREATHE],
    DeviceType.MOUSEMAT: [NONE, STATIC, WAVE_SIMPLE, SPECTRUM, BREATHE, BRIGHTNESS],
    DeviceType.EGPU: [NONE, STATIC, WAVE_SIMPLE, SPECTRUM, BREATHE],
    DeviceType.HEADPHONE: [NONE, STATIC, SPECTRUM, BREATHE],
    DeviceType.ACCESSORY: [NONE, STATIC, WAVE_SIMPLE, SPECTRUM, BREATHE, BRIGHTNESS],
}


class FeatureError(ValueError):
    """Raised for a feature entry that is neither an identifier nor ``{id: config}``."""


@dataclass
class FeatureDescriptor:
    feature_identifier: str
    configuration: dict[str, Any] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def merge_configuration(
    base: Mapping[str, Any],
    override: Mapping[str, Any] | None,
) -> dict[str, Any]:
    """Deep-merge *override* into a copy of *base*.

    Override keys win; nested mappings are merged recursively, every other
    value (lists included) is replaced. Neither input is mutated and the
    result shares no containers with them.
    """
    merged = copy.deepcopy(dict(base))
    for key, value in (override or {}).items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = merge_configuration(current, value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def _split_entry(entry: Any) -> tuple[str, Mapping[str, Any] | None]:
    if isinstance(entry, str):
        return entry, None
    if isinstance(entry, Mapping) and len(entry) == 1:
        identifier, config = next(iter(entry.items()))
        if isinstance(identifier, str) and (config is None or isinstance(config, Mapping)):
            return identifier, config
    raise FeatureError(f"Invalid feature entry: {entry!r}")


def create_feature_from(entry: Any) -> FeatureDescriptor:
    """Build a descriptor from ``"identifier"`` or ``{"identifier": {...}}``."""
    identifier, config = _split_entry(entry)
    defaults = DEFAULT_CONFIGURATIONS.get(identifier, {})
    return FeatureDescriptor(identifier, merge_configuration(defaults, config))


def default_features_for(main_type: Any) -> list[FeatureDescriptor]:
    """Return fresh default descriptors for a category (empty if unknown)."""
    device_type = DeviceType.parse(main_type)
    if device_type is None:
        return []
    return [create_feature_from(identifier) for identifier in DEFAULT_FEATURES[device_type]]


def normalize_overrides(
    features_config: Mapping[str, Any] | Iterable[Mapping[str, Any]] | None,
) -> dict[str, dict[str, Any]]:
    """Collapse ``featuresConfig`` into one ``{identifier: override}`` mapping.

    The catalog stores overrides as a list of single-key objects; repeated
    identifiers are deep-merged in list order.
    """
    if features_config is None:
        return {}
    if isinstance(features_config, Mapping):
        entries: Iterable[Mapping[str, Any]] = [{k: v} for k, v in features_config.items()]
    else:
        entries = features_config

    overrides: dict[str, dict[str, Any]] = {}
    for entry in entries:
        if not isinstance(entry, Mapping):
            raise FeatureError(f"Invalid featuresConfig entry: {entry!r}")
        for identifier, config in entry.items():
            if not isinstance(config, Mapping):
                raise FeatureError(f"Override for {identifier!r} must be an object, got {config!r}")
            overrides[identifier] = merge_configuration(overrides.get(identifier, {}), config)
    return overrides


# ---------------------------------------------------------------------------
# Assembly
# ---------------------------------------------------------------------------


def assemble_features(
    main_type: Any,
    features: Iterable[Any] | None,
    features_missing: Iterable[str] | None = None,
    features_config: Mapping[str, Any] | Iterable[Mapping[str, Any]] | None = None,
) -> list[FeatureDescriptor]:
    """Build the ordered feature list for one device instance.

    Args:
        main_type:        Device category, used only when *features* is ``None``.
        features:         Explicit feature entries, or ``None`` for defaults.
        features_missing: Identifiers to drop.
        features_config:  Per-identifier configuration overrides. Overrides
                          for identifiers not in the list are ignored.

    Returns:
        New descriptors in list (or default) order.
    """
    if features is None:
        descriptors = default_features_for(main_type)
    else:
        descriptors = [create_feature_from(entry) for entry in features]

    if features_missing:
        missing = set(features_missing)
        descriptors = [d for d in descriptors if d.feature_identifier not in missing]

    for identifier, override in normalize_overrides(features_config).items():
        for descriptor in descriptors:
            if descriptor.feature_identifier == identifier:
                descriptor.configuration = merge_configuration(descriptor.configuration, override)
                break
        else:
            logger.debug("Ignoring override for absent feature %s", identifier)

    return descriptors


__all__ = [
    "DEFAULT_CONFIGURATIONS",
    "DEFAULT_FEATURES",
    "FeatureDescriptor",
    "FeatureError",
    "assemble_features",
    "create_feature_from",
    "default_features_for",
    "merge_configuration",
    "normalize_overrides",
]
