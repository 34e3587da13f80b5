"""razerhub — Razer peripheral reconciliation core.

Turns the list of physically attached Razer devices into configured device
objects carrying the feature set, overrides and metadata of their model.

Quickstart::

    from razerhub import DeviceManager, get_hardware_layer

    manager = DeviceManager(get_hardware_layer())   # reads RAZERHUB_BACKEND
    await manager.refresh()
    for device in manager.active_devices:
        print(device.name, [f.feature_identifier for f in device.features])
    manager.destroy()
"""

from __future__ import annotations

from razerhub.hardware import get_hardware_layer
from razerhub.manager import DeviceManager

__version__ = "1.0.0"

__all__ = ["DeviceManager", "get_hardware_layer", "__version__"]
