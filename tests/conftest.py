"""pytest configuration and shared fixtures for razerhub tests."""

import pytest

from razerhub.devices.catalog import DeviceCatalog
from razerhub.hardware import DiscoveredDevice, MockHardwareLayer


# Configure asyncio mode for pytest-asyncio
def pytest_configure(config):
    config.addinivalue_line(
        "markers", "asyncio: mark test as async"
    )


class FakeClock:
    """Manually advanced monotonic clock (seconds)."""

    def __init__(self, start: float = 100.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


PROFILES = [
    {"name": "Razer BlackWidow V3", "productId": "0x024E", "mainType": "keyboard"},
    {
        "name": "Razer DeathAdder V2",
        "productId": "0x0084",
        "mainType": "mouse",
        "featuresMissing": ["waveSimple"],
        "featuresConfig": [{"mouseDpi": {"maxDpi": 20000}}],
    },
    {"name": "Razer Pro Click V2 Vertical Edition", "productId": "0x00C7", "mainType": "mouse"},
    {"name": "Razer Kraken Kitty Edition", "productId": "0x0F19", "mainType": "headphone"},
    {"name": "Razer Mystery Gadget", "productId": "0x0ABC", "mainType": "toaster"},
]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def catalog():
    return DeviceCatalog.from_profiles(PROFILES)


@pytest.fixture
def hardware():
    return MockHardwareLayer([
        DiscoveredDevice(internal_device_id=1, product_id=0x0F19),
        DiscoveredDevice(internal_device_id=2, product_id="0x024E"),
        DiscoveredDevice(internal_device_id=3, product_id="132"),  # 0x0084
    ])
