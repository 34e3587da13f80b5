"""razerhub command-line entry point.

Usage::

    python -m razerhub [--config PATH] [--devices-dir PATH] [--backend NAME]
                       [--catalog] [--json] [--debug]
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

from razerhub.config import ManagerConfig
from razerhub.devices.catalog import DeviceCatalog
from razerhub.hardware import format_product_id, get_hardware_layer
from razerhub.manager import DeviceManager


def _print(msg: str = "") -> None:
    print(msg, flush=True)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m razerhub",
        description="List attached Razer devices and their configured features",
    )
    parser.add_argument("--config", metavar="PATH", default=None, help="JSON config file")
    parser.add_argument(
        "--devices-dir",
        metavar="PATH",
        default=None,
        help="Device profile directory (default: bundled catalog or RAZERHUB_DEVICES_DIR)",
    )
    parser.add_argument(
        "--backend",
        default=None,
        help="Hardware backend: hid or mock (default: RAZERHUB_BACKEND or hid)",
    )
    parser.add_argument("--catalog", action="store_true", help="List known device profiles and exit")
    parser.add_argument("--json", action="store_true", help="Print JSON instead of a table")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser


def load_config(args: argparse.Namespace) -> ManagerConfig:
    config = ManagerConfig.load(args.config) if args.config else ManagerConfig()
    config = ManagerConfig.from_env(config)
    if args.devices_dir:
        config.devices_dir = args.devices_dir
    if args.backend:
        config.backend = args.backend
    return config


def print_catalog(catalog: DeviceCatalog, as_json: bool) -> None:
    if as_json:
        _print(json.dumps(
            [
                {
                    "name": p.name,
                    "productId": format_product_id(p.product_id),
                    "mainType": p.main_type,
                }
                for p in catalog
            ],
            indent=2,
        ))
        return
    for profile in catalog:
        _print(f"{format_product_id(profile.product_id)}  {profile.main_type:<10}  {profile.name}")


async def run(config: ManagerConfig, as_json: bool) -> int:
    catalog = DeviceCatalog.from_directory(config.catalog_dir())
    manager = DeviceManager(get_hardware_layer(config.backend), catalog, config=config)
    try:
        await manager.refresh()
        devices = manager.active_devices
        if as_json:
            _print(json.dumps([d.to_dict() for d in devices], indent=2, default=str))
        elif not devices:
            _print("No supported Razer devices found.")
        else:
            for device in devices:
                features = ", ".join(f.feature_identifier for f in device.features)
                _print(f"{format_product_id(device.product_id)}  {device.name}  [{features}]")
    finally:
        manager.destroy()
    return 0


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    level = logging.DEBUG if args.debug else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")

    config = load_config(args)
    if args.catalog:
        print_catalog(DeviceCatalog.from_directory(config.catalog_dir()), args.json)
        return

    try:
        sys.exit(asyncio.run(run(config, args.json)))
    except KeyboardInterrupt:
        _print("\nCancelled.")
        sys.exit(1)


if __name__ == "__main__":
    main()
