"""Tests for the device profile catalog."""

from __future__ import annotations

import json
import logging

import pytest

from razerhub.devices.catalog import (
    CatalogError,
    DeviceCatalog,
    DeviceProfile,
    default_catalog_dir,
    parse_catalog_product_id,
)


def _write(path, data):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data) if not isinstance(data, str) else data, encoding="utf-8")


class TestParseCatalogProductId:
    @pytest.mark.parametrize("value", ["0x00C7", "00C7", "0x00c7", " c7 ", 199])
    def test_hex_forms(self, value):
        assert parse_catalog_product_id(value) == 199

    @pytest.mark.parametrize("value", ["nope", "", None, -3, 1.5, True, "0x", "+c7", "c_7", "0x+c7", "\u0661\u0669"])
    def test_invalid(self, value):
        with pytest.raises(CatalogError):
            parse_catalog_product_id(value)


class TestDeviceProfile:
    def test_from_dict(self):
        profile = DeviceProfile.from_dict({
            "name": "Razer DeathAdder V2",
            "productId": "0x0084",
            "mainType": "mouse",
            "image": "da.png",
            "features": ["static", {"mouseDpi": {"maxDpi": 20000}}],
            "featuresMissing": ["static"],
            "featuresConfig": [{"mouseDpi": {"minDpi": 200}}],
        })
        assert profile.product_id == 0x0084
        assert profile.features == ("static", {"mouseDpi": {"maxDpi": 20000}})
        assert profile.features_missing == ("static",)
        assert dict(profile.features_config) == {"mouseDpi": {"minDpi": 200}}
        assert profile.image == "da.png"

    def test_optional_fields_default_to_none(self):
        profile = DeviceProfile.from_dict({"name": "X", "productId": "0x1", "mainType": "keyboard"})
        assert profile.features is None
        assert profile.features_missing is None
        assert profile.features_config is None

    @pytest.mark.parametrize("data", [
        {"productId": "0x1", "mainType": "mouse"},
        {"name": "X", "mainType": "mouse"},
        {"name": "X", "productId": "0x1"},
        {"name": "X", "productId": "0x1", "mainType": "mouse", "features": "static"},
        {"name": "X", "productId": "0x1", "mainType": "mouse", "features": [42]},
        {"name": "X", "productId": "0x1", "mainType": "mouse", "featuresMissing": [1]},
        {"name": "X", "productId": "0x1", "mainType": "mouse", "featuresConfig": [{"a": 1}]},
        ["not", "an", "object"],
    ])
    def test_malformed_entries_raise(self, data):
        with pytest.raises(CatalogError):
            DeviceProfile.from_dict(data)

    @pytest.mark.parametrize("kwargs", [
        {"product_id": "0x1"},
        {"product_id": -1},
        {"product_id": True},
        {"features": (42,)},
        {"features": "static"},
        {"features_missing": ("static", None)},
        {"features_config": {"mouseDpi": 20000}},
    ])
    def test_direct_construction_is_validated(self, kwargs):
        fields = {"name": "X", "product_id": 1, "main_type": "mouse", **kwargs}
        with pytest.raises(CatalogError):
            DeviceProfile(**fields)

    def test_direct_construction_freezes_fields(self):
        profile = DeviceProfile(
            "X", 1, "mouse",
            features=["static"],
            features_missing=["wave"],
            features_config=[{"mouseDpi": {"maxDpi": 16000}}],
        )
        assert profile.features == ("static",)
        assert profile.features_missing == ("wave",)
        with pytest.raises(TypeError):
            profile.features_config["mouseDpi"] = {}


class TestDeviceCatalog:
    def test_find_and_product_ids(self, catalog):
        assert catalog.find(0x0084).name == "Razer DeathAdder V2"
        assert catalog.find(0x9999) is None
        assert catalog.product_ids == sorted(catalog.product_ids)
        assert len(catalog) == 5

    def test_duplicate_ids_first_wins(self, caplog):
        with caplog.at_level(logging.WARNING):
            catalog = DeviceCatalog.from_profiles([
                {"name": "First", "productId": "0x0010", "mainType": "mouse"},
                {"name": "Second", "productId": "0x10", "mainType": "keyboard"},
            ])
        assert catalog.find(0x10).name == "First"
        assert catalog.product_ids == [0x10]
        assert "Duplicate productId 0x0010" in caplog.text

    def test_from_directory_recursive_and_sorted(self, tmp_path):
        _write(tmp_path / "b.json", {"name": "B", "productId": "0x0002", "mainType": "mouse"})
        _write(tmp_path / "a.json", {"name": "A", "productId": "0x0002", "mainType": "keyboard"})
        _write(tmp_path / "sub" / "c.json", {"name": "C", "productId": "0x0003", "mainType": "egpu"})
        catalog = DeviceCatalog.from_directory(tmp_path)
        assert [p.name for p in catalog] == ["A", "B", "C"]
        assert catalog.find(2).name == "A"
        assert catalog.find(3).source == tmp_path / "sub" / "c.json"

    def test_malformed_files_skipped(self, tmp_path, caplog):
        _write(tmp_path / "good.json", {"name": "Good", "productId": "0x0001", "mainType": "mouse"})
        _write(tmp_path / "broken.json", "{not json")
        _write(tmp_path / "bad_pid.json", {"name": "Bad", "productId": "xyz", "mainType": "mouse"})
        with caplog.at_level(logging.WARNING):
            catalog = DeviceCatalog.from_directory(tmp_path)
        assert [p.name for p in catalog] == ["Good"]
        assert "broken.json" in caplog.text
        assert "bad_pid.json" in caplog.text

    def test_missing_directory_gives_empty_catalog(self, tmp_path):
        catalog = DeviceCatalog.from_directory(tmp_path / "nowhere")
        assert len(catalog) == 0

    def test_bundled_catalog_loads(self):
        catalog = DeviceCatalog.from_directory(default_catalog_dir())
        assert len(catalog) >= 10
        assert catalog.find(0x00C7).name == "Razer Pro Click V2 Vertical Edition"
        assert {p.main_type for p in catalog} >= {
            "keyboard", "mouse", "mousedock", "mousemat", "egpu", "headphone", "accessory",
        }

    def test_profiles_are_immutable(self, catalog):
        profile = catalog.find(0x0084)
        with pytest.raises(Exception):
            profile.name = "changed"
        with pytest.raises(TypeError):
            profile.features_config["mouseDpi"] = {}
