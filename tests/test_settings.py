# tests/test_settings.py
from __future__ import annotations

import json

import pytest

from spareparts_pos.settings import AppSettings, SettingsStore, settings_from_dict


def test_missing_file_is_created_with_defaults(store):
    s = store.load()
    assert s == AppSettings()
    assert s.tax_rate == 0.15
    assert s.currency == "USD"
    assert s.low_stock_threshold == 5
    raw = json.loads(store.path.read_text(encoding="utf-8"))
    assert raw["general"]["taxRate"] == 0.15
    assert raw["general"]["lowStockThreshold"] == 5
    assert raw["appearance"]["compactMode"] is False


def test_update_section_accepts_snake_and_camel_keys(store):
    store.load()
    updated = store.update_section("general", {"tax_rate": 0.17, "lowStockThreshold": "9"})
    assert updated.tax_rate == 0.17
    assert updated.low_stock_threshold == 9
    assert updated.general.currency == "USD"
    assert store.reload() == updated


def test_settings_value_is_not_shared_state(store):
    held = store.load()
    store.update_section("company", {"name": "Spares R Us"})
    assert held.company.name == ""
    assert store.reload().company.name == "Spares R Us"
    with pytest.raises(AttributeError):
        held.general.tax_rate = 0.2


def test_unknown_section_rejected(store):
    with pytest.raises(ValueError):
        store.update_section("printing", {"paper": "A4"})


def test_corrupt_file_falls_back_to_defaults(store):
    store.path.write_text("{not json", encoding="utf-8")
    assert store.load() == AppSettings()
    assert store.path.read_text(encoding="utf-8") == "{not json"


def test_invalid_values_keep_defaults():
    s = settings_from_dict({"general": {"taxRate": "abc", "currency": "PKR"}, "company": "oops"})
    assert s.tax_rate == 0.15
    assert s.currency == "PKR"
    assert s.company.name == ""
