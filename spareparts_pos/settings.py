# spareparts_pos/settings.py
"""
Business settings (currency, tax rate, low-stock threshold, company block,
appearance) persisted as JSON.

Settings are an immutable value: `SettingsStore.load()` returns an
`AppSettings`, components receive it explicitly, and a change is made by
`update_section(...)`, which writes the file and hands back a new value.
Callers that hold an old value call `reload()` to pick up the change.

The file uses camelCase keys (`lowStockThreshold`, `taxRate`, ...);
snake_case keys are accepted on update.
"""
from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field, fields, replace
from pathlib import Path
from typing import Any

from .constants import DEFAULT_CURRENCY, DEFAULT_LOW_STOCK_THRESHOLD, DEFAULT_TAX_RATE

_log = logging.getLogger(__name__)

SECTIONS = ("general", "company", "appearance")


@dataclass(frozen=True)
class GeneralSettings:
    currency: str = DEFAULT_CURRENCY
    date_format: str = "YYYY-MM-DD"
    time_format: str = "12h"
    language: str = "en"
    low_stock_threshold: int = DEFAULT_LOW_STOCK_THRESHOLD
    backup_frequency: str = "weekly"
    tax_rate: float = DEFAULT_TAX_RATE


@dataclass(frozen=True)
class CompanySettings:
    name: str = ""
    tax_id: str = ""
    phone: str = ""
    email: str = ""
    address: str = ""
    logo: str = ""


@dataclass(frozen=True)
class AppearanceSettings:
    theme: str = "light"
    primary_color: str = "#0d6efd"
    nav_style: str = "sidebar"
    font_size: str = "medium"
    compact_mode: bool = False


@dataclass(frozen=True)
class AppSettings:
    general: GeneralSettings = field(default_factory=GeneralSettings)
    company: CompanySettings = field(default_factory=CompanySettings)
    appearance: AppearanceSettings = field(default_factory=AppearanceSettings)

    @property
    def tax_rate(self) -> float:
        return self.general.tax_rate

    @property
    def currency(self) -> str:
        return self.general.currency

    @property
    def low_stock_threshold(self) -> int:
        return self.general.low_stock_threshold

    def to_json_dict(self) -> dict:
        return {name: {_camel(k): v for k, v in asdict(getattr(self, name)).items()} for name in SECTIONS}


_SECTION_TYPES = {
    "general": GeneralSettings,
    "company": CompanySettings,
    "appearance": AppearanceSettings,
}


def _camel(snake: str) -> str:
    head, *rest = snake.split("_")
    return head + "".join(p.title() for p in rest)


def _section_from_json(section: str, raw: Any):
    cls = _SECTION_TYPES[section]
    if not isinstance(raw, dict):
        return cls()
    defaults = cls()
    values = {}
    for f in fields(cls):
        key = _camel(f.name)
        if key in raw:
            values[f.name] = _coerce(raw[key], getattr(defaults, f.name))
        elif f.name in raw:
            values[f.name] = _coerce(raw[f.name], getattr(defaults, f.name))
    return cls(**values)


def _coerce(value: Any, default: Any) -> Any:
    """Cast a JSON value to the type of the default; keep the default on failure."""
    try:
        if isinstance(default, bool):
            return bool(value)
        if isinstance(default, int):
            return int(value)
        if isinstance(default, float):
            return float(value)
        if isinstance(default, str):
            return "" if value is None else str(value)
    except (TypeError, ValueError):
        _log.warning("settings: ignoring invalid value %r (expected %s)", value, type(default).__name__)
        return default
    return value


def settings_from_dict(raw: dict) -> AppSettings:
    return AppSettings(**{s: _section_from_json(s, raw.get(s)) for s in SECTIONS})


class SettingsStore:
    """Reads and writes settings.json; never holds a mutable shared copy."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def load(self) -> AppSettings:
        """
        Load settings from disk. A missing file is created with defaults;
        an unreadable file falls back to defaults and is left untouched.
        """
        if not self.path.exists():
            settings = AppSettings()
            self.save(settings)
            return settings
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            _log.error("settings: could not read %s: %s", self.path, e)
            return AppSettings()
        if not isinstance(raw, dict):
            return AppSettings()
        return settings_from_dict(raw)

    reload = load

    def save(self, settings: AppSettings) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(settings.to_json_dict(), indent=2), encoding="utf-8")
        tmp.replace(self.path)

    def update_section(self, section: str, values: dict) -> AppSettings:
        """
        Replace fields of one section (keys may be snake_case or camelCase),
        persist, and return the new settings value.
        """
        if section not in SECTIONS:
            raise ValueError(f"Unknown settings section: {section}")
        current = self.load()
        merged = {_camel(f.name): getattr(getattr(current, section), f.name)
                  for f in fields(_SECTION_TYPES[section])}
        for k, v in values.items():
            merged[_camel(k)] = v
        updated = replace(current, **{section: _section_from_json(section, merged)})
        self.save(updated)
        return updated
