"""Locale table and time zone names offered to the user."""

from __future__ import annotations

import json
import zoneinfo
from pathlib import Path

from deploykit_cli.domain import Locale

LOCALE_TABLE_PATH = Path(__file__).resolve().parent.parent / "data" / "locales.json"

# Legacy aliases and leap-second variants are not useful install choices
_SKIPPED_TZ_PREFIXES = (
    "posix/",
    "right/",
    "Etc/",
    "SystemV/",
    "US/",
    "Canada/",
    "Brazil/",
    "Mexico/",
    "Chile/",
)


def load_locales(path: Path = LOCALE_TABLE_PATH) -> list[Locale]:
    data = json.loads(path.read_text(encoding="utf-8"))
    return [Locale.from_dict(item) for item in data]


def list_timezones() -> list[str]:
    """Area/Location zone names from the system tz database, plus UTC."""
    names = {
        name
        for name in zoneinfo.available_timezones()
        if "/" in name and not name.startswith(_SKIPPED_TZ_PREFIXES)
    }
    return ["UTC", *sorted(names)]
