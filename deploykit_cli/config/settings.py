"""Settings storage for front end configuration."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


SETTINGS_PATH = Path(
    os.environ.get(
        "DEPLOYKIT_CLI_SETTINGS_PATH",
        Path.home() / ".config" / "deploykit-cli" / "settings.json",
    )
)

# Default values - use these constants instead of hardcoding values elsewhere
DEFAULT_POLL_INTERVAL = 0.1
DEFAULT_TOTAL_STEPS = 8
DEFAULT_SUB_PROGRESS_TOTAL = 100
DEFAULT_RELEASE_BASE_URL = "https://releases.aosc.io"

DEFAULT_SETTINGS: dict[str, Any] = {
    "dbus_service": "io.aosc.Deploykit",
    "dbus_object_path": "/io/aosc/Deploykit",
    "dbus_interface": "io.aosc.Deploykit1",
    "rpc_timeout_seconds": 120.0,
    "rpc_read_retries": 0,
    "manifest_url": f"{DEFAULT_RELEASE_BASE_URL}/manifest/recipe.json",
    "release_base_url": DEFAULT_RELEASE_BASE_URL,
    "offline_manifest_path": "/run/livekit/livemnt/manifest/recipe.json",
    "offline_sysroot_dir": "/run/livekit/sysroots",
    "http_user_agent": "deploykit",
    "http_timeout_seconds": 60,
    "progress_poll_interval": DEFAULT_POLL_INTERVAL,
    "progress_total_steps": DEFAULT_TOTAL_STEPS,
}


@dataclass
class SettingsStore:
    values: dict[str, Any] = field(default_factory=dict)


settings_store = SettingsStore()


def load_settings() -> None:
    settings_store.values = dict(DEFAULT_SETTINGS)
    if not SETTINGS_PATH.exists():
        return
    try:
        data = json.loads(SETTINGS_PATH.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError):
        return
    if isinstance(data, dict):
        settings_store.values.update(data)


def save_settings() -> None:
    SETTINGS_PATH.parent.mkdir(parents=True, exist_ok=True)
    SETTINGS_PATH.write_text(
        json.dumps(settings_store.values, indent=2, sort_keys=True),
        encoding="utf-8",
    )


def get_setting(key: str, default: Any | None = None) -> Any:
    return settings_store.values.get(key, default)


def set_setting(key: str, value: Any) -> None:
    settings_store.values[key] = value
    save_settings()


def get_float(key: str, default: float = 0.0) -> float:
    try:
        return float(get_setting(key, default))
    except (TypeError, ValueError):
        return default


def get_int(key: str, default: int = 0) -> int:
    try:
        return int(get_setting(key, default))
    except (TypeError, ValueError):
        return default


load_settings()
