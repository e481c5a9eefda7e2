"""Domain models for daemon-driven installs.

This package contains type-safe domain objects for everything exchanged
with the daemon and the release server.
"""

from __future__ import annotations

from .install import (
    ConfigEntry,
    ConfigField,
    DirSource,
    DownloadSource,
    HttpSource,
    InstallConfiguration,
    SwapPolicy,
    UserAccount,
    UserChoices,
)
from .models import (
    AutoPartitionProgress,
    Device,
    ImageAsset,
    Locale,
    Partition,
    ProgressError,
    ProgressFinish,
    ProgressPending,
    ProgressState,
    ProgressWorking,
    Variant,
    VariantManifest,
    human_size,
    parse_progress,
)


__all__ = [
    "AutoPartitionProgress",
    "ConfigEntry",
    "ConfigField",
    "Device",
    "DirSource",
    "DownloadSource",
    "HttpSource",
    "ImageAsset",
    "InstallConfiguration",
    "Locale",
    "Partition",
    "ProgressError",
    "ProgressFinish",
    "ProgressPending",
    "ProgressState",
    "ProgressWorking",
    "SwapPolicy",
    "UserAccount",
    "UserChoices",
    "Variant",
    "VariantManifest",
    "human_size",
    "parse_progress",
]
