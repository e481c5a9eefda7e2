"""Install configuration pushed to the daemon through ``set_config``.

Each configuration field is a closed ``ConfigField`` member and every value
type knows its own wire encoding, so the daemon only ever receives values
produced by ``to_wire``.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Union

from .models import Partition, Variant


class ConfigField(Enum):
    """Configuration keys accepted by ``set_config``, in push order."""

    DOWNLOAD = "download"
    LOCALE = "locale"
    USER = "user"
    TIMEZONE = "timezone"
    HOSTNAME = "hostname"
    RTC_AS_LOCALTIME = "rtc_as_localtime"
    SWAPFILE = "swapfile"
    TARGET_PARTITION = "target_partition"
    EFI_PARTITION = "efi_partition"


@dataclass(frozen=True)
class HttpSource:
    """Download the system image from the release server."""

    url: str
    sha256: str

    def to_wire(self) -> str:
        return json.dumps({"Http": {"url": self.url, "hash": self.sha256}})


@dataclass(frozen=True)
class DirSource:
    """Copy the system from an unpacked sysroot on the live media."""

    path: str

    def to_wire(self) -> str:
        return json.dumps({"Dir": self.path})


DownloadSource = Union[HttpSource, DirSource]


class SwapPolicy(Enum):
    DISABLED = "Disable"

    def to_wire(self) -> str:
        return json.dumps(self.value)


@dataclass(frozen=True)
class UserAccount:
    username: str
    password: str
    full_name: str

    def to_wire(self) -> str:
        return json.dumps(
            {
                "username": self.username,
                "password": self.password,
                "full_name": self.full_name,
            }
        )

    def __repr__(self) -> str:
        return (
            f"UserAccount(username={self.username!r}, password='********', "
            f"full_name={self.full_name!r})"
        )


@dataclass(frozen=True)
class ConfigEntry:
    """One ``set_config(field, value)`` call."""

    field: ConfigField
    value: str


@dataclass
class UserChoices:
    """Answers collected from the prompts, before any validation of the whole."""

    offline_install: bool
    full_name: str
    username: str
    password: str
    hostname: str
    timezone: str
    locale: str
    rtc_as_localtime: bool
    target_partition: Partition
    efi_partition: Partition | None = None

    def __repr__(self) -> str:
        return (
            f"UserChoices(username={self.username!r}, "
            f"hostname={self.hostname!r}, target={self.target_partition.path!r})"
        )


@dataclass(frozen=True)
class InstallConfiguration:
    """Immutable snapshot of everything the daemon needs for one install."""

    offline_install: bool
    variant: Variant
    download: DownloadSource
    locale: str
    account: UserAccount
    timezone: str
    hostname: str
    rtc_as_localtime: bool
    swap: SwapPolicy
    target_partition: Partition
    efi_partition: Partition | None = None

    def entries(self) -> list[ConfigEntry]:
        """Encode every field in the fixed push order."""
        entries = [
            ConfigEntry(ConfigField.DOWNLOAD, self.download.to_wire()),
            ConfigEntry(ConfigField.LOCALE, self.locale),
            ConfigEntry(ConfigField.USER, self.account.to_wire()),
            ConfigEntry(ConfigField.TIMEZONE, self.timezone),
            ConfigEntry(ConfigField.HOSTNAME, self.hostname),
            ConfigEntry(
                ConfigField.RTC_AS_LOCALTIME, "true" if self.rtc_as_localtime else "false"
            ),
            ConfigEntry(ConfigField.SWAPFILE, self.swap.to_wire()),
            ConfigEntry(
                ConfigField.TARGET_PARTITION, json.dumps(self.target_partition.to_dict())
            ),
        ]
        if self.efi_partition is not None:
            entries.append(
                ConfigEntry(
                    ConfigField.EFI_PARTITION, json.dumps(self.efi_partition.to_dict())
                )
            )
        return entries
