"""Domain objects for daemon-reported storage, the variant manifest and job progress.

These replace the raw JSON values the daemon and the release server hand
back. Each ``from_wire``/``from_dict`` constructor raises ``KeyError``,
``TypeError`` or ``ValueError`` on malformed input; the daemon client turns
those into ``DecodeError`` at the call boundary.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union


def _require_mapping(data: Any, what: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise TypeError(f"{what} must be an object, got {type(data).__name__}")
    return data


def _require_int(value: Any, what: str) -> int:
    # bool is an int subclass but never a valid size
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{what} must be an integer, got {value!r}")
    return value


def human_size(size_bytes):
    if size_bytes is None:
        return "0B"
    size = float(size_bytes)
    for unit in ["B", "KiB", "MiB", "GiB", "TiB"]:
        if size < 1024.0:
            return f"{size:.1f}{unit}"
        size /= 1024.0
    return f"{size:.1f}PiB"


# ==============================================================================
# Storage Domain
# ==============================================================================


@dataclass(frozen=True)
class Device:
    """A whole disk reported by ``get_list_devices``."""

    model: str
    path: str  # e.g., "/dev/nvme0n1"
    size: int  # bytes

    def format_label(self) -> str:
        """Format a human-readable label, e.g. "Samsung SSD /dev/sda (476.9GiB)"."""
        return f"{self.model} {self.path} ({human_size(self.size)})"

    @classmethod
    def from_dict(cls, data: Any) -> Device:
        data = _require_mapping(data, "device")
        return cls(
            model=str(data["model"]),
            path=str(data["path"]),
            size=_require_int(data["size"], "device size"),
        )


@dataclass(frozen=True)
class Partition:
    """A partition reported by the daemon.

    Only ever passed back to the daemon verbatim as ``target_partition`` or
    ``efi_partition``; the field names match the daemon's wire format.
    """

    size: int
    path: str | None = None  # e.g., "/dev/sda2"
    parent_path: str | None = None  # e.g., "/dev/sda"
    fs_type: str | None = None  # e.g., "ext4", "vfat"

    def format_label(self) -> str:
        fs = self.fs_type or "unformatted"
        return f"{self.path} {fs} ({human_size(self.size)})"

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "parent_path": self.parent_path,
            "fs_type": self.fs_type,
            "size": self.size,
        }

    @classmethod
    def from_dict(cls, data: Any) -> Partition:
        data = _require_mapping(data, "partition")
        return cls(
            path=data.get("path"),
            parent_path=data.get("parent_path"),
            fs_type=data.get("fs_type"),
            size=_require_int(data["size"], "partition size"),
        )


# ==============================================================================
# Manifest Domain
# ==============================================================================


@dataclass(frozen=True)
class ImageAsset:
    """One per-architecture system image (squashfs) of a variant."""

    arch: str  # e.g., "amd64"
    path: str  # relative to the release base URL
    sha256: str
    download_size: int
    inst_size: int
    inode_count: int
    build_tag: str | None = None  # sortable date token, e.g. "20240202"

    @classmethod
    def from_dict(cls, data: Any) -> ImageAsset:
        data = _require_mapping(data, "squashfs entry")
        tag = data.get("data")
        return cls(
            arch=str(data["arch"]),
            path=str(data["path"]),
            sha256=str(data["sha256sum"]),
            download_size=_require_int(data["downloadSize"], "downloadSize"),
            inst_size=_require_int(data["instSize"], "instSize"),
            inode_count=_require_int(data["inodes"], "inodes"),
            build_tag=None if tag is None else str(tag),
        )


@dataclass(frozen=True)
class Variant:
    """A distributable OS flavour (e.g. "Desktop", "Server")."""

    name: str
    retro: bool = False
    dir_name: str | None = None  # sysroot directory on offline media
    assets: tuple[ImageAsset, ...] = ()

    @property
    def is_installable(self) -> bool:
        """Retro variants and the buildkit are never offered for install."""
        return not self.retro and self.name.lower() != "buildkit"

    @classmethod
    def from_dict(cls, data: Any) -> Variant:
        data = _require_mapping(data, "variant")
        squashfs = data.get("squashfs") or []
        if not isinstance(squashfs, list):
            raise TypeError("variant squashfs must be a list")
        retro = data.get("retro", False)
        if not isinstance(retro, bool):
            raise TypeError(f"variant retro must be a boolean, got {retro!r}")
        dir_name = data.get("dir-name")
        if dir_name is not None and not isinstance(dir_name, str):
            raise TypeError(f"variant dir-name must be a string, got {dir_name!r}")
        return cls(
            name=str(data["name"]),
            retro=retro,
            dir_name=dir_name,
            assets=tuple(ImageAsset.from_dict(item) for item in squashfs),
        )


@dataclass(frozen=True)
class VariantManifest:
    """The release recipe: available variants plus opaque mirror data."""

    variants: tuple[Variant, ...] = ()
    mirrors: Any = None

    def installable_variants(self) -> list[Variant]:
        return [variant for variant in self.variants if variant.is_installable]

    def find_variant(self, name: str) -> Variant | None:
        for variant in self.variants:
            if variant.name == name:
                return variant
        return None

    @classmethod
    def from_dict(cls, data: Any) -> VariantManifest:
        data = _require_mapping(data, "manifest")
        variants = data["variants"]
        if not isinstance(variants, list):
            raise TypeError("manifest variants must be a list")
        return cls(
            variants=tuple(Variant.from_dict(item) for item in variants),
            mirrors=data.get("mirrors"),
        )


@dataclass(frozen=True)
class Locale:
    """An entry of the bundled locale table."""

    lang_english: str
    locale: str
    lang: str
    text: str  # shown to the user
    data: str  # pushed to the daemon as the ``locale`` field

    @classmethod
    def from_dict(cls, data: Any) -> Locale:
        data = _require_mapping(data, "locale")
        return cls(
            lang_english=str(data["lang_english"]),
            locale=str(data["locale"]),
            lang=str(data["lang"]),
            text=str(data["text"]),
            data=str(data["data"]),
        )


# ==============================================================================
# Progress Domain
# ==============================================================================


@dataclass(frozen=True)
class ProgressPending:
    """The daemon has not started working on the job yet."""


@dataclass(frozen=True)
class ProgressWorking:
    step: int  # coarse step, 1..total steps
    progress: int  # fine sub-step, 0..100


@dataclass(frozen=True)
class ProgressError:
    payload: Any


@dataclass(frozen=True)
class ProgressFinish:
    """The install job completed."""


ProgressState = Union[ProgressPending, ProgressWorking, ProgressError, ProgressFinish]


def parse_progress(data: Any) -> ProgressState:
    """Decode the ``get_progress`` payload (tagged by ``status``)."""
    data = _require_mapping(data, "progress")
    status = data["status"]
    if status == "Pending":
        return ProgressPending()
    if status == "Working":
        return ProgressWorking(
            step=_require_int(data["step"], "step"),
            progress=_require_int(data["progress"], "progress"),
        )
    if status == "Error":
        payload = {key: value for key, value in data.items() if key != "status"}
        return ProgressError(payload=payload)
    if status == "Finish":
        return ProgressFinish()
    raise ValueError(f"Unknown progress status: {status!r}")


@dataclass(frozen=True)
class AutoPartitionProgress:
    """Progress of an ``auto_partition`` job.

    ``status`` is one of "Pending", "Working", "Finish". On "Finish",
    ``succeeded`` tells whether ``result`` is the daemon's Ok or Err value.
    """

    status: str
    succeeded: bool = False
    result: Any = None

    @property
    def is_finished(self) -> bool:
        return self.status == "Finish"

    @classmethod
    def from_wire(cls, data: Any) -> AutoPartitionProgress:
        data = _require_mapping(data, "auto partition progress")
        status = data["status"]
        if status in ("Pending", "Working"):
            return cls(status=status)
        if status != "Finish":
            raise ValueError(f"Unknown auto partition status: {status!r}")
        res = _require_mapping(data["res"], "auto partition result")
        if "Ok" in res:
            return cls(status=status, succeeded=True, result=res["Ok"])
        if "Err" in res:
            return cls(status=status, succeeded=False, result=res["Err"])
        raise ValueError(f"Auto partition result has neither Ok nor Err: {res!r}")
