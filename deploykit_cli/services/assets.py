"""Pick the system image matching the host architecture."""

from __future__ import annotations

import platform
import re
import sys

from deploykit_cli.daemon.exceptions import NoCompatibleAsset
from deploykit_cli.domain import ImageAsset, Variant
from deploykit_cli.logging import get_logger

log = get_logger(source="assets", tags=["manifest"])

# Machine name (as reported by uname) -> release architecture name
ARCH_NAMES = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "i386": "i486",
    "i486": "i486",
    "i586": "i486",
    "i686": "i486",
    "ppc": "powerpc",
    "powerpc": "powerpc",
    "aarch64": "arm64",
    "arm64": "arm64",
    "mips64": "loongson3",
    "riscv64": "riscv64",
    "loongarch64": "loongarch64",
}

_DATE_TAG = re.compile(r"^\d{8}")


def resolve_host_arch(
    machine: str | None = None, byteorder: str | None = None
) -> str | None:
    """Map the running host to a release architecture name.

    PowerPC64 kernels run either byte order, so ``ppc64*`` is resolved from
    the byte order of the running interpreter. Returns None for machines
    with no release images.
    """
    machine = (machine if machine is not None else platform.machine()).lower()
    if machine.startswith("ppc64"):
        byteorder = byteorder or sys.byteorder
        return "ppc64el" if byteorder == "little" else "ppc64"
    return ARCH_NAMES.get(machine)


def _sort_key(asset: ImageAsset) -> tuple[bool, str]:
    # Untagged assets sort after every tagged one
    return (asset.build_tag is not None, asset.build_tag or "")


def select_asset(variant: Variant, arch: str | None) -> ImageAsset:
    """Return the latest image of ``variant`` for ``arch``.

    Candidates are ordered by build tag, compared as plain strings, greatest
    first. Assets sharing a tag keep their manifest order.

    Raises:
        NoCompatibleAsset: No image for ``arch``
    """
    candidates = [
        asset for asset in variant.assets if arch is not None and asset.arch == arch
    ]
    if not candidates:
        raise NoCompatibleAsset(variant.name, arch)

    unsortable = [
        asset.build_tag
        for asset in candidates
        if asset.build_tag is None or not _DATE_TAG.match(asset.build_tag)
    ]
    if unsortable and len(candidates) > 1:
        log.warning(
            f"{variant.name}/{arch}: build tags {unsortable!r} are not date tokens, "
            "latest image may be misidentified"
        )

    selected = sorted(candidates, key=_sort_key, reverse=True)[0]
    log.info(f"Selected {selected.path} ({selected.build_tag or 'untagged'}) for {arch}")
    return selected
