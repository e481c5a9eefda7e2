"""Turn the user's answers into the configuration pushed to the daemon."""

from __future__ import annotations

import posixpath

from deploykit_cli.config import settings
from deploykit_cli.daemon.exceptions import ConfigurationError
from deploykit_cli.domain import (
    DirSource,
    DownloadSource,
    HttpSource,
    ImageAsset,
    InstallConfiguration,
    SwapPolicy,
    UserAccount,
    UserChoices,
    Variant,
)


def download_source(
    offline_install: bool,
    variant: Variant,
    asset: ImageAsset,
    *,
    release_base_url: str | None = None,
    sysroot_dir: str | None = None,
) -> DownloadSource:
    """Where the daemon gets the system from.

    Raises:
        ConfigurationError: Offline install of a variant with no sysroot directory
    """
    if offline_install:
        if not variant.dir_name:
            raise ConfigurationError(
                f"Variant {variant.name} has no offline sysroot (missing dir-name)"
            )
        sysroot_dir = sysroot_dir or settings.get_setting("offline_sysroot_dir")
        return DirSource(path=posixpath.join(sysroot_dir, variant.dir_name))

    release_base_url = release_base_url or settings.get_setting("release_base_url")
    return HttpSource(
        url=f"{release_base_url.rstrip('/')}/{asset.path.lstrip('/')}",
        sha256=asset.sha256,
    )


def build_configuration(
    choices: UserChoices,
    variant: Variant,
    asset: ImageAsset,
    *,
    release_base_url: str | None = None,
    sysroot_dir: str | None = None,
) -> InstallConfiguration:
    """Build the immutable configuration for one session.

    Swap is always disabled: custom swap file sizes are not offered yet.
    """
    return InstallConfiguration(
        offline_install=choices.offline_install,
        variant=variant,
        download=download_source(
            choices.offline_install,
            variant,
            asset,
            release_base_url=release_base_url,
            sysroot_dir=sysroot_dir,
        ),
        locale=choices.locale,
        account=UserAccount(
            username=choices.username,
            password=choices.password,
            full_name=choices.full_name,
        ),
        timezone=choices.timezone,
        hostname=choices.hostname,
        rtc_as_localtime=choices.rtc_as_localtime,
        swap=SwapPolicy.DISABLED,
        target_partition=choices.target_partition,
        efi_partition=choices.efi_partition,
    )
