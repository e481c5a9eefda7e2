"""One end-to-end install session.

The session gathers the user's choices (asking the daemon about disks as it
goes), builds the configuration, pushes it field by field, starts the job
and follows it to completion. Any failure aborts the session; nothing is
rolled back since the daemon owns its own consistency.
"""

from __future__ import annotations

from typing import Callable

from rich.console import Console

from deploykit_cli.daemon.client import DaemonClient
from deploykit_cli.daemon.exceptions import (
    ConfigurationError,
    NoEspPartition,
    UnsupportedDevice,
)
from deploykit_cli.domain import (
    Device,
    ImageAsset,
    InstallConfiguration,
    Locale,
    Partition,
    UserChoices,
    Variant,
    VariantManifest,
)
from deploykit_cli.logging import LoggerFactory, operation_context
from deploykit_cli.ui.prompts import Prompter

from .assets import resolve_host_arch, select_asset
from .cancellation import CancellationToken
from .config_builder import build_configuration
from .locales import list_timezones, load_locales
from .manifest import load_manifest
from .progress import ProgressMonitor, ProgressReporter
from .validation import (
    default_username,
    validate_full_name,
    validate_hostname,
    validate_password,
    validate_username,
)

log = LoggerFactory.for_session()


class InstallSession:
    """Sequences choice gathering, configuration push, install and monitoring."""

    def __init__(
        self,
        client: DaemonClient,
        prompter: Prompter,
        reporter: ProgressReporter | None = None,
        *,
        cancel_token: CancellationToken | None = None,
        offline: bool | None = None,
        arch: str | None = None,
        reboot: bool = False,
        poll_interval: float | None = None,
        manifest_loader: Callable[[bool], VariantManifest] = load_manifest,
        locales: list[Locale] | None = None,
        timezones: list[str] | None = None,
        console: Console | None = None,
    ) -> None:
        self.client = client
        self.prompter = prompter
        self.reporter = reporter
        self.cancel_token = cancel_token or CancellationToken()
        self.offline = offline
        self.arch = arch or resolve_host_arch()
        self.reboot = reboot
        self.poll_interval = poll_interval
        self.manifest_loader = manifest_loader
        self._locales = locales
        self._timezones = timezones
        self.console = console or Console()

    # --- whole session -----------------------------------------------------

    def run(self) -> InstallConfiguration:
        with operation_context("install", arch=self.arch) as op_log:
            self.client.ping()
            variant, asset, choices = self.collect_choices()
            config = build_configuration(choices, variant, asset)
            op_log.info(f"Installing {variant.name} to {choices.target_partition.path}")
            self.push_configuration(config)
            self.start_install()
            self.monitor()
            self.finalize()
        return config

    # --- choice gathering --------------------------------------------------

    def collect_choices(self) -> tuple[Variant, ImageAsset, UserChoices]:
        offline = self.offline
        if offline is None:
            offline = self.prompter.confirm("Install AOSC OS on offline mode?", default=True)

        manifest = self.manifest_loader(offline)
        variant = self.select_variant(manifest)
        asset = select_asset(variant, self.arch)

        device = self.select_device()
        self.check_device(device)
        partitions = self.client.list_partitions(device.path)
        target = self.select_partition(partitions)
        efi_partition = self.select_esp()

        full_name = self.prompter.text("Your name?", check=validate_full_name)
        username = self.prompter.text(
            "Username", default=default_username(full_name), check=validate_username
        )
        password = self.prompter.password("Password", check=validate_password)
        timezone = self.prompter.select(
            "Select timezone",
            [(name, name) for name in self.timezones],
            searchable=True,
        )
        locale = self.prompter.select(
            "Select locale",
            [(entry.text, entry.data) for entry in self.locales],
            searchable=True,
        )
        hostname = self.prompter.text("Hostname", check=validate_hostname)
        rtc_as_localtime = self.prompter.confirm("Use RTC as localtime?", default=False)

        choices = UserChoices(
            offline_install=offline,
            full_name=full_name,
            username=username,
            password=password,
            hostname=hostname,
            timezone=timezone,
            locale=locale,
            rtc_as_localtime=rtc_as_localtime,
            target_partition=target,
            efi_partition=efi_partition,
        )
        log.debug(f"Collected {choices!r}")
        return variant, asset, choices

    @property
    def locales(self) -> list[Locale]:
        if self._locales is None:
            self._locales = load_locales()
        return self._locales

    @property
    def timezones(self) -> list[str]:
        if self._timezones is None:
            self._timezones = list_timezones()
        return self._timezones

    def select_variant(self, manifest: VariantManifest) -> Variant:
        variants = manifest.installable_variants()
        if not variants:
            raise ConfigurationError("Manifest lists no installable variants")
        return self.prompter.select(
            "Install AOSC OS variant?", [(variant.name, variant) for variant in variants]
        )

    def select_device(self) -> Device:
        devices = self.client.list_devices()
        if not devices:
            raise ConfigurationError("No storage devices found")

        self.console.print("List of Devices:")
        for device in devices:
            self.console.print(device.format_label(), markup=False)

        return self.prompter.select(
            "Select Device", [(device.path, device) for device in devices]
        )

    def check_device(self, device: Device) -> None:
        """Reject devices the daemon cannot install to.

        Raises:
            UnsupportedDevice: The device is backed by LVM
        """
        if self.client.is_lvm_device(device.path):
            raise UnsupportedDevice(device.path, "installer does not support LVM devices")

    def select_partition(self, partitions: list[Partition]) -> Partition:
        candidates = [partition for partition in partitions if partition.path]
        if not candidates:
            raise ConfigurationError("Selected device has no partitions")
        return self.prompter.select(
            "Select system target partition",
            [(partition.format_label(), partition) for partition in candidates],
        )

    def select_esp(self) -> Partition | None:
        """Ask for the EFI system partition on EFI hosts.

        Raises:
            NoEspPartition: EFI host and the daemon found no ESP
        """
        is_efi = self.client.is_efi()
        log.info(f"Device is{' ' if is_efi else ' not '}EFI")
        if not is_efi:
            return None

        candidates = [
            partition for partition in self.client.get_all_esp_partitions() if partition.path
        ]
        if not candidates:
            raise NoEspPartition()
        return self.prompter.select(
            "Select ESP Partition",
            [(partition.format_label(), partition) for partition in candidates],
        )

    # --- daemon side -------------------------------------------------------

    def push_configuration(self, config: InstallConfiguration) -> None:
        for entry in config.entries():
            self.cancel_token.raise_if_cancelled()
            log.info(f"Setting {entry.field.value}")
            self.client.set_config(entry.field, entry.value)

    def start_install(self) -> None:
        self.cancel_token.raise_if_cancelled()
        self.client.start_install()
        log.info("Installation started")

    def monitor(self) -> None:
        monitor = ProgressMonitor(
            self.client,
            self.reporter,
            interval=self.poll_interval,
            cancel_token=self.cancel_token,
        )
        try:
            monitor.run()
        finally:
            if self.reporter is not None:
                self.reporter.close()

    def finalize(self) -> None:
        if self.reboot:
            log.info("Syncing disks and rebooting")
            self.client.sync_and_reboot()
        else:
            self.client.sync_disk()
