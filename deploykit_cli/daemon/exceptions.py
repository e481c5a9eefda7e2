"""Custom exceptions for daemon-driven installs.

Every failure in a session is fatal: nothing here is retried or resumed,
and each exception carries enough context to explain the abort.

Exception Hierarchy:
    DeploykitError (base)
        ├── DaemonError
        │   ├── DaemonUnavailableError
        │   ├── DecodeError
        │   └── RpcFailure
        ├── InstallError
        │   ├── InstallFailedError
        │   └── InstallCancelledError
        ├── SelectionError
        │   ├── NoCompatibleAsset
        │   ├── NoEspPartition
        │   ├── UnsupportedDevice
        │   ├── ConfigurationError
        │   └── ManifestError
        └── ValidationError

Usage:
    from deploykit_cli.daemon.exceptions import RpcFailure

    try:
        client.start_install()
    except RpcFailure as error:
        log.error(f"Daemon refused: {error.payload}")
"""

from __future__ import annotations

from typing import Any


class DeploykitError(Exception):
    """Base exception for all front end failures."""



class DaemonError(DeploykitError):
    """Base exception for daemon communication errors."""



class DaemonUnavailableError(DaemonError):
    """The daemon could not be reached over the bus."""

    def __init__(self, method: str, reason: str = ""):
        self.method = method
        self.reason = reason
        msg = f"Daemon unavailable while calling {method}"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class DecodeError(DaemonError):
    """The daemon returned a response that is not a well-formed envelope."""

    def __init__(self, message: str, raw: Any = None):
        self.raw = raw
        super().__init__(message)


class RpcFailure(DaemonError):
    """The daemon answered with result=Error."""

    def __init__(self, method: str, payload: Any):
        self.method = method
        self.payload = payload
        super().__init__(f"Failed to execute {method}: {payload!r}")


class InstallError(DeploykitError):
    """Base exception for install job outcomes."""



class InstallFailedError(InstallError):
    """The daemon reported the install job as failed."""

    def __init__(self, payload: Any):
        self.payload = payload
        super().__init__(f"Installation failed: {payload!r}")


class InstallCancelledError(InstallError):
    """The install job was cancelled before it finished."""

    def __init__(self, message: str = "Installation cancelled"):
        super().__init__(message)


class SelectionError(DeploykitError):
    """Base exception for choices that cannot produce an install."""



class NoCompatibleAsset(SelectionError):
    """No image in the variant matches the host architecture."""

    def __init__(self, variant: str, arch: str | None):
        self.variant = variant
        self.arch = arch
        super().__init__(
            f"Variant {variant} has no image for architecture {arch or 'unknown'}"
        )


class NoEspPartition(SelectionError):
    """EFI host with no EFI system partition to install the bootloader to."""

    def __init__(self, message: str = "No ESP partition found on device"):
        super().__init__(message)


class UnsupportedDevice(SelectionError):
    """The selected device cannot be used as an install target."""

    def __init__(self, device: str, reason: str):
        self.device = device
        self.reason = reason
        super().__init__(f"Unsupported device {device}: {reason}")


class ConfigurationError(SelectionError):
    """User choices cannot be turned into a daemon configuration."""



class ManifestError(SelectionError):
    """The variant manifest could not be loaded or parsed."""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Failed to load manifest from {source}: {reason}")


class ValidationError(DeploykitError):
    """User input violates a field constraint."""

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid {field}: {reason}")
