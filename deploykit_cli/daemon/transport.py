"""System bus transport to the Deploykit daemon."""

from __future__ import annotations

from typing import Protocol

from deploykit_cli.config import settings
from deploykit_cli.logging import LoggerFactory

from .exceptions import DaemonUnavailableError
from .methods import DaemonMethod

log = LoggerFactory.for_daemon()


class Transport(Protocol):
    """Sends one request and returns the daemon's raw string reply."""

    def invoke(self, method: DaemonMethod, args: tuple[str, ...]) -> str:
        ...


class DBusTransport:
    """Calls the daemon over the system bus with dbus-python.

    Every daemon method returns a single string holding a JSON envelope.
    """

    def __init__(
        self,
        service: str | None = None,
        object_path: str | None = None,
        interface: str | None = None,
        timeout_seconds: float | None = None,
    ) -> None:
        self.service = service or settings.get_setting("dbus_service")
        self.object_path = object_path or settings.get_setting("dbus_object_path")
        self.interface_name = interface or settings.get_setting("dbus_interface")
        self.timeout = (
            timeout_seconds
            if timeout_seconds is not None
            else settings.get_float("rpc_timeout_seconds", 120.0)
        )
        self._dbus = None
        self._interface = None

    def connect(self) -> None:
        """Open the system bus and bind the daemon interface."""
        try:
            import dbus
        except ImportError as error:
            log.error("dbus-python not installed, cannot reach the daemon")
            raise DaemonUnavailableError("connect", "dbus-python not installed") from error

        try:
            bus = dbus.SystemBus()
            self._interface = dbus.Interface(
                bus.get_object(self.service, self.object_path), self.interface_name
            )
        except dbus.DBusException as error:
            log.error(f"D-Bus error connecting to {self.service}: {error}")
            raise DaemonUnavailableError("connect", str(error)) from error

        self._dbus = dbus
        log.debug(f"Connected to {self.service} at {self.object_path}")

    def invoke(self, method: DaemonMethod, args: tuple[str, ...]) -> str:
        if self._interface is None:
            self.connect()

        remote = getattr(self._interface, method.dbus_name)
        try:
            reply = remote(*args, timeout=self.timeout)
        except self._dbus.DBusException as error:
            raise DaemonUnavailableError(method.wire_name, str(error)) from error
        return str(reply)
