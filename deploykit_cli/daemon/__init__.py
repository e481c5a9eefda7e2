"""Communication with the privileged Deploykit daemon."""

from __future__ import annotations

from deploykit_cli.config import settings

from .client import DaemonClient, Envelope, EnvelopeResult
from .methods import DaemonMethod
from .transport import DBusTransport, Transport


def connect(read_retries: int | None = None) -> DaemonClient:
    """Connect to the daemon on the system bus using the configured names."""
    transport = DBusTransport()
    transport.connect()
    if read_retries is None:
        read_retries = settings.get_int("rpc_read_retries", 0)
    return DaemonClient(transport, read_retries=read_retries)


__all__ = [
    "DBusTransport",
    "DaemonClient",
    "DaemonMethod",
    "Envelope",
    "EnvelopeResult",
    "Transport",
    "connect",
]
