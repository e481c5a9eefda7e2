"""Cancel the daemon's install job from an interrupt signal.

The controller owns a ``CancellationToken`` that is handed to the session
and the progress monitor. On SIGINT/SIGTERM it marks the token, sends
``cancel_install`` through the shared client, and exits the process with a
non-zero status. Python runs signal handlers on the main thread between
bytecodes, so the cancel request never overlaps another daemon call.
"""

from __future__ import annotations

import signal
import sys
import threading
from typing import Any, Iterable

from deploykit_cli.daemon.client import DaemonClient
from deploykit_cli.daemon.exceptions import DeploykitError, InstallCancelledError
from deploykit_cli.logging import LoggerFactory

log = LoggerFactory.for_system()

DEFAULT_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class CancellationToken:
    """Cancellation flag observed by the polling loop."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise InstallCancelledError()

    def wait(self, timeout: float) -> bool:
        """Sleep up to ``timeout`` seconds; returns True early once cancelled."""
        return self._event.wait(timeout)


class CancellationController:
    """Installs the interrupt handlers for one install session."""

    def __init__(
        self,
        client: DaemonClient,
        token: CancellationToken | None = None,
        *,
        exit_code: int = 1,
        signals: Iterable[int] = DEFAULT_SIGNALS,
    ) -> None:
        self.client = client
        self.token = token or CancellationToken()
        self.exit_code = exit_code
        self.signals = tuple(signals)
        self._previous: dict[int, Any] = {}
        self._cancel_sent = False
        self._lock = threading.Lock()

    def install(self) -> None:
        for signum in self.signals:
            self._previous[signum] = signal.getsignal(signum)
            signal.signal(signum, self._handle)

    def uninstall(self) -> None:
        for signum, handler in self._previous.items():
            signal.signal(signum, handler)
        self._previous.clear()

    def __enter__(self) -> CancellationController:
        self.install()
        return self

    def __exit__(self, *exc_info) -> None:
        self.uninstall()

    def request_cancel(self) -> bool:
        """Mark the token and ask the daemon to cancel, once.

        Returns False if cancellation was already sent.

        Raises:
            DeploykitError: The cancel request failed
        """
        self.token.cancel()
        with self._lock:
            if self._cancel_sent:
                return False
            self._cancel_sent = True
        log.warning("Cancelling installation")
        self.client.cancel_install()
        log.info("Daemon acknowledged cancellation")
        return True

    def _handle(self, signum, frame) -> None:
        log.warning(f"Received {signal.Signals(signum).name}")
        try:
            self.request_cancel()
        except DeploykitError as error:
            log.error(f"Failed to cancel installation: {error}")
        sys.exit(self.exit_code)
