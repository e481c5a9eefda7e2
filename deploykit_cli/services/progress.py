"""Track the daemon's install job until it finishes or fails."""

from __future__ import annotations

import time
from typing import Any, Callable, Protocol

from deploykit_cli.config import settings
from deploykit_cli.daemon.client import DaemonClient
from deploykit_cli.daemon.exceptions import InstallFailedError, RpcFailure
from deploykit_cli.domain import (
    ProgressError,
    ProgressFinish,
    ProgressPending,
    ProgressWorking,
)
from deploykit_cli.logging import LoggerFactory, ThrottledLogger

from .cancellation import CancellationToken

log = LoggerFactory.for_poll()
# Poll-tagged: reaches the console only at TRACE
progress_log = ThrottledLogger(log, interval_seconds=5.0)


class ProgressReporter(Protocol):
    """Renders the coarse step and fine sub-step indicators."""

    def start(self, total_steps: int, total_progress: int) -> None:
        ...

    def update(self, step: int, progress: int) -> None:
        ...

    def finish(self) -> None:
        ...

    def close(self) -> None:
        ...


class ProgressMonitor:
    """Poll ``get_progress`` until the job reaches Finish or Error.

    Pending polls only sleep; Working polls forward step/progress to the
    reporter as reported, without correcting a step that goes backwards.
    """

    def __init__(
        self,
        client: DaemonClient,
        reporter: ProgressReporter | None = None,
        *,
        interval: float | None = None,
        total_steps: int | None = None,
        cancel_token: CancellationToken | None = None,
        sleep: Callable[[float], Any] | None = None,
    ) -> None:
        self.client = client
        self.reporter = reporter
        self.interval = (
            interval
            if interval is not None
            else settings.get_float("progress_poll_interval", settings.DEFAULT_POLL_INTERVAL)
        )
        self.total_steps = total_steps or settings.get_int(
            "progress_total_steps", settings.DEFAULT_TOTAL_STEPS
        )
        self.cancel_token = cancel_token
        self._sleep = sleep
        self.polls = 0

    def sleep(self) -> None:
        if self._sleep is not None:
            self._sleep(self.interval)
        elif self.cancel_token is not None:
            self.cancel_token.wait(self.interval)
        else:
            time.sleep(self.interval)

    def run(self) -> None:
        """Block until the job finishes.

        Raises:
            InstallFailedError: The daemon reported Error (payload verbatim)
            InstallCancelledError: The cancel token was set while polling
        """
        if self.reporter is not None:
            self.reporter.start(self.total_steps, settings.DEFAULT_SUB_PROGRESS_TOTAL)

        last_step = 0
        while True:
            if self.cancel_token is not None:
                self.cancel_token.raise_if_cancelled()

            state = self.client.get_progress()
            self.polls += 1

            if isinstance(state, ProgressFinish):
                if self.reporter is not None:
                    self.reporter.finish()
                log.success("Finished")
                return

            if isinstance(state, ProgressError):
                log.error(f"Install job failed: {state.payload!r}")
                raise InstallFailedError(state.payload)

            if isinstance(state, ProgressWorking):
                if state.step < last_step:
                    log.debug(f"Step went backwards: {last_step} -> {state.step}")
                last_step = state.step
                if self.reporter is not None:
                    self.reporter.update(state.step, state.progress)
                progress_log.info(
                    "progress",
                    f"Step {state.step}/{self.total_steps}, {state.progress}%",
                )
            elif isinstance(state, ProgressPending):
                log.trace("Install job pending")

            self.sleep()


def wait_for_auto_partition(
    client: DaemonClient,
    device: str,
    *,
    interval: float | None = None,
    cancel_token: CancellationToken | None = None,
    sleep: Callable[[float], Any] | None = None,
) -> Any:
    """Run ``auto_partition`` on ``device`` and wait for its result.

    Raises:
        RpcFailure: The daemon finished partitioning with an error
        InstallCancelledError: The cancel token was set while polling
    """
    monitor = ProgressMonitor(
        client, interval=interval, cancel_token=cancel_token, sleep=sleep
    )
    client.auto_partition(device)
    while True:
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()
        progress = client.get_auto_partition_progress()
        if progress.is_finished:
            if not progress.succeeded:
                raise RpcFailure("auto_partition", progress.result)
            return progress.result
        monitor.sleep()
