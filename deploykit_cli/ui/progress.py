"""Two-level install progress bars rendered with rich."""

from __future__ import annotations

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)


class RichProgressReporter:
    """Coarse "step" bar over a fine "progress" bar."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console(stderr=True)
        self._progress: Progress | None = None
        self._step_task: TaskID | None = None
        self._sub_task: TaskID | None = None

    def start(self, total_steps: int, total_progress: int) -> None:
        self._progress = Progress(
            SpinnerColumn(style="green"),
            TextColumn("[progress.description]{task.description}"),
            TimeElapsedColumn(),
            BarColumn(complete_style="cyan", finished_style="blue"),
            MofNCompleteColumn(),
            console=self.console,
        )
        self._step_task = self._progress.add_task("Step", total=total_steps)
        self._sub_task = self._progress.add_task("Progress", total=total_progress)
        self._progress.start()

    def update(self, step: int, progress: int) -> None:
        if self._progress is None:
            return
        self._progress.update(self._step_task, completed=step)
        self._progress.update(self._sub_task, completed=progress)

    def finish(self) -> None:
        if self._progress is None:
            return
        for task in self._progress.tasks:
            self._progress.update(task.id, completed=task.total)

    def close(self) -> None:
        if self._progress is not None:
            self._progress.stop()
            self._progress = None
