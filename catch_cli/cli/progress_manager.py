"""
Manages Rich progress bars for transfers, store appends and extractions.
"""

from rich.console import Console
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeRemainingColumn,
    TransferSpeedColumn,
)


class TransferTask:
    """
    A single progress bar. Storage and network code only ever call
    `advance`, `reset`, `set_total`, `set_status` and `finish` on it.
    """

    def __init__(self, progress: Progress, task_id: TaskID, label: str):
        self._progress = progress
        self.task_id = task_id
        self.label = label
        self.finished = False

    def advance(self, amount: int = 1) -> None:
        self._progress.advance(self.task_id, amount)

    def reset(self) -> None:
        self._progress.reset(self.task_id, completed=0)

    def set_total(self, total: int) -> None:
        # Rich renders an indeterminate bar for a None total.
        self._progress.update(self.task_id, total=total or None)

    def set_status(self, text: str) -> None:
        self._progress.update(self.task_id, status=text)

    def finish(self, message: str) -> None:
        if self.finished:
            return
        task = next(t for t in self._progress.tasks if t.id == self.task_id)
        total = task.completed if task.total is None else task.total
        self._progress.update(
            self.task_id, total=total, completed=total, status=message
        )
        self._progress.stop_task(self.task_id)
        self.finished = True


class ProgressManager:
    """Owns the Rich Progress display and hands out TransferTask objects."""

    def __init__(self, console: Console):
        self.console = console
        self.progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}", justify="left"),
            BarColumn(bar_width=30),
            "[progress.percentage]{task.percentage:>3.0f}%",
            "•",
            DownloadColumn(),
            "•",
            TransferSpeedColumn(),
            "•",
            TimeRemainingColumn(),
            TextColumn("[dim]{task.fields[status]}[/dim]"),
            console=console,
            transient=False,
        )
        self._tasks: list[TransferTask] = []

    def add_task(self, label: str, total: int) -> TransferTask:
        if len(label) > 40:
            label = "…" + label[-39:]
        task_id = self.progress.add_task(
            label, total=total or None, start=True, status=""
        )
        task = TransferTask(self.progress, task_id, label)
        self._tasks.append(task)
        return task

    def __enter__(self):
        self.progress.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.progress.stop()

    async def __aenter__(self):
        return self.__enter__()

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        self.__exit__(exc_type, exc_val, exc_tb)
