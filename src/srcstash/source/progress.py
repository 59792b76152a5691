"""
Progress observers for transfer backends.
"""

from typing import Optional

from rich.console import Console
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    TaskID,
    TextColumn,
    TimeRemainingColumn,
    TransferSpeedColumn,
)

from srcstash.constants import PROGRESS_LOG_EVERY
from srcstash.log_utils import logger

from .interfaces import ProgressObserver


class NullProgressObserver(ProgressObserver):
    """Discards all progress reports."""

    def start(self, label: str, total: Optional[int] = None) -> None:
        pass

    def update(self, completed: int, total: Optional[int] = None) -> None:
        pass

    def finish(self) -> None:
        pass


class LoggingProgressObserver(ProgressObserver):
    """
    Writes periodic debug lines through the package logger.

    Used when the console is not interactive, so progress still shows up in
    debug logs without redrawing a bar.
    """

    def __init__(self, every: int = PROGRESS_LOG_EVERY) -> None:
        self.every = every
        self.label = ""
        self.total: Optional[int] = None
        self.completed = 0
        self._updates = 0

    def start(self, label: str, total: Optional[int] = None) -> None:
        self.label = label
        self.total = total
        self.completed = 0
        self._updates = 0
        logger.debug(f"Starting transfer of {label} (size: {total or 'unknown'})")

    def update(self, completed: int, total: Optional[int] = None) -> None:
        if total is not None:
            self.total = total
        self.completed = completed
        self._updates += 1
        if self._updates % self.every == 0:
            logger.debug(
                f"Transferred {completed} of {self.total or 'unknown'} bytes for {self.label}"
            )

    def finish(self) -> None:
        logger.debug(f"Finished transfer of {self.label}: {self.completed} bytes")


class RichProgressObserver(ProgressObserver):
    """Renders a Rich progress bar with byte counts and transfer speed."""

    def __init__(self, progress: Optional[Progress] = None) -> None:
        self._progress = progress or Progress(
            TextColumn("[bold blue]{task.description}"),
            BarColumn(bar_width=40),
            DownloadColumn(),
            TransferSpeedColumn(),
            TimeRemainingColumn(),
            transient=False,
        )
        self._task: Optional[TaskID] = None

    def start(self, label: str, total: Optional[int] = None) -> None:
        self._progress.start()
        self._task = self._progress.add_task(label, total=total)

    def update(self, completed: int, total: Optional[int] = None) -> None:
        if self._task is None:
            return
        if total is not None:
            self._progress.update(self._task, completed=completed, total=total)
        else:
            self._progress.update(self._task, completed=completed)

    def finish(self) -> None:
        if self._task is not None:
            self._progress.refresh()
            self._task = None
        self._progress.stop()


def default_observer(show_progress: bool = True) -> ProgressObserver:
    """Pick a Rich bar for interactive consoles, debug logging otherwise."""
    if show_progress and Console().is_terminal:
        return RichProgressObserver()
    return LoggingProgressObserver()
