from __future__ import annotations

import logging

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeRemainingColumn,
)

from tomatl.domain.interfaces import IProgressReporter

logger = logging.getLogger(__name__)


class RichProgressReporter(IProgressReporter):
    """Spinner + bar countdown display.

    The spinner animates on rich's own refresh thread; finish() (or leaving
    the context manager) stops that thread. Rendering errors are logged and
    dropped so they never reach the countdown.
    """

    def __init__(
        self,
        *,
        console: Console | None = None,
        message: str = "Good luck!",
        done_message: str = "🎉 Done!",
        refresh_per_second: float = 12.5,
    ) -> None:
        self._console = console or Console()
        self._message = message
        self._done_message = done_message
        self._progress = Progress(
            SpinnerColumn("dots", style="blue"),
            TextColumn("{task.description}"),
            BarColumn(bar_width=40, style="blue", complete_style="cyan"),
            MofNCompleteColumn(),
            TextColumn("sec •"),
            TextColumn("ETA"),
            TimeRemainingColumn(),
            console=self._console,
            refresh_per_second=refresh_per_second,
            transient=False,
        )
        self._task: TaskID | None = None
        self._total = 0
        self._started = False
        self._finished = False

    @property
    def finished(self) -> bool:
        return self._finished

    def start(self, total: int) -> None:
        if self._started:
            return
        try:
            self._total = max(total, 0)
            self._task = self._progress.add_task(self._message, total=self._total)
            self._progress.start()
            self._started = True
        except Exception:
            logger.debug("Could not start progress display", exc_info=True)

    def accept_tick(self, current: int, total: int) -> None:
        try:
            if not self._started:
                self.start(total)
            if self._task is not None:
                self._total = total
                self._progress.update(self._task, completed=current, total=total)
        except Exception:
            logger.debug("Progress update failed at %d/%d", current, total, exc_info=True)

    def finish(self) -> None:
        if self._finished:
            return
        self._finished = True
        try:
            if self._task is not None:
                self._progress.update(self._task, completed=self._total)
        except Exception:
            logger.debug("Progress finish failed", exc_info=True)
        self.close()
        try:
            self._console.print(self._done_message)
        except Exception:
            logger.debug("Progress finish failed", exc_info=True)

    def close(self) -> None:
        """Stop the refresh thread without the completion message."""
        try:
            self._progress.stop()
        except Exception:
            logger.debug("Progress close failed", exc_info=True)

    def __enter__(self) -> RichProgressReporter:
        return self

    def __exit__(self, *exc: object) -> None:
        if not self._finished:
            self.close()


class NullProgressReporter(IProgressReporter):
    def __init__(self) -> None:
        self.finished = False

    def accept_tick(self, current: int, total: int) -> None:
        return None

    def finish(self) -> None:
        self.finished = True

    def close(self) -> None:
        return None
