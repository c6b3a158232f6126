"""Progress monitors for patch runs."""

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
)

from diffmend.core.cancel import CancellationToken

logger = logging.getLogger(__name__)


class NullProgressMonitor:
    """Monitor that reports nothing; cancellation comes from an optional token."""

    def __init__(self, token: CancellationToken | None = None) -> None:
        self.token = token
        self.total = 0
        self.completed = 0

    def begin(self, total_units: int) -> None:
        self.total = total_units
        self.completed = 0

    def worked(self, units: int) -> None:
        self.completed += units

    def is_cancelled(self) -> bool:
        return self.token is not None and self.token.is_cancelled

    def sub_task(self, description: str) -> None:
        logger.debug("Patching %s", description)

    def done(self) -> None:
        pass


class RichProgressMonitor:
    """Progress bar on a rich Console, cancelled through a CancellationToken.

    Example:
        token = CancellationToken()
        monitor = RichProgressMonitor(get_console(), token)
        report = patcher.apply_all(storage, progress=monitor)
    """

    def __init__(self, console: Console, token: CancellationToken | None = None) -> None:
        self.token = token or CancellationToken()
        self._progress = Progress(
            SpinnerColumn(),
            TextColumn("[bold]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            console=console,
            transient=True,
        )
        self._task: TaskID | None = None

    def begin(self, total_units: int) -> None:
        self._progress.start()
        self._task = self._progress.add_task("Patching", total=total_units)

    def worked(self, units: int) -> None:
        if self._task is not None:
            self._progress.advance(self._task, units)

    def is_cancelled(self) -> bool:
        return self.token.is_cancelled

    def sub_task(self, description: str) -> None:
        if self._task is not None:
            self._progress.update(self._task, description=description)

    def done(self) -> None:
        self._progress.stop()
        self._task = None
