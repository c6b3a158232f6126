"""Cooperative cancellation of patch runs.

A run is only ever stopped between two diffs: apply_all() asks its
ProgressMonitor before starting each file, so every file is either fully
processed or left untouched.
"""

from __future__ import annotations

import signal
from collections.abc import Iterator
from contextlib import contextmanager


class CancellationToken:
    """Cancellation flag for a patch run, with the reason it was raised.

    Example:
        token = CancellationToken()
        with token.cancel_on_sigint():
            report = patcher.apply_all(storage, progress=RichProgressMonitor(console, token))
    """

    def __init__(self) -> None:
        self.reason: str | None = None

    @property
    def is_cancelled(self) -> bool:
        return self.reason is not None

    def cancel(self, reason: str = "cancelled") -> None:
        """Request cancellation; the first reason given is kept."""
        if self.reason is None:
            self.reason = reason

    @contextmanager
    def cancel_on_sigint(self) -> Iterator[None]:
        """Turn Ctrl+C into a cancellation request for the duration of the block.

        Must be entered from the main thread. The previous SIGINT handler is
        restored on exit.
        """
        def handler(signum: int, frame: object) -> None:
            self.cancel("interrupted")

        previous = signal.signal(signal.SIGINT, handler)
        try:
            yield
        finally:
            signal.signal(signal.SIGINT, previous)
