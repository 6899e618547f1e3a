"""Progress reporting on stderr for long counting passes."""

from __future__ import annotations

import sys
import time
from typing import Protocol

from rich.console import Console
from rich.progress import BarColumn, MofNCompleteColumn, Progress as RichBar, TextColumn

# Seconds a pass must run before its bar is drawn.
PROGRESS_DELAY = 2.0


class Progress(Protocol):
    def start(self, title: str, total: int | None = None) -> None: ...

    def update(self, completed: int) -> None: ...

    def stop(self) -> None: ...


class NullProgress:
    """Progress sink used when progress display is off."""

    def start(self, title: str, total: int | None = None) -> None:
        pass

    def update(self, completed: int) -> None:
        pass

    def stop(self) -> None:
        pass


class RichProgress:
    """Transient rich progress bar drawn on stderr.

    The bar only appears once a pass has run for ``delay`` seconds, so quick
    passes leave the terminal untouched.
    """

    def __init__(self, console: Console | None = None, delay: float | None = None) -> None:
        self._console = console or Console(stderr=True)
        self._delay = PROGRESS_DELAY if delay is None else delay
        self._bar: RichBar | None = None
        self._task = None
        self._completed = 0
        self._started_at = 0.0
        self.shown = False

    def start(self, title: str, total: int | None = None) -> None:
        self._bar = RichBar(
            TextColumn("{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            console=self._console,
            transient=True,
        )
        self._completed = 0
        self._task = self._bar.add_task(title, total=total or None)
        self._started_at = time.monotonic()
        self.shown = False
        self._show_if_due()

    def _show_if_due(self) -> None:
        if not self.shown and time.monotonic() - self._started_at >= self._delay:
            self._bar.start()
            self.shown = True

    def update(self, completed: int) -> None:
        if self._bar is None or completed < self._completed:
            return
        self._completed = completed
        self._bar.update(self._task, completed=completed)
        self._show_if_due()

    def stop(self) -> None:
        if self._bar is None:
            return
        if self.shown:
            self._bar.stop()
        self._bar = None
        self._task = None
        self.shown = False


def make_progress(enabled: bool | None) -> Progress:
    """Return a progress sink; ``None`` means "on when stderr is a terminal"."""
    if enabled is None:
        enabled = sys.stderr.isatty()
    return RichProgress() if enabled else NullProgress()
