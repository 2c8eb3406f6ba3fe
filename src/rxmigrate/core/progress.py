"""Terminal feedback for migration runs.

Status lines and progress bars go to stderr through one shared Rich console,
so stdout stays free for diffs and ``--json`` reports.
"""

from __future__ import annotations

import sys
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import TypeVar

from rich.console import Console
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn

from rxmigrate.core.logging import get_logger

log = get_logger("progress")

# Below this many files a bar is only noise
_PROGRESS_THRESHOLD = 50

_console = Console(stderr=True)

_STYLES = {
    "success": "[green]✓[/green] ",
    "error": "[red]✗[/red] ",
    "warning": "[yellow]![/yellow] ",
    "info": "  ",
    "none": "",
}

T = TypeVar("T")

_live_display: ContextVar[bool] = ContextVar("live_display", default=False)


def is_console_suppressed() -> bool:
    """True while a progress bar owns the terminal."""
    return _live_display.get()


@contextmanager
def suppress_console_logs() -> Iterator[None]:
    _live_display.set(True)
    try:
        yield
    finally:
        _live_display.set(False)


def _is_tty() -> bool:
    isatty = getattr(sys.stderr, "isatty", None)
    return bool(isatty and isatty())


def get_console() -> Console:
    return _console


def status(message: str, *, style: str = "info", indent: int = 0) -> None:
    """Print one styled line to stderr, e.g. ``status("Changed 2 files", style="success")``."""
    line = " " * indent + _STYLES.get(style, "") + message
    _console.print(line, highlight=False)
    log.debug("status", message=message, style=style)


def pluralize(count: int, singular: str, plural: str | None = None) -> str:
    """``pluralize(1, "file")`` is ``"1 file"``, ``pluralize(3, "fix", "fixes")`` ``"3 fixes"``."""
    return f"{count} {singular if count == 1 else (plural or singular + 's')}"


def progress(
    iterable: Iterable[T],
    *,
    desc: str | None = None,
    total: int | None = None,
    unit: str = "files",
    force: bool = False,
) -> Iterator[T]:
    """Yield from ``iterable``, drawing a bar for long runs on a terminal.

    ``force`` draws the bar regardless of size. Without a known total no bar
    is drawn. Console log lines are held back while the bar is live.
    """
    if total is None and hasattr(iterable, "__len__"):
        total = len(iterable)  # type: ignore[arg-type]

    if not (_is_tty() and total is not None and (force or total > _PROGRESS_THRESHOLD)):
        log.debug("progress_start", desc=desc, total=total)
        yield from iterable
        log.debug("progress_done", desc=desc, total=total)
        return

    columns = (
        TextColumn("    {task.description}"),
        BarColumn(bar_width=25, style="cyan", complete_style="cyan"),
        MofNCompleteColumn(),
        TextColumn("{task.fields[unit]}"),
    )
    with suppress_console_logs(), Progress(*columns, console=_console, transient=True) as bar:
        task = bar.add_task(desc or "Migrating", total=total, unit=unit)
        for item in iterable:
            yield item
            bar.advance(task)
