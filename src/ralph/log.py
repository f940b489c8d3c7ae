"""Logging utilities with colored output via Rich.

Messages are printed literally; only the level tags carry markup. Callers
that own a :class:`ralph.display.Display` pass its console so status and
log lines share one output stream.
"""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape

console = Console(highlight=False)
_err_console = Console(highlight=False, stderr=True)

_verbose = False


def set_verbose(enabled: bool) -> None:
    global _verbose
    _verbose = enabled


def success(msg: str, *, to: Console | None = None) -> None:
    (to or console).print(f"[green]\\[OK][/green] {escape(msg)}")


def warn(msg: str, *, to: Console | None = None) -> None:
    (to or console).print(f"[yellow]\\[WARN][/yellow] {escape(msg)}")


def error(msg: str, *, to: Console | None = None) -> None:
    (to or _err_console).print(f"[red]\\[ERROR][/red] {escape(msg)}")


def debug(msg: str, *, to: Console | None = None) -> None:
    if _verbose:
        (to or console).print(f"[dim]\\[DEBUG] {escape(msg)}[/dim]")
