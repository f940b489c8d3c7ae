"""Tests for ralph.log helpers."""

from __future__ import annotations

import io

from rich.console import Console

from ralph import log


def _console() -> tuple[Console, io.StringIO]:
    out = io.StringIO()
    return Console(file=out, color_system=None, width=120, highlight=False), out


def test_messages_printed_literally():
    console, out = _console()

    log.warn("Handle [/api] routes [wip]", to=console)
    log.error("Task '[bold]x' broke", to=console)
    log.success("done [/]", to=console)

    lines = out.getvalue().splitlines()
    assert lines == [
        "[WARN] Handle [/api] routes [wip]",
        "[ERROR] Task '[bold]x' broke",
        "[OK] done [/]",
    ]


def test_debug_only_when_verbose(monkeypatch):
    console, out = _console()

    monkeypatch.setattr(log, "_verbose", False)
    log.debug("hidden", to=console)
    assert out.getvalue() == ""

    monkeypatch.setattr(log, "_verbose", True)
    log.debug("label [/x]", to=console)
    assert out.getvalue() == "[DEBUG] label [/x]\n"


def test_defaults_to_module_consoles(capsys):
    log.warn("to stdout [/x]")
    log.error("to stderr [/x]")

    captured = capsys.readouterr()
    assert "[WARN] to stdout [/x]" in captured.out
    assert "[ERROR] to stderr [/x]" in captured.err
