"""Shared fixtures for ralph tests.

File handling in tests:
- Use tmp_path for any directory or file creation so tests are isolated and cleaned up.
- Use ralph.io_utils.read_text and the write_text helper below for UTF-8 I/O.
- Fake agents are small ``python -c`` scripts so the supervisor runs real processes.
"""

from __future__ import annotations

import io
import json
import sys
from pathlib import Path

import pytest
from rich.console import Console

from ralph.config import RunContext
from ralph.display import Display
from ralph.engines.base import EngineBase
from ralph.tasks.model import TaskFormat


def pytest_addoption(parser: pytest.Parser) -> None:
    """Register opt-in switch for slow end-to-end tests."""
    parser.addoption(
        "--run-e2e",
        action="store_true",
        default=False,
        help="Run end-to-end tests marked with 'e2e'.",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Skip e2e tests unless explicitly enabled."""
    if config.getoption("--run-e2e"):
        return

    skip_e2e = pytest.mark.skip(
        reason="E2E tests are skipped by default. Use --run-e2e to include them.",
    )
    for item in items:
        if "e2e" in item.keywords:
            item.add_marker(skip_e2e)


def write_text(path: Path, text: str) -> None:
    """Write *text* to *path* as UTF-8."""
    path.write_text(text, encoding="utf-8")


# ── Fake agents ──────────────────────────────────────────────────────

# Marks the first incomplete task of a nested or flat JSON PRD as done.
FLIP_JSON_SCRIPT = """
import json, sys
path = sys.argv[1]
with open(path, encoding="utf-8") as f:
    data = json.load(f)
tasks = data["tasks"] if isinstance(data, dict) else data
for task in tasks:
    if not task["passes"]:
        task["passes"] = True
        print("working on", task.get("description") or task.get("name"))
        break
with open(path, "w", encoding="utf-8") as f:
    json.dump(data, f)
"""

# Checks the first unchecked Markdown box.
FLIP_MD_SCRIPT = """
import sys
path = sys.argv[1]
with open(path, encoding="utf-8") as f:
    text = f.read()
with open(path, "w", encoding="utf-8") as f:
    f.write(text.replace("- [ ]", "- [x]", 1))
"""

FAIL_SCRIPT = """
import sys
print("something broke", file=sys.stderr)
sys.exit(1)
"""

SLEEP_SCRIPT = """
import time
print("thinking", flush=True)
time.sleep(30)
"""


class ScriptEngine(EngineBase):
    """Runs a Python snippet instead of a real agent CLI."""

    name = "script"
    binary = sys.executable

    def __init__(self, script: str, *args: str) -> None:
        super().__init__()
        self.script = script
        self.args = list(args)
        self.prompts: list[str] = []

    def build_cmd(self, prompt: str) -> list[str]:
        self.prompts.append(prompt)
        return [sys.executable, "-c", self.script, *self.args]


@pytest.fixture
def script_engine():
    """Factory fixture that creates ScriptEngine instances."""
    return ScriptEngine


# ── PRD files ────────────────────────────────────────────────────────


def _nested_prd(tasks: list[dict]) -> dict:
    return {
        "prdName": "test-feature",
        "tasks": tasks,
        "context": {"patterns": ["use dataclasses"], "keyFiles": ["src/app.py"], "nonGoals": []},
    }


@pytest.fixture
def write_json_prd(tmp_path: Path):
    """Write a nested-JSON PRD (``tasks.json``) and return its path."""

    def _write(tasks: list[dict], name: str = "tasks.json", flat: bool = False) -> Path:
        path = tmp_path / name
        payload = tasks if flat else _nested_prd(tasks)
        write_text(path, json.dumps(payload, indent=2))
        return path

    return _write


@pytest.fixture
def write_md_prd(tmp_path: Path):
    """Write a checkbox Markdown PRD and return its path."""

    def _write(body: str, name: str = "prd.md") -> Path:
        path = tmp_path / name
        write_text(path, body)
        return path

    return _write


# ── Run context and display ──────────────────────────────────────────


def _make_ctx(prd_file: Path, task_format: TaskFormat, **overrides) -> RunContext:
    values = dict(
        prd_file=prd_file,
        progress_file=prd_file.parent / "progress.txt",
        task_format=task_format,
        max_iterations=0,
    )
    values.update(overrides)
    return RunContext(**values)


@pytest.fixture
def make_ctx():
    """Factory fixture that creates RunContext instances."""
    return _make_ctx


@pytest.fixture
def term_output() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def live_display(term_output: io.StringIO) -> Display:
    """A terminal-like display writing to ``term_output`` without colors."""
    console = Console(
        file=term_output,
        force_terminal=True,
        color_system=None,
        width=100,
        highlight=False,
    )
    return Display(console=console, live=True)
