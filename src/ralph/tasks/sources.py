"""Task sources: read a PRD task list from disk in one of the supported formats.

Every query re-reads the file. The agent edits the task list between (and
during) iterations, so nothing parsed here is ever cached.
"""

from __future__ import annotations

import json
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from ralph.io_utils import read_text
from ralph.tasks.model import NO_TASK_LABEL, Task, TaskFormat, TaskList

MARKER_FIELD = "passes"
TASKS_FIELD = "tasks"
PRD_DOCUMENT = "prd.md"

# Markdown labels are cut to this many characters for display.
MARKDOWN_LABEL_LIMIT = 60

# A recognized box may be followed directly by its text ("- [ ]Task").
_CHECKBOX_RE = re.compile(r"^- \[([ xX])\]\s*(.*)$")
# Any other single-character box followed by whitespace or end of line.
_BAD_CHECKBOX_RE = re.compile(r"^- \[(.)\](?:\s+(.*))?$")
_LABEL_KEYS = ("description", "name", "title")


class TaskSourceError(ValueError):
    """The task list cannot be read or fails validation."""


class TaskSource(ABC):
    """Uniform query surface over a task list file."""

    format: TaskFormat

    def __init__(self, path: Path) -> None:
        self.path = path

    @abstractmethod
    def load(self) -> TaskList:
        """Parse and validate the current file content."""
        ...

    def remaining_count(self) -> int:
        return len(self.load().remaining())

    def completed_count(self) -> int:
        return len(self.load().completed())

    def next_task_label(self) -> str:
        task = self.load().next_task()
        if task is None:
            return NO_TASK_LABEL
        return task.label

    def prd_document(self) -> Path | None:
        """Companion PRD text the agent may read for context."""
        return None

    def _read(self) -> str:
        try:
            return read_text(self.path, errors="replace")
        except OSError as e:
            raise TaskSourceError(f"Cannot read PRD {self.path}: {e.strerror or e}") from e


# ── JSON ─────────────────────────────────────────────────────────────


def _parse_json(source: TaskSource) -> Any:
    try:
        return json.loads(source._read())
    except json.JSONDecodeError as e:
        raise TaskSourceError(f"Invalid JSON: {source.path} ({e.msg} at line {e.lineno})") from e


def _task_ref(entry: dict[str, Any], index: int) -> str:
    """How a task is named in diagnostics: id, else description, else position."""
    for key in ("id", *_LABEL_KEYS):
        value = entry.get(key)
        if value is not None and value != "":
            return str(value)
    return f"index {index}"


def _json_task(entry: Any, index: int) -> Task:
    if not isinstance(entry, dict):
        raise TaskSourceError(f"Task at index {index} is not an object")
    marker = entry.get(MARKER_FIELD)
    if marker is None:
        raise TaskSourceError(f"Task '{_task_ref(entry, index)}' is missing '{MARKER_FIELD}' field")
    if not isinstance(marker, bool):
        raise TaskSourceError(
            f"Task '{_task_ref(entry, index)}' has a non-boolean '{MARKER_FIELD}' field: {marker!r}"
        )

    description = ""
    for key in _LABEL_KEYS:
        value = entry.get(key)
        if value is not None:
            description = str(value)
            break
    raw_id = entry.get("id")
    return Task(
        description=description,
        completed=marker,
        id="" if raw_id is None else str(raw_id),
        index=index,
    )


class _JsonTaskSource(TaskSource):
    @abstractmethod
    def _entries(self, data: Any) -> list[Any]:
        """Return the raw task entries of the decoded document."""
        ...

    def load(self) -> TaskList:
        entries = self._entries(_parse_json(self))
        tasks = [_json_task(entry, i) for i, entry in enumerate(entries)]
        return TaskList(format=self.format, tasks=tasks)

    def prd_document(self) -> Path | None:
        doc = self.path.parent / PRD_DOCUMENT
        return doc if doc.is_file() else None


class FlatJsonSource(_JsonTaskSource):
    """A top-level JSON array of task objects."""

    format = TaskFormat.FLAT_JSON

    def _entries(self, data: Any) -> list[Any]:
        if not isinstance(data, list):
            raise TaskSourceError(f"Invalid format: {self.path} must be a JSON array of tasks")
        return data


class NestedJsonSource(_JsonTaskSource):
    """A JSON object holding the tasks under ``tasks`` next to agent-only metadata."""

    format = TaskFormat.NESTED_JSON

    def _entries(self, data: Any) -> list[Any]:
        if not isinstance(data, dict):
            raise TaskSourceError(f"Invalid format: {self.path} must be a JSON object")
        tasks = data.get(TASKS_FIELD)
        if not isinstance(tasks, list):
            raise TaskSourceError(f"Invalid format: {self.path} must have .{TASKS_FIELD} array")
        return tasks


# ── Markdown ─────────────────────────────────────────────────────────


class MarkdownSource(TaskSource):
    """Checkbox lines: ``- [ ] todo`` and ``- [x] done``."""

    format = TaskFormat.MARKDOWN

    def load(self) -> TaskList:
        tasks: list[Task] = []
        for lineno, line in enumerate(self._read().splitlines(), start=1):
            line = line.rstrip()
            m = _CHECKBOX_RE.match(line)
            if m:
                mark, text = m.group(1), m.group(2).strip()
                tasks.append(Task(description=text, completed=mark != " ", index=len(tasks)))
                continue
            bad = _BAD_CHECKBOX_RE.match(line)
            if bad:
                mark, text = bad.group(1), (bad.group(2) or "").strip()
                ref = text or f"index {len(tasks)}"
                raise TaskSourceError(
                    f"Task '{ref}' (line {lineno}) has an unrecognized checkbox marker '[{mark}]'"
                )
        return TaskList(format=self.format, tasks=tasks)

    def next_task_label(self) -> str:
        task = self.load().next_task()
        if task is None:
            return NO_TASK_LABEL
        return task.description[:MARKDOWN_LABEL_LIMIT]


# ── Factory ──────────────────────────────────────────────────────────

_SOURCES: dict[TaskFormat, type[TaskSource]] = {
    TaskFormat.FLAT_JSON: FlatJsonSource,
    TaskFormat.NESTED_JSON: NestedJsonSource,
    TaskFormat.MARKDOWN: MarkdownSource,
}


def detect_format(path: Path) -> TaskFormat:
    """Pick the format from the extension and, for JSON, the top-level shape."""
    suffix = path.suffix.lower()
    if suffix in (".md", ".markdown"):
        return TaskFormat.MARKDOWN
    if suffix != ".json":
        raise TaskSourceError(f"Unknown PRD format: {path} (expected .json or .md)")

    data = _parse_json(NestedJsonSource(path))
    if isinstance(data, list):
        return TaskFormat.FLAT_JSON
    return TaskFormat.NESTED_JSON


def open_task_source(path: Path, task_format: TaskFormat | None = None) -> TaskSource:
    """Return the task source for *path*, validated once against the current content."""
    if task_format is None:
        task_format = detect_format(path)
    source = _SOURCES[task_format](path)
    source.load()
    return source
