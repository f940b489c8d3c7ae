"""Task and TaskList data models shared by the task sources and the runner."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

# Label reported when no incomplete task remains.
NO_TASK_LABEL = "Task"


class TaskFormat(str, Enum):
    FLAT_JSON = "flat-json"
    NESTED_JSON = "json"
    MARKDOWN = "markdown"


@dataclass(frozen=True)
class Task:
    description: str
    completed: bool = False
    id: str = ""
    index: int = 0

    @property
    def label(self) -> str:
        return self.description or self.id or NO_TASK_LABEL


@dataclass
class TaskList:
    format: TaskFormat
    tasks: list[Task] = field(default_factory=list)

    def remaining(self) -> list[Task]:
        return [t for t in self.tasks if not t.completed]

    def completed(self) -> list[Task]:
        return [t for t in self.tasks if t.completed]

    def next_task(self) -> Task | None:
        for t in self.tasks:
            if not t.completed:
                return t
        return None
