"""Configuration defaults, exit codes, and the per-run context for RALPH."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path

from ralph.tasks.model import TaskFormat

DEFAULT_AGENT = "claude"
DEFAULT_PRD = "PRD.json"
DEFAULT_MAX_ITERATIONS = 2
DEFAULT_LOG_LINES = 50

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_INTERRUPTED = 130


class ConfigError(Exception):
    """Invalid run configuration, reported before any iteration starts."""


@dataclass(frozen=True)
class RunContext:
    """Everything one invocation needs, resolved once at startup."""

    prd_file: Path
    progress_file: Path
    task_format: TaskFormat

    agent: str = DEFAULT_AGENT
    model: str = ""
    safe_mode: bool = False

    # 0 means unlimited
    max_iterations: int = DEFAULT_MAX_ITERATIONS
    log_lines: int = DEFAULT_LOG_LINES

    prompt_file: Path | None = None
    prompt_override: str = ""

    # Companion prd.md offered to the agent alongside a JSON task list
    prd_document: Path | None = None

    def __post_init__(self) -> None:
        if self.max_iterations < 0:
            raise ConfigError(f"Invalid iterations: {self.max_iterations}")
        if self.log_lines < 1:
            raise ConfigError(f"Invalid log lines: {self.log_lines}")

    @property
    def unlimited(self) -> bool:
        return self.max_iterations == 0


def is_windows() -> bool:
    return sys.platform == "win32"
