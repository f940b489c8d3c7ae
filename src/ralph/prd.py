"""PRD handling: resolve the task list and progress file from ``--prd``."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ralph.config import ConfigError

# Looked up in this order when --prd names a directory.
PRD_CANDIDATES = ("tasks.json", "prd.md")
PROGRESS_FILE_NAME = "progress.txt"


@dataclass(frozen=True)
class PrdPaths:
    prd_file: Path
    progress_file: Path


def find_prd_file(prd_dir: Path) -> Path | None:
    """Return the first conventional task file inside *prd_dir*."""
    for name in PRD_CANDIDATES:
        p = prd_dir / name
        if p.is_file():
            return p
    return None


def resolve_prd_paths(prd_input: str | Path) -> PrdPaths:
    """Resolve a file or directory argument into the task list and progress file."""
    p = Path(prd_input)
    if p.is_dir():
        prd_dir = p
        prd_file = find_prd_file(p)
        if prd_file is None:
            raise ConfigError(f"No {' or '.join(PRD_CANDIDATES)} in {p}")
    else:
        prd_file = p
        prd_dir = p.parent

    if not prd_file.is_file():
        raise ConfigError(f"PRD not found: {prd_file}")

    return PrdPaths(
        prd_file=prd_file,
        progress_file=prd_dir / PROGRESS_FILE_NAME,
    )


def ensure_progress_file(progress_file: Path) -> None:
    """Create the agent's progress notes file if it does not exist yet."""
    progress_file.parent.mkdir(parents=True, exist_ok=True)
    progress_file.touch(exist_ok=True)
