"""Wrappers for text file I/O with consistent encoding (UTF-8)."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

PathLike = Path | str

TAIL_BLOCK_SIZE = 8192


def read_text(path: PathLike, errors: str = "strict", **kwargs: Any) -> str:
    """Read path as text with UTF-8 encoding. Forwards extra kwargs to Path.read_text."""
    p = path if isinstance(path, Path) else Path(path)
    return p.read_text(encoding="utf-8", errors=errors, **kwargs)


def tail_lines(path: PathLike, count: int, block_size: int = TAIL_BLOCK_SIZE) -> list[str]:
    """Return the last *count* lines of *path* without trailing newlines.

    Reads backwards from the end in *block_size* chunks, so the cost depends
    on the lines returned rather than the file size. Undecodable bytes are
    replaced and NUL bytes dropped. A missing file yields an empty list: the
    writer may not have produced anything yet.
    """
    if count <= 0:
        return []
    try:
        f = open(path, "rb")
    except FileNotFoundError:
        return []

    with f:
        pos = f.seek(0, os.SEEK_END)
        data = b""
        # count + 1 newlines guarantee count complete lines after the first one.
        while pos > 0 and data.count(b"\n") <= count:
            step = min(block_size, pos)
            pos -= step
            f.seek(pos)
            data = f.read(step) + data

    text = data.decode("utf-8", errors="replace").replace("\r\n", "\n").replace("\r", "\n")
    lines = text.split("\n")
    if pos > 0:
        # Started mid-file: the first piece is a partial line.
        lines = lines[1:]
    if lines and lines[-1] == "":
        lines.pop()
    return [line.replace("\0", "") for line in lines[-count:]]
