"""Engine registry: get the right adapter by name."""

from __future__ import annotations

from ralph.engines.base import EngineBase
from ralph.engines.claude import ClaudeEngine
from ralph.engines.opencode import OpenCodeEngine


def get_engine(name: str, *, model: str = "", safe_mode: bool = False) -> EngineBase:
    """Return an engine adapter for *name*."""
    match name:
        case "claude":
            return ClaudeEngine(model, safe_mode=safe_mode)
        case "opencode":
            return OpenCodeEngine(model, safe_mode=safe_mode)
        case _:
            raise ValueError(f"Unknown engine: {name}")


ENGINE_NAMES = ("claude", "opencode")
