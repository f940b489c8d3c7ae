"""Base class for AI agent adapters."""

from __future__ import annotations

import shutil
from abc import ABC, abstractmethod


class EngineBase(ABC):
    """Abstract agent adapter.  Subclasses implement ``build_cmd``.

    An adapter only knows how to spell one agent invocation; launching and
    supervising the process is :class:`ralph.supervisor.ProcessSupervisor`'s job.
    """

    name: str = "base"
    binary: str = ""
    install_hint: str = ""

    def __init__(self, model: str = "", *, safe_mode: bool = False) -> None:
        self.model = model
        self.safe_mode = safe_mode

    @abstractmethod
    def build_cmd(self, prompt: str) -> list[str]:
        """Return the CLI command list for the given prompt."""
        ...

    def build_env(self) -> dict[str, str] | None:
        """Extra environment for the agent process, or ``None`` to inherit ours."""
        return None

    def resolve_binary(self) -> str:
        # Use resolved path so subprocess gets an absolute path; on some platforms
        # (e.g. Windows with pipx) the child process resolves PATH differently.
        return shutil.which(self.binary) or self.binary

    def model_args(self) -> list[str]:
        return ["--model", self.model] if self.model else []

    def check_available(self) -> str | None:
        """Return an error message if the agent CLI is not available, else None."""
        if not shutil.which(self.binary):
            msg = f"{self.binary} CLI not found"
            if self.install_hint:
                msg += f". Install from {self.install_hint}"
            return msg
        return None
