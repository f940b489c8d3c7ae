"""OpenCode agent adapter."""

from __future__ import annotations

import os

from ralph.engines.base import EngineBase

# Grants every tool permission without prompting.
ALLOW_ALL_PERMISSION = '{"*":"allow"}'


class OpenCodeEngine(EngineBase):
    name = "opencode"
    binary = "opencode"
    install_hint = "https://opencode.ai/docs/"

    def build_cmd(self, prompt: str) -> list[str]:
        return [self.resolve_binary(), "run", *self.model_args(), prompt]

    def build_env(self) -> dict[str, str] | None:
        if self.safe_mode:
            return None
        env = os.environ.copy()
        env["OPENCODE_PERMISSION"] = ALLOW_ALL_PERMISSION
        return env
