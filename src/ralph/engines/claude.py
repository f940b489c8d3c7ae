"""Claude Code agent adapter."""

from __future__ import annotations

from ralph.engines.base import EngineBase


class ClaudeEngine(EngineBase):
    name = "claude"
    binary = "claude"
    install_hint = "https://github.com/anthropics/claude-code"

    def build_cmd(self, prompt: str) -> list[str]:
        cmd = [self.resolve_binary(), "-p", prompt]
        if not self.safe_mode:
            cmd.append("--dangerously-skip-permissions")
        cmd += self.model_args()
        return cmd
