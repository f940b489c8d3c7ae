"""Process supervision for one agent attempt.

The agent's stdout and stderr both go to a temporary *sink* file that the
progress renderer tails while the process runs.
"""

from __future__ import annotations

import os
import subprocess
import tempfile
import time
from dataclasses import dataclass, field
from pathlib import Path

from rich.console import Console

from ralph import log
from ralph.config import is_windows

# Reported for an attempt whose agent binary vanished between check and launch.
EXIT_NOT_FOUND = 127


@dataclass
class AgentAttempt:
    """One supervised agent run; never outlives its iteration."""

    label: str
    task_num: int
    total: int
    output_file: Path
    started_at: float = field(default_factory=time.monotonic)
    proc: subprocess.Popen[bytes] | None = None
    return_code: int | None = None

    @classmethod
    def create(cls, label: str, task_num: int, total: int) -> AgentAttempt:
        fd, name = tempfile.mkstemp(prefix="ralph-output-", suffix=".log")
        # The child opens its own handle; only the path is kept.
        os.close(fd)
        return cls(label=label, task_num=task_num, total=total, output_file=Path(name))

    @property
    def elapsed(self) -> float:
        return time.monotonic() - self.started_at

    @property
    def succeeded(self) -> bool:
        return self.return_code == 0

    def discard(self) -> None:
        """Delete the output sink (safe to call more than once)."""
        self.output_file.unlink(missing_ok=True)


class ProcessSupervisor:
    """Launches, awaits, and stops agent processes.  Never retries."""

    poll_interval: float = 0.2
    terminate_timeout: float = 2.0

    def __init__(self, console: Console | None = None) -> None:
        self.console = console

    def launch(
        self,
        cmd: list[str],
        *,
        output_file: Path,
        env: dict[str, str] | None = None,
    ) -> subprocess.Popen[bytes] | None:
        """Start *cmd* with stdout and stderr appended to *output_file*.

        Returns ``None`` when the executable cannot be started; the reason is
        written to the sink so it shows up like any other agent output.
        """
        log.debug(f"Launching: {cmd[0]}", to=self.console)
        with open(output_file, "ab") as sink:
            try:
                return subprocess.Popen(
                    cmd,
                    stdin=None,
                    stdout=sink,
                    stderr=subprocess.STDOUT,
                    env=env,
                    creationflags=self._creationflags(),
                )
            except OSError as e:
                sink.write(f"{cmd[0]}: {e.strerror or e}\n".encode("utf-8", errors="replace"))
                return None

    def wait(self, proc: subprocess.Popen[bytes] | None) -> int:
        """Block until *proc* exits while remaining responsive to KeyboardInterrupt."""
        if proc is None:
            return EXIT_NOT_FOUND
        while True:
            try:
                return proc.wait(timeout=self.poll_interval)
            except subprocess.TimeoutExpired:
                continue

    def terminate(self, proc: subprocess.Popen[bytes] | None) -> None:
        """Terminate a subprocess promptly (best effort, idempotent)."""
        if proc is None:
            return

        try:
            if proc.poll() is None:
                proc.terminate()
        except OSError:
            pass

        try:
            proc.wait(timeout=self.terminate_timeout)
            return
        except (OSError, subprocess.TimeoutExpired):
            pass

        try:
            if proc.poll() is None:
                proc.kill()
        except OSError:
            pass

        try:
            proc.wait(timeout=self.terminate_timeout)
        except (OSError, subprocess.TimeoutExpired):
            log.warn(f"Agent process {proc.pid} did not exit after kill", to=self.console)

    @staticmethod
    def _creationflags() -> int:
        """Creation flags for agent processes."""
        if is_windows():
            return int(getattr(subprocess, "CREATE_NEW_PROCESS_GROUP", 0))
        return 0
