"""Live progress block repainted while an agent attempt runs."""

from __future__ import annotations

import threading
import time

from ralph.display import SPINNER, Display, output_line, progress_line
from ralph.io_utils import tail_lines
from ralph.supervisor import AgentAttempt

DEFAULT_INTERVAL = 0.1


class ProgressRenderer:
    """Repaints a status line plus the tail of the attempt's output.

    Every frame first erases exactly the lines the previous frame drew, so
    the block never eats output printed before it and never leaves stale
    lines behind.  Runs on its own thread between :meth:`start` and
    :meth:`stop`; after stopping, the caller clears the last frame with
    :meth:`erase` before printing anything else.
    """

    def __init__(
        self,
        attempt: AgentAttempt,
        display: Display,
        *,
        log_lines: int = 50,
        interval: float = DEFAULT_INTERVAL,
    ) -> None:
        self.attempt = attempt
        self.display = display
        self.log_lines = log_lines
        self.interval = interval
        self.last_line_count = 0
        self._spin_idx = 0
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self._thread is not None:
            return
        self._thread = threading.Thread(target=self._loop, name="ralph-renderer", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        """Signal the loop and wait for its last frame.  Safe if never started."""
        self._stop.set()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join()

    def erase(self) -> None:
        """Clear the most recent frame."""
        self.display.erase_lines(self.last_line_count)
        self.last_line_count = 0

    def render_frame(self) -> int:
        """Draw one frame and return how many lines it occupies."""
        if not self.display.live:
            return 0

        spin = SPINNER[self._spin_idx]
        self._spin_idx = (self._spin_idx + 1) % len(SPINNER)

        lines = [
            progress_line(
                spin,
                self.attempt.task_num,
                self.attempt.total,
                self.attempt.label,
                time.monotonic() - self.attempt.started_at,
            )
        ]
        for raw in tail_lines(self.attempt.output_file, self.log_lines):
            lines.append(output_line(raw))

        with self.display.console:
            self.display.erase_lines(self.last_line_count)
            for line in lines:
                self.display.print_line(line)
        self.last_line_count = len(lines)
        return self.last_line_count

    def _loop(self) -> None:
        # At least one frame per attempt, even when the agent exits instantly.
        while True:
            self.render_frame()
            if self._stop.wait(self.interval):
                return
