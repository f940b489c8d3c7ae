"""Runner: drives the agent one attempt at a time until the PRD is complete."""

from __future__ import annotations

import signal
from collections.abc import Iterator
from contextlib import contextmanager
from enum import Enum

from ralph import log
from ralph.config import EXIT_INTERRUPTED, EXIT_OK, RunContext
from ralph.display import Display, result_line
from ralph.engines.base import EngineBase
from ralph.prompts import build_prompt, select_template
from ralph.renderer import ProgressRenderer
from ralph.supervisor import AgentAttempt, ProcessSupervisor
from ralph.tasks.sources import TaskSource


class RunOutcome(Enum):
    COMPLETED = "completed"
    BUDGET_EXHAUSTED = "budget-exhausted"
    INTERRUPTED = "interrupted"

    @property
    def exit_code(self) -> int:
        if self is RunOutcome.INTERRUPTED:
            return EXIT_INTERRUPTED
        return EXIT_OK


class Runner:
    """Sequential task loop: one agent attempt per iteration, re-reading the PRD each time."""

    def __init__(
        self,
        ctx: RunContext,
        source: TaskSource,
        engine: EngineBase,
        display: Display,
        supervisor: ProcessSupervisor | None = None,
    ) -> None:
        self.ctx = ctx
        self.source = source
        self.engine = engine
        self.display = display
        self.supervisor = supervisor or ProcessSupervisor(display.console)
        self.iteration = 0
        self.attempts_run = 0
        self.failed_attempts = 0
        self.total_tasks = 0
        self._orig_signal_handlers: dict[int, object] = {}

    def run(self) -> RunOutcome:
        """Loop until every task is complete, the budget runs out, or we are interrupted."""
        self._install_signal_handlers()
        try:
            try:
                outcome = self._main_loop()
            except KeyboardInterrupt:
                self.display.console.print()
                log.warn("Interrupted! Cleaned up.", to=self.display.console)
                return RunOutcome.INTERRUPTED
        finally:
            self._restore_signal_handlers()

        self._show_summary()
        return outcome

    def _main_loop(self) -> RunOutcome:
        template = select_template(self.ctx)
        self.total_tasks = self.source.completed_count() + self.source.remaining_count()

        while True:
            if self.source.remaining_count() == 0:
                log.success("All tasks complete!", to=self.display.console)
                return RunOutcome.COMPLETED

            self.iteration += 1
            if self.ctx.max_iterations > 0 and self.iteration > self.ctx.max_iterations:
                log.warn(
                    f"Reached max iterations ({self.ctx.max_iterations})", to=self.display.console
                )
                return RunOutcome.BUDGET_EXHAUSTED

            task_num = self.source.completed_count() + 1
            label = self.source.next_task_label() or f"Task {task_num}"
            log.debug(
                f"Iteration {self.iteration}: task {task_num}/{self.total_tasks} ({label})",
                to=self.display.console,
            )

            prompt = build_prompt(template, self.ctx)
            self._run_attempt(prompt, label, task_num)

    def _run_attempt(self, prompt: str, label: str, task_num: int) -> None:
        with self._attempt(label, task_num) as (attempt, renderer):
            attempt.proc = self.supervisor.launch(
                self.engine.build_cmd(prompt),
                output_file=attempt.output_file,
                env=self.engine.build_env(),
            )
            attempt.return_code = self.supervisor.wait(attempt.proc)

            renderer.stop()
            renderer.erase()
            self.display.print_line(
                result_line(
                    attempt.succeeded,
                    attempt.task_num,
                    attempt.total,
                    attempt.label,
                    attempt.elapsed,
                )
            )

        self.attempts_run += 1
        if not attempt.succeeded:
            self.failed_attempts += 1
            log.debug(f"Agent exited with code {attempt.return_code}", to=self.display.console)

    @contextmanager
    def _attempt(
        self, label: str, task_num: int
    ) -> Iterator[tuple[AgentAttempt, ProgressRenderer]]:
        """Scope of one attempt: whatever happens inside, the renderer is
        stopped and its last frame erased, the agent is stopped, and the
        output sink is deleted."""
        attempt: AgentAttempt | None = None
        renderer: ProgressRenderer | None = None
        try:
            attempt = AgentAttempt.create(label, task_num, self.total_tasks)
            renderer = ProgressRenderer(attempt, self.display, log_lines=self.ctx.log_lines)
            renderer.start()
            yield attempt, renderer
        finally:
            if renderer is not None:
                renderer.stop()
                renderer.erase()
            if attempt is not None:
                self.supervisor.terminate(attempt.proc)
                attempt.discard()

    def _show_summary(self) -> None:
        self.display.console.print("[bold]============================================[/bold]")
        msg = f"[green]Done.[/green] Completed {self.attempts_run} iteration(s)."
        if self.failed_attempts:
            msg += f" [red]{self.failed_attempts} failed.[/red]"
        self.display.console.print(msg)

    # ── Signals ──────────────────────────────────────────────────────

    def _install_signal_handlers(self) -> None:
        """Turn SIGINT/SIGTERM into KeyboardInterrupt so cleanup runs in one place."""
        self._orig_signal_handlers = {}
        signals_to_handle = [signal.SIGINT]
        if hasattr(signal, "SIGBREAK"):
            signals_to_handle.append(signal.SIGBREAK)
        if hasattr(signal, "SIGTERM"):
            signals_to_handle.append(signal.SIGTERM)

        for sig in signals_to_handle:
            try:
                self._orig_signal_handlers[sig] = signal.getsignal(sig)
                signal.signal(sig, self._on_signal)
            except (OSError, RuntimeError, ValueError):
                continue

    def _restore_signal_handlers(self) -> None:
        for sig, handler in self._orig_signal_handlers.items():
            try:
                signal.signal(sig, handler)
            except (OSError, RuntimeError, ValueError):
                continue
        self._orig_signal_handlers = {}

    def _on_signal(self, signum: int, _frame: object) -> None:
        # Cleanup is already under way; a second signal must not cut it short.
        for sig in self._orig_signal_handlers:
            try:
                signal.signal(sig, signal.SIG_IGN)
            except (OSError, RuntimeError, ValueError):
                continue
        log.debug(f"Received signal {signum}", to=self.display.console)
        raise KeyboardInterrupt
