"""RALPH CLI: run an agent against a PRD task list until it is done.

Installed as ``ralph`` console_script via pipx / pip.
"""

from __future__ import annotations

import sys
from pathlib import Path

import click

from ralph import __version__
from ralph.config import (
    DEFAULT_AGENT,
    DEFAULT_LOG_LINES,
    DEFAULT_MAX_ITERATIONS,
    DEFAULT_PRD,
    EXIT_ERROR,
    ConfigError,
    RunContext,
)
from ralph.display import AGENT_STYLES, Display
from ralph.engines.base import EngineBase
from ralph.engines.registry import ENGINE_NAMES
from ralph.io_utils import read_text
from ralph.tasks.sources import TaskSource


class RalphCommand(click.Command):
    """Report bad flags with the same exit status as every other setup error."""

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        try:
            return super().parse_args(ctx, args)
        except click.UsageError as e:
            e.exit_code = EXIT_ERROR
            raise


CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])


@click.command(cls=RalphCommand, context_settings=CONTEXT_SETTINGS)
@click.option(
    "-a",
    "--agent",
    type=click.Choice(ENGINE_NAMES, case_sensitive=False),
    default=DEFAULT_AGENT,
    envvar="RALPH_AGENT",
    show_default=True,
    help="AI engine to run",
)
@click.option("-m", "--model", default="", envvar="RALPH_MODEL", help="Model to use (e.g. sonnet, opus)")
@click.option("--safe", is_flag=True, help="Disable auto-permissions (the agent prompts you)")
@click.option(
    "--prd",
    "prd_input",
    default=DEFAULT_PRD,
    show_default=True,
    help="PRD file or folder (a folder is searched for tasks.json, then prd.md)",
)
@click.option(
    "-n",
    "--max-iterations",
    type=click.IntRange(min=0),
    default=DEFAULT_MAX_ITERATIONS,
    show_default=True,
    help="Max agent runs, 0 = unlimited",
)
@click.option(
    "--log-lines",
    type=click.IntRange(min=1),
    default=DEFAULT_LOG_LINES,
    show_default=True,
    help="Number of agent output lines to display",
)
@click.option("--prompt", "prompt_file", default="", help="Override the prompt template with file contents")
@click.option("--color/--no-color", default=None, help="Force colored output on or off")
@click.option("-v", "--verbose", is_flag=True, help="Show debug output")
@click.version_option(__version__, prog_name="ralph")
def main(
    agent: str,
    model: str,
    safe: bool,
    prd_input: str,
    max_iterations: int,
    log_lines: int,
    prompt_file: str,
    color: bool | None,
    verbose: bool,
) -> None:
    """RALPH: Autonomous AI Coding Loop.

    Runs an AI coding agent against a PRD task list until every task is
    marked complete or the iteration budget is spent.

    \b
    SUPPORTED PRD FORMATS:
      Folder:      .spec/prds/feature-name/ (with tasks.json or prd.md inside)
      JSON:        {prdName, tasks: [{id, description, steps, passes}], context}
      Flat JSON:   [{name, passes}, ...]
      Markdown:    - [ ] task / - [x] complete

    \b
    EXAMPLES:
      ralph                                   # PRD.json, claude, 2 iterations
      ralph --prd .spec/prds/auth -n 0        # Run until done
      ralph -a opencode -m gpt-5 --prd PRD.md
      ralph --safe --prompt my-prompt.txt
    """
    from ralph import log as rlog

    rlog.set_verbose(verbose)
    display = Display.detect(color)

    try:
        ctx, source, engine = _build_run_context(
            agent=agent,
            model=model,
            safe=safe,
            prd_input=prd_input,
            max_iterations=max_iterations,
            log_lines=log_lines,
            prompt_file=prompt_file,
        )
    except (ConfigError, ValueError) as e:
        rlog.error(str(e), to=display.err_console)
        sys.exit(EXIT_ERROR)

    sys.exit(_run_loop(ctx, source, engine, display))


def _build_run_context(
    *,
    agent: str,
    model: str,
    safe: bool,
    prd_input: str,
    max_iterations: int,
    log_lines: int,
    prompt_file: str,
) -> tuple[RunContext, TaskSource, EngineBase]:
    """Validate everything up front; nothing is written before this succeeds."""
    from ralph.engines.registry import get_engine
    from ralph.prd import resolve_prd_paths
    from ralph.tasks.sources import open_task_source

    engine = get_engine(agent, model=model, safe_mode=safe)
    err = engine.check_available()
    if err:
        raise ConfigError(err)

    paths = resolve_prd_paths(prd_input)
    source = open_task_source(paths.prd_file)

    prompt_path: Path | None = None
    prompt_override = ""
    if prompt_file:
        prompt_path = Path(prompt_file)
        if not prompt_path.is_file():
            raise ConfigError(f"Prompt file not found: {prompt_path}")
        prompt_override = read_text(prompt_path)

    ctx = RunContext(
        prd_file=paths.prd_file,
        progress_file=paths.progress_file,
        task_format=source.format,
        agent=agent,
        model=model,
        safe_mode=safe,
        max_iterations=max_iterations,
        log_lines=log_lines,
        prompt_file=prompt_path,
        prompt_override=prompt_override,
        prd_document=source.prd_document(),
    )
    return ctx, source, engine


def _run_loop(
    ctx: RunContext,
    source: TaskSource,
    engine: EngineBase,
    display: Display,
) -> int:
    """Run the task loop for a validated context and return the process exit code."""
    from ralph import log as rlog
    from ralph.prd import ensure_progress_file
    from ralph.runner import Runner
    from ralph.tasks.sources import TaskSourceError

    if not source.load().tasks:
        rlog.warn(f"No tasks found in {ctx.prd_file}", to=display.console)

    ensure_progress_file(ctx.progress_file)
    _show_banner(ctx, display)

    runner = Runner(ctx, source, engine, display)
    try:
        outcome = runner.run()
    except TaskSourceError as e:
        rlog.error(str(e), to=display.err_console)
        return EXIT_ERROR
    return outcome.exit_code


def _show_banner(ctx: RunContext, display: Display) -> None:
    console = display.console
    style = AGENT_STYLES.get(ctx.agent, "blue")

    console.print("[bold]============================================[/bold]")
    console.print("[bold]Ralph[/bold] - Autonomous AI Coding Loop")
    console.print(f"  Agent:      [{style}]{ctx.agent}[/{style}]")
    if ctx.model:
        console.print(f"  Model:      {ctx.model}", markup=False)
    console.print(f"  PRD:        {ctx.prd_file} ({ctx.task_format.value})", markup=False)
    console.print(f"  Progress:   {ctx.progress_file}", markup=False)
    if ctx.prompt_file:
        console.print(f"  Prompt:     {ctx.prompt_file}", markup=False)
    if ctx.unlimited:
        console.print("  Max iter:   ∞")
    else:
        console.print(f"  Max iter:   {ctx.max_iterations}")
    if ctx.safe_mode:
        console.print("  Safe mode:  [yellow]enabled[/yellow]")
    console.print("[bold]============================================[/bold]")
