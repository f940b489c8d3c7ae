"""Terminal display settings and the status lines shared by renderer and runner."""

from __future__ import annotations

from dataclasses import dataclass, field

from rich.console import Console
from rich.control import Control
from rich.segment import ControlType
from rich.text import Text

SPINNER = "⠋⠙⠹⠸⠼⠴⠦⠧⠇⠏"
GUTTER = "  │ "
LABEL_WIDTH = 50

AGENT_STYLES = {
    "claude": "color(208)",
    "opencode": "bold white",
}


@dataclass(frozen=True)
class Display:
    """Resolved once at startup and passed to everything that prints.

    ``console`` carries status lines, the live block and log messages;
    ``err_console`` carries error diagnostics.
    """

    console: Console
    live: bool
    err_console: Console = field(default_factory=lambda: Console(highlight=False, stderr=True))

    @classmethod
    def detect(cls, color: bool | None = None, console: Console | None = None) -> Display:
        """Build a display for stdout; *color* forces color on/off, ``None`` detects it."""
        if color is None:
            options: dict = {}
        else:
            options = {"force_terminal": True if color else None, "no_color": not color}
        if console is None:
            console = Console(highlight=False, **options)
        err_console = Console(highlight=False, stderr=True, **options)
        live = console.is_terminal and not console.is_dumb_terminal
        return cls(console=console, live=live, err_console=err_console)

    def erase_lines(self, count: int) -> None:
        """Move up and clear *count* previously printed lines."""
        if count <= 0 or not self.live:
            return
        self.console.control(
            Control(*(((ControlType.CURSOR_UP, 1), (ControlType.ERASE_IN_LINE, 2)) * count))
        )

    def print_line(self, text: Text) -> None:
        """Print exactly one physical line, cropping instead of wrapping."""
        self.console.print(text, no_wrap=True, overflow="ellipsis", crop=True, soft_wrap=False)


def format_elapsed(seconds: float) -> str:
    total = max(int(seconds), 0)
    return f"{total // 60:02d}:{total % 60:02d}"


def truncate_label(label: str, width: int = LABEL_WIDTH) -> str:
    return label[:width]


def progress_line(spin: str, task_num: int, total: int, label: str, elapsed: float) -> Text:
    line = Text()
    line.append(spin, style="cyan")
    line.append(" ")
    line.append(f"[{task_num}/{total}]", style="dim")
    line.append(" ")
    line.append(truncate_label(label), style="bold")
    line.append(" ")
    line.append(f"[{format_elapsed(elapsed)}]", style="dim")
    return line


def result_line(ok: bool, task_num: int, total: int, label: str, elapsed: float) -> Text:
    line = Text()
    if ok:
        line.append("✓", style="green")
    else:
        line.append("✗", style="red")
    line.append(" ")
    line.append(f"[{task_num}/{total}]", style="dim")
    line.append(" ")
    line.append(truncate_label(label), style="bold")
    line.append(" ")
    status = "completed" if ok else "failed"
    line.append(f"{status} [{format_elapsed(elapsed)}]", style="dim")
    return line


def output_line(raw: str) -> Text:
    """Agent output behind the gutter; SGR colors kept, cursor movement dropped."""
    line = Text(GUTTER, style="dim")
    line.append_text(Text.from_ansi(raw))
    return line
