"""Prompt templates sent to the agent on every iteration."""

from __future__ import annotations

from ralph.config import RunContext
from ralph.tasks.model import TaskFormat

PROGRESS_PLACEHOLDER = "PROGRESS_FILE_PLACEHOLDER"

PROMPT_TEMPLATE_JSON = f"""Instructions:
Work through ALL incomplete tasks sequentially in this session. For each task:
1. Read the context section for patterns, key files, and non-goals
2. Find the highest-priority incomplete task (passes: false)
3. Implement it fully following existing patterns
4. Verify ALL steps in the task are satisfied
5. Write tests and ensure they pass
6. Run linting and ensure it passes
7. Update the tasks file: set passes: true for the completed task
8. Commit your changes with a descriptive message
9. Append any useful knowledge to {PROGRESS_PLACEHOLDER}
10. Move to the next incomplete task and repeat

Focus on ONE TASK AT A TIME. Complete all verification steps before marking passes: true.
Do NOT exit after completing a task - continue to the next one.

When ALL tasks have passes: true, output <promise>COMPLETE</promise>."""

PROMPT_TEMPLATE_MD = f"""Instructions:
Work through ALL incomplete tasks sequentially in this session. For each task:
1. Find the highest-priority incomplete task (marked - [ ])
2. Implement it fully
3. Write tests and ensure they pass
4. Run linting and ensure it passes
5. Verify all acceptanceCriteria are met
6. Update the PRD file: change - [ ] to - [x] for the completed task
7. Commit your changes with a descriptive message
8. Append any useful knowledge to {PROGRESS_PLACEHOLDER}
9. Move to the next incomplete task and repeat

Focus on ONE TASK AT A TIME. Complete all verification before marking done.
Do NOT exit after completing a task - continue to the next one.

When ALL tasks are marked - [x], output <promise>COMPLETE</promise>."""


def select_template(ctx: RunContext) -> str:
    """Return the override template if one was given, else the built-in one for the format."""
    if ctx.prompt_override:
        return ctx.prompt_override
    if ctx.task_format is TaskFormat.MARKDOWN:
        return PROMPT_TEMPLATE_MD
    return PROMPT_TEMPLATE_JSON


def build_prompt(template: str, ctx: RunContext) -> str:
    """Fill in *template* and prepend the file preamble."""
    body = template.replace(PROGRESS_PLACEHOLDER, str(ctx.progress_file))

    lines = [f"Read the PRD file {ctx.prd_file} and the progress file {ctx.progress_file}."]
    if ctx.prd_document is not None:
        lines.append("")
        lines.append(f"PRD document available at: {ctx.prd_document} (read for full context)")
    lines.append("")
    lines.append(body)
    return "\n".join(lines)
