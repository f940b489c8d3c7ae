"""Ralph: run an AI coding agent against a PRD task list until it is done."""

__version__ = "1.0.0"
