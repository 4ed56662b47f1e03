"""Tool implementations for the shell logger server."""

from __future__ import annotations

from shell_logger.tools.base import BaseTool, CommandError, CommandResult

__all__ = [
    "BaseTool",
    "CommandError",
    "CommandResult",
]
