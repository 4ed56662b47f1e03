"""Read back recent entries from the command audit log."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from shell_logger.tools.base import BaseTool

DEFAULT_LOG_LINES = 10


def format_entry(line: str) -> str:
    """Summarize one audit log line.

    JSON objects render as ``[timestamp] command (SUCCESS|FAILED, Nms)``.
    Anything else is returned unchanged.
    """
    try:
        entry = json.loads(line)
    except json.JSONDecodeError:
        return line
    if not isinstance(entry, dict):
        return line

    status = "SUCCESS" if entry.get("exitCode") == 0 else "FAILED"
    return (
        f"[{entry.get('timestamp')}] {entry.get('command')} "
        f"({status}, {entry.get('duration')}ms)"
    )


def tail_lines(content: str, count: int) -> list[str]:
    """Return the last count lines of content, ignoring surrounding blank space.

    A count of 0 keeps every line; a negative count drops that many lines
    from the start.
    """
    lines = content.strip().split("\n")
    return lines[-count:]


class ViewLogs(BaseTool):
    """Show the most recent audit log entries."""

    def __init__(self, log_path: str | Path) -> None:
        self._log_path = Path(log_path)

    @property
    def name(self) -> str:
        return "view_logs"

    @property
    def description(self) -> str:
        return "View recent command logs"

    async def execute(self, *, lines: int = DEFAULT_LOG_LINES, **kwargs: Any) -> str:
        try:
            content = self._log_path.read_bytes().decode("utf-8", errors="replace")
        except OSError as e:
            return f"No logs found or error reading logs: {e}"

        formatted = "\n".join(format_entry(line) for line in tail_lines(content, lines))
        return f"Recent command logs:\n\n{formatted}"
