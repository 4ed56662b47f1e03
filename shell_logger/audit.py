"""Append-only JSONL audit log of executed commands.

One JSON object per line: timestamp, command, exitCode, stdout, stderr
and duration. Writing is best effort; a failed append is reported on
the diagnostic stream and never reaches the caller.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import structlog

from shell_logger.tools.base import CommandError, CommandResult

logger = structlog.get_logger()


def _utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a Z suffix."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_record(
    command: str,
    result: CommandResult | None = None,
    error: CommandError | None = None,
) -> dict[str, Any]:
    """Build a log record for a finished command.

    The record's stderr holds the failure message when an error is given.
    """
    if error is not None:
        return {
            "timestamp": _utc_timestamp(),
            "command": command,
            "exitCode": error.exit_code,
            "stdout": error.stdout,
            "stderr": str(error),
            "duration": error.duration,
        }
    return {
        "timestamp": _utc_timestamp(),
        "command": command,
        "exitCode": 0,
        "stdout": result.stdout if result else "",
        "stderr": result.stderr if result else "",
        "duration": result.duration if result else 0,
    }


class AuditLogger:
    """Appends command records to the audit log file."""

    def __init__(self, log_path: str | Path) -> None:
        """Initialize the audit logger.

        Args:
            log_path: Path to the JSONL audit log file. Created on first write.
        """
        self._log_path = Path(log_path)

    @property
    def log_path(self) -> Path:
        return self._log_path

    def record(
        self,
        command: str,
        *,
        result: CommandResult | None = None,
        error: CommandError | None = None,
    ) -> None:
        """Append one record for a command.

        Args:
            command: The exact command string that was run.
            result: Captured output of a successful run.
            error: The failure, when the command did not succeed.
        """
        line = json.dumps(build_record(command, result, error)) + "\n"
        try:
            self._log_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self._log_path, "a", encoding="utf-8") as f:
                f.write(line)
        except OSError as e:
            logger.error(
                "audit_write_failed", path=str(self._log_path), error=str(e)
            )
