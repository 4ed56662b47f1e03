"""Base tool class and the result types shared by the tools.

Each tool provides its name, description, and an async execute method
returning the text body sent back to the MCP client. The server binds
each tool to a typed handler so the SDK can derive its input schema.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class CommandResult:
    """Captured output of a command that exited with status 0."""

    stdout: str = ""
    stderr: str = ""
    duration: int = 0

    @property
    def exit_code(self) -> int:
        return 0


class CommandError(Exception):
    """A command that could not be run or did not exit cleanly.

    Carries whatever output was captured before the failure so it can be
    logged and shown to the caller.
    """

    def __init__(
        self,
        message: str,
        *,
        stdout: str = "",
        stderr: str = "",
        returncode: int | None = None,
        duration: int = 0,
    ) -> None:
        super().__init__(message)
        self.stdout = stdout
        self.stderr = stderr
        self.returncode = returncode
        self.duration = duration

    @property
    def exit_code(self) -> int:
        return 1


class BaseTool(ABC):
    """Abstract base class for all server tools."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique tool name the client calls."""

    @property
    @abstractmethod
    def description(self) -> str:
        """Human-readable description. The calling agent reads this to decide when to use the tool."""

    @abstractmethod
    async def execute(self, **kwargs: Any) -> str:
        """Execute the tool with the given parameters.

        Args:
            **kwargs: Tool-specific parameters, already validated by the SDK.

        Returns:
            The text body returned to the client. Failures are reported
            in the text, not raised.
        """
