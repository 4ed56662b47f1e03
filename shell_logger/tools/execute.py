"""Shell command execution with output truncation and audit logging.

Commands are handed verbatim to /bin/sh via asyncio.create_subprocess_shell.
There is no allowlist, escaping, or approval step: the command runs with
the full privileges of the server process, and the MCP host that launched
the server is trusted to decide what may be run.
"""

from __future__ import annotations

import asyncio
import contextlib
import time
from typing import Any

import structlog

from shell_logger.audit import AuditLogger
from shell_logger.tools.base import BaseTool, CommandError, CommandResult

logger = structlog.get_logger()

DEFAULT_MAX_BUFFER = 10 * 1024 * 1024
DEFAULT_MAX_OUTPUT = 500
UNLIMITED = -1

_CHUNK_SIZE = 64 * 1024


class OutputLimitExceeded(Exception):
    """A stream produced more bytes than the buffer ceiling allows."""

    def __init__(self, stream_name: str) -> None:
        super().__init__(f"{stream_name} maxBuffer length exceeded")


def _decode(data: bytes | bytearray) -> str:
    return bytes(data).decode("utf-8", errors="replace")


async def _read_stream(
    stream: asyncio.StreamReader, name: str, limit: int, sink: bytearray
) -> None:
    """Read a stream to EOF into sink, raising once it grows past limit."""
    while True:
        chunk = await stream.read(_CHUNK_SIZE)
        if not chunk:
            return
        sink.extend(chunk)
        if len(sink) > limit:
            del sink[limit:]
            raise OutputLimitExceeded(name)


async def _terminate(
    proc: asyncio.subprocess.Process, readers: list[asyncio.Task]
) -> None:
    """Stop the stream readers and kill the process if it is still running."""
    for task in readers:
        task.cancel()
    await asyncio.gather(*readers, return_exceptions=True)
    if proc.returncode is None:
        with contextlib.suppress(ProcessLookupError):
            proc.kill()
        await proc.wait()


async def run_shell_command(
    command: str,
    *,
    cwd: str | None = None,
    max_buffer: int = DEFAULT_MAX_BUFFER,
) -> CommandResult:
    """Run a command in a subshell and capture its output.

    Args:
        command: The command string, passed to the shell unmodified.
        cwd: Working directory for the subshell.
        max_buffer: Per-stream ceiling in bytes. Exceeding it kills the process.

    Returns:
        CommandResult with decoded stdout, stderr, and duration in ms.

    Raises:
        CommandError: If the spawn fails, the buffer ceiling is exceeded,
            or the process exits with a non-zero status.
    """
    start = time.monotonic()

    def elapsed() -> int:
        return int((time.monotonic() - start) * 1000)

    try:
        proc = await asyncio.create_subprocess_shell(
            command,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=cwd,
        )
    except (OSError, ValueError) as e:
        raise CommandError(str(e), duration=elapsed()) from e

    out = bytearray()
    err = bytearray()
    readers = [
        asyncio.create_task(_read_stream(proc.stdout, "stdout", max_buffer, out)),
        asyncio.create_task(_read_stream(proc.stderr, "stderr", max_buffer, err)),
    ]
    try:
        await asyncio.gather(*readers)
        returncode = await proc.wait()
    except OutputLimitExceeded as e:
        await _terminate(proc, readers)
        raise CommandError(
            str(e),
            stdout=_decode(out),
            stderr=_decode(err),
            returncode=proc.returncode,
            duration=elapsed(),
        ) from e
    finally:
        # Also reached when the caller cancels the request
        await _terminate(proc, readers)

    stdout = _decode(out)
    stderr = _decode(err)

    if returncode != 0:
        message = f"Command failed: {command}"
        if stderr:
            message += f"\n{stderr}"
        raise CommandError(
            message,
            stdout=stdout,
            stderr=stderr,
            returncode=returncode,
            duration=elapsed(),
        )

    return CommandResult(stdout=stdout, stderr=stderr, duration=elapsed())


def truncate(text: str, max_output: int, suffix: str) -> tuple[str, bool]:
    """Cap text at max_output characters.

    A cap of -1 disables truncation. The suffix is only appended for
    positive caps, so a cap of 0 or any other negative value yields an
    empty string.

    Returns:
        Tuple of (possibly truncated text, whether it was truncated).
    """
    if max_output == UNLIMITED or len(text) <= max_output:
        return text, False
    return text[:max(max_output, 0)] + (suffix if max_output > 0 else ""), True


def _truncate_streams(stdout: str, stderr: str, max_output: int) -> tuple[str, str, bool]:
    stdout, out_cut = truncate(stdout, max_output, "\n... (output truncated)")
    stderr, err_cut = truncate(stderr, max_output, "\n... (error output truncated)")
    return stdout, stderr, out_cut or err_cut


def format_success(result: CommandResult, max_output: int) -> str:
    """Render a successful run as the text returned to the client."""
    stdout, stderr, truncated = _truncate_streams(
        result.stdout, result.stderr, max_output
    )
    note = ""
    if truncated:
        note = f" - Output: {len(result.stdout)} chars (truncated to {max_output})"
    text = f"Command executed successfully ({result.duration}ms){note}:\n\nOutput:\n{stdout}\n"
    if stderr:
        text += f"\nErrors:\n{stderr}"
    return text


def format_failure(error: CommandError, max_output: int) -> str:
    """Render a failed run as the text returned to the client."""
    total = len(error.stdout) + len(error.stderr)
    stdout, stderr, _ = _truncate_streams(error.stdout, error.stderr, max_output)
    return (
        f"Command failed ({error.duration}ms) - Total output: {total} chars:\n\n"
        f"Error: {error}\n\n"
        f"Output:\n{stdout}\n\n"
        f"Error output:\n{stderr}"
    )


class ExecuteCommand(BaseTool):
    """Run a shell command on the host and report its output."""

    def __init__(
        self, audit: AuditLogger, max_buffer: int = DEFAULT_MAX_BUFFER
    ) -> None:
        self._audit = audit
        self._max_buffer = max_buffer

    @property
    def name(self) -> str:
        return "execute_command"

    @property
    def description(self) -> str:
        return "Execute a shell command with optional output limiting and logging"

    async def execute(
        self,
        *,
        command: str,
        working_directory: str | None = None,
        max_output: int = DEFAULT_MAX_OUTPUT,
        enable_logging: bool = True,
        **kwargs: Any,
    ) -> str:
        """Run the command, log it if enabled, and format the result.

        Args:
            command: The shell command to execute.
            working_directory: Directory to run the command in.
            max_output: Characters to return per stream; -1 for unlimited.
            enable_logging: Whether to append a record to the audit log.

        Returns:
            A success or failure report. Never raises for command failures.
        """
        try:
            result = await run_shell_command(
                command,
                cwd=working_directory or None,
                max_buffer=self._max_buffer,
            )
        except CommandError as e:
            logger.info(
                "command_failed",
                command=command,
                returncode=e.returncode,
                duration_ms=e.duration,
            )
            # Logged before truncation so the audit log keeps full output
            if enable_logging:
                self._audit.record(command, error=e)
            return format_failure(e, max_output)

        logger.info("command_finished", command=command, duration_ms=result.duration)
        if enable_logging:
            self._audit.record(command, result=result)
        return format_success(result, max_output)
