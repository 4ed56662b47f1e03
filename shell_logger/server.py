"""MCP server bootstrap: tool registration and the stdio run loop.

The handlers registered here only describe the wire parameters; the
SDK validates incoming arguments against the schema derived from their
signatures before the tool's execute method runs.
"""

from typing import Annotated

import structlog
from mcp.server.fastmcp import FastMCP
from pydantic import Field

from shell_logger import __version__
from shell_logger.audit import AuditLogger
from shell_logger.config import ServerConfig
from shell_logger.tools.execute import DEFAULT_MAX_OUTPUT, ExecuteCommand
from shell_logger.tools.logs import DEFAULT_LOG_LINES, ViewLogs

logger = structlog.get_logger()


def build_server(config: ServerConfig) -> FastMCP:
    """Create the MCP server with both tools bound to the configured log file.

    Args:
        config: Server configuration.

    Returns:
        A FastMCP instance ready to run.
    """
    server = FastMCP(config.name)
    audit = AuditLogger(config.log_file)
    execute_tool = ExecuteCommand(audit, max_buffer=config.max_buffer)
    logs_tool = ViewLogs(config.log_file)

    # Parameter names are the wire names clients send
    async def execute_command(
        command: Annotated[str, Field(description="The shell command to execute")],
        workingDirectory: Annotated[  # noqa: N803
            str | None,
            Field(description="Working directory for command execution"),
        ] = None,
        maxOutput: Annotated[  # noqa: N803
            int,
            Field(
                description="Maximum characters to return (-1 for unlimited, 0 for no output, default: 500)",
            ),
        ] = DEFAULT_MAX_OUTPUT,
        enableLogging: Annotated[  # noqa: N803
            bool,
            Field(description="Whether to save command and output to log file (default: true)"),
        ] = True,
    ) -> str:
        return await execute_tool.execute(
            command=command,
            working_directory=workingDirectory,
            max_output=maxOutput,
            enable_logging=enableLogging,
        )

    async def view_logs(
        lines: Annotated[
            int,
            Field(description="Number of recent log entries to show"),
        ] = DEFAULT_LOG_LINES,
    ) -> str:
        return await logs_tool.execute(lines=lines)

    for tool, handler in ((execute_tool, execute_command), (logs_tool, view_logs)):
        server.add_tool(handler, name=tool.name, description=tool.description)
        logger.debug("tool_registered", tool=tool.name)

    return server


async def serve(config: ServerConfig) -> None:
    """Run the server over stdio until the host closes the connection."""
    server = build_server(config)
    logger.info(
        "server_running",
        name=config.name,
        version=__version__,
        log_file=config.log_file,
    )
    await server.run_stdio_async()
