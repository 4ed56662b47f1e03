"""CLI entry point for the shell logger MCP server using Click."""

from __future__ import annotations

import asyncio
import logging
import os
import sys

import click
import structlog

from shell_logger import __version__
from shell_logger.config import ServerConfig, load_config

logger = structlog.get_logger()

_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def _configure_logging(log_level: str) -> None:
    """Configure structlog for stderr; stdout carries the MCP protocol."""
    if sys.stderr.isatty():
        renderer = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level.upper(), logging.INFO)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def _resolve_config(config_file: str | None, log_file: str | None = None) -> ServerConfig:
    """Load config from flags, falling back to SHELL_LOGGER_* environment variables."""
    config_path = config_file or os.environ.get("SHELL_LOGGER_CONFIG")
    return load_config(
        config_path,
        log_file=log_file or os.environ.get("SHELL_LOGGER_LOG_FILE"),
    )


config_option = click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False, resolve_path=True),
    default=None,
    help="Path to a YAML configuration file. Defaults to SHELL_LOGGER_CONFIG env.",
)
log_file_option = click.option(
    "--log-file",
    type=click.Path(dir_okay=False),
    default=None,
    help="Audit log path. Defaults to SHELL_LOGGER_LOG_FILE env or ~/.mcp-shell-commands.log.",
)


@click.group()
@click.version_option(version=__version__, prog_name="mcp-shell-logger")
def cli() -> None:
    """MCP Shell Logger - run shell commands for an MCP client and log them."""


@cli.command()
@config_option
@log_file_option
@click.option(
    "--log-level",
    type=click.Choice(_LOG_LEVELS, case_sensitive=False),
    default=None,
    help="Logging level. Defaults to SHELL_LOGGER_LOG_LEVEL env or INFO.",
)
def serve(config_file: str | None, log_file: str | None, log_level: str | None) -> None:
    """Start the MCP server on stdio."""
    level = log_level or os.environ.get("SHELL_LOGGER_LOG_LEVEL", "INFO")
    _configure_logging(level)

    try:
        config = _resolve_config(config_file, log_file)
        asyncio.run(_serve(config))
    except KeyboardInterrupt:
        logger.info("server_stopped")
    except Exception as e:
        click.echo(f"Server error: {e}", err=True)
        logger.exception("server_failed")
        sys.exit(1)


async def _serve(config: ServerConfig) -> None:
    from shell_logger.server import serve as run_server

    await run_server(config)


@cli.command()
@config_option
def check_config(config_file: str | None) -> None:
    """Validate configuration without starting the server."""
    try:
        config = _resolve_config(config_file)
    except Exception as e:
        click.echo(f"FAIL: {e}", err=True)
        sys.exit(1)

    click.echo("Configuration OK")
    click.echo(f"  Server name: {config.name}")
    click.echo(f"  Log file: {config.log_file}")
    click.echo(f"  Max buffer: {config.max_buffer} bytes")


@cli.command()
@config_option
@log_file_option
@click.option(
    "--lines",
    "-n",
    type=click.IntRange(min=1),
    default=10,
    show_default=True,
    help="Number of recent entries to show.",
)
def logs(config_file: str | None, log_file: str | None, lines: int) -> None:
    """Print recent command log entries."""
    from shell_logger.tools.logs import ViewLogs

    try:
        config = _resolve_config(config_file, log_file)
    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(asyncio.run(ViewLogs(config.log_file).execute(lines=lines)))


if __name__ == "__main__":
    cli()
