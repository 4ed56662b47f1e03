"""MCP server that runs shell commands and keeps an append-only audit log."""

__version__ = "2.0.0"
