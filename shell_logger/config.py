"""Configuration loading and validation using Pydantic models.

Loads server configuration from an optional YAML file. The CLI layers
environment variables and flags on top of what is loaded here.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator

DEFAULT_LOG_FILE = "~/.mcp-shell-commands.log"


class ServerConfig(BaseModel):
    """Top-level server configuration."""

    name: str = "mcp-shell-logger"
    log_file: str = DEFAULT_LOG_FILE
    max_buffer: int = Field(
        default=10 * 1024 * 1024,
        ge=1,
        description="Per-stream output ceiling in bytes. Commands exceeding it are killed.",
    )

    @field_validator("log_file")
    @classmethod
    def expand_log_file(cls, v: str) -> str:
        """Expand ~ in the log path to the actual home directory."""
        return str(Path(v).expanduser())


def _load_yaml(path: Path) -> dict[str, Any]:
    """Load and parse a YAML file, returning an empty dict for empty content."""
    with open(path) as f:
        data = yaml.safe_load(f)
    return data if isinstance(data, dict) else {}


def load_config(
    config_path: str | Path | None = None, **overrides: Any
) -> ServerConfig:
    """Load server configuration.

    Args:
        config_path: Optional path to a YAML file. Defaults are used when None.
        **overrides: Values that take precedence over the file. None values
            are ignored.

    Returns:
        The validated ServerConfig.

    Raises:
        FileNotFoundError: If config_path is given but does not exist.
        pydantic.ValidationError: If the configuration has invalid content.
    """
    data: dict[str, Any] = {}
    if config_path is not None:
        path = Path(config_path)
        if not path.is_file():
            raise FileNotFoundError(f"Configuration file not found: {path}")
        data = _load_yaml(path)

    data.update({k: v for k, v in overrides.items() if v is not None})
    return ServerConfig(**data)
