"""Tool-provider server configuration.

The config file maps server names to launch descriptors:

    {
        "mcpServers": {
            "math": {"command": "python", "args": ["-m", "tooltrace_server.tools.math_server"]}
        }
    }

Relative path arguments are kept as written here and resolved against the
current working directory at discovery time (see resolve_args).
"""

import logging
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from tooltrace_server.errors import ConfigurationError

logger = logging.getLogger(__name__)


class ServerDescriptor(BaseModel):
    """Launch command, arguments and environment overrides for one provider."""

    command: str = Field(min_length=1)
    args: list[str] = Field(default_factory=list)
    env: dict[str, str] | None = None

    model_config = ConfigDict(frozen=True)


class ServerConfig(BaseModel):
    """Parsed config file. Iteration order of mcpServers is registration order."""

    mcpServers: dict[str, ServerDescriptor] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)


def load_server_config(path: Path) -> ServerConfig:
    """Read and validate the tool-provider config file.

    Args:
        path: Location of the JSON config file

    Returns:
        ServerConfig: The parsed configuration

    Raises:
        ConfigurationError: If the file is missing, unreadable or invalid
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(
            f"Cannot read tool server config {path}: {e}"
        ) from e

    try:
        config = ServerConfig.model_validate_json(raw)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid tool server config {path}: {e}") from e

    logger.debug(f"Loaded {len(config.mcpServers)} server(s) from {path}")
    return config


def _looks_like_path(arg: str, cwd: Path) -> bool:
    if not arg or arg.startswith("-"):
        return False
    if Path(arg).is_absolute():
        return False
    return (cwd / arg).exists()


def resolve_args(args: list[str], cwd: Path | None = None) -> list[str]:
    """Resolve relative file-path arguments against the working directory.

    Arguments that are flags, absolute paths, or do not name an existing
    file or directory relative to cwd pass through unchanged.
    """
    base = cwd if cwd is not None else Path.cwd()
    return [
        str((base / arg).resolve()) if _looks_like_path(arg, base) else arg
        for arg in args
    ]
