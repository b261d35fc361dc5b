"""Configuration module for tooltrace-server using pydantic-settings."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SYSTEM_PROMPT = (
    "You are a helpful assistant that uses tools to solve problems step-by-step."
)


class TooltraceSettings(BaseSettings):
    """Main configuration settings for tooltrace-server.

    All settings can be overridden via environment variables with the TOOLTRACE_ prefix.
    For example, TOOLTRACE_OLLAMA_HOST will override the ollama_host setting.
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 8000

    # Ollama
    ollama_host: str = "http://localhost:11434"
    model: str = "llama3.1:latest"

    # Tool providers (relative to data_dir)
    data_dir: str = "."
    mcp_config_path: str = "mcpConfig.json"

    # Conversation
    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    # None keeps the loop unbounded
    max_tool_turns: int | None = Field(default=None, ge=1)

    # CORS
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_prefix="TOOLTRACE_")

    @property
    def resolved_mcp_config_path(self) -> Path:
        """Get the full path to the tool-provider config file."""
        path = Path(self.mcp_config_path)
        if path.is_absolute():
            return path
        return Path(self.data_dir) / path
