"""Health check response models."""

from typing import Literal

from pydantic import BaseModel, Field


class ToolConfigStatus(BaseModel):
    """State of the tool-server config file, read without starting any server."""

    path: str = Field(..., description="Resolved path of the server config file")
    loaded: bool = Field(..., description="Whether the file exists and parses")
    server_names: list[str] = Field(
        default_factory=list,
        description="Configured servers, in registration order",
    )
    error: str | None = Field(
        default=None,
        description="Why the file could not be loaded",
    )


class HealthResponse(BaseModel):
    """Response model for the health check endpoint.

    Attributes:
        status: "ok", or "degraded" when queries cannot run because the
            tool-server config is missing or invalid.
        version: The version of tooltrace-server.
        model: The reasoning model used for queries.
        max_tool_turns: Tool-call cap per query, None when unbounded.
        ollama_connected: Ollama connectivity, None without a client.
        ollama_host: The Ollama host URL, None without a client.
        tool_config: State of the tool-server config file.
    """

    status: Literal["ok", "degraded"] = Field(..., description="Health status")
    version: str = Field(..., description="Version of tooltrace-server")
    model: str = Field(..., description="Reasoning model used for queries")
    max_tool_turns: int | None = Field(
        default=None,
        description="Tool-call cap per query (None = unbounded)",
    )
    ollama_connected: bool | None = Field(
        default=None,
        description="Whether Ollama is reachable",
    )
    ollama_host: str | None = Field(default=None, description="Ollama host URL")
    tool_config: ToolConfigStatus
