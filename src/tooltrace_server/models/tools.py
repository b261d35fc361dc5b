"""Pydantic models for the tool listing endpoint."""

from typing import Any

from pydantic import BaseModel, Field


class ToolInfo(BaseModel):
    """A discovered tool and the server that advertises it."""

    name: str = Field(description="Tool name")
    description: str = Field(description="Tool description")
    input_schema: dict[str, Any] = Field(
        default_factory=dict, description="JSON schema of the tool arguments"
    )
    server_name: str = Field(description="Server that advertises the tool")


class ToolListResponse(BaseModel):
    """Response body for GET /api/v1/tools."""

    tools: list[ToolInfo] = Field(default_factory=list)
    count: int = Field(description="Number of tools")
