"""Pydantic models for query API requests and responses.

This module defines the request and response schemas for the query endpoints,
including the SSE events of the streaming endpoint.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from tooltrace_server.conversation.types import Step


class QueryRequest(BaseModel):
    """Request body for POST /api/v1/query and POST /api/v1/query/stream."""

    query: str = Field(
        min_length=1,
        description="The natural-language query to answer with the available tools.",
    )

    model_config = ConfigDict(
        json_schema_extra={"examples": [{"query": "What is 15 * 32?"}]}
    )


class StepResponse(BaseModel):
    """A single step of the execution trace."""

    type: Literal["text", "tool_use", "tool_result"] = Field(
        description="Step kind"
    )
    content: str = Field(description="Step content")

    @classmethod
    def from_step(cls, step: Step) -> "StepResponse":
        return cls(type=step.kind.value, content=step.content)


class QueryResponse(BaseModel):
    """Response body for the non-streaming query endpoint."""

    query: str = Field(description="The query that was answered")
    steps: list[StepResponse] = Field(
        default_factory=list, description="Ordered execution trace"
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "query": "What is 15 * 32?",
                "steps": [
                    {
                        "type": "tool_use",
                        "content": 'Tool: multiply\nInput:\n{\n  "a": 15,\n  "b": 32\n}',
                    },
                    {"type": "tool_result", "content": "15 × 32 = 480"},
                    {"type": "text", "content": "15 multiplied by 32 is 480."},
                ],
            }
        }
    )


class StepEvent(StepResponse):
    """SSE event emitted for each step as it is produced."""


class ErrorEvent(BaseModel):
    """SSE event emitted when the query fails."""

    type: Literal["text"] = Field(default="text", description="Step kind")
    content: str = Field(description="Error step content, prefixed with the error marker")


class DoneEvent(BaseModel):
    """SSE event emitted when the stream is complete."""

    step_count: int = Field(description="Number of steps emitted")
