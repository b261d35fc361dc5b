"""Pydantic models for API request and response schemas.

This package contains all Pydantic models used for validating and
serializing API requests and responses across all endpoints.
"""

from tooltrace_server.models.health import HealthResponse, ToolConfigStatus
from tooltrace_server.models.query import (
    DoneEvent,
    ErrorEvent,
    QueryRequest,
    QueryResponse,
    StepEvent,
    StepResponse,
)
from tooltrace_server.models.tools import ToolInfo, ToolListResponse

__all__ = [
    "DoneEvent",
    "ErrorEvent",
    "HealthResponse",
    "QueryRequest",
    "QueryResponse",
    "StepEvent",
    "StepResponse",
    "ToolConfigStatus",
    "ToolInfo",
    "ToolListResponse",
]
