"""Data types for the tool-orchestration conversation.

This module defines the content blocks exchanged with the reasoning model,
the messages of the conversation log, and the steps of the visible trace.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


@dataclass
class TextBlock:
    """Free text produced by the model."""

    text: str = ""
    type: str = "text"

    def __post_init__(self) -> None:
        """Validate type is always 'text'."""
        self.type = "text"


@dataclass
class ToolUseBlock:
    """A request from the model to invoke a tool."""

    id: str = ""
    name: str = ""
    arguments: dict[str, Any] = field(default_factory=dict)
    type: str = "tool_use"

    def __post_init__(self) -> None:
        """Validate type is always 'tool_use'."""
        self.type = "tool_use"


@dataclass
class ToolResultBlock:
    """The outcome of a tool call, correlated by tool_use_id."""

    tool_use_id: str = ""
    tool_name: str = ""
    content: str = ""
    type: str = "tool_result"

    def __post_init__(self) -> None:
        """Validate type is always 'tool_result'."""
        self.type = "tool_result"


# Union type for all content blocks
ContentBlock = TextBlock | ToolUseBlock | ToolResultBlock


@dataclass
class UserMessage:
    """The user's query."""

    role: str = "user"
    content: str = ""

    def __post_init__(self) -> None:
        """Validate role is always 'user'."""
        self.role = "user"


@dataclass
class AssistantMessage:
    """A model response, kept verbatim so later turns see what was requested."""

    role: str = "assistant"
    content: list[ContentBlock] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Validate role is always 'assistant'."""
        self.role = "assistant"


@dataclass
class ToolResultMessage:
    """A tool outcome fed back to the model.

    Sent with the user role, as tool results are input to the model.
    """

    role: str = "user"
    result: ToolResultBlock = field(default_factory=ToolResultBlock)

    def __post_init__(self) -> None:
        """Validate role is always 'user'."""
        self.role = "user"


# Union type for all conversation messages
ConversationMessage = UserMessage | AssistantMessage | ToolResultMessage


@dataclass
class ModelResponse:
    """One reply from the reasoning model as ordered content blocks."""

    content: list[ContentBlock] = field(default_factory=list)
    model: str = ""


class StepKind(str, Enum):
    """Kinds of steps in the visible execution trace."""

    TEXT = "text"
    TOOL_USE = "tool_use"
    TOOL_RESULT = "tool_result"


@dataclass(frozen=True)
class Step:
    """One entry of the execution trace returned to the caller."""

    kind: StepKind
    content: str

    def to_dict(self) -> dict[str, str]:
        return {"type": self.kind.value, "content": self.content}
