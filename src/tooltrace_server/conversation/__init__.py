"""Conversation loop with the reasoning model.

This package contains the message and step types, the reasoning model
interface with its Ollama implementation, and the driver that runs the
turn-based tool-orchestration loop.
"""

from tooltrace_server.conversation.driver import ConversationDriver, DriverState
from tooltrace_server.conversation.model import OllamaReasoningModel, ReasoningModel
from tooltrace_server.conversation.types import (
    AssistantMessage,
    ContentBlock,
    ConversationMessage,
    ModelResponse,
    Step,
    StepKind,
    TextBlock,
    ToolResultBlock,
    ToolResultMessage,
    ToolUseBlock,
    UserMessage,
)

__all__ = [
    # Core classes
    "ConversationDriver",
    "DriverState",
    "OllamaReasoningModel",
    "ReasoningModel",
    # Content blocks
    "ContentBlock",
    "TextBlock",
    "ToolUseBlock",
    "ToolResultBlock",
    # Messages
    "ConversationMessage",
    "UserMessage",
    "AssistantMessage",
    "ToolResultMessage",
    "ModelResponse",
    # Trace
    "Step",
    "StepKind",
]
