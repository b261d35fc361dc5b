"""Reasoning model interface and its Ollama implementation."""

import json
import logging
import uuid
from typing import Any, Protocol

from tooltrace_server.conversation.types import (
    AssistantMessage,
    ContentBlock,
    ConversationMessage,
    ModelResponse,
    TextBlock,
    ToolResultMessage,
    ToolUseBlock,
    UserMessage,
)
from tooltrace_server.errors import ModelCallError
from tooltrace_server.ollama.client import OllamaClient
from tooltrace_server.providers.registry import ToolDescriptor

logger = logging.getLogger(__name__)


class ReasoningModel(Protocol):
    """A model that answers with text or tool-use content blocks."""

    async def complete(
        self,
        messages: list[ConversationMessage],
        tools: list[ToolDescriptor],
        system: str,
    ) -> ModelResponse: ...


def generate_tool_use_id() -> str:
    """Create a correlation id for a tool call the model did not label."""
    return f"toolu_{uuid.uuid4().hex[:24]}"


def _blocks_to_ollama(blocks: list[ContentBlock]) -> dict[str, Any]:
    texts = []
    tool_calls = []
    for block in blocks:
        match block:
            case TextBlock():
                texts.append(block.text)
            case ToolUseBlock():
                tool_calls.append(
                    {"function": {"name": block.name, "arguments": block.arguments}}
                )
            case _:
                raise ValueError(f"Unexpected block in assistant message: {block.type}")

    message: dict[str, Any] = {"role": "assistant", "content": "\n".join(texts)}
    if tool_calls:
        message["tool_calls"] = tool_calls
    return message


def convert_messages_to_ollama_format(
    messages: list[ConversationMessage], system: str
) -> list[dict[str, Any]]:
    """Convert the conversation log to Ollama chat messages.

    Args:
        messages: Ordered conversation log
        system: System instruction, sent as the first message

    Returns:
        List of message dicts in Ollama format
    """
    ollama_messages: list[dict[str, Any]] = []
    if system:
        ollama_messages.append({"role": "system", "content": system})

    for msg in messages:
        match msg:
            case UserMessage():
                ollama_messages.append({"role": "user", "content": msg.content})
            case AssistantMessage():
                ollama_messages.append(_blocks_to_ollama(msg.content))
            case ToolResultMessage():
                ollama_messages.append(
                    {
                        "role": "tool",
                        "content": msg.result.content,
                        "tool_name": msg.result.tool_name,
                    }
                )

    return ollama_messages


def convert_tools_to_ollama_format(tools: list[ToolDescriptor]) -> list[dict[str, Any]]:
    """Convert tool descriptors to Ollama function definitions."""
    return [
        {
            "type": "function",
            "function": {
                "name": tool.name,
                "description": tool.description,
                "parameters": tool.input_schema or {"type": "object", "properties": {}},
            },
        }
        for tool in tools
    ]


def _parse_arguments(raw: Any) -> dict[str, Any]:
    if raw is None:
        return {}
    if isinstance(raw, str):
        try:
            raw = json.loads(raw) if raw.strip() else {}
        except json.JSONDecodeError:
            logger.warning(f"Tool call arguments are not valid JSON: {raw!r}")
            return {}
    if not isinstance(raw, dict):
        return {}
    return dict(raw)


def parse_ollama_response(
    content: str, tool_calls: list[dict[str, Any]]
) -> list[ContentBlock]:
    """Turn a collected Ollama reply into ordered content blocks."""
    blocks: list[ContentBlock] = []
    if content.strip():
        blocks.append(TextBlock(text=content))

    for call in tool_calls:
        function = call.get("function") or {}
        name = function.get("name")
        if not name:
            logger.warning(f"Ignoring tool call without a name: {call}")
            continue
        blocks.append(
            ToolUseBlock(
                id=call.get("id") or generate_tool_use_id(),
                name=name,
                arguments=_parse_arguments(function.get("arguments")),
            )
        )
    return blocks


class OllamaReasoningModel:
    """ReasoningModel backed by an Ollama chat model with tool calling."""

    def __init__(self, client: OllamaClient, model: str) -> None:
        self.client = client
        self.model = model

    async def complete(
        self,
        messages: list[ConversationMessage],
        tools: list[ToolDescriptor],
        system: str,
    ) -> ModelResponse:
        ollama_messages = convert_messages_to_ollama_format(messages, system)
        ollama_tools = convert_tools_to_ollama_format(tools)

        logger.info(
            f"Sending {len(ollama_messages)} messages and {len(ollama_tools)} tools "
            f"to Ollama with model {self.model}"
        )

        try:
            content, tool_calls, _ = await self.client.chat_with_tools(
                model=self.model,
                messages=ollama_messages,
                tools=ollama_tools,
            )
        except Exception as e:
            raise ModelCallError(f"Failed to get response from Ollama: {e}") from e

        return ModelResponse(
            content=parse_ollama_response(content, tool_calls), model=self.model
        )
