"""Tool invocation across connected servers.

The invoker never raises for a failed tool call. Failures are reported back
as result text so the reasoning model can see and react to them.
"""

import json
import logging
from typing import Any

from tooltrace_server.errors import ToolInvocationError
from tooltrace_server.providers.channel import ToolChannel
from tooltrace_server.providers.registry import CapabilityRegistry

logger = logging.getLogger(__name__)

NO_OUTPUT_TEXT = "Tool executed successfully (no output)."


def _to_readable(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False, default=str)


def normalize_tool_content(content: Any) -> str:
    """Reduce a tool result's content to a single text.

    Args:
        content: A list of content items, a plain string, or None

    Returns:
        str: Items' text joined by newlines (structured items serialized),
             the string itself, or a fixed "no output" text
    """
    if content is None:
        return NO_OUTPUT_TEXT

    if isinstance(content, str):
        return content

    if isinstance(content, list):
        if not content:
            return NO_OUTPUT_TEXT
        parts = []
        for item in content:
            if isinstance(item, dict) and item.get("text") is not None:
                parts.append(str(item["text"]))
            elif isinstance(item, str):
                parts.append(item)
            else:
                parts.append(_to_readable(item))
        return "\n".join(parts)

    return _to_readable(content)


class ToolInvoker:
    """Runs tool calls against the registry's connections in registration order."""

    def __init__(self, registry: CapabilityRegistry) -> None:
        self.registry = registry

    async def _call(
        self,
        connection_name: str,
        channel: ToolChannel,
        tool_name: str,
        arguments: dict[str, Any],
    ) -> str:
        try:
            result = await channel.call_tool(tool_name, arguments)
        except Exception as e:
            raise ToolInvocationError(connection_name, tool_name, str(e)) from e

        text = normalize_tool_content(result.content)
        if result.is_error:
            raise ToolInvocationError(connection_name, tool_name, text)
        return text

    async def invoke(self, tool_name: str, arguments: dict[str, Any]) -> str:
        """Invoke a tool on the first server that accepts the call.

        Args:
            tool_name: Name of the tool requested by the model
            arguments: Tool arguments

        Returns:
            str: Normalized result text, or a "not found"/failure text when
                 no server accepted the call
        """
        last_error: ToolInvocationError | None = None

        for connection in self.registry.connections:
            try:
                text = await self._call(
                    connection.name, connection.channel, tool_name, arguments
                )
            except ToolInvocationError as e:
                logger.debug(
                    f"Tool '{tool_name}' failed on server '{connection.name}': {e}"
                )
                last_error = e
                continue

            logger.info(f"Tool '{tool_name}' executed on server '{connection.name}'")
            return text

        if self.registry.find_tool(tool_name) is None or last_error is None:
            logger.warning(f"Tool '{tool_name}' not found in any server")
            return f"Tool '{tool_name}' not found in any server."

        logger.warning(f"Tool '{tool_name}' failed on every server: {last_error}")
        return f"Tool '{tool_name}' failed: {last_error}"
