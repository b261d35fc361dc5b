"""Request/response channels to tool-provider processes.

The registry and invoker only depend on the ToolChannel interface. The
StdioToolChannel implementation launches an MCP server as a subprocess and
talks to it through the official MCP client session.
"""

import asyncio
import logging
import os
from abc import ABC, abstractmethod
from contextlib import AsyncExitStack
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from mcp import ClientSession, StdioServerParameters
from mcp.client.stdio import stdio_client

from tooltrace_server.providers.config import ServerDescriptor

logger = logging.getLogger(__name__)


@dataclass
class ToolCallResult:
    """Raw outcome of an "invoke capability" request.

    Attributes:
        content: List of content items (usually {"type": "text", "text": ...}),
                 a plain string, or None
        is_error: True when the provider reported the call as failed
    """

    content: Any = None
    is_error: bool = False


class ToolChannel(ABC):
    """A duplex request/response channel to one tool provider."""

    name: str

    @abstractmethod
    async def list_tools(self) -> list[dict[str, Any]]:
        """List the provider's tools as {name, description, inputSchema} dicts."""

    @abstractmethod
    async def call_tool(self, tool_name: str, arguments: dict[str, Any]) -> ToolCallResult:
        """Invoke a tool by name with the given arguments."""

    @abstractmethod
    async def close(self) -> None:
        """Close the channel. Calling it more than once is a no-op."""


ChannelFactory = Callable[[str, ServerDescriptor], Awaitable[ToolChannel]]


class StdioToolChannel(ToolChannel):
    """MCP channel over a subprocess's stdin/stdout.

    Requests are serialized with a lock so concurrent callers never
    interleave request/response pairs on the same process.
    """

    def __init__(self, name: str, descriptor: ServerDescriptor) -> None:
        self.name = name
        self.descriptor = descriptor
        self._exit_stack: AsyncExitStack | None = None
        self._session: ClientSession | None = None
        self._lock = asyncio.Lock()

    def _server_parameters(self) -> StdioServerParameters:
        env = None
        if self.descriptor.env:
            env = {**os.environ, **self.descriptor.env}
        return StdioServerParameters(
            command=self.descriptor.command,
            args=list(self.descriptor.args),
            env=env,
        )

    async def connect(self) -> None:
        """Spawn the provider process and perform the MCP handshake."""
        logger.info(
            f"Starting tool server '{self.name}': "
            f"{self.descriptor.command} {' '.join(self.descriptor.args)}"
        )
        stack = AsyncExitStack()
        try:
            read, write = await stack.enter_async_context(
                stdio_client(self._server_parameters())
            )
            session = await stack.enter_async_context(ClientSession(read, write))
            await session.initialize()
        except BaseException:
            await stack.aclose()
            raise

        self._exit_stack = stack
        self._session = session
        logger.debug(f"Tool server '{self.name}' initialized")

    def _require_session(self) -> ClientSession:
        if self._session is None:
            raise RuntimeError(f"Tool server '{self.name}' is not connected")
        return self._session

    async def list_tools(self) -> list[dict[str, Any]]:
        session = self._require_session()
        async with self._lock:
            response = await session.list_tools()

        return [
            {
                "name": tool.name,
                "description": tool.description,
                "inputSchema": tool.inputSchema,
            }
            for tool in response.tools
        ]

    async def call_tool(self, tool_name: str, arguments: dict[str, Any]) -> ToolCallResult:
        session = self._require_session()
        async with self._lock:
            result = await session.call_tool(tool_name, arguments=arguments)

        content = [
            item.model_dump(mode="json", exclude_none=True) for item in result.content
        ]
        return ToolCallResult(content=content, is_error=bool(result.isError))

    async def close(self) -> None:
        stack = self._exit_stack
        if stack is None:
            return
        self._exit_stack = None
        self._session = None
        await stack.aclose()
        logger.info(f"Tool server '{self.name}' closed")


async def open_stdio_channel(name: str, descriptor: ServerDescriptor) -> ToolChannel:
    """Default channel factory: launch the provider and connect over stdio."""
    channel = StdioToolChannel(name, descriptor)
    await channel.connect()
    return channel
