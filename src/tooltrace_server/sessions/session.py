"""QuerySession: lifecycle of the tool-provider connections for a query.

This module provides the QuerySession class which handles:
- Connecting to every configured tool server and discovering tools
- Running the conversation loop for a query
- Closing every opened connection, whether the query succeeded or not
"""

import logging
from contextlib import aclosing
from typing import AsyncIterator

from tooltrace_server.conversation.driver import ConversationDriver
from tooltrace_server.conversation.model import ReasoningModel
from tooltrace_server.conversation.types import Step
from tooltrace_server.providers.channel import ChannelFactory, open_stdio_channel
from tooltrace_server.providers.config import ServerConfig
from tooltrace_server.providers.invoker import ToolInvoker
from tooltrace_server.providers.registry import (
    CapabilityRegistry,
    ServerConnection,
    ToolDescriptor,
)

logger = logging.getLogger(__name__)


class QuerySession:
    """Owns the server connections used to answer queries.

    Use as an async context manager: entering discovers the tools, leaving
    closes every connection. Enter and leave from the same task, since the
    stdio transports are bound to the task that opened them.

    Example:
        >>> async with QuerySession(config, model, system_prompt) as session:
        ...     steps = await session.run_query("What is 15 * 32?")
    """

    def __init__(
        self,
        server_config: ServerConfig,
        model: ReasoningModel,
        system_prompt: str,
        max_tool_turns: int | None = None,
        channel_factory: ChannelFactory = open_stdio_channel,
    ) -> None:
        """Initialize a QuerySession.

        Args:
            server_config: Tool servers to connect to
            model: Reasoning model used by the conversation loop
            system_prompt: Fixed system instruction sent every turn
            max_tool_turns: Optional cap on tool calls per query
            channel_factory: Opens a channel for a server descriptor
        """
        self.server_config = server_config
        self.model = model
        self.system_prompt = system_prompt
        self.max_tool_turns = max_tool_turns
        self.registry = CapabilityRegistry(channel_factory=channel_factory)
        self.invoker = ToolInvoker(self.registry)

    @property
    def connections(self) -> list[ServerConnection]:
        return self.registry.connections

    @property
    def tools(self) -> list[ToolDescriptor]:
        return self.registry.tools

    async def open(self) -> list[ToolDescriptor]:
        """Connect to all servers and discover their tools.

        Raises:
            ServerConnectionError: If a server fails to start or list tools
        """
        _, tools = await self.registry.discover(self.server_config)
        return tools

    async def close(self) -> None:
        """Close every opened connection. Close failures are logged, not raised."""
        # Newest first: each stdio transport nests inside the previous one
        for connection in reversed(self.registry.connections):
            try:
                await connection.channel.close()
            except Exception as e:
                logger.warning(f"Failed to close tool server '{connection.name}': {e}")

        closed = len(self.registry.connections)
        self.registry.connections.clear()
        self.registry.tools.clear()
        if closed:
            logger.debug(f"Closed {closed} tool server connection(s)")

    async def __aenter__(self) -> "QuerySession":
        try:
            await self.open()
        except BaseException:
            await self.close()
            raise
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def create_driver(self) -> ConversationDriver:
        """Create a driver with its own message log for one query."""
        return ConversationDriver(
            model=self.model,
            invoker=self.invoker,
            tools=self.tools,
            system_prompt=self.system_prompt,
            max_tool_turns=self.max_tool_turns,
        )

    async def run_query(self, query: str) -> list[Step]:
        """Run a query and return its complete step trace."""
        return await self.create_driver().run(query)

    async def stream_query(self, query: str) -> AsyncIterator[Step]:
        """Run a query, yielding steps as they are produced."""
        async with aclosing(self.create_driver().iter_steps(query)) as steps:
            async for step in steps:
                yield step
