"""Capability registry: discovers tools across all configured providers."""

import logging
from dataclasses import dataclass, field
from typing import Any

from tooltrace_server.errors import ServerConnectionError
from tooltrace_server.providers.channel import (
    ChannelFactory,
    ToolChannel,
    open_stdio_channel,
)
from tooltrace_server.providers.config import (
    ServerConfig,
    ServerDescriptor,
    resolve_args,
)

logger = logging.getLogger(__name__)


@dataclass
class ServerConnection:
    """A live channel bound to the server name it was configured under."""

    name: str
    descriptor: ServerDescriptor
    channel: ToolChannel


@dataclass(frozen=True)
class ToolDescriptor:
    """A tool advertised by one of the connected servers.

    Attributes:
        name: Tool name, unique across all servers (last registered wins)
        description: Human-readable description (falls back to the name)
        input_schema: JSON schema of the accepted arguments
        server_name: Name of the server that advertised the tool
    """

    name: str
    description: str
    input_schema: dict[str, Any] = field(default_factory=dict)
    server_name: str = ""


class CapabilityRegistry:
    """Opens provider connections and catalogs their tools.

    Connections are recorded as soon as they are opened, so the owner can
    close them even when a later server fails during discovery.
    """

    def __init__(self, channel_factory: ChannelFactory = open_stdio_channel) -> None:
        self._channel_factory = channel_factory
        self.connections: list[ServerConnection] = []
        self.tools: list[ToolDescriptor] = []

    def _register_tool(self, tool: ToolDescriptor) -> None:
        for index, existing in enumerate(self.tools):
            if existing.name == tool.name:
                logger.warning(
                    f"Tool '{tool.name}' from server '{tool.server_name}' replaces "
                    f"the one from server '{existing.server_name}'"
                )
                self.tools[index] = tool
                return
        self.tools.append(tool)

    async def discover(
        self, servers: ServerConfig
    ) -> tuple[list[ServerConnection], list[ToolDescriptor]]:
        """Connect to every configured server and list its tools.

        Args:
            servers: Parsed server configuration, in registration order

        Returns:
            Tuple of (connections, tools)

        Raises:
            ServerConnectionError: If any server fails to start or to list tools
            RuntimeError: If connections from an earlier discovery are still open
        """
        if self.connections:
            raise RuntimeError(
                f"Registry already holds {len(self.connections)} connection(s); "
                "close them before discovering again"
            )
        self.tools = []

        for server_name, descriptor in servers.mcpServers.items():
            resolved = descriptor.model_copy(
                update={"args": resolve_args(descriptor.args)}
            )

            try:
                channel = await self._channel_factory(server_name, resolved)
            except Exception as e:
                logger.error(f"Failed to connect to tool server '{server_name}': {e}")
                raise ServerConnectionError(server_name, f"failed to start: {e}") from e

            self.connections.append(
                ServerConnection(name=server_name, descriptor=resolved, channel=channel)
            )

            try:
                listed = await channel.list_tools()
            except Exception as e:
                logger.error(f"Failed to list tools on server '{server_name}': {e}")
                raise ServerConnectionError(
                    server_name, f"failed to list tools: {e}"
                ) from e

            for entry in listed:
                name = entry["name"]
                self._register_tool(
                    ToolDescriptor(
                        name=name,
                        description=entry.get("description") or name,
                        input_schema=entry.get("inputSchema") or {},
                        server_name=server_name,
                    )
                )

            logger.info(f"Server '{server_name}' advertised {len(listed)} tool(s)")

        logger.info(
            f"Discovered {len(self.tools)} tool(s) across "
            f"{len(self.connections)} server(s)"
        )
        return list(self.connections), list(self.tools)

    def find_tool(self, name: str) -> ToolDescriptor | None:
        """Look up an advertised tool by name."""
        for tool in self.tools:
            if tool.name == name:
                return tool
        return None
