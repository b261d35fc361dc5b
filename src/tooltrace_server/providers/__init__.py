"""Tool-provider discovery, channels and invocation.

This package connects to the configured tool-provider processes, catalogs
the tools they advertise and runs tool calls against them.
"""

from tooltrace_server.providers.channel import (
    ChannelFactory,
    StdioToolChannel,
    ToolCallResult,
    ToolChannel,
    open_stdio_channel,
)
from tooltrace_server.providers.config import (
    ServerConfig,
    ServerDescriptor,
    load_server_config,
    resolve_args,
)
from tooltrace_server.providers.invoker import ToolInvoker, normalize_tool_content
from tooltrace_server.providers.registry import (
    CapabilityRegistry,
    ServerConnection,
    ToolDescriptor,
)

__all__ = [
    # Configuration
    "ServerConfig",
    "ServerDescriptor",
    "load_server_config",
    "resolve_args",
    # Channels
    "ChannelFactory",
    "StdioToolChannel",
    "ToolCallResult",
    "ToolChannel",
    "open_stdio_channel",
    # Registry and invocation
    "CapabilityRegistry",
    "ServerConnection",
    "ToolDescriptor",
    "ToolInvoker",
    "normalize_tool_content",
]
