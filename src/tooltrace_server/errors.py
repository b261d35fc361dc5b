"""Exception types for tooltrace-server.

Fatal errors (configuration, connection, model call) propagate out of a query
and are rendered as an error step at the service boundary. Tool invocation
errors are recovered inside the ToolInvoker and never escape it.
"""


class TooltraceError(Exception):
    """Base class for all tooltrace-server errors."""


class ConfigurationError(TooltraceError):
    """A required setting or the server config file is missing or invalid."""


class ServerConnectionError(TooltraceError):
    """A tool-provider process failed to start or to list its tools."""

    def __init__(self, server_name: str, message: str) -> None:
        super().__init__(f"Server '{server_name}': {message}")
        self.server_name = server_name


class ModelCallError(TooltraceError):
    """The reasoning model request failed (network, auth, model missing)."""


class ToolInvocationError(TooltraceError):
    """A single tool call failed on a single server."""

    def __init__(self, server_name: str, tool_name: str, message: str) -> None:
        super().__init__(message)
        self.server_name = server_name
        self.tool_name = tool_name
