"""QueryService: builds a session per query from the app configuration."""

import logging
from contextlib import aclosing
from typing import AsyncIterator

from tooltrace_server.config import TooltraceSettings
from tooltrace_server.conversation.model import OllamaReasoningModel, ReasoningModel
from tooltrace_server.conversation.types import Step, StepKind
from tooltrace_server.errors import ConfigurationError
from tooltrace_server.ollama.client import OllamaClient
from tooltrace_server.providers.channel import ChannelFactory, open_stdio_channel
from tooltrace_server.providers.config import ServerConfig, load_server_config
from tooltrace_server.providers.registry import ToolDescriptor
from tooltrace_server.sessions.session import QuerySession

logger = logging.getLogger(__name__)

ERROR_MARKER = "❌ Error: "


def error_step(error: BaseException) -> Step:
    """Render a fatal query error as a single text step."""
    return Step(kind=StepKind.TEXT, content=f"{ERROR_MARKER}{error}")


class QueryService:
    """Answers queries, each with its own freshly connected QuerySession."""

    def __init__(
        self,
        settings: TooltraceSettings,
        ollama_client: OllamaClient,
        channel_factory: ChannelFactory = open_stdio_channel,
        model: ReasoningModel | None = None,
    ) -> None:
        """Initialize the QueryService.

        Args:
            settings: Application settings
            ollama_client: Shared Ollama client
            channel_factory: Opens a channel for a server descriptor
            model: Optional reasoning model; defaults to the configured Ollama model
        """
        self.settings = settings
        self.ollama_client = ollama_client
        self.channel_factory = channel_factory
        self._model = model

    def _reasoning_model(self) -> ReasoningModel:
        if self._model is not None:
            return self._model
        if not self.settings.model:
            raise ConfigurationError("No reasoning model configured")
        return OllamaReasoningModel(self.ollama_client, self.settings.model)

    def _server_config(self) -> ServerConfig:
        return load_server_config(self.settings.resolved_mcp_config_path)

    def create_session(self) -> QuerySession:
        """Create an unopened session from the current configuration.

        Raises:
            ConfigurationError: If the model or the server config is missing
        """
        return QuerySession(
            server_config=self._server_config(),
            model=self._reasoning_model(),
            system_prompt=self.settings.system_prompt,
            max_tool_turns=self.settings.max_tool_turns,
            channel_factory=self.channel_factory,
        )

    async def run_query(self, query: str) -> list[Step]:
        """Run a query end to end.

        Any fatal error (configuration, connection, model call) is returned
        as a single error step instead of being raised.
        """
        logger.info(f"Running query ({len(query)} characters)")
        try:
            async with self.create_session() as session:
                return await session.run_query(query)
        except Exception as e:
            logger.error(f"Query failed: {e}")
            return [error_step(e)]

    async def stream_query(self, query: str) -> AsyncIterator[Step]:
        """Run a query end to end, yielding steps as they are produced.

        Raises:
            TooltraceError: Fatal errors are raised to the caller, which
                            renders them with error_step()
        """
        logger.info(f"Streaming query ({len(query)} characters)")
        async with self.create_session() as session:
            async with aclosing(session.stream_query(query)) as steps:
                async for step in steps:
                    yield step

    async def list_tools(self) -> list[ToolDescriptor]:
        """Connect to every server, list the discovered tools, and disconnect."""
        async with self.create_session() as session:
            return list(session.tools)
