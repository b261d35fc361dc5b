"""Health check endpoint router."""

import logging

from fastapi import APIRouter, Request

from tooltrace_server.config import TooltraceSettings
from tooltrace_server.errors import ConfigurationError
from tooltrace_server.models.health import HealthResponse, ToolConfigStatus
from tooltrace_server.providers.config import load_server_config

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["health"])


def _tool_config_status(settings: TooltraceSettings) -> ToolConfigStatus:
    path = settings.resolved_mcp_config_path
    try:
        config = load_server_config(path)
    except ConfigurationError as e:
        return ToolConfigStatus(path=str(path), loaded=False, error=str(e))
    return ToolConfigStatus(
        path=str(path), loaded=True, server_names=list(config.mcpServers)
    )


async def _ollama_reachable(client) -> bool:
    try:
        return await client.check_connection()
    except Exception as e:
        logger.warning(f"Ollama connectivity check failed: {e}")
        return False


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """Report whether queries can run.

    Reads the tool-server config (no server is started) and checks that
    Ollama is reachable. A config that is missing or invalid makes the
    status "degraded"; Ollama being unreachable does not, since it may come
    up later.
    """
    settings: TooltraceSettings = request.app.state.settings
    tool_config = _tool_config_status(settings)

    client = getattr(request.app.state, "ollama_client", None)
    ollama_connected = None if client is None else await _ollama_reachable(client)

    return HealthResponse(
        status="ok" if tool_config.loaded else "degraded",
        version="0.1.0",
        model=settings.model,
        max_tool_turns=settings.max_tool_turns,
        ollama_connected=ollama_connected,
        ollama_host=None if client is None else client.host,
        tool_config=tool_config,
    )
