"""Unit tests for the health check endpoint."""

import json
from unittest.mock import AsyncMock

import pytest


def _ollama(connected=True, error=None) -> AsyncMock:
    client = AsyncMock()
    client.host = "http://ollama.internal:11434"
    if error is not None:
        client.check_connection.side_effect = error
    else:
        client.check_connection.return_value = connected
    return client


@pytest.mark.asyncio
async def test_health_reports_loaded_tool_config(async_client, test_app, test_settings):
    """Test a healthy service with a valid server config."""
    test_app.state.ollama_client = _ollama()

    response = await async_client.get("/api/v1/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["version"] == "0.1.0"
    assert data["model"] == "llama3.1:latest"
    assert data["max_tool_turns"] is None
    assert data["tool_config"] == {
        "path": str(test_settings.resolved_mcp_config_path),
        "loaded": True,
        "server_names": ["math"],
        "error": None,
    }


@pytest.mark.asyncio
async def test_health_lists_servers_in_file_order(async_client, test_settings):
    """Test that configured server names keep registration order."""
    test_settings.resolved_mcp_config_path.write_text(
        json.dumps(
            {
                "mcpServers": {
                    "weather": {"command": "node", "args": ["weather.js"]},
                    "math": {"command": "python"},
                }
            }
        )
    )

    response = await async_client.get("/api/v1/health")

    assert response.json()["tool_config"]["server_names"] == ["weather", "math"]


@pytest.mark.asyncio
async def test_health_degraded_without_tool_config(async_client, test_settings):
    """Test that a missing server config makes the service degraded."""
    test_settings.resolved_mcp_config_path.unlink()

    response = await async_client.get("/api/v1/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "degraded"
    assert data["tool_config"]["loaded"] is False
    assert data["tool_config"]["server_names"] == []
    assert "mcpConfig.json" in data["tool_config"]["error"]


@pytest.mark.asyncio
async def test_health_degraded_with_invalid_tool_config(async_client, test_settings):
    """Test that a server entry without a command is reported."""
    test_settings.resolved_mcp_config_path.write_text(
        json.dumps({"mcpServers": {"math": {"args": []}}})
    )

    response = await async_client.get("/api/v1/health")

    data = response.json()
    assert data["status"] == "degraded"
    assert data["tool_config"]["loaded"] is False
    assert data["tool_config"]["error"]


@pytest.mark.asyncio
async def test_health_reports_turn_cap(async_client, test_settings):
    """Test that the configured tool-call cap is exposed."""
    test_settings.max_tool_turns = 4

    response = await async_client.get("/api/v1/health")

    assert response.json()["max_tool_turns"] == 4


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "client,expected",
    [
        (_ollama(connected=True), True),
        (_ollama(connected=False), False),
        (_ollama(error=ConnectionError("refused")), False),
    ],
)
async def test_health_ollama_connectivity(async_client, test_app, client, expected):
    """Test that Ollama reachability does not change the status."""
    test_app.state.ollama_client = client

    response = await async_client.get("/api/v1/health")

    data = response.json()
    assert data["status"] == "ok"
    assert data["ollama_connected"] is expected
    assert data["ollama_host"] == "http://ollama.internal:11434"


@pytest.mark.asyncio
async def test_health_without_ollama_client(async_client, test_app):
    """Test the response before the Ollama client exists."""
    del test_app.state.ollama_client

    response = await async_client.get("/api/v1/health")

    data = response.json()
    assert data["ollama_connected"] is None
    assert data["ollama_host"] is None
    assert data["status"] == "ok"
