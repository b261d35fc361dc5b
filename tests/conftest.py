"""Pytest configuration and shared fixtures for tooltrace-server tests.

This module provides common fixtures used across all test modules,
including test app creation and async client setup.
"""

import json

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from tooltrace_server import create_app
from tooltrace_server.config import TooltraceSettings


@pytest.fixture
def mcp_config_data():
    """Server config written to the test data directory."""
    return {
        "mcpServers": {
            "math": {
                "command": "python",
                "args": ["-m", "tooltrace_server.tools.math_server"],
            }
        }
    }


@pytest.fixture
def test_settings(tmp_path, mcp_config_data):
    """Create test settings with an isolated data directory.

    Args:
        tmp_path: Pytest fixture providing a temporary directory.
        mcp_config_data: Server config to write as mcpConfig.json.

    Returns:
        TooltraceSettings: Settings instance configured for testing.
    """
    (tmp_path / "mcpConfig.json").write_text(json.dumps(mcp_config_data))
    return TooltraceSettings(
        host="127.0.0.1",
        port=8000,
        ollama_host="http://localhost:11434",
        model="llama3.1:latest",
        data_dir=str(tmp_path),
        mcp_config_path="mcpConfig.json",
        log_level="DEBUG",
        cors_origins=["*"],
    )


@pytest.fixture
def test_app(test_settings):
    """Create a FastAPI test application instance.

    Args:
        test_settings: Test settings fixture.

    Returns:
        FastAPI: Configured test application.
    """
    return create_app(settings=test_settings)


@pytest_asyncio.fixture
async def async_client(test_app):
    """Create an async HTTP client for testing FastAPI endpoints.

    Args:
        test_app: Test application fixture.

    Yields:
        AsyncClient: Async HTTP client for making test requests.
    """
    # Trigger the lifespan startup manually for tests
    async with test_app.router.lifespan_context(test_app):
        transport = ASGITransport(app=test_app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client
