"""Pytest configuration for integration tests.

This module provides integration-test-specific fixtures that replace the
Ollama client and the stdio tool servers, so API tests run in-process.
"""

from unittest.mock import AsyncMock, patch

import pytest
from fakes import FakeChannelFactory, math_channel


@pytest.fixture(autouse=True)
def mock_ollama_client():
    """Mock OllamaClient for all integration tests.

    This fixture patches the OllamaClient class before the app is created,
    ensuring the lifespan uses our mock instead of creating a real client.
    Tests script model turns through chat_with_tools.side_effect.
    """
    with patch("tooltrace_server.app.OllamaClient") as mock_client_class:
        # Create the mock instance
        mock_instance = AsyncMock()
        mock_instance.host = "http://localhost:11434"
        mock_instance.check_connection.return_value = True
        mock_instance.close = AsyncMock()

        # Return the mock instance when OllamaClient is instantiated
        mock_client_class.return_value = mock_instance

        yield mock_instance


@pytest.fixture
def channel_factory():
    """Channel factory serving the math tools in-process."""
    return FakeChannelFactory({"math": math_channel()})


@pytest.fixture(autouse=True)
def use_fake_channels(test_app, channel_factory):
    """Route every query's tool servers to the in-process channels."""
    test_app.state.channel_factory = channel_factory
    yield
    del test_app.state.channel_factory
