"""Unit tests for the FastAPI app factory and configuration."""

import pytest
from fastapi import FastAPI
from pydantic import ValidationError

from tooltrace_server import __version__, create_app
from tooltrace_server.config import DEFAULT_SYSTEM_PROMPT, TooltraceSettings


def test_create_app_returns_fastapi_instance():
    """Test that create_app returns a FastAPI instance."""
    app = create_app()
    assert isinstance(app, FastAPI)


def test_create_app_with_settings(test_settings):
    """Test that create_app accepts custom settings."""
    app = create_app(settings=test_settings)
    assert isinstance(app, FastAPI)
    assert app.state.settings is test_settings


def test_create_app_metadata():
    """Test that app has correct metadata."""
    app = create_app()
    assert app.title == "tooltrace-server"
    assert app.version == "0.1.0"
    assert "Headless FastAPI server" in app.description


def test_create_app_includes_routers():
    """Test that health, tools and query routes are registered."""
    app = create_app()

    routes = [route.path for route in app.routes]  # type: ignore[attr-defined]
    assert "/api/v1/health" in routes
    assert "/api/v1/tools" in routes
    assert "/api/v1/query" in routes
    assert "/api/v1/query/stream" in routes


def test_create_app_has_cors_middleware(test_settings):
    """Test that CORS middleware is configured."""
    app = create_app(settings=test_settings)

    # FastAPI wraps middleware, so we check user_middleware instead
    middleware_classes = [m.cls.__name__ for m in app.user_middleware]  # type: ignore[attr-defined]
    assert "CORSMiddleware" in middleware_classes


def test_version_constant():
    """Test that __version__ is defined and matches app version."""
    assert __version__ == "0.1.0"


def test_settings_default_values():
    """Test that settings have correct default values."""
    settings = TooltraceSettings()

    assert settings.host == "127.0.0.1"
    assert settings.port == 8000
    assert settings.ollama_host == "http://localhost:11434"
    assert settings.model == "llama3.1:latest"
    assert settings.data_dir == "."
    assert settings.mcp_config_path == "mcpConfig.json"
    assert settings.system_prompt == DEFAULT_SYSTEM_PROMPT
    assert settings.max_tool_turns is None
    assert settings.log_level == "INFO"


def test_settings_env_prefix(monkeypatch):
    """Test that settings respect TOOLTRACE_ environment variable prefix."""
    monkeypatch.setenv("TOOLTRACE_PORT", "9000")
    monkeypatch.setenv("TOOLTRACE_OLLAMA_HOST", "http://custom:11434")
    monkeypatch.setenv("TOOLTRACE_MAX_TOOL_TURNS", "5")

    settings = TooltraceSettings()

    assert settings.port == 9000
    assert settings.ollama_host == "http://custom:11434"
    assert settings.max_tool_turns == 5


def test_settings_reject_non_positive_turn_cap():
    """Test that a tool-turn cap must be at least one."""
    with pytest.raises(ValidationError):
        TooltraceSettings(max_tool_turns=0)


def test_settings_resolved_mcp_config_path(tmp_path):
    """Test that the server config path is resolved against data_dir."""
    settings = TooltraceSettings(data_dir=str(tmp_path))

    assert settings.resolved_mcp_config_path == tmp_path / "mcpConfig.json"


def test_settings_absolute_mcp_config_path(tmp_path):
    """Test that an absolute server config path is used as is."""
    config_path = tmp_path / "elsewhere" / "servers.json"
    settings = TooltraceSettings(data_dir="/data", mcp_config_path=str(config_path))

    assert settings.resolved_mcp_config_path == config_path
