"""Dependency injection providers for FastAPI endpoints.

This module provides FastAPI dependency functions that are used across
multiple routers to inject common dependencies like settings and services.
"""

from functools import lru_cache

from fastapi import HTTPException, Request

from tooltrace_server.config import TooltraceSettings
from tooltrace_server.ollama import OllamaClient
from tooltrace_server.sessions import QueryService


@lru_cache
def get_settings() -> TooltraceSettings:
    """Get the application settings instance.

    This function is cached so that the same settings instance is reused
    across all requests. Settings are loaded from environment variables
    with the TOOLTRACE_ prefix.

    Returns:
        TooltraceSettings: The application configuration settings.
    """
    return TooltraceSettings()


def get_ollama_client(request: Request) -> OllamaClient:
    """Get the Ollama client from app state.

    Args:
        request: The FastAPI request object.

    Returns:
        OllamaClient: The Ollama client instance.

    Raises:
        HTTPException: If the Ollama client is not initialized (503 Service Unavailable).
    """
    if not hasattr(request.app.state, "ollama_client"):
        raise HTTPException(
            status_code=503,
            detail="Ollama client not initialized",
        )
    return request.app.state.ollama_client


def get_query_service(request: Request) -> QueryService:
    """Get a QueryService instance with app configuration.

    Creates a new QueryService for each request, using the settings and
    the Ollama client from app state. Tests may place a channel factory in
    app.state.channel_factory to replace the stdio tool servers.

    Args:
        request: The FastAPI request object.

    Returns:
        QueryService: A new QueryService instance.

    Raises:
        HTTPException: If the Ollama client is not initialized (503 Service Unavailable).
    """
    # Use settings from app.state instead of cached get_settings()
    # This ensures tests can use their own isolated settings
    settings = request.app.state.settings
    ollama_client = get_ollama_client(request)

    channel_factory = getattr(request.app.state, "channel_factory", None)
    if channel_factory is None:
        return QueryService(settings=settings, ollama_client=ollama_client)
    return QueryService(
        settings=settings,
        ollama_client=ollama_client,
        channel_factory=channel_factory,
    )
