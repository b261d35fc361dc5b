"""CLI entry point for tooltrace-server.

This module provides the command-line interface for starting the tooltrace-server.
It can be invoked as `tooltrace-server` (via the script entry point) or
`python -m tooltrace_server`. With --query it answers a single query and
prints the step trace instead of starting the server.
"""

import argparse
import asyncio
import logging
import sys

import uvicorn

from tooltrace_server import __version__, create_app
from tooltrace_server.config import TooltraceSettings
from tooltrace_server.ollama import OllamaClient
from tooltrace_server.sessions import QueryService

STEP_LABELS = {
    "text": "Model",
    "tool_use": "Tool call",
    "tool_result": "Tool result",
}


async def _run_single_query(settings: TooltraceSettings, query: str) -> int:
    client = OllamaClient(host=settings.ollama_host)
    try:
        steps = await QueryService(settings=settings, ollama_client=client).run_query(
            query
        )
    finally:
        await client.close()

    for step in steps:
        print(f"[{STEP_LABELS[step.kind.value]}]")
        print(step.content)
        print()
    return 0


def main() -> int:
    """Main entry point for the tooltrace-server CLI.

    Parses command-line arguments and starts the uvicorn server with the
    FastAPI application, or runs a single query.
    """
    parser = argparse.ArgumentParser(
        prog="tooltrace-server",
        description="Headless FastAPI server running LLM tool-use loops over MCP servers",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"tooltrace-server {__version__}",
    )

    parser.add_argument(
        "--host",
        type=str,
        default=None,
        help="Host to bind the server to (default: 127.0.0.1, can be set via TOOLTRACE_HOST)",
    )

    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port to bind the server to (default: 8000, can be set via TOOLTRACE_PORT)",
    )

    parser.add_argument(
        "--ollama-host",
        type=str,
        default=None,
        help="Ollama server URL (default: http://localhost:11434, can be set via TOOLTRACE_OLLAMA_HOST)",
    )

    parser.add_argument(
        "--model",
        type=str,
        default=None,
        help="Tool-capable Ollama model (can be set via TOOLTRACE_MODEL)",
    )

    parser.add_argument(
        "--mcp-config",
        type=str,
        default=None,
        help="Tool server config file (default: mcpConfig.json, can be set via TOOLTRACE_MCP_CONFIG_PATH)",
    )

    parser.add_argument(
        "--max-tool-turns",
        type=int,
        default=None,
        help="Maximum tool calls per query (default: unlimited, can be set via TOOLTRACE_MAX_TOOL_TURNS)",
    )

    parser.add_argument(
        "--data-dir",
        type=str,
        default=None,
        help="Base directory for relative paths (default: ., can be set via TOOLTRACE_DATA_DIR)",
    )

    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: INFO, can be set via TOOLTRACE_LOG_LEVEL)",
    )

    parser.add_argument(
        "--query",
        type=str,
        default=None,
        help="Answer a single query, print the step trace and exit",
    )

    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload for development (uvicorn --reload)",
    )

    args = parser.parse_args()

    # Build settings, CLI args override environment variables
    settings_kwargs = {}
    if args.host is not None:
        settings_kwargs["host"] = args.host
    if args.port is not None:
        settings_kwargs["port"] = args.port
    if args.ollama_host is not None:
        settings_kwargs["ollama_host"] = args.ollama_host
    if args.model is not None:
        settings_kwargs["model"] = args.model
    if args.mcp_config is not None:
        settings_kwargs["mcp_config_path"] = args.mcp_config
    if args.max_tool_turns is not None:
        settings_kwargs["max_tool_turns"] = args.max_tool_turns
    if args.data_dir is not None:
        settings_kwargs["data_dir"] = args.data_dir
    if args.log_level is not None:
        settings_kwargs["log_level"] = args.log_level

    settings = TooltraceSettings(**settings_kwargs)

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.query is not None:
        return asyncio.run(_run_single_query(settings, args.query))

    # Create the FastAPI app
    app = create_app(settings=settings)

    # Start uvicorn
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        reload=args.reload,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
