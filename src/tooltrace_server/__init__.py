"""tooltrace-server: Headless FastAPI server for LLM tool-use loops.

This package runs natural-language queries through a reasoning model that
can call tools served by MCP processes, and returns the step-by-step trace
of text, tool calls and tool results.
"""

from tooltrace_server.app import create_app

__version__ = "0.1.0"

__all__ = ["create_app", "__version__"]
