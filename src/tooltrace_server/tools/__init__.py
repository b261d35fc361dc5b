"""Tool servers shipped with tooltrace-server.

This package contains a demo MCP server (math_server) exposing arithmetic
and text tools over stdio.
"""

__all__: list[str] = []
