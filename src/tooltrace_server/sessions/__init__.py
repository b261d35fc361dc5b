"""Session lifecycle for tooltrace-server.

This package opens the tool-provider connections for a query, runs the
conversation loop over them, and guarantees they are closed afterwards.
"""

from tooltrace_server.sessions.service import ERROR_MARKER, QueryService, error_step
from tooltrace_server.sessions.session import QuerySession

__all__ = [
    "ERROR_MARKER",
    "QueryService",
    "QuerySession",
    "error_step",
]
