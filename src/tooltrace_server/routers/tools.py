"""Tool listing endpoint router."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from tooltrace_server.dependencies import get_query_service
from tooltrace_server.errors import ConfigurationError, ServerConnectionError
from tooltrace_server.models.tools import ToolInfo, ToolListResponse
from tooltrace_server.sessions import QueryService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["tools"])


@router.get("/tools", response_model=ToolListResponse)
async def list_tools(
    query_service: QueryService = Depends(get_query_service),
) -> ToolListResponse:
    """List the tools advertised by the configured tool servers.

    Connects to every server, collects its tools and disconnects again.

    Raises:
        HTTPException: 503 if the configuration is invalid or a server fails
    """
    try:
        tools = await query_service.list_tools()
    except ConfigurationError as e:
        raise HTTPException(
            status_code=503,
            detail={
                "error": {
                    "code": "configuration_error",
                    "message": str(e),
                    "details": {},
                }
            },
        )
    except ServerConnectionError as e:
        raise HTTPException(
            status_code=503,
            detail={
                "error": {
                    "code": "server_connection_error",
                    "message": str(e),
                    "details": {"server_name": e.server_name},
                }
            },
        )

    logger.debug(f"Listed {len(tools)} tools")
    return ToolListResponse(
        tools=[
            ToolInfo(
                name=tool.name,
                description=tool.description,
                input_schema=tool.input_schema,
                server_name=tool.server_name,
            )
            for tool in tools
        ],
        count=len(tools),
    )
