"""Query API endpoints.

This module provides endpoints that run a query through the tool-orchestration
loop, returning the step trace either at once or streamed via SSE.
"""

import logging
from contextlib import aclosing

from fastapi import APIRouter, Depends, Request
from sse_starlette.sse import EventSourceResponse

from tooltrace_server.dependencies import get_query_service
from tooltrace_server.models.query import (
    DoneEvent,
    ErrorEvent,
    QueryRequest,
    QueryResponse,
    StepEvent,
    StepResponse,
)
from tooltrace_server.sessions import QueryService, error_step

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/query", tags=["query"])


@router.post("", response_model=QueryResponse)
async def run_query(
    request_body: QueryRequest,
    query_service: QueryService = Depends(get_query_service),
) -> QueryResponse:
    """Run a query and return the complete step trace.

    Fatal errors do not produce an HTTP error: the trace then consists of a
    single text step prefixed with the error marker.

    Args:
        request_body: Query request containing the query text
        query_service: Injected query service

    Returns:
        QueryResponse with the ordered steps
    """
    steps = await query_service.run_query(request_body.query)
    logger.info(f"Query produced {len(steps)} step(s)")

    return QueryResponse(
        query=request_body.query,
        steps=[StepResponse.from_step(step) for step in steps],
    )


@router.post("/stream")
async def stream_query(
    request_body: QueryRequest,
    request: Request,
    query_service: QueryService = Depends(get_query_service),
) -> EventSourceResponse:
    """Stream the step trace of a query via Server-Sent Events (SSE).

    Args:
        request_body: Query request containing the query text
        request: FastAPI request object
        query_service: Injected query service

    Returns:
        EventSourceResponse with SSE events

    SSE Events:
        - step: Each step as soon as it is produced
        - error: The error step if the query fails
        - done: Stream is complete
    """

    async def event_generator():
        """Generate SSE events from the conversation loop."""
        step_count = 0

        try:
            # aclosing: leaving the loop early closes the tool servers in this task
            async with aclosing(query_service.stream_query(request_body.query)) as steps:
                async for step in steps:
                    # Check if client disconnected
                    if await request.is_disconnected():
                        logger.warning("Client disconnected during query streaming")
                        break

                    step_count += 1
                    yield {
                        "event": "step",
                        "data": StepEvent.from_step(step).model_dump_json(),
                    }

        except Exception as e:
            logger.error(f"Error during query streaming: {e}")
            error_event = ErrorEvent(content=error_step(e).content)
            yield {
                "event": "error",
                "data": error_event.model_dump_json(),
            }

        done_event = DoneEvent(step_count=step_count)
        yield {
            "event": "done",
            "data": done_event.model_dump_json(),
        }

    return EventSourceResponse(event_generator())
