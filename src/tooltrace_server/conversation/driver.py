"""Conversation driver: the turn-based tool-orchestration loop.

Each turn sends the whole message log and tool list to the reasoning model.
Text blocks become text steps. The first tool-use block of a response is
executed through the ToolInvoker, its result is fed back to the model, and
the loop repeats until a response contains no tool use.
"""

import json
import logging
from enum import Enum
from typing import AsyncIterator

from tooltrace_server.conversation.model import ReasoningModel
from tooltrace_server.conversation.types import (
    AssistantMessage,
    ConversationMessage,
    ModelResponse,
    Step,
    StepKind,
    TextBlock,
    ToolResultBlock,
    ToolResultMessage,
    ToolUseBlock,
    UserMessage,
)
from tooltrace_server.providers.invoker import ToolInvoker
from tooltrace_server.providers.registry import ToolDescriptor

logger = logging.getLogger(__name__)


class DriverState(str, Enum):
    """States of the conversation loop."""

    AWAITING_MODEL = "awaiting_model"
    MODEL_RESPONDED = "model_responded"
    EXECUTING_TOOL = "executing_tool"
    DONE = "done"


def format_tool_use(block: ToolUseBlock) -> str:
    """Render a tool request as readable step content."""
    rendered = json.dumps(block.arguments, indent=2, ensure_ascii=False, default=str)
    return f"Tool: {block.name}\nInput:\n{rendered}"


class ConversationDriver:
    """Runs one query through the model and tools, producing the step trace.

    A driver owns its message log and step list; create one per query.

    Attributes:
        state: Current DriverState
        messages: Conversation log sent to the model each turn
        steps: Steps produced so far, in chronological order
        model_calls: Number of model requests made
    """

    def __init__(
        self,
        model: ReasoningModel,
        invoker: ToolInvoker,
        tools: list[ToolDescriptor],
        system_prompt: str,
        max_tool_turns: int | None = None,
    ) -> None:
        self.model = model
        self.invoker = invoker
        self.tools = list(tools)
        self.system_prompt = system_prompt
        self.max_tool_turns = max_tool_turns

        self.state = DriverState.AWAITING_MODEL
        self.messages: list[ConversationMessage] = []
        self.steps: list[Step] = []
        self.model_calls = 0
        self.tool_turns = 0

    def _record(self, kind: StepKind, content: str) -> Step:
        step = Step(kind=kind, content=content)
        self.steps.append(step)
        return step

    async def _request_model(self) -> ModelResponse:
        self.state = DriverState.AWAITING_MODEL
        self.model_calls += 1
        logger.debug(
            f"Model turn {self.model_calls} with {len(self.messages)} message(s)"
        )
        # Model errors are not caught here; they end the query
        response = await self.model.complete(
            list(self.messages), self.tools, self.system_prompt
        )
        self.state = DriverState.MODEL_RESPONDED
        return response

    def _turn_limit_reached(self) -> bool:
        return (
            self.max_tool_turns is not None
            and self.tool_turns >= self.max_tool_turns
        )

    async def iter_steps(self, query: str) -> AsyncIterator[Step]:
        """Run the loop for a query, yielding each step as it is produced.

        Raises:
            ModelCallError: If a reasoning model request fails
        """
        self.messages = [UserMessage(content=query)]
        self.steps = []
        self.model_calls = 0
        self.tool_turns = 0

        while True:
            response = await self._request_model()

            tool_use: ToolUseBlock | None = None
            for index, block in enumerate(response.content):
                match block:
                    case TextBlock():
                        yield self._record(StepKind.TEXT, block.text)
                    case ToolUseBlock():
                        tool_use = block
                        skipped = sum(
                            isinstance(b, ToolUseBlock)
                            for b in response.content[index + 1 :]
                        )
                        if skipped:
                            logger.debug(
                                f"Ignoring {skipped} additional tool call(s) this turn"
                            )
                        break
                    case ToolResultBlock():
                        logger.warning("Model response contained a tool result block")

            if tool_use is None:
                self.state = DriverState.DONE
                logger.info(
                    f"Query finished after {self.model_calls} model call(s) "
                    f"and {self.tool_turns} tool call(s)"
                )
                return

            if self._turn_limit_reached():
                logger.warning(
                    f"Stopping after {self.tool_turns} tool call(s): "
                    f"limit of {self.max_tool_turns} reached"
                )
                yield self._record(
                    StepKind.TEXT,
                    f"Stopped after {self.tool_turns} tool call(s) without a final answer.",
                )
                self.state = DriverState.DONE
                return

            self.state = DriverState.EXECUTING_TOOL
            yield self._record(StepKind.TOOL_USE, format_tool_use(tool_use))

            result = await self.invoker.invoke(tool_use.name, tool_use.arguments)
            self.tool_turns += 1
            yield self._record(StepKind.TOOL_RESULT, result)

            self.messages.append(AssistantMessage(content=list(response.content)))
            self.messages.append(
                ToolResultMessage(
                    result=ToolResultBlock(
                        tool_use_id=tool_use.id,
                        tool_name=tool_use.name,
                        content=result,
                    )
                )
            )

    async def run(self, query: str) -> list[Step]:
        """Run the loop for a query and return the complete step trace."""
        async for _ in self.iter_steps(query):
            pass
        return list(self.steps)
