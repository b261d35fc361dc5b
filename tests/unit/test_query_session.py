"""Unit tests for QuerySession connection lifecycle."""

import pytest
from fakes import (
    FakeChannel,
    FakeChannelFactory,
    ScriptedModel,
    math_channel,
    reply,
    text,
    tool_use,
)

from tooltrace_server.conversation.types import StepKind
from tooltrace_server.errors import ModelCallError, ServerConnectionError
from tooltrace_server.providers.config import ServerConfig, ServerDescriptor
from tooltrace_server.sessions import QuerySession


def _config(*names: str) -> ServerConfig:
    return ServerConfig(
        mcpServers={name: ServerDescriptor(command="python") for name in names}
    )


def _session(factory, model, *names: str) -> QuerySession:
    return QuerySession(
        server_config=_config(*names),
        model=model,
        system_prompt="system",
        channel_factory=factory,
    )


@pytest.mark.asyncio
async def test_session_runs_query_and_closes_connections():
    """Test a successful query closes every connection once."""
    math = math_channel()
    model = ScriptedModel(
        [reply(tool_use("multiply", {"a": 15, "b": 32})), reply(text("It is 480."))]
    )

    async with _session(FakeChannelFactory({"math": math}), model, "math") as session:
        assert len(session.tools) == 10
        steps = await session.run_query("What is 15 * 32?")

    assert steps[1].content == "15 × 32 = 480"
    assert math.close_calls == 1
    assert session.connections == []
    assert session.tools == []


@pytest.mark.asyncio
async def test_connections_closed_in_reverse_order():
    """Test that the newest connection is closed first."""
    close_log: list[str] = []
    factory = FakeChannelFactory(
        {
            "first": FakeChannel("first", close_log=close_log),
            "second": FakeChannel("second", close_log=close_log),
            "third": FakeChannel("third", close_log=close_log),
        }
    )

    async with _session(factory, ScriptedModel([]), "first", "second", "third"):
        pass

    assert close_log == ["third", "second", "first"]


@pytest.mark.asyncio
async def test_connections_closed_after_model_error():
    """Test that a failing model call still releases every connection."""
    math = math_channel()
    model = ScriptedModel([ModelCallError("rate limited")])

    with pytest.raises(ModelCallError):
        async with _session(FakeChannelFactory({"math": math}), model, "math") as session:
            await session.run_query("What is 2 + 2?")

    assert math.close_calls == 1


@pytest.mark.asyncio
async def test_discovery_failure_closes_opened_connections():
    """Test that connections opened before a failing server are closed."""
    first = FakeChannel("first", tools={"alpha": str})
    factory = FakeChannelFactory(
        {"first": first}, failing={"second": FileNotFoundError("no such command")}
    )
    session = _session(factory, ScriptedModel([]), "first", "second")

    with pytest.raises(ServerConnectionError):
        async with session:
            pytest.fail("session body must not run")

    assert first.close_calls == 1
    assert session.connections == []


@pytest.mark.asyncio
async def test_close_errors_are_swallowed():
    """Test that a failing close does not stop the remaining closes."""
    close_log: list[str] = []
    broken = FakeChannel("broken", close_error=RuntimeError("already dead"), close_log=close_log)
    healthy = FakeChannel("healthy", close_log=close_log)
    factory = FakeChannelFactory({"healthy": healthy, "broken": broken})

    async with _session(factory, ScriptedModel([]), "healthy", "broken"):
        pass

    assert close_log == ["broken", "healthy"]
    assert healthy.close_calls == 1


@pytest.mark.asyncio
async def test_close_is_idempotent():
    """Test that closing twice closes each connection once."""
    math = math_channel()
    session = _session(FakeChannelFactory({"math": math}), ScriptedModel([]), "math")
    await session.open()

    await session.close()
    await session.close()

    assert math.close_calls == 1


@pytest.mark.asyncio
async def test_stream_query_yields_steps():
    """Test streaming steps from an open session."""
    model = ScriptedModel([reply(text("Hello there"))])

    async with _session(
        FakeChannelFactory({"math": math_channel()}), model, "math"
    ) as session:
        steps = [step async for step in session.stream_query("Hi")]

    assert [(s.kind, s.content) for s in steps] == [(StepKind.TEXT, "Hello there")]


@pytest.mark.asyncio
async def test_each_driver_has_its_own_log():
    """Test that two queries on one session do not share messages."""
    model = ScriptedModel([reply(text("one")), reply(text("two"))])

    async with _session(
        FakeChannelFactory({"math": math_channel()}), model, "math"
    ) as session:
        await session.run_query("first")
        await session.run_query("second")

    assert len(model.calls[1]["messages"]) == 1
    assert model.calls[1]["messages"][0].content == "second"
