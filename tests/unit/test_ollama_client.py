"""Unit tests for the OllamaClient wrapper."""

from unittest.mock import AsyncMock, patch

import pytest

from tooltrace_server.ollama import OllamaClient


async def _stream(*chunks):
    for chunk in chunks:
        yield chunk


@pytest.fixture
def mock_ollama_async_client():
    """Create a mock ollama.AsyncClient."""
    with patch("tooltrace_server.ollama.client.ollama.AsyncClient") as mock_class:
        mock_instance = AsyncMock()
        mock_class.return_value = mock_instance
        yield mock_instance


@pytest.fixture
def ollama_client(mock_ollama_async_client):
    """Create an OllamaClient with mocked AsyncClient."""
    return OllamaClient(host="http://localhost:11434")


@pytest.mark.asyncio
async def test_client_initialization():
    """Test that OllamaClient initializes correctly."""
    with patch("tooltrace_server.ollama.client.ollama.AsyncClient"):
        client = OllamaClient(host="http://test:11434")
        assert client.host == "http://test:11434"
        assert client._client is not None


@pytest.mark.asyncio
async def test_check_connection_success(ollama_client, mock_ollama_async_client):
    """Test successful connection check."""
    mock_ollama_async_client.list.return_value = {"models": []}

    result = await ollama_client.check_connection()

    assert result is True
    mock_ollama_async_client.list.assert_called_once()


@pytest.mark.asyncio
async def test_check_connection_failure(ollama_client, mock_ollama_async_client):
    """Test connection check when Ollama is unreachable."""
    mock_ollama_async_client.list.side_effect = Exception("Connection refused")

    result = await ollama_client.check_connection()

    assert result is False


@pytest.mark.asyncio
async def test_chat_stream_passes_tools(ollama_client, mock_ollama_async_client):
    """Test that chat_stream forwards tools and streams chunks."""
    tools = [{"type": "function", "function": {"name": "add"}}]
    mock_ollama_async_client.chat.return_value = _stream(
        {"message": {"role": "assistant", "content": "Hi"}, "done": False},
        {"message": {"role": "assistant", "content": ""}, "done": True},
    )

    chunks = [
        chunk
        async for chunk in ollama_client.chat_stream(
            model="llama3.1:latest",
            messages=[{"role": "user", "content": "Hello"}],
            tools=tools,
        )
    ]

    assert len(chunks) == 2
    call_kwargs = mock_ollama_async_client.chat.call_args.kwargs
    assert call_kwargs["tools"] == tools
    assert call_kwargs["stream"] is True


@pytest.mark.asyncio
async def test_chat_with_tools_collects_content_and_calls(
    ollama_client, mock_ollama_async_client
):
    """Test that content is concatenated and tool calls are gathered."""
    call = {"function": {"name": "multiply", "arguments": {"a": 15, "b": 32}}}
    mock_ollama_async_client.chat.return_value = _stream(
        {"message": {"role": "assistant", "content": "Let me "}, "done": False},
        {"message": {"role": "assistant", "content": "calculate."}, "done": False},
        {"message": {"role": "assistant", "content": "", "tool_calls": [call]}, "done": False},
        {"message": {"role": "assistant", "content": ""}, "done": True, "eval_count": 12},
    )

    content, tool_calls, final_chunk = await ollama_client.chat_with_tools(
        model="llama3.1:latest",
        messages=[{"role": "user", "content": "What is 15 * 32?"}],
        tools=[],
    )

    assert content == "Let me calculate."
    assert tool_calls == [call]
    assert final_chunk["eval_count"] == 12


@pytest.mark.asyncio
async def test_chat_with_tools_requires_done_marker(
    ollama_client, mock_ollama_async_client
):
    """Test that a truncated stream is reported as an error."""
    mock_ollama_async_client.chat.return_value = _stream(
        {"message": {"role": "assistant", "content": "partial"}, "done": False},
    )

    with pytest.raises(RuntimeError, match="completion marker"):
        await ollama_client.chat_with_tools(
            model="llama3.1:latest", messages=[], tools=[]
        )


@pytest.mark.asyncio
async def test_chat_stream_api_error(ollama_client, mock_ollama_async_client):
    """Test that API failures propagate from chat_stream."""
    mock_ollama_async_client.chat.side_effect = Exception("model not found")

    with pytest.raises(Exception, match="model not found"):
        async for _ in ollama_client.chat_stream(model="missing", messages=[]):
            pass


@pytest.mark.asyncio
async def test_close(ollama_client):
    """Test that close method can be called without errors."""
    await ollama_client.close()
    # Should not raise any exceptions
