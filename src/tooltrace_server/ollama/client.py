"""Async Ollama client wrapper.

This module provides an async wrapper around the ollama.AsyncClient for
communicating with the Ollama API. All operations are async and the client
is designed to be created once at startup and reused.
"""

import logging
from typing import Any, AsyncIterator

import ollama

logger = logging.getLogger(__name__)


class OllamaClient:
    """Async client for interacting with Ollama API.

    This client wraps ollama.AsyncClient and provides high-level async methods
    for checking connectivity and chatting with tool definitions.
    All chat operations use streaming.

    Attributes:
        host: The Ollama server URL (e.g., "http://localhost:11434")
        _client: The underlying ollama.AsyncClient instance
    """

    def __init__(self, host: str) -> None:
        """Initialize the Ollama client.

        Args:
            host: The Ollama server URL
        """
        self.host = host
        self._client = ollama.AsyncClient(host=host)
        logger.info(f"OllamaClient initialized with host: {host}")

    async def check_connection(self) -> bool:
        """Check if the Ollama server is reachable.

        Returns:
            bool: True if connection is successful, False otherwise
        """
        try:
            # Try to list models as a connectivity check
            await self._client.list()
            logger.debug("Ollama connection check: successful")
            return True
        except Exception as e:
            logger.warning(f"Ollama connection check failed: {e}")
            return False

    async def chat_stream(
        self,
        model: str,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]] | None = None,
        options: dict[str, Any] | None = None,
    ) -> AsyncIterator[dict[str, Any]]:
        """Stream chat responses from Ollama.

        Args:
            model: The model name to use for the chat
            messages: List of message dicts in Ollama format:
                      [{"role": "user", "content": "..."}, ...]
            tools: Optional tool definitions in Ollama function format
            options: Optional model parameters (temperature, etc.)

        Yields:
            dict: Response chunks from Ollama. Each chunk contains:
                  - model: str - The model name
                  - message: dict - Contains role, content and tool_calls
                  - done: bool - True on the final chunk

        Raises:
            Exception: If the Ollama API request fails
        """
        try:
            logger.debug(f"Starting chat stream with model: {model}")
            logger.debug(f"Message count: {len(messages)}, tool count: {len(tools or [])}")

            async for chunk in await self._client.chat(
                model=model,
                messages=messages,
                tools=tools,
                stream=True,
                options=options,
            ):
                # Convert the chunk to a dict if it's not already
                if hasattr(chunk, "model_dump"):
                    chunk_dict = chunk.model_dump()
                elif isinstance(chunk, dict):
                    chunk_dict = chunk
                else:
                    chunk_dict = vars(chunk)

                yield chunk_dict

            logger.debug("Chat stream completed")

        except Exception as e:
            logger.error(f"Chat stream failed: {e}")
            raise

    async def chat_with_tools(
        self,
        model: str,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]],
    ) -> tuple[str, list[dict[str, Any]], dict[str, Any]]:
        """Collect a complete response, including tool calls, from the stream.

        Args:
            model: Model name to use
            messages: Messages in Ollama format
            tools: Tool definitions in Ollama function format

        Returns:
            Tuple of (content, tool_calls, final_chunk_metadata)

        Raises:
            RuntimeError: If the stream ends without a completion marker
            Exception: If the Ollama API request fails
        """
        content_parts: list[str] = []
        tool_calls: list[dict[str, Any]] = []
        final_chunk = None

        async for chunk in self.chat_stream(model=model, messages=messages, tools=tools):
            message = chunk.get("message") or {}
            content = message.get("content") or ""
            if content:
                content_parts.append(content)

            # Tool calls arrive whole, possibly spread over several chunks
            for call in message.get("tool_calls") or []:
                tool_calls.append(call)

            if chunk.get("done"):
                final_chunk = chunk
                break

        if final_chunk is None:
            raise RuntimeError("Stream ended without completion marker")

        logger.debug(
            f"Collected response: {len(''.join(content_parts))} characters, "
            f"{len(tool_calls)} tool call(s)"
        )
        return "".join(content_parts), tool_calls, final_chunk

    async def close(self) -> None:
        """Close the client and clean up resources.

        ollama.AsyncClient doesn't require explicit cleanup in current versions.
        """
        logger.debug("OllamaClient closed")
