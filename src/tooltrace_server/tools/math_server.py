"""Demo MCP tool server with arithmetic and text tools.

Run it over stdio with `python -m tooltrace_server.tools.math_server`, or
point a config entry at it:

    {"mcpServers": {"math": {"command": "python",
                             "args": ["-m", "tooltrace_server.tools.math_server"]}}}

Invalid arguments raise InvalidToolArguments, which the MCP server reports
to the client as an error result.
"""

import asyncio
import logging
import math
import random
import re
from datetime import datetime, timezone
from typing import Any, Callable

import mcp.types as types
from mcp.server import Server
from mcp.server.stdio import stdio_server

logger = logging.getLogger(__name__)

FACTORIAL_LIMIT = 170
FIBONACCI_LIMIT = 78


class InvalidToolArguments(ValueError):
    """Raised when a tool receives arguments of the wrong type or range."""


def _number_schema(**properties: str) -> dict[str, Any]:
    return {
        "type": "object",
        "properties": {
            name: {"type": "number", "description": description}
            for name, description in properties.items()
        },
        "required": list(properties),
    }


def _text_schema(description: str) -> dict[str, Any]:
    return {
        "type": "object",
        "properties": {"text": {"type": "string", "description": description}},
        "required": ["text"],
    }


TOOL_DEFINITIONS: list[dict[str, Any]] = [
    {
        "name": "add",
        "description": "Add two numbers together",
        "inputSchema": _number_schema(a="First number", b="Second number"),
    },
    {
        "name": "multiply",
        "description": "Multiply two numbers",
        "inputSchema": _number_schema(a="First number", b="Second number"),
    },
    {
        "name": "power",
        "description": "Raise a number to a power",
        "inputSchema": _number_schema(base="Base number", exponent="Exponent"),
    },
    {
        "name": "factorial",
        "description": "Calculate the factorial of a number",
        "inputSchema": _number_schema(n="Non-negative integer"),
    },
    {
        "name": "is_prime",
        "description": "Check if a number is prime",
        "inputSchema": _number_schema(n="Number to check"),
    },
    {
        "name": "fibonacci",
        "description": "Calculate the nth Fibonacci number",
        "inputSchema": _number_schema(n="Position in sequence (0-based)"),
    },
    {
        "name": "random",
        "description": "Generate a random number between min and max",
        "inputSchema": {
            "type": "object",
            "properties": {
                "min": {"type": "number", "description": "Minimum value", "default": 0},
                "max": {"type": "number", "description": "Maximum value", "default": 100},
            },
        },
    },
    {
        "name": "reverse_string",
        "description": "Reverse a string",
        "inputSchema": _text_schema("Text to reverse"),
    },
    {
        "name": "word_count",
        "description": "Count words in text",
        "inputSchema": _text_schema("Text to analyze"),
    },
    {
        "name": "current_time",
        "description": "Get current date and time",
        "inputSchema": {
            "type": "object",
            "properties": {
                "format": {
                    "type": "string",
                    "description": "Format: 'iso' or 'local'",
                    "default": "iso",
                },
            },
        },
    },
]


def _number(arguments: dict[str, Any], name: str) -> int | float:
    value = arguments.get(name)
    if isinstance(value, bool) or not isinstance(value, (int, float)) or math.isnan(value):
        raise InvalidToolArguments(f"{name} must be a valid number")
    return value


def _integer(value: int | float) -> int | None:
    if isinstance(value, int):
        return value
    if math.isfinite(value) and value.is_integer():
        return int(value)
    return None


def _fmt(value: int | float) -> str:
    """Format numbers without a trailing .0 for integral floats."""
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return str(int(value))
    return str(value)


def _text(arguments: dict[str, Any]) -> str:
    text = arguments.get("text")
    if not isinstance(text, str):
        raise InvalidToolArguments("text must be a string")
    return text


def add(arguments: dict[str, Any]) -> str:
    a, b = _number(arguments, "a"), _number(arguments, "b")
    return f"{_fmt(a)} + {_fmt(b)} = {_fmt(a + b)}"


def multiply(arguments: dict[str, Any]) -> str:
    a, b = _number(arguments, "a"), _number(arguments, "b")
    return f"{_fmt(a)} × {_fmt(b)} = {_fmt(a * b)}"


def power(arguments: dict[str, Any]) -> str:
    base = _number(arguments, "base")
    exponent = _number(arguments, "exponent")
    try:
        result = math.pow(base, exponent)
    except OverflowError:
        raise InvalidToolArguments("Number too large (would exceed precision)") from None
    except ValueError:
        raise InvalidToolArguments(f"{_fmt(base)}^{_fmt(exponent)} is undefined") from None
    return f"{_fmt(base)}^{_fmt(exponent)} = {_fmt(result)}"


def factorial(arguments: dict[str, Any]) -> str:
    n = _integer(_number(arguments, "n"))
    if n is None or n < 0:
        raise InvalidToolArguments("Factorial requires a non-negative integer")
    if n > FACTORIAL_LIMIT:
        raise InvalidToolArguments("Number too large (would exceed precision)")
    return f"{n}! = {math.factorial(n)}"


def is_prime(arguments: dict[str, Any]) -> str:
    value = _number(arguments, "n")
    n = _integer(value)
    if n is None or n < 2:
        return f"{_fmt(value)} is not prime (must be integer ≥ 2)"
    if n == 2:
        return f"{n} is prime"
    if n % 2 == 0:
        return f"{n} is not prime (divisible by 2)"
    for divisor in range(3, math.isqrt(n) + 1, 2):
        if n % divisor == 0:
            return f"{n} is not prime (divisible by {divisor})"
    return f"{n} is prime"


def fibonacci(arguments: dict[str, Any]) -> str:
    n = _integer(_number(arguments, "n"))
    if n is None or n < 0:
        raise InvalidToolArguments("Fibonacci requires non-negative integer")
    if n > FIBONACCI_LIMIT:
        raise InvalidToolArguments("Number too large (would exceed precision)")
    a, b = 0, 1
    for _ in range(n):
        a, b = b, a + b
    return f"Fibonacci({n}) = {a}"


def random_number(arguments: dict[str, Any]) -> str:
    bounds = {"min": arguments.get("min", 0), "max": arguments.get("max", 100)}
    low, high = _number(bounds, "min"), _number(bounds, "max")
    if low > high:
        raise InvalidToolArguments("min cannot be greater than max")
    low_int, high_int = _integer(low), _integer(high)
    if low_int is not None and high_int is not None:
        result: int | float = random.randint(low_int, high_int)
    else:
        result = random.uniform(low, high)
    return f"Random number between {_fmt(low)} and {_fmt(high)}: {_fmt(result)}"


def reverse_string(arguments: dict[str, Any]) -> str:
    text = _text(arguments)
    return f'Original: "{text}"\nReversed: "{text[::-1]}"'


def word_count(arguments: dict[str, Any]) -> str:
    text = _text(arguments)
    no_spaces = re.sub(r"\s", "", text)
    return (
        "Text analysis:\n"
        f"Words: {len(text.split())}\n"
        f"Characters: {len(text)}\n"
        f"Characters (no spaces): {len(no_spaces)}"
    )


def current_time(arguments: dict[str, Any]) -> str:
    fmt = arguments.get("format") or "iso"
    if fmt == "local":
        time_string = datetime.now().astimezone().strftime("%x, %X")
    else:
        time_string = datetime.now(timezone.utc).isoformat()
    return f"Current time ({fmt}): {time_string}"


TOOL_HANDLERS: dict[str, Callable[[dict[str, Any]], str]] = {
    "add": add,
    "multiply": multiply,
    "power": power,
    "factorial": factorial,
    "is_prime": is_prime,
    "fibonacci": fibonacci,
    "random": random_number,
    "reverse_string": reverse_string,
    "word_count": word_count,
    "current_time": current_time,
}


def run_tool(name: str, arguments: dict[str, Any] | None) -> str:
    """Run a tool by name and return its result text.

    Raises:
        InvalidToolArguments: If the arguments are invalid
        ValueError: If the tool is unknown
    """
    handler = TOOL_HANDLERS.get(name)
    if handler is None:
        raise ValueError(f"Unknown tool: {name}")
    return handler(arguments or {})


server = Server("tooltrace-math")


@server.list_tools()
async def list_tools() -> list[types.Tool]:
    """List available tools."""
    return [types.Tool(**definition) for definition in TOOL_DEFINITIONS]


@server.call_tool()
async def call_tool(name: str, arguments: dict[str, Any] | None) -> list[types.TextContent]:
    """Handle tool calls."""
    logger.debug(f"Calling tool {name} with {arguments}")
    return [types.TextContent(type="text", text=run_tool(name, arguments))]


async def serve() -> None:
    async with stdio_server() as (read_stream, write_stream):
        await server.run(
            read_stream, write_stream, server.create_initialization_options()
        )


def main() -> None:
    # stdout carries the protocol, so logs go to stderr
    logging.basicConfig(level=logging.WARNING)
    asyncio.run(serve())


if __name__ == "__main__":
    main()
