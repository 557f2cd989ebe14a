#!/usr/bin/env python3
"""Arithmetic MCP server using stdio mode.

Tools:
- calculate: evaluate an expression with numbers, + - * / and parentheses
- add, subtract, multiply, divide: two-operand arithmetic

Errors (bad expression, division by zero) are raised from the handler, which
the MCP server turns into an ``isError`` tool result.

Usage:
    python math_server.py
"""

import ast
import asyncio
import operator
from typing import Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

app = Server("aime-math-server")

_OPERATORS = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.USub: operator.neg,
    ast.UAdd: operator.pos,
}

_OPERANDS_SCHEMA = {
    "type": "object",
    "properties": {
        "a": {"type": "number", "description": "First operand"},
        "b": {"type": "number", "description": "Second operand"},
    },
    "required": ["a", "b"],
}


def _format(value: float) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _evaluate(node: ast.AST) -> float:
    if isinstance(node, ast.Constant) and isinstance(node.value, (int, float)) and not isinstance(node.value, bool):
        return node.value
    if isinstance(node, ast.UnaryOp) and type(node.op) in _OPERATORS:
        return _OPERATORS[type(node.op)](_evaluate(node.operand))
    if isinstance(node, ast.BinOp) and type(node.op) in _OPERATORS:
        return _OPERATORS[type(node.op)](_evaluate(node.left), _evaluate(node.right))
    raise ValueError("only numbers, + - * / and parentheses are allowed")


def calculate(expression: str) -> str:
    try:
        tree = ast.parse(expression.strip(), mode="eval")
        return _format(_evaluate(tree.body))
    except ZeroDivisionError:
        raise ValueError("calculation failed: division by zero")
    except SyntaxError as exc:
        raise ValueError(f"calculation failed: invalid expression ({exc.msg})")
    except ValueError as exc:
        raise ValueError(f"calculation failed: {exc}")


@app.list_tools()
async def list_tools() -> list[Tool]:
    """List available tools."""
    return [
        Tool(
            name="calculate",
            description="Evaluate an arithmetic expression with numbers, + - * / and parentheses",
            inputSchema={
                "type": "object",
                "properties": {
                    "expression": {
                        "type": "string",
                        "description": "Expression such as 1+2*3/4 - 5",
                    }
                },
                "required": ["expression"],
            },
        ),
        Tool(name="add", description="Add two numbers (a + b)", inputSchema=_OPERANDS_SCHEMA),
        Tool(name="subtract", description="Subtract two numbers (a - b)", inputSchema=_OPERANDS_SCHEMA),
        Tool(name="multiply", description="Multiply two numbers (a * b)", inputSchema=_OPERANDS_SCHEMA),
        Tool(name="divide", description="Divide two numbers (a / b)", inputSchema=_OPERANDS_SCHEMA),
    ]


@app.call_tool()
async def call_tool(name: str, arguments: Any) -> list[TextContent]:
    """Handle tool calls."""
    arguments = arguments or {}

    if name == "calculate":
        return [TextContent(type="text", text=calculate(str(arguments.get("expression", ""))))]

    a = arguments.get("a", 0)
    b = arguments.get("b", 0)

    if name == "add":
        result = a + b
    elif name == "subtract":
        result = a - b
    elif name == "multiply":
        result = a * b
    elif name == "divide":
        if b == 0:
            raise ValueError("division by zero: divisor b must not be 0")
        result = a / b
    else:
        raise ValueError(f"Unknown tool: {name}")

    return [TextContent(type="text", text=_format(result))]


async def main():
    """Run the MCP server."""
    async with stdio_server() as (read_stream, write_stream):
        await app.run(
            read_stream,
            write_stream,
            app.create_initialization_options(),
        )


if __name__ == "__main__":
    asyncio.run(main())
