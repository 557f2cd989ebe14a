"""Safe arithmetic evaluation."""

from __future__ import annotations

import ast
import operator as op

from langchain_core.tools import tool

from aimeAgent.tools.base import format_error

_ALLOWED_OPS = {
    ast.Add: op.add,
    ast.Sub: op.sub,
    ast.Mult: op.mul,
    ast.Div: op.truediv,
    ast.FloorDiv: op.floordiv,
    ast.Mod: op.mod,
    ast.Pow: op.pow,
    ast.USub: op.neg,
    ast.UAdd: op.pos,
}


def _eval(node: ast.AST):
    if isinstance(node, ast.Constant) and isinstance(node.value, (int, float)) and not isinstance(node.value, bool):
        return node.value
    if isinstance(node, ast.UnaryOp) and type(node.op) in _ALLOWED_OPS:
        return _ALLOWED_OPS[type(node.op)](_eval(node.operand))
    if isinstance(node, ast.BinOp) and type(node.op) in _ALLOWED_OPS:
        return _ALLOWED_OPS[type(node.op)](_eval(node.left), _eval(node.right))
    raise ValueError("disallowed expression")


@tool
def calc(expression: str) -> str:
    """Evaluate an arithmetic expression such as "(1200 + 350) * 2".

    Supports + - * / // % ** and parentheses on numbers only.
    """
    try:
        node = ast.parse(expression, mode="eval").body
        return str(_eval(node))
    except Exception as exc:  # noqa: BLE001
        return format_error(f"calc failed: {exc}")


__all__ = ["calc"]
