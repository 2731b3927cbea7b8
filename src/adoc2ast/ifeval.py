#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/adoc2ast/ifeval.py
"""Evaluator for ``ifeval::[lhs op rhs]`` preprocessor conditions.

Only a single comparison is supported. Each operand is one of

- a quoted string (``"text"`` or ``'text'``), kept as a string
- ``true`` / ``false``
- a number (a ``.`` makes it a float, otherwise the leading integer is used)
- any of the above containing ``{attribute}`` references, which are
  substituted first with missing references dropped

Examples
--------
>>> evaluate_expression('"{backend}" == "html5"', lambda text: text.replace("{backend}", "html5"))
True
>>> evaluate_expression("2 > 10", lambda text: text)
False

"""

from __future__ import annotations

import logging
import operator
import re
from typing import Any, Callable, Optional

from adoc2ast.utils.text import to_float, to_int

logger = logging.getLogger(__name__)

EVAL_EXPRESSION_RE = re.compile(r"^(.+?) *([=!><]=|[><]) *(.+)$")

_OPERATORS: dict[str, Callable[[Any, Any], bool]] = {
    "==": operator.eq,
    "!=": operator.ne,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
}


def parse_expression(text: Optional[str]) -> Optional[tuple[str, str, str]]:
    """Split an expression into ``(lhs, operator, rhs)``, or None if malformed."""
    if not text:
        return None
    match = EVAL_EXPRESSION_RE.match(text.strip())
    if match is None:
        return None
    return match.group(1), match.group(2), match.group(3)


def resolve_operand(value: str, sub_attributes: Callable[[str], str]) -> Any:
    """Convert one side of an expression into a comparable value."""
    quoted = len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'"
    if quoted:
        value = value[1:-1]
    if "{" in value:
        value = sub_attributes(value)

    if quoted:
        return value
    if not value:
        return None
    if value == "true":
        return True
    if value == "false":
        return False
    if not value.strip():
        return " "
    if "." in value:
        return to_float(value)
    return to_int(value)


def compare(lhs: Any, op: str, rhs: Any) -> bool:
    """Apply ``op`` to two resolved operands.

    Booleans only compare equal to booleans, and comparing values that have
    no ordering between them yields False rather than an error.
    """
    if isinstance(lhs, bool) != isinstance(rhs, bool):
        if op == "==":
            return False
        if op == "!=":
            return True
        return False
    try:
        return bool(_OPERATORS[op](lhs, rhs))
    except TypeError:
        logger.debug("ifeval operands %r and %r cannot be compared with %s", lhs, rhs, op)
        return False


def evaluate_expression(text: str, sub_attributes: Callable[[str], str]) -> bool:
    """Evaluate an ``ifeval`` expression.

    Parameters
    ----------
    text : str
        The bracket content of the directive
    sub_attributes : callable
        Substitutes attribute references in an operand

    Returns
    -------
    bool
        True when the enclosed content should be kept

    Raises
    ------
    ValueError
        If ``text`` is not a comparison expression

    """
    parts = parse_expression(text)
    if parts is None:
        raise ValueError(f"invalid expression: {text!r}")
    lhs, op, rhs = parts
    return compare(resolve_operand(lhs, sub_attributes), op, resolve_operand(rhs, sub_attributes))
