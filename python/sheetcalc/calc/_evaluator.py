"""Two-stack infix evaluator for parsed formulas.

Operands and pending operators are kept on separate stacks and the token
stream is read once, left to right.  ``*`` and ``/`` are applied as soon as
their right operand is available; ``+`` and ``-`` wait until another
``+``/``-``, a ``)`` or the end of input.  That gives standard precedence
and left associativity without an explicit precedence table.

Failures (undefined variable, division by zero) come back as
:class:`FormulaError` values rather than exceptions.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from sheetcalc.calc._parser import Token, TokenKind
from sheetcalc.calc._protocol import FormulaError, Lookup

logger = logging.getLogger(__name__)

_ADDITIVE = ("+", "-")
_MULTIPLICATIVE = ("*", "/")


def _apply(left: float, op: str, right: float) -> float:
    """Apply a binary operator.  Division by zero raises ``ZeroDivisionError``."""
    if op == "+":
        return left + right
    if op == "-":
        return left - right
    if op == "*":
        return left * right
    if op == "/":
        if right == 0:
            raise ZeroDivisionError("division by zero")
        return left / right
    raise ValueError(f"Unknown operator: {op!r}")


def _reduce(values: list[float], operators: list[str]) -> None:
    """Pop one operator and two operands, push the result.

    The most recently pushed operand is the right-hand side.
    """
    op = operators.pop()
    right = values.pop()
    left = values.pop()
    values.append(_apply(left, op, right))


def _top_is(operators: list[str], ops: tuple[str, ...]) -> bool:
    return bool(operators) and operators[-1] in ops


def evaluate_tokens(tokens: Sequence[Token], lookup: Lookup) -> float | FormulaError:
    """Evaluate a validated token sequence.

    *tokens* must come from a successfully constructed ``Formula``; the
    stacks are not checked for malformed input.
    """
    values: list[float] = []
    operators: list[str] = []

    try:
        for token in tokens:
            kind = token.kind

            if kind is TokenKind.NUMBER or kind is TokenKind.VARIABLE:
                if kind is TokenKind.NUMBER:
                    operand = float(token.text)
                else:
                    try:
                        found = lookup(token.text)
                    except KeyError:
                        logger.debug("Undefined variable %s", token.text)
                        return FormulaError(f"undefined variable: {token.text}")
                    try:
                        operand = float(found)
                    except (TypeError, ValueError):
                        logger.debug("Non-numeric value for %s: %r", token.text, found)
                        return FormulaError(f"not a number: {token.text}")
                if _top_is(operators, _MULTIPLICATIVE):
                    operand = _apply(values.pop(), operators.pop(), operand)
                values.append(operand)

            elif kind is TokenKind.OPERATOR:
                if token.text in _ADDITIVE and _top_is(operators, _ADDITIVE):
                    _reduce(values, operators)
                operators.append(token.text)

            elif kind is TokenKind.LPAREN:
                operators.append(token.text)

            elif kind is TokenKind.RPAREN:
                if _top_is(operators, _ADDITIVE):
                    _reduce(values, operators)
                operators.pop()  # the matching "("
                if _top_is(operators, _MULTIPLICATIVE):
                    _reduce(values, operators)

        if operators:
            _reduce(values, operators)
    except ZeroDivisionError:
        logger.debug("Division by zero")
        return FormulaError("division by zero")

    return values[-1]
