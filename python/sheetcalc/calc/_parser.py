"""Formula tokenizer and parser for infix arithmetic over named variables."""

from __future__ import annotations

import enum
import re
from collections.abc import Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING

from sheetcalc._errors import ArgumentNullError, FormulaFormatError

if TYPE_CHECKING:
    from sheetcalc.calc._protocol import FormulaError, Lookup, Normalizer, Validator

# ---------------------------------------------------------------------------
# Token patterns
# ---------------------------------------------------------------------------

_SPACE = r"\s+"
_LPAREN = r"\("
_RPAREN = r"\)"
_OPERATOR = r"[+\-*/]"
_VARIABLE = r"[a-zA-Z][0-9a-zA-Z]*"
_NUMBER = r"(?:\d+\.\d*|\d*\.\d+|\d+)(?:[eE][+-]?\d+)?"

# Group order matters: the first alternative that matches at a position wins.
_TOKEN_RE = re.compile(
    rf"({_SPACE})|({_LPAREN})|({_RPAREN})|({_OPERATOR})|({_VARIABLE})|({_NUMBER})|(.)",
    re.DOTALL,
)


class TokenKind(enum.Enum):
    LPAREN = "lparen"
    RPAREN = "rparen"
    OPERATOR = "operator"
    VARIABLE = "variable"
    NUMBER = "number"
    INVALID = "invalid"


# Indexed by regex group number (group 1 is whitespace and is skipped).
_GROUP_KINDS = {
    2: TokenKind.LPAREN,
    3: TokenKind.RPAREN,
    4: TokenKind.OPERATOR,
    5: TokenKind.VARIABLE,
    6: TokenKind.NUMBER,
    7: TokenKind.INVALID,
}

# Tokens that may start an operand position / may end an operand.
_OPERAND_START = frozenset({TokenKind.NUMBER, TokenKind.VARIABLE, TokenKind.LPAREN})
_OPERAND_END = frozenset({TokenKind.NUMBER, TokenKind.VARIABLE, TokenKind.RPAREN})


@dataclass(frozen=True)
class Token:
    text: str
    kind: TokenKind


def tokenize(text: str) -> Iterator[Token]:
    """Yield the tokens of *text* left to right, skipping whitespace.

    Characters that fit no token class come out as ``INVALID`` tokens;
    rejecting them is the parser's job.
    """
    for m in _TOKEN_RE.finditer(text):
        group = m.lastindex
        if group == 1:
            continue
        yield Token(m.group(group), _GROUP_KINDS[group])


# ---------------------------------------------------------------------------
# Formula
# ---------------------------------------------------------------------------


def _identity(name: str) -> str:
    return name


def _accept_all(name: str) -> bool:
    return True


class Formula:
    """An immutable, validated infix arithmetic expression.

    Formulas are built from non-negative numbers, variables (a letter
    followed by letters and/or digits), parentheses and the binary
    operators ``+ - * /``.  Unary ``+``/``-`` are not supported.

    Every variable is passed through *normalize* and the result through
    *validate*; the normalized spelling is what the formula stores and
    reports.

    Usage::

        f = Formula("a1 + 2 * b2", normalize=str.upper)
        f.variables            # frozenset({'A1', 'B2'})
        str(f)                 # 'A1+2*B2'
        f.evaluate({"A1": 1.0, "B2": 3.0}.__getitem__)   # 7.0
    """

    __slots__ = ("_tokens", "_variables", "_text")

    def __init__(
        self,
        formula: str,
        normalize: Normalizer = _identity,
        validate: Validator = _accept_all,
    ) -> None:
        if formula is None or normalize is None or validate is None:
            raise ArgumentNullError("Formula arguments cannot be None")

        tokens: list[Token] = []
        variables: set[str] = set()
        open_parens = 0
        close_parens = 0
        previous: Token | None = None

        for token in tokenize(formula):
            kind = token.kind
            if kind is TokenKind.INVALID:
                raise FormulaFormatError(f"Invalid token {token.text!r} in {formula!r}")

            if previous is None:
                if kind not in _OPERAND_START:
                    raise FormulaFormatError(
                        f"Formula must start with a number, variable or '(': {formula!r}"
                    )
            elif previous.kind in _OPERAND_END:
                if kind is not TokenKind.OPERATOR and kind is not TokenKind.RPAREN:
                    raise FormulaFormatError(
                        f"Expected an operator or ')' after {previous.text!r}, got {token.text!r}"
                    )
            elif kind not in _OPERAND_START:
                raise FormulaFormatError(
                    f"Expected a number, variable or '(' after {previous.text!r}, "
                    f"got {token.text!r}"
                )

            if kind is TokenKind.LPAREN:
                open_parens += 1
            elif kind is TokenKind.RPAREN:
                close_parens += 1
                if close_parens > open_parens:
                    raise FormulaFormatError(f"Unmatched ')' in {formula!r}")
            elif kind is TokenKind.VARIABLE:
                name = normalize(token.text)
                if not validate(name):
                    raise FormulaFormatError(f"Invalid variable {name!r} in {formula!r}")
                token = Token(name, kind)
                variables.add(name)

            tokens.append(token)
            previous = token

        if previous is None:
            raise FormulaFormatError("Formula must contain at least one token")
        if previous.kind not in _OPERAND_END:
            raise FormulaFormatError(
                f"Formula must end with a number, variable or ')': {formula!r}"
            )
        if open_parens != close_parens:
            raise FormulaFormatError(f"Unbalanced parentheses in {formula!r}")

        self._tokens = tuple(tokens)
        self._variables = frozenset(variables)
        self._text = "".join(t.text for t in tokens)

    @property
    def tokens(self) -> tuple[Token, ...]:
        return self._tokens

    @property
    def variables(self) -> frozenset[str]:
        """Distinct normalized variable names appearing in the formula."""
        return self._variables

    def evaluate(self, lookup: Lookup) -> float | FormulaError:
        """Evaluate using *lookup* for variable values.

        Returns the numeric result, or a ``FormulaError`` if a variable is
        undefined (*lookup* raises ``KeyError``), *lookup* returns something
        that is not a number, or a division by zero occurs.  Any other
        exception raised by *lookup* propagates.
        """
        from sheetcalc.calc._evaluator import evaluate_tokens

        if lookup is None:
            raise ArgumentNullError("lookup cannot be None")
        return evaluate_tokens(self._tokens, lookup)

    def __str__(self) -> str:
        return self._text

    def __repr__(self) -> str:
        return f"Formula({self._text!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Formula):
            return self._text == other._text
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._text)
