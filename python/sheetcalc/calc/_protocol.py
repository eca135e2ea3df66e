"""Value types and callable protocols shared by the calc engine."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Protocol, Union, runtime_checkable

if TYPE_CHECKING:
    from sheetcalc.calc._parser import Formula


@dataclass(frozen=True)
class FormulaError:
    """Error value of a formula cell whose evaluation failed.

    Stored as the cell's value and returned from ``Formula.evaluate``;
    never raised.
    """

    reason: str

    def __str__(self) -> str:
        return f"#ERROR: {self.reason}"


# Contents of a cell: text, a number, or a formula.
CellContents = Union[str, float, "Formula"]

# Value of a cell: text, a number, or an evaluation error.
CellValue = Union[str, float, FormulaError]

Normalizer = Callable[[str], str]
Validator = Callable[[str], bool]


@runtime_checkable
class Lookup(Protocol):
    """Maps a variable name to its numeric value.

    Implementations raise ``UndefinedVariableError`` (or any ``KeyError``)
    when the name has no numeric value.
    """

    def __call__(self, name: str) -> float:
        ...
