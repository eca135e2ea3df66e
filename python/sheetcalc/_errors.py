"""Exception types raised by sheetcalc."""

from __future__ import annotations


class SpreadsheetError(Exception):
    """Base class for errors raised by the spreadsheet engine."""


class InvalidNameError(SpreadsheetError, ValueError):
    """A cell name failed the syntax rule or the injected validator."""

    def __init__(self, name: str | None) -> None:
        super().__init__(f"Invalid cell name: {name!r}")
        self.name = name


class FormulaFormatError(SpreadsheetError, ValueError):
    """A formula string could not be tokenized or parsed."""


class CircularDependencyError(SpreadsheetError):
    """A change would make a cell depend on itself."""

    def __init__(self, cell: str) -> None:
        super().__init__(f"Circular dependency detected involving: {cell}")
        self.cell = cell


class ArgumentNullError(SpreadsheetError, TypeError):
    """A required argument was ``None``."""


class UndefinedVariableError(KeyError):
    """Raised by a lookup function when a variable has no numeric value."""


class SpreadsheetReadError(SpreadsheetError):
    """A saved spreadsheet is malformed or inconsistent with its own validator."""


class SpreadsheetVersionError(SpreadsheetError):
    """A saved spreadsheet is valid, but not under the requested validator."""
