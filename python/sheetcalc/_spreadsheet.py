"""Spreadsheet: the cell store that keeps every value consistent with its inputs.

A spreadsheet holds named cells.  Each cell has *contents* (text, a number,
or a ``Formula``) and a *value* (text, a number, or a ``FormulaError``).
Setting a cell updates the dependency graph, computes the recalculation
order from the changed cell, and re-evaluates every affected formula.
"""

from __future__ import annotations

import logging
import math
import os
import re
from collections.abc import Iterator
from dataclasses import dataclass
from decimal import Decimal
from typing import IO, TYPE_CHECKING, Any

from sheetcalc._errors import (
    ArgumentNullError,
    CircularDependencyError,
    InvalidNameError,
    UndefinedVariableError,
)
from sheetcalc._names import NamePolicy, NameValidator
from sheetcalc.calc._graph import DependencyGraph
from sheetcalc.calc._parser import Formula
from sheetcalc.calc._protocol import CellContents, CellValue, FormulaError, Normalizer
from sheetcalc.calc._recalc import recalculation_order

if TYPE_CHECKING:
    from openpyxl import Workbook as XlsxWorkbook

logger = logging.getLogger(__name__)

# Plain decimal literal: optional minus, no leading zeros, optional fraction.
_NUMBER_RE = re.compile(r"-?(?:0|[1-9][0-9]*)(?:\.[0-9]+)?")


def format_number(value: float) -> str:
    """Render *value* in plain decimal form, without exponent or trailing ``.0``."""
    text = repr(float(value))
    if "e" in text or "E" in text:
        text = format(Decimal(text), "f")
    if text.endswith(".0"):
        text = text[:-2]
    if text == "-0":
        text = "0"
    return text


def contents_to_string(contents: CellContents) -> str:
    """The string that, passed to ``set_contents_of_cell``, recreates *contents*."""
    if isinstance(contents, Formula):
        return f"={contents}"
    if isinstance(contents, float):
        return format_number(contents)
    return contents


@dataclass
class _Cell:
    contents: CellContents
    value: CellValue


class Spreadsheet:
    """An unbounded grid of named cells.

    Cell names are normalized with *normalize* (upper case by default) and
    must satisfy both the built-in syntax rule and *is_valid*.

    Usage::

        sheet = Spreadsheet()
        sheet.set_contents_of_cell("A1", "5")
        sheet.set_contents_of_cell("B1", "=A1*2")
        sheet.get_cell_value("B1")        # 10.0
        sheet.set_contents_of_cell("A1", "3")   # ['A1', 'B1']
        sheet.get_cell_value("B1")        # 6.0
    """

    def __init__(
        self,
        is_valid: NamePolicy = None,
        normalize: Normalizer = str.upper,
    ) -> None:
        self._validator = NameValidator(is_valid)
        self._normalize = normalize
        self._cells: dict[str, _Cell] = {}
        self._graph = DependencyGraph()
        self._changed = False

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def changed(self) -> bool:
        """True if the sheet was modified since it was created, saved or loaded."""
        return self._changed

    @property
    def validator(self) -> NameValidator:
        return self._validator

    @property
    def normalizer(self) -> Normalizer:
        return self._normalize

    def __len__(self) -> int:
        return len(self._cells)

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, str):
            return False
        return self._normalize(name) in self._cells

    def __repr__(self) -> str:
        return f"<Spreadsheet cells={len(self._cells)} is_valid={self._validator.pattern!r}>"

    # ------------------------------------------------------------------
    # Reading cells
    # ------------------------------------------------------------------

    def get_cell_contents(self, name: str) -> CellContents:
        """Contents of *name*: a ``str``, a ``float`` or a ``Formula``.

        Empty cells have contents ``""``.
        """
        cell = self._cells.get(self._check_name(name))
        return cell.contents if cell is not None else ""

    def get_cell_value(self, name: str) -> CellValue:
        """Value of *name*: a ``str``, a ``float`` or a ``FormulaError``.

        Empty cells have value ``""``.
        """
        cell = self._cells.get(self._check_name(name))
        return cell.value if cell is not None else ""

    def get_names_of_all_nonempty_cells(self) -> list[str]:
        return list(self._cells)

    def get_direct_dependents(self, name: str) -> set[str]:
        """Names of the cells whose formulas read *name* directly."""
        return self._graph.dependents(self._check_name(name))

    def items(self) -> Iterator[tuple[str, str]]:
        """Yield ``(name, contents_string)`` for every non-empty cell.

        Replaying the pairs through ``set_contents_of_cell`` rebuilds the
        sheet.
        """
        for name, cell in self._cells.items():
            yield name, contents_to_string(cell.contents)

    # ------------------------------------------------------------------
    # Writing cells
    # ------------------------------------------------------------------

    def set_contents_of_cell(self, name: str, content: str) -> list[str]:
        """Set the contents of *name* from the string *content*.

        - ``""`` empties the cell;
        - a plain decimal literal (``"3"``, ``"-2.5"``) stores a number, unless
          it overflows a float, in which case it is stored as text;
        - ``"=..."`` parses the rest as a ``Formula``;
        - anything else is stored as text.

        Returns *name* plus every cell that depends on it, directly or
        indirectly, in the order they were re-evaluated.

        Raises ``ArgumentNullError`` if *content* is None,
        ``InvalidNameError`` for a bad name, ``FormulaFormatError`` for a
        bad formula and ``CircularDependencyError`` if the formula would
        make a cell depend on itself.  In every error case the sheet is
        left unchanged.
        """
        if content is None:
            raise ArgumentNullError("Cell content cannot be None")
        name = self._check_name(name)

        if content.startswith("="):
            formula = Formula(content[1:], self._normalize, self._validator)
            order = self._set_formula(name, formula)
        else:
            contents: CellContents = content
            if _NUMBER_RE.fullmatch(content):
                number = float(content)
                # Literals too large for a float stay text.
                if math.isfinite(number):
                    contents = number
            self._graph.replace_dependees(name, ())
            if contents == "":
                self._cells.pop(name, None)
            else:
                self._cells[name] = _Cell(contents, contents)
            order = recalculation_order(self._graph, name)

        self._changed = True
        logger.debug("Set %s to %r; recalculating %s", name, content, order)
        self._recalculate(order)
        return order

    def _set_formula(self, name: str, formula: Formula) -> list[str]:
        """Point *name* at *formula*, rolling back the graph on a cycle."""
        old_dependees = self._graph.dependees(name)
        self._graph.replace_dependees(name, formula.variables)
        try:
            order = recalculation_order(self._graph, name)
        except CircularDependencyError:
            logger.debug("Cycle through %s; restoring dependees %s", name, old_dependees)
            self._graph.replace_dependees(name, old_dependees)
            raise
        self._cells[name] = _Cell(formula, FormulaError("not yet evaluated"))
        return order

    def _recalculate(self, order: list[str]) -> None:
        for name in order:
            cell = self._cells.get(name)
            if cell is None or not isinstance(cell.contents, Formula):
                continue
            cell.value = cell.contents.evaluate(self._lookup)
            if isinstance(cell.value, FormulaError):
                logger.debug("%s evaluated to error: %s", name, cell.value.reason)

    def _lookup(self, name: str) -> float:
        """Numeric value of *name*; raises ``UndefinedVariableError`` otherwise."""
        cell = self._cells.get(name)
        if cell is None or not isinstance(cell.value, float):
            raise UndefinedVariableError(name)
        return cell.value

    def _check_name(self, name: str) -> str:
        """Normalize *name*, raising ``InvalidNameError`` if it is not valid."""
        if name is None or not isinstance(name, str):
            raise InvalidNameError(name)
        canonical = self._normalize(name)
        if not self._validator(canonical):
            raise InvalidNameError(name)
        return canonical

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save(self, dest: str | os.PathLike[str] | IO[str]) -> None:
        """Write the sheet as XML to a path or text stream."""
        from sheetcalc._persist import write_spreadsheet

        write_spreadsheet(self, dest)
        self._changed = False

    def to_workbook(self) -> XlsxWorkbook:
        """Copy cell contents into a new openpyxl workbook (``sheetcalc[xlsx]``)."""
        from sheetcalc._xlsx import spreadsheet_to_workbook

        return spreadsheet_to_workbook(self)

    @classmethod
    def from_workbook(cls, workbook: Any, is_valid: NamePolicy = None) -> Spreadsheet:
        """Build a sheet from the active worksheet of an openpyxl workbook."""
        from sheetcalc._xlsx import workbook_to_spreadsheet

        return workbook_to_spreadsheet(workbook, cls(is_valid))

    def _mark_saved(self) -> None:
        self._changed = False
