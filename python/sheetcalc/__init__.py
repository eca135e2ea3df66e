"""sheetcalc: a spreadsheet engine that keeps every cell value consistent.

Usage::

    from sheetcalc import Spreadsheet, load_spreadsheet

    sheet = Spreadsheet(is_valid=r"^[A-Z]+[1-9][0-9]*$")
    sheet.set_contents_of_cell("A1", "5")
    sheet.set_contents_of_cell("B1", "=A1*2")
    print(sheet.get_cell_value("B1"))   # 10.0

    sheet.save("sheet.xml")
    sheet = load_spreadsheet("sheet.xml", is_valid=r"^[A-Z]+[1-9][0-9]*$")
"""

from sheetcalc._errors import (
    ArgumentNullError,
    CircularDependencyError,
    FormulaFormatError,
    InvalidNameError,
    SpreadsheetError,
    SpreadsheetReadError,
    SpreadsheetVersionError,
    UndefinedVariableError,
)
from sheetcalc._names import NameValidator
from sheetcalc._persist import load_spreadsheet
from sheetcalc._spreadsheet import Spreadsheet
from sheetcalc.calc import DependencyGraph, Formula, FormulaError, recalculation_order

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "ArgumentNullError",
    "CircularDependencyError",
    "DependencyGraph",
    "Formula",
    "FormulaError",
    "FormulaFormatError",
    "InvalidNameError",
    "NameValidator",
    "Spreadsheet",
    "SpreadsheetError",
    "SpreadsheetReadError",
    "SpreadsheetVersionError",
    "UndefinedVariableError",
    "load_spreadsheet",
    "recalculation_order",
]
