"""openpyxl interop: copy cell contents to and from .xlsx workbooks.

Requires the ``xlsx`` extra (``pip install sheetcalc[xlsx]``).  Only
contents travel; openpyxl does not evaluate formulas, and values are
recomputed by the spreadsheet on import.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from sheetcalc._spreadsheet import Spreadsheet, format_number
from sheetcalc.calc._parser import Formula

if TYPE_CHECKING:
    from openpyxl import Workbook

logger = logging.getLogger(__name__)


def spreadsheet_to_workbook(sheet: Spreadsheet) -> Workbook:
    """Write each non-empty cell of *sheet* to the active worksheet.

    Raises ValueError if a cell name is not an A1-style coordinate.
    """
    import openpyxl
    from openpyxl.utils.cell import coordinate_from_string
    from openpyxl.utils.exceptions import CellCoordinatesException

    wb = openpyxl.Workbook()
    ws = wb.active
    for name in sheet.get_names_of_all_nonempty_cells():
        try:
            coordinate_from_string(name)
        except CellCoordinatesException as e:
            raise ValueError(f"Cell name {name!r} is not an xlsx coordinate") from e
        contents = sheet.get_cell_contents(name)
        if isinstance(contents, Formula):
            ws[name] = f"={contents}"
        else:
            ws[name] = contents
    return wb


def _cell_text(value: Any) -> str:
    if isinstance(value, bool):
        return str(value).upper()
    if isinstance(value, (int, float)):
        return format_number(value)
    return str(value)


def workbook_to_spreadsheet(workbook: Any, sheet: Spreadsheet) -> Spreadsheet:
    """Replay the active worksheet of *workbook* into *sheet*.

    Cells are replayed in row-major order; formulas that read cells further
    down are re-evaluated when those cells arrive.
    """
    ws = workbook.active
    count = 0
    for row in ws.iter_rows():
        for cell in row:
            if cell.value is None:
                continue
            sheet.set_contents_of_cell(cell.coordinate, _cell_text(cell.value))
            count += 1
    logger.debug("Imported %d cells from worksheet %r", count, ws.title)
    sheet._mark_saved()  # noqa: SLF001
    return sheet
