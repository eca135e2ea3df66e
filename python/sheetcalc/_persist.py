"""XML persistence for spreadsheets.

Format::

    <spreadsheet IsValid="^[A-Z][0-9]+$">
      <cell name="A1" contents="5"/>
      <cell name="B1" contents="=A1*2"/>
    </spreadsheet>

Loading replays every cell twice: once under the saved ``IsValid`` (to
check the file is self-consistent) and once under the caller's policy.
"""

from __future__ import annotations

import logging
import os
import re
import xml.etree.ElementTree as ET
from typing import IO, TYPE_CHECKING

from sheetcalc._errors import (
    CircularDependencyError,
    FormulaFormatError,
    InvalidNameError,
    SpreadsheetReadError,
    SpreadsheetVersionError,
)
from sheetcalc._spreadsheet import Spreadsheet

if TYPE_CHECKING:
    from sheetcalc._names import NamePolicy

logger = logging.getLogger(__name__)

_ROOT_TAG = "spreadsheet"
_CELL_TAG = "cell"
_VALID_ATTR = "IsValid"

# Errors that mean "this cell cannot be replayed under this policy".
_REPLAY_ERRORS = (InvalidNameError, FormulaFormatError, CircularDependencyError)

# Characters outside the XML 1.0 Char production.
_NON_XML_RE = re.compile(r"[^\t\n\r\x20-\uD7FF\uE000-\uFFFD\U00010000-\U0010FFFF]")


def _check_xml_text(what: str, text: str) -> str:
    m = _NON_XML_RE.search(text)
    if m is not None:
        raise ValueError(f"{what} contains {m.group()!r}, which XML cannot store")
    return text


def write_spreadsheet(sheet: Spreadsheet, dest: str | os.PathLike[str] | IO[str]) -> None:
    """Serialize *sheet* to *dest* (a path or a text stream)."""
    pattern = sheet.validator.pattern
    if pattern is None:
        raise ValueError("Only spreadsheets with a regex name policy can be saved")
    # The file format has no field for the normalizer; loading upper-cases.
    if sheet.normalizer is not str.upper:
        raise ValueError("Only spreadsheets with the default normalizer can be saved")

    root = ET.Element(_ROOT_TAG, {_VALID_ATTR: _check_xml_text(_VALID_ATTR, pattern)})
    for name, contents in sheet.items():
        _check_xml_text(f"Cell {name}", contents)
        ET.SubElement(root, _CELL_TAG, {"name": name, "contents": contents})
    ET.indent(root)
    tree = ET.ElementTree(root)

    if isinstance(dest, (str, os.PathLike)):
        tree.write(dest, encoding="utf-8", xml_declaration=True)
    else:
        tree.write(dest, encoding="unicode")


def _read_cells(source: str | os.PathLike[str] | IO[str]) -> tuple[str, list[tuple[str, str]]]:
    """Parse *source* into ``(is_valid, [(name, contents), ...])``."""
    try:
        root = ET.parse(source).getroot()
    except ET.ParseError as e:
        raise SpreadsheetReadError(f"Malformed spreadsheet XML: {e}") from e

    if root.tag != _ROOT_TAG:
        raise SpreadsheetReadError(f"Expected <{_ROOT_TAG}> root, found <{root.tag}>")
    is_valid = root.get(_VALID_ATTR)
    if is_valid is None:
        raise SpreadsheetReadError(f"<{_ROOT_TAG}> is missing the {_VALID_ATTR} attribute")

    cells: list[tuple[str, str]] = []
    for elem in root:
        if elem.tag != _CELL_TAG:
            raise SpreadsheetReadError(f"Unexpected element <{elem.tag}>")
        name = elem.get("name")
        contents = elem.get("contents")
        if name is None or contents is None:
            raise SpreadsheetReadError("<cell> requires name and contents attributes")
        cells.append((name, contents))
    return is_valid, cells


def load_spreadsheet(
    source: str | os.PathLike[str] | IO[str],
    is_valid: NamePolicy = None,
) -> Spreadsheet:
    """Read a spreadsheet saved with ``Spreadsheet.save``.

    The returned sheet uses *is_valid* as its name policy.

    Raises ``SpreadsheetReadError`` if the file is malformed, has a bad
    ``IsValid`` regex, repeats a cell name (ignoring case), or contains a
    bad name, bad formula or cycle under its own ``IsValid``.  Raises
    ``SpreadsheetVersionError`` if the file is fine but a cell fails under
    *is_valid*.  I/O failures propagate as ``OSError``.
    """
    saved_valid, cells = _read_cells(source)
    try:
        saved_policy = re.compile(saved_valid)
    except re.error as e:
        raise SpreadsheetReadError(f"Invalid {_VALID_ATTR} regex {saved_valid!r}: {e}") from e

    seen: set[str] = set()
    for name, _ in cells:
        key = name.upper()
        if key in seen:
            raise SpreadsheetReadError(f"Duplicate cell name {name!r}")
        seen.add(key)

    as_saved = Spreadsheet(saved_policy)
    sheet = Spreadsheet(is_valid)
    for name, contents in cells:
        try:
            as_saved.set_contents_of_cell(name, contents)
        except _REPLAY_ERRORS as e:
            raise SpreadsheetReadError(f"Cell {name!r} is invalid: {e}") from e
        try:
            sheet.set_contents_of_cell(name, contents)
        except _REPLAY_ERRORS as e:
            raise SpreadsheetVersionError(
                f"Cell {name!r} is invalid under the new name policy: {e}"
            ) from e

    logger.debug("Loaded %d cells (saved IsValid=%r)", len(cells), saved_valid)
    sheet._mark_saved()  # noqa: SLF001
    return sheet
