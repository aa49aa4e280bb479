"""
Spreadsheet parser - uploaded bytes to row records

Rules:
  - Row 1 of the first worksheet holds the headers
  - Header text is normalized into column keys (no diacritics, non-alphanumeric
    runs collapsed to "_"); empty headers become "Column<N>"
  - Every following row becomes a Row with a fresh unique id
  - Empty cells are left out, rows without any value are dropped
"""
import logging
import time
import uuid
from collections.abc import Mapping
from typing import Any, Dict, List, Sequence

from vmix_server.core.cells import Cell, normalize_header, render_cell
from vmix_server.core.workbook import read_first_sheet
from vmix_server.errors import ParseError
from vmix_server.models import ROW_ID_KEY, Row


logger = logging.getLogger(__name__)


def placeholder_key(column: int) -> str:
    """Key for a header cell that is empty or unreadable (1-based column)"""
    return f"Column{column}"


def new_row_id(position: int, stamp_ms: int) -> str:
    """Unique row id: position in batch, import time and a random suffix"""
    return f"row_{position}_{stamp_ms}_{uuid.uuid4().hex[:6]}"


def build_headers(cells: Sequence[Cell]) -> Dict[int, str]:
    """
    Map 1-based column numbers to column keys

    Args:
        cells: First row of the worksheet

    Returns:
        Dictionary column -> key. Duplicate keys are kept as-is.
    """
    headers = {}
    for column, cell in enumerate(cells, start=1):
        text = render_cell(cell)
        key = normalize_header(text) if text and text.strip() else ""
        if not key or key == ROW_ID_KEY:
            key = placeholder_key(column)
        headers[column] = key
    return headers


def parse(data: bytes, filename: str) -> List[Row]:
    """
    Parse an uploaded workbook into rows

    Args:
        data: Raw file bytes (.xlsx or .xls)
        filename: Declared upload filename, used for logging

    Returns:
        Rows in sheet order

    Raises:
        ParseError: unreadable or protected file, no worksheet, no header, no data
    """
    sheet = read_first_sheet(data)

    if not sheet.rows:
        raise ParseError(ParseError.NO_HEADER, "Excel file has no header row")

    headers = build_headers(sheet.rows[0])
    stamp_ms = int(time.time() * 1000)

    rows = []
    for cells in sheet.rows[1:]:
        row = Row(id=new_row_id(len(rows) + 1, stamp_ms))
        for column, cell in enumerate(cells, start=1):
            value = render_cell(cell)
            if value is None:
                continue
            row.set(headers.get(column) or placeholder_key(column), value)

        # Skip rows with no populated cell
        if row.entries:
            rows.append(row)

    if not rows:
        raise ParseError(ParseError.NO_DATA, "Excel file contains no data rows")

    logger.info(
        f"📊 Parsed {filename}: sheet '{sheet.name}', {len(rows)} rows, "
        f"{len(headers)} columns"
    )
    return rows


def validate(rows: Any) -> bool:
    """
    Structural sanity check on parsed rows

    True when there is at least one row, every row is a record and at least
    one row carries a column besides ``id``. Column names are not checked.
    """
    if not rows or isinstance(rows, (str, bytes, Mapping)):
        return False

    has_data = False
    for row in rows:
        if isinstance(row, Row):
            keys = row.keys()
        elif isinstance(row, Mapping):
            keys = [key for key in row if key != ROW_ID_KEY]
        else:
            return False
        has_data = has_data or bool(keys)
    return has_data
