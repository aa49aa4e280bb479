"""
Workbook format layer

Opens uploaded bytes with openpyxl (.xlsx) or xlrd (.xls) and exposes the
first worksheet as rows of ``Cell`` values.
"""
import io
import logging
import zipfile
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, List, Optional

import openpyxl
import xlrd
from openpyxl.cell.rich_text import CellRichText
from openpyxl.utils.exceptions import InvalidFileException
from openpyxl.worksheet.formula import ArrayFormula, DataTableFormula
from xlrd.biffh import (
    XL_CELL_BLANK,
    XL_CELL_BOOLEAN,
    XL_CELL_DATE,
    XL_CELL_EMPTY,
    XL_CELL_ERROR,
    XL_CELL_NUMBER,
    XLRDError,
    error_text_from_code,
)
from xlrd.compdoc import CompDocError
from xlrd.xldate import XLDateError, xldate_as_datetime

from vmix_server.core.cells import EMPTY_CELL, Cell, CellKind
from vmix_server.core.signature import (
    FORMAT_XLS,
    FORMAT_XLSX,
    detect_format,
    is_encrypted_package,
)
from vmix_server.errors import ParseError
from vmix_server.models import WorkbookMetadata


logger = logging.getLogger(__name__)

_XLSX_ERRORS = (zipfile.BadZipFile, InvalidFileException, KeyError, ValueError, TypeError, OSError)


@dataclass
class Sheet:
    """First worksheet of a workbook, row-major; index 0 of a row is column 1"""
    name: str
    rows: List[List[Cell]] = field(default_factory=list)


def read_first_sheet(data: bytes) -> Sheet:
    """
    Read the first worksheet of an uploaded workbook

    Raises:
        ParseError: corrupted or password-protected container, or no worksheet
    """
    fmt = _format_or_fail(data)
    if fmt == FORMAT_XLSX:
        return _read_xlsx(data)
    return _read_xls(data)


def workbook_metadata(data: bytes) -> WorkbookMetadata:
    """Container-level details (sheets, author, timestamps)"""
    fmt = _format_or_fail(data)
    if fmt == FORMAT_XLSX:
        wb = _open_xlsx(data, read_only=True)
        try:
            props = wb.properties
            return WorkbookMetadata(
                format=FORMAT_XLSX,
                sheet_names=list(wb.sheetnames),
                sheet_count=len(wb.sheetnames),
                creator=props.creator,
                created=props.created,
                modified=props.modified,
            )
        finally:
            wb.close()

    book = _open_xls(data)
    names = list(book.sheet_names())
    return WorkbookMetadata(
        format=FORMAT_XLS,
        sheet_names=names,
        sheet_count=len(names),
        creator=getattr(book, "user_name", None) or None,
    )


def _format_or_fail(data: bytes) -> str:
    if is_encrypted_package(data):
        raise ParseError(
            ParseError.PASSWORD_PROTECTED,
            "This file is password protected. Please use an unprotected file",
        )
    fmt = detect_format(data)
    if fmt is None:
        raise ParseError(ParseError.CORRUPTED, "File is not a readable Excel workbook")
    return fmt


# ==================== XLSX (openpyxl) ====================

def _open_xlsx(data: bytes, data_only: bool = False, read_only: bool = False):
    try:
        return openpyxl.load_workbook(
            io.BytesIO(data),
            read_only=read_only,
            data_only=data_only,
            rich_text=not read_only,
        )
    except _XLSX_ERRORS as e:
        logger.error(f"❌ openpyxl could not open workbook: {type(e).__name__}: {e}")
        raise ParseError(ParseError.CORRUPTED, f"Excel file appears to be corrupted: {e}") from e


def _read_xlsx(data: bytes) -> Sheet:
    # Two views of the same file: formulas as written, and their cached results
    formulas_wb = _open_xlsx(data, data_only=False)
    values_wb = _open_xlsx(data, data_only=True)
    try:
        if not formulas_wb.worksheets:
            raise ParseError(ParseError.NO_WORKSHEET, "Workbook contains no worksheet")

        ws = formulas_wb.worksheets[0]
        values_ws = values_wb.worksheets[0]

        rows = []
        for cells, cached_cells in zip(ws.iter_rows(), values_ws.iter_rows()):
            rows.append([
                _xlsx_cell(cell, cached) for cell, cached in zip(cells, cached_cells)
            ])
        return Sheet(name=ws.title, rows=rows)
    finally:
        formulas_wb.close()
        values_wb.close()


def _xlsx_cell(cell: Any, cached: Any = None) -> Cell:
    value = cell.value
    if value is None:
        return EMPTY_CELL

    if cell.data_type == "f" or isinstance(value, (ArrayFormula, DataTableFormula)):
        formula = value if isinstance(value, str) else getattr(value, "text", None)
        result = _xlsx_cell(cached) if cached is not None else None
        if result is not None and result.kind is CellKind.EMPTY:
            result = None
        return Cell(CellKind.FORMULA, result, fallback=formula)

    if cell.hyperlink is not None:
        return Cell(CellKind.HYPERLINK, value, fallback=cell.hyperlink.target)

    if isinstance(value, CellRichText):
        runs = tuple(run if isinstance(run, str) else run.text for run in value)
        return Cell(CellKind.RICH_TEXT, runs)

    if cell.is_date:
        return Cell(CellKind.DATE, value)
    if isinstance(value, bool):
        return Cell(CellKind.BOOLEAN, value)
    if isinstance(value, (int, float)):
        return Cell(CellKind.NUMBER, value)
    if cell.data_type == "e":
        return Cell(CellKind.ERROR, value)

    return Cell(CellKind.TEXT, value)


# ==================== XLS (xlrd) ====================

def _open_xls(data: bytes):
    try:
        return xlrd.open_workbook(file_contents=data)
    except XLRDError as e:
        if "encrypted" in str(e).lower():
            raise ParseError(
                ParseError.PASSWORD_PROTECTED,
                "This file is password protected. Please use an unprotected file",
            ) from e
        logger.error(f"❌ xlrd could not open workbook: {e}")
        raise ParseError(ParseError.CORRUPTED, f"Excel file appears to be corrupted: {e}") from e
    except (CompDocError, ValueError, IndexError, OSError) as e:
        logger.error(f"❌ xlrd could not open workbook: {type(e).__name__}: {e}")
        raise ParseError(ParseError.CORRUPTED, f"Excel file appears to be corrupted: {e}") from e


def _read_xls(data: bytes) -> Sheet:
    book = _open_xls(data)
    if book.nsheets == 0:
        raise ParseError(ParseError.NO_WORKSHEET, "Workbook contains no worksheet")

    sheet = book.sheet_by_index(0)
    rows = []
    for r in range(sheet.nrows):
        rows.append([_xls_cell(sheet.cell(r, c), book.datemode) for c in range(sheet.ncols)])
    return Sheet(name=sheet.name, rows=rows)


def _xls_cell(cell: Any, datemode: int) -> Cell:
    ctype = cell.ctype
    if ctype in (XL_CELL_EMPTY, XL_CELL_BLANK):
        return EMPTY_CELL
    if ctype == XL_CELL_DATE:
        value = _xls_date(cell.value, datemode)
        if value is not None:
            return Cell(CellKind.DATE, value)
        return Cell(CellKind.NUMBER, cell.value)
    if ctype == XL_CELL_NUMBER:
        return Cell(CellKind.NUMBER, cell.value)
    if ctype == XL_CELL_BOOLEAN:
        return Cell(CellKind.BOOLEAN, bool(cell.value))
    if ctype == XL_CELL_ERROR:
        return Cell(CellKind.ERROR, error_text_from_code.get(cell.value, "#ERR"))
    return Cell(CellKind.TEXT, cell.value)


def _xls_date(value: float, datemode: int) -> Optional[datetime]:
    try:
        return xldate_as_datetime(value, datemode)
    except (XLDateError, ValueError, OverflowError):
        return None
