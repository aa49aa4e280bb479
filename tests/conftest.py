"""
Shared fixtures: in-memory workbooks, a fresh store and a test client
"""
import io
from datetime import date, time
from typing import Any, List, Optional, Sequence

import openpyxl
import pytest
import xlrd
import xlwt

from vmix_server.config import Settings
from vmix_server.core.signature import OLE_SIGNATURE
from vmix_server.core.store import RowStore


XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
XLS_MIME = "application/vnd.ms-excel"

# xlrd only types a number as a date when its cell format is a date format
XLS_DATE_STYLE = xlwt.easyxf(num_format_str="DD/MM/YYYY")


def workbook_bytes(wb) -> bytes:
    buffer = io.BytesIO()
    wb.save(buffer)
    wb.close()
    return buffer.getvalue()


@pytest.fixture
def make_xlsx():
    """Factory: list of rows -> .xlsx bytes (first sheet)"""
    def _make(rows: Sequence[Sequence[Any]], title: str = "Sheet1") -> bytes:
        wb = openpyxl.Workbook()
        ws = wb.active
        ws.title = title
        for row in rows:
            ws.append(list(row))
        return workbook_bytes(wb)

    return _make


@pytest.fixture
def make_xls():
    """Factory: list of rows -> genuine BIFF8 .xls bytes written by xlwt"""
    def _make(rows: Sequence[Sequence[Any]], title: str = "Sheet1") -> bytes:
        wb = xlwt.Workbook()
        ws = wb.add_sheet(title)
        for r, row in enumerate(rows):
            for c, value in enumerate(row):
                if value is None:
                    continue
                if isinstance(value, (date, time)):
                    ws.write(r, c, value, XLS_DATE_STYLE)
                else:
                    ws.write(r, c, value)
        buffer = io.BytesIO()
        wb.save(buffer)
        return buffer.getvalue()

    return _make


class EmptyXlsBook:
    """xlrd book without worksheets; xlwt refuses to write one"""
    datemode = 0
    nsheets = 0
    user_name = ""

    def sheet_names(self) -> List[str]:
        return []


@pytest.fixture
def stub_xlrd(monkeypatch):
    """
    Factory: make xlrd.open_workbook return ``book`` or raise ``error``

    For workbook states no writer can produce. Returns bytes carrying the
    OLE signature so the legacy reader is selected.
    """
    def _stub(book: Any = None, error: Optional[Exception] = None) -> bytes:
        def _open_workbook(**kwargs):
            if error is not None:
                raise error
            return book

        monkeypatch.setattr(xlrd, "open_workbook", _open_workbook)
        return OLE_SIGNATURE + b"\x00" * 504

    return _stub


@pytest.fixture
def store():
    return RowStore()


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def client(settings, store):
    from fastapi.testclient import TestClient

    from vmix_server.main import create_app

    return TestClient(create_app(settings, store))
