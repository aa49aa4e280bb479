"""
Cell values and their display strings

Format readers reduce every spreadsheet cell to a ``Cell`` tagged with a
``CellKind``; ``render_cell`` turns it into the string stored in a row.
"""
import re
import unicodedata
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional


DATE_FORMAT = "%d/%m/%Y"

_NON_WORD_RE = re.compile(r"[\W_]+")


class CellKind(str, Enum):
    EMPTY = "empty"
    TEXT = "text"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    FORMULA = "formula"
    RICH_TEXT = "rich_text"
    HYPERLINK = "hyperlink"
    ERROR = "error"


@dataclass(frozen=True)
class Cell:
    """
    A spreadsheet cell resolved by a format reader

    ``value`` depends on ``kind``:
      - FORMULA: the cached result as another Cell (or None if never computed)
      - RICH_TEXT: tuple of text runs
      - HYPERLINK: display text
      - others: the raw Python value

    ``fallback`` holds the formula text or hyperlink target.
    """
    kind: CellKind
    value: Any = None
    fallback: Optional[str] = None


EMPTY_CELL = Cell(CellKind.EMPTY)


def _format_number(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, Decimal) and value == value.to_integral_value():
        return str(value.quantize(Decimal(1)))
    return str(value)


def _format_date(value: Any) -> str:
    # datetime is a subclass of date; time-only values have no calendar fields
    if isinstance(value, (datetime, date)):
        return value.strftime(DATE_FORMAT)
    return str(value)


def _to_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float, Decimal)):
        return _format_number(value)
    if isinstance(value, (datetime, date)):
        return _format_date(value)
    return str(value)


def render_cell(cell: Cell) -> Optional[str]:
    """
    Reduce a cell to its display string

    Returns:
        The string, or None for empty cells and empty strings
    """
    kind = cell.kind

    if kind is CellKind.EMPTY:
        text = None
    elif kind is CellKind.DATE:
        text = _format_date(cell.value)
    elif kind is CellKind.FORMULA:
        text = render_cell(cell.value) if cell.value is not None else None
        if not text:
            text = cell.fallback
    elif kind is CellKind.RICH_TEXT:
        text = "".join(cell.value or ())
    elif kind is CellKind.HYPERLINK:
        text = _to_text(cell.value) or cell.fallback
    elif kind is CellKind.BOOLEAN:
        text = "true" if cell.value else "false"
    elif kind is CellKind.NUMBER:
        text = _format_number(cell.value)
    elif kind in (CellKind.TEXT, CellKind.ERROR):
        text = _to_text(cell.value)
    else:
        raise ValueError(f"Unknown cell kind: {kind}")

    return text or None


def normalize_header(text: str) -> str:
    """
    Turn header text into a column key

    Diacritics are stripped and every run of non-alphanumeric characters
    becomes a single underscore. Letters of any script are kept.

    Example:
        >>> normalize_header("Prénom / Nom")
        'Prenom_Nom'
        >>> normalize_header("Город")
        'Город'
    """
    decomposed = unicodedata.normalize("NFKD", text.strip())
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return _NON_WORD_RE.sub("_", stripped)
