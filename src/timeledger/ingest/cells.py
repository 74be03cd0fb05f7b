"""Cell value helpers shared by the timesheet parsers."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional

from dateutil import parser as dateparser
from openpyxl.utils.datetime import from_excel

TRUTHY = frozenset({"y", "yes", "true", "x", "1"})


def cell_text(value: Any) -> str:
    """Render a raw cell value as trimmed text ('' for empty cells)."""
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value).strip()


def cell_at(row: tuple[Any, ...], index: Optional[int]) -> Any:
    if index is None or index >= len(row):
        return None
    return row[index]


def parse_cell_date(value: Any) -> Optional[date]:
    """Dates arrive as datetimes, Excel serial numbers, or free text."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return from_excel(value).date()
        except (ValueError, OverflowError, TypeError):
            return None
    text = str(value).strip()
    if not text:
        return None
    try:
        return dateparser.parse(text).date()
    except (ValueError, OverflowError):
        return None


def is_truthy(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return cell_text(value).lower() in TRUTHY
