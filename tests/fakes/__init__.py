"""Shared test doubles — re-export memory backends plus a workbook builder."""

from __future__ import annotations

import io
from typing import Any

import openpyxl

from timeledger.persistence.memory_backend import (
    MemoryEmployeeDirectory,
    MemoryFileStore,
    MemoryForecastDirectory,
    MemoryTeamConfig,
)


def build_workbook(rows: list[list[Any]], sheet: str = "Data") -> bytes:
    """Serialize rows into .xlsx bytes with a single named worksheet."""
    workbook = openpyxl.Workbook()
    worksheet = workbook.active
    worksheet.title = sheet
    for row in rows:
        worksheet.append(row)
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


__all__ = [
    "MemoryEmployeeDirectory",
    "MemoryFileStore",
    "MemoryForecastDirectory",
    "MemoryTeamConfig",
    "build_workbook",
]
