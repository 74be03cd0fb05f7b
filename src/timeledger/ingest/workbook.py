"""openpyxl-backed spreadsheet reader implementing ISpreadsheetReader."""

from __future__ import annotations

import io
import zipfile
from collections.abc import Iterator
from typing import Any

import openpyxl
from openpyxl.utils.exceptions import InvalidFileException
from openpyxl.worksheet.worksheet import Worksheet

from timeledger.core.exceptions import MissingWorksheetError, UnreadableFileError


class OpenpyxlWorksheet:
    """IWorksheet over an openpyxl worksheet, yielding cell values only."""

    def __init__(self, sheet: Worksheet) -> None:
        self._sheet = sheet

    def iter_rows(self) -> Iterator[tuple[Any, ...]]:
        yield from self._sheet.iter_rows(values_only=True)


class OpenpyxlReader:
    """Production ISpreadsheetReader for .xlsx timesheet exports."""

    def load(self, data: bytes, worksheet: str, filename: str = "") -> OpenpyxlWorksheet:
        try:
            workbook = openpyxl.load_workbook(io.BytesIO(data), data_only=True)
        except (zipfile.BadZipFile, InvalidFileException, KeyError, OSError, ValueError) as exc:
            raise UnreadableFileError(f"{filename}: not a readable workbook: {exc}") from exc

        if worksheet not in workbook.sheetnames:
            raise MissingWorksheetError(filename, worksheet)
        return OpenpyxlWorksheet(workbook[worksheet])
