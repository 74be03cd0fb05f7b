"""Timesheet parsers — turn uploaded spreadsheets into canonical time entries.

Two layouts are supported:

* ``ExportTimesheetParser``: a column-header export (worksheet ``Data``) with one
  charge line per row, located by header name.
* ``MonthlyGridParser``: a manual monthly grid (worksheet ``Sheet1``) with one
  employee per row and one column per day of the month.

Each file is an independent unit of work. Files run concurrently; a file that
fails structurally is reported as a ``FileFailure`` while its siblings finish.
Dropped rows are reported as ``DataQualityIssue`` records, never raised.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable
from datetime import date, timedelta
from typing import Any, Optional

from timeledger.core.config import AppSettings
from timeledger.core.exceptions import MissingHeaderError, TimeLedgerError, UnreadableFileError
from timeledger.core.protocols import (
    IEmployeeDirectory,
    IFileStore,
    IForecastDirectory,
    ILeaveCodeConfig,
    ISpreadsheetReader,
    IWorksheet,
)
from timeledger.ingest.cells import cell_at, cell_text, is_truthy, parse_cell_date
from timeledger.ingest.charge_codes import ChargeCodeResolver
from timeledger.ingest.classifier import ClassificationKind, RowClassifier
from timeledger.ingest.workbook import OpenpyxlReader
from timeledger.models.labor import Employee, Workcode
from timeledger.models.time_entry import (
    DataQualityIssue,
    FileFailure,
    FileResult,
    IngestResult,
    IssueKind,
    SourceFile,
    TimeEntry,
)

logger = logging.getLogger(__name__)


class _FileRun:
    """Per-file state. Owned by a single task until its result is merged."""

    def __init__(self, filename: str, resolver: ChargeCodeResolver) -> None:
        self.filename = filename
        self.resolver = resolver
        self.entries: list[TimeEntry] = []
        self.issues: list[DataQualityIssue] = []
        self._work: dict[tuple[str, date, str, str], int] = {}

    def drop(self, kind: IssueKind, row: int, message: str, employee: str = "") -> None:
        logger.warning("%s row %d dropped (%s): %s", self.filename, row, kind, message)
        self._record(kind, row, message, employee)

    def _record(self, kind: IssueKind, row: int, message: str, employee: str) -> None:
        self.issues.append(DataQualityIssue(
            kind=kind, filename=self.filename, row=row, message=message, employee=employee,
        ))

    def add_work(self, entry: TimeEntry, row: int) -> None:
        """Append a work entry, folding it into an earlier one with the same identity.

        Work entries are unique per (employee, date, charge number, extension);
        a second row resolving to the same key adds its hours to the first.
        """
        key = (entry.employee_id.lower(), entry.date,
               entry.charge_number.lower(), entry.extension.lower())
        position = self._work.get(key)
        if position is None:
            self._work[key] = len(self.entries)
            self.entries.append(entry)
            return

        existing = self.entries[position]
        self.entries[position] = existing.model_copy(update={
            "hours": existing.hours + entry.hours,
            "modified": existing.modified or entry.modified,
        })
        message = (f"{entry.charge_number}/{entry.extension} already recorded on "
                   f"{entry.date.isoformat()}; {entry.hours} hours merged")
        logger.warning("%s row %d merged (%s): %s",
                       self.filename, row, IssueKind.DUPLICATE_CHARGE, message)
        self._record(IssueKind.DUPLICATE_CHARGE, row, message, entry.employee_id)


class TimesheetParser(ABC):
    """Shared driver: per-file isolation, concurrency, and row-to-entry emission."""

    worksheet_setting = "export_worksheet"

    @classmethod
    def for_team(
        cls, team_config: ILeaveCodeConfig, team_id: str, **kwargs: Any
    ) -> TimesheetParser:
        """Build a parser recognising ``team_id``'s configured work/leave codes."""
        return cls(workcodes=team_config.workcodes(team_id), **kwargs)

    def __init__(
        self,
        *,
        employees: IEmployeeDirectory,
        forecasts: IForecastDirectory,
        workcodes: Iterable[Workcode],
        company_id: str,
        reader: ISpreadsheetReader | None = None,
        settings: AppSettings | None = None,
    ) -> None:
        self._settings = settings or AppSettings()
        self._employees = employees
        self._forecasts = forecasts
        self._company_id = company_id
        self._reader = reader or OpenpyxlReader()
        self._classifier = RowClassifier(workcodes, holiday_code=self._settings.ingest.holiday_code)

    @property
    def worksheet(self) -> str:
        return getattr(self._settings.ingest, self.worksheet_setting)

    # ---- single file ----

    def parse_file(self, source: SourceFile) -> FileResult:
        """Parse one file. Structural failures become the result's ``failure``."""
        run = _FileRun(
            source.name,
            ChargeCodeResolver(
                self._forecasts, self._company_id, self._settings.ingest.default_premium
            ),
        )
        try:
            sheet = self._reader.load(source.data, self.worksheet, filename=source.name)
            self._parse_sheet(sheet, run)
        except TimeLedgerError as exc:
            logger.error("Rejected %s: %s", source.name, exc)
            return FileResult(
                filename=source.name,
                failure=FileFailure(
                    filename=source.name, error=str(exc), error_type=type(exc).__name__
                ),
            )
        logger.info("Parsed %s: %d entries, %d row issues",
                    source.name, len(run.entries), len(run.issues))
        return FileResult(filename=source.name, entries=run.entries, issues=run.issues)

    @abstractmethod
    def _parse_sheet(self, sheet: IWorksheet, run: _FileRun) -> None:
        """Walk one worksheet, emitting entries and issues into ``run``."""

    # ---- many files ----

    async def parse_async(self, sources: Iterable[SourceFile]) -> IngestResult:
        """Parse files concurrently and merge into one deterministically ordered result."""
        semaphore = asyncio.Semaphore(max(1, self._settings.ingest.max_concurrent_files))

        async def _one(source: SourceFile) -> FileResult:
            async with semaphore:
                return await asyncio.to_thread(self.parse_file, source)

        sources = list(sources)
        settled = await asyncio.gather(*(_one(s) for s in sources), return_exceptions=True)
        return IngestResult.merge(
            [self._settle(s.name, outcome) for s, outcome in zip(sources, settled)]
        )

    def parse(self, sources: Iterable[SourceFile]) -> IngestResult:
        return asyncio.run(self.parse_async(sources))

    async def parse_store_async(
        self, store: IFileStore, paths: Iterable[str], *, archive: bool = False
    ) -> IngestResult:
        """Read files from a store concurrently, parse them, optionally archive them.

        Files that could not be read stay where they are. Archive failures are
        reported on the result and never abort the ingest.
        """
        semaphore = asyncio.Semaphore(max(1, self._settings.ingest.max_concurrent_files))
        unread: set[str] = set()

        async def _one(path: str) -> FileResult:
            async with semaphore:
                try:
                    data = await asyncio.to_thread(store.read, path)
                except TimeLedgerError as exc:
                    unread.add(path)
                    raise UnreadableFileError(f"{path}: {exc}") from exc
                return await asyncio.to_thread(self.parse_file, SourceFile(name=path, data=data))

        paths = list(paths)
        settled = await asyncio.gather(*(_one(p) for p in paths), return_exceptions=True)
        results = [self._settle(p, outcome) for p, outcome in zip(paths, settled)]

        archived: dict[str, str] = {}
        archive_failures: list[FileFailure] = []
        if archive:
            for result in results:
                if result.filename in unread:
                    continue
                try:
                    archived[result.filename] = await asyncio.to_thread(
                        self._archive, store, result
                    )
                except TimeLedgerError as exc:
                    logger.error("Could not archive %s: %s", result.filename, exc)
                    archive_failures.append(FileFailure(
                        filename=result.filename, error=str(exc), error_type=type(exc).__name__,
                    ))
        return IngestResult.merge(results, archived=archived, archive_failures=archive_failures)

    def parse_store(
        self, store: IFileStore, paths: Iterable[str], *, archive: bool = False
    ) -> IngestResult:
        return asyncio.run(self.parse_store_async(store, paths, archive=archive))

    def _settle(self, filename: str, outcome: FileResult | BaseException) -> FileResult:
        if isinstance(outcome, FileResult):
            return outcome
        if not isinstance(outcome, Exception):
            raise outcome
        if isinstance(outcome, TimeLedgerError):
            logger.error("Rejected %s: %s", filename, outcome)
        else:
            logger.error("Unexpected failure parsing %s", filename, exc_info=outcome)
        return FileResult(
            filename=filename,
            failure=FileFailure(
                filename=filename, error=str(outcome), error_type=type(outcome).__name__
            ),
        )

    def _archive(self, store: IFileStore, result: FileResult) -> str:
        prefix = self._settings.s3.processed_prefix if result.ok else self._settings.s3.failed_prefix
        dst = store.archive(result.filename, prefix)
        logger.info("Archived %s -> %s", result.filename, dst)
        return dst

    # ---- row emission ----

    def _emit(
        self,
        run: _FileRun,
        row: int,
        employee: Employee,
        on: date,
        value: str,
        *,
        charge_number: str = "",
        extension: str = "",
        premium: str = "",
        description: Optional[str] = None,
        explanation: Optional[str] = None,
        modified: bool = False,
    ) -> None:
        result = self._classifier.classify(
            value, row_text=description or "", explanation=explanation
        )
        if result.kind == ClassificationKind.EMPTY:
            return
        if result.kind == ClassificationKind.UNRECOGNIZED:
            run.drop(IssueKind.UNRECOGNIZED_VALUE, row,
                     f"{value!r} matches neither hours nor a configured leave code",
                     employee.employee_id)
            return

        if result.kind == ClassificationKind.HOURS:
            charge = run.resolver.resolve(
                employee, on, charge_number=charge_number, extension=extension, premium=premium
            )
            if charge is None:
                run.drop(IssueKind.UNRESOLVED_CHARGE, row,
                         f"no assigned and forecast labor code on {on.isoformat()}",
                         employee.employee_id)
                return
            run.add_work(TimeEntry(
                date=on,
                employee_id=employee.employee_id,
                charge_number=charge.charge_number,
                extension=charge.extension,
                premium=charge.premium,
                hours=result.hours,
                modified=modified,
                description=description or None,
                comment=explanation or None,
            ), row)
            return

        run.entries.append(TimeEntry(
            date=on,
            employee_id=employee.employee_id,
            code=result.code,
            hours=employee.standard_workday(on, self._settings.report.standard_workday_hours),
            modified=modified,
            holiday_id=result.holiday_id,
            description=description or None,
            comment=explanation or None,
        ))


class ExportTimesheetParser(TimesheetParser):
    """Column-header export: one charge line per row, columns located by header text."""

    REQUIRED_HEADERS = (
        "explanation", "date", "personnel id", "charge number",
        "premium", "extension", "hours", "description",
    )
    OPTIONAL_HEADERS = ("modified",)

    worksheet_setting = "export_worksheet"

    def _parse_sheet(self, sheet: IWorksheet, run: _FileRun) -> None:
        rows = sheet.iter_rows()
        header = next(rows, None) or ()
        columns = discover_columns(header)
        missing = [h for h in self.REQUIRED_HEADERS if h not in columns]
        if missing:
            raise MissingHeaderError(run.filename, missing)

        marker = self._settings.ingest.subtotal_marker.lower()
        explanation_col = columns["explanation"]
        for index, row in enumerate(rows, start=2):
            if all(v is None for v in row) or explanation_col >= len(row):
                continue
            explanation = cell_text(row[explanation_col])
            if marker in explanation.lower():
                continue
            self._parse_row(run, index, row, columns, explanation)

    def _parse_row(
        self, run: _FileRun, index: int, row: tuple[Any, ...],
        columns: dict[str, int], explanation: str,
    ) -> None:
        personnel_id = cell_text(cell_at(row, columns["personnel id"]))
        employee = self._employees.get_employee(personnel_id) if personnel_id else None
        if employee is None:
            run.drop(IssueKind.UNKNOWN_EMPLOYEE, index,
                     f"personnel id {personnel_id!r} not in directory", personnel_id)
            return

        raw_date = cell_at(row, columns["date"])
        on = parse_cell_date(raw_date)
        if on is None:
            run.drop(IssueKind.INVALID_DATE, index,
                     f"cannot parse date {cell_text(raw_date)!r}", personnel_id)
            return

        self._emit(
            run, index, employee, on,
            cell_text(cell_at(row, columns["hours"])),
            charge_number=cell_text(cell_at(row, columns["charge number"])),
            extension=cell_text(cell_at(row, columns["extension"])),
            premium=cell_text(cell_at(row, columns["premium"])),
            description=cell_text(cell_at(row, columns["description"])),
            explanation=explanation,
            modified=is_truthy(cell_at(row, columns.get("modified"))),
        )


class MonthlyGridParser(TimesheetParser):
    """Manual monthly grid: employee name in column 1, days 1..31 in columns 3..33."""

    SKIP_NAMES = frozenset({"", "name", "remarks", "n/a"})
    FIRST_DAY_COLUMN = 2  # 0-indexed
    DAY_COLUMNS = 31

    worksheet_setting = "grid_worksheet"

    def __init__(self, *, month: date, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._month = month.replace(day=1)

    def _parse_sheet(self, sheet: IWorksheet, run: _FileRun) -> None:
        for index, row in enumerate(sheet.iter_rows(), start=1):
            name = cell_text(cell_at(row, 0))
            if name.lower() in self.SKIP_NAMES:
                continue
            employee = self._employees.find_by_name(name)
            if employee is None:
                run.drop(IssueKind.UNKNOWN_EMPLOYEE, index, f"no employee named {name!r}", name)
                continue

            for offset in range(self.DAY_COLUMNS):
                on = self._month + timedelta(days=offset)
                if on.month != self._month.month:
                    break
                value = cell_text(cell_at(row, self.FIRST_DAY_COLUMN + offset))
                self._emit(run, index, employee, on, value)


def discover_columns(header: Iterable[Any]) -> dict[str, int]:
    """Map lower-cased header text to 0-indexed column position (first occurrence wins)."""
    columns: dict[str, int] = {}
    for position, value in enumerate(header):
        text = cell_text(value).lower()
        if text and text not in columns:
            columns[text] = position
    return columns
