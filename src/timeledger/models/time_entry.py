"""Canonical Time Entry — the normalized record every timesheet row becomes.

Every vendor spreadsheet, regardless of layout, is parsed into this schema.
Work entries carry a resolved charge code; leave entries carry a leave code.
"""

from __future__ import annotations

import datetime as dt
from decimal import Decimal
from enum import StrEnum
from typing import Optional

from pydantic import BaseModel, Field


class TimeEntry(BaseModel):
    """Single day of worked or leave time for one employee."""

    model_config = {"frozen": True, "str_strip_whitespace": True}

    # --- Identity ---
    date: dt.date
    employee_id: str
    charge_number: str = ""
    extension: str = ""
    premium: str = "1"

    # --- Time ---
    hours: Decimal = Field(default=Decimal("0"), ge=0)
    code: Optional[str] = None  # leave code; None for worked time
    status: str = "actual"  # leave status chain: approved / actual / requested
    modified: bool = False  # modified ("mod") time
    holiday_id: Optional[str] = None  # e.g. H3, F12 for holiday leave

    # --- Source text ---
    description: Optional[str] = None
    comment: Optional[str] = None

    @property
    def is_leave(self) -> bool:
        return self.code is not None

    @property
    def sort_key(self) -> tuple[str, dt.date, str, str, str]:
        return (
            self.employee_id.lower(),
            self.date,
            self.charge_number.lower(),
            self.extension.lower(),
            (self.code or "").lower(),
        )

    def __str__(self) -> str:
        label = f"{self.code}" if self.is_leave else f"{self.charge_number}/{self.extension}"
        if self.holiday_id:
            label += f" ({self.holiday_id})"
        return f"{self.date.isoformat()} - {self.employee_id} - {label} - {self.hours:.2f}"


def sort_entries(entries) -> tuple[TimeEntry, ...]:
    """Return entries ordered by (employee, date, charge number, extension)."""
    return tuple(sorted(entries, key=lambda e: e.sort_key))


class IssueKind(StrEnum):
    UNRECOGNIZED_VALUE = "unrecognized_value"
    UNRESOLVED_CHARGE = "unresolved_charge"
    UNKNOWN_EMPLOYEE = "unknown_employee"
    INVALID_DATE = "invalid_date"
    DUPLICATE_CHARGE = "duplicate_charge"


class DataQualityIssue(BaseModel):
    """A dropped row. Recoverable; reported alongside the parsed entries."""

    model_config = {"frozen": True}

    kind: IssueKind
    filename: str
    row: int
    message: str
    employee: str = ""


class FileFailure(BaseModel):
    """A source file that could not be processed at all."""

    model_config = {"frozen": True}

    filename: str
    error: str
    error_type: str = ""


class SourceFile(BaseModel):
    """Raw bytes of one uploaded timesheet."""

    name: str
    data: bytes


class FileResult(BaseModel):
    """Outcome of parsing one source file."""

    filename: str
    entries: list[TimeEntry] = Field(default_factory=list)
    issues: list[DataQualityIssue] = Field(default_factory=list)
    failure: Optional[FileFailure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None


class IngestResult(BaseModel):
    """Combined, deterministically ordered output of a multi-file parse.

    ``archived`` maps each source path to its archive key when store ingest ran
    with archiving; ``archive_failures`` lists files that parsed but could not
    be moved. Neither affects ``entries``.
    """

    entries: tuple[TimeEntry, ...] = ()
    issues: tuple[DataQualityIssue, ...] = ()
    failures: tuple[FileFailure, ...] = ()
    processed_files: tuple[str, ...] = ()
    archived: dict[str, str] = Field(default_factory=dict)
    archive_failures: tuple[FileFailure, ...] = ()

    @property
    def start(self) -> Optional[dt.date]:
        return min((e.date for e in self.entries), default=None)

    @property
    def end(self) -> Optional[dt.date]:
        return max((e.date for e in self.entries), default=None)

    @property
    def warning_count(self) -> int:
        return len(self.issues)

    @classmethod
    def merge(
        cls,
        results: list[FileResult],
        *,
        archived: Optional[dict[str, str]] = None,
        archive_failures: Optional[list[FileFailure]] = None,
    ) -> IngestResult:
        entries: list[TimeEntry] = []
        issues: list[DataQualityIssue] = []
        failures: list[FileFailure] = []
        processed: list[str] = []
        for result in sorted(results, key=lambda r: r.filename):
            entries.extend(result.entries)
            issues.extend(result.issues)
            if result.failure is not None:
                failures.append(result.failure)
            else:
                processed.append(result.filename)
        return cls(
            entries=sort_entries(entries),
            issues=tuple(sorted(issues, key=lambda i: (i.filename, i.row))),
            failures=tuple(failures),
            processed_files=tuple(processed),
            archived=dict(sorted((archived or {}).items())),
            archive_failures=tuple(sorted(archive_failures or [], key=lambda f: f.filename)),
        )
