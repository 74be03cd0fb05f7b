"""Protocol interfaces for every collaborator the engine consumes.

The engine never opens its own connections: directories, forecasts, and files
arrive through these Protocols. Structural typing, no inheritance required,
easy to test with isinstance().
"""

from __future__ import annotations

from collections.abc import Iterator
from datetime import date
from typing import Any, Optional, Protocol, runtime_checkable

from timeledger.models.labor import Employee, LaborCode, Workcode
from timeledger.models.periods import FiscalWindow


# ---------------------------------------------------------------------------
# Spreadsheet reader
# ---------------------------------------------------------------------------

@runtime_checkable
class IWorksheet(Protocol):
    """Row-major view of one worksheet. Rows and cells are 0-indexed."""

    def iter_rows(self) -> Iterator[tuple[Any, ...]]: ...


@runtime_checkable
class ISpreadsheetReader(Protocol):
    """Turns workbook bytes into a worksheet view."""

    def load(self, data: bytes, worksheet: str, filename: str = "") -> IWorksheet: ...


# ---------------------------------------------------------------------------
# Directories
# ---------------------------------------------------------------------------

@runtime_checkable
class IEmployeeDirectory(Protocol):
    """Employees and their assignments (with configured labor codes)."""

    def get_employee(self, employee_id: str) -> Optional[Employee]: ...

    def find_by_name(self, last_first: str) -> Optional[Employee]: ...

    def employees(self, team_id: str, site_id: str) -> list[Employee]: ...


@runtime_checkable
class IForecastDirectory(Protocol):
    """Labor codes forecast to be available to a company on a date."""

    def labor_codes(self, on: date, company_id: str) -> list[LaborCode]: ...


@runtime_checkable
class ILeaveCodeConfig(Protocol):
    """A team's ordered work/leave code configuration."""

    def workcodes(self, team_id: str) -> list[Workcode]: ...


@runtime_checkable
class IFiscalWindowSupplier(Protocol):
    """Configured mod periods for a team/company pair."""

    def windows(self, team_id: str, company_id: str) -> list[FiscalWindow]: ...


# ---------------------------------------------------------------------------
# File Store
# ---------------------------------------------------------------------------

@runtime_checkable
class IFileStore(Protocol):
    """S3-compatible store holding uploaded timesheet files."""

    def read(self, path: str) -> bytes: ...

    def archive(self, path: str, prefix: str) -> str: ...

    def list_files(self, prefix: str) -> list[str]: ...
