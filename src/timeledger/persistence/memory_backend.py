"""In-memory backends for unit tests and embedding hosts — dict-backed fakes."""

from __future__ import annotations

from datetime import date
from typing import Optional

from timeledger.core.exceptions import StoreObjectNotFoundError
from timeledger.models.labor import Employee, Forecast, LaborCode, Workcode
from timeledger.models.periods import FiscalWindow
from timeledger.persistence.s3_backend import archive_key


class MemoryEmployeeDirectory:
    """Dict-backed IEmployeeDirectory."""

    def __init__(self, employees: list[Employee] | None = None) -> None:
        self._employees: dict[str, Employee] = {}
        for emp in employees or []:
            self.add(emp)

    def add(self, employee: Employee) -> None:
        self._employees[employee.employee_id.lower()] = employee

    def get_employee(self, employee_id: str) -> Optional[Employee]:
        return self._employees.get(employee_id.lower())

    def find_by_name(self, last_first: str) -> Optional[Employee]:
        for emp in self._employees.values():
            if emp.last_first.lower() == last_first.lower():
                return emp
        return None

    def employees(self, team_id: str, site_id: str) -> list[Employee]:
        return [e for e in self._employees.values() if e.site.lower() == site_id.lower()]


class MemoryForecastDirectory:
    """List-backed IForecastDirectory."""

    def __init__(self, forecasts: list[Forecast] | None = None) -> None:
        self._forecasts = list(forecasts or [])

    def labor_codes(self, on: date, company_id: str) -> list[LaborCode]:
        codes: list[LaborCode] = []
        for fcst in self._forecasts:
            if fcst.use(on, company_id):
                codes.extend(fcst.labor_codes)
        return codes


class MemoryTeamConfig:
    """Dict-backed ILeaveCodeConfig and IFiscalWindowSupplier."""

    def __init__(self) -> None:
        self._workcodes: dict[str, list[Workcode]] = {}
        self._windows: dict[str, list[FiscalWindow]] = {}

    def set_workcodes(self, team_id: str, workcodes: list[Workcode]) -> None:
        self._workcodes[team_id] = list(workcodes)

    def set_windows(self, team_id: str, company_id: str, windows: list[FiscalWindow]) -> None:
        self._windows[f"{team_id}:{company_id.lower()}"] = list(windows)

    def workcodes(self, team_id: str) -> list[Workcode]:
        return self._workcodes.get(team_id, [])

    def windows(self, team_id: str, company_id: str) -> list[FiscalWindow]:
        return self._windows.get(f"{team_id}:{company_id.lower()}", [])


class MemoryFileStore:
    """Dict-backed IFileStore."""

    def __init__(self) -> None:
        self._files: dict[str, bytes] = {}

    def read(self, path: str) -> bytes:
        try:
            return self._files[path]
        except KeyError as exc:
            raise StoreObjectNotFoundError(path) from exc

    def write(self, path: str, data: bytes) -> str:
        self._files[path] = data
        return path

    def archive(self, path: str, prefix: str) -> str:
        if path not in self._files:
            raise StoreObjectNotFoundError(path)
        dst = archive_key(prefix, path)
        self._files[dst] = self._files.pop(path)
        return dst

    def list_files(self, prefix: str) -> list[str]:
        return sorted(k for k in self._files if k.startswith(prefix))
