"""LeaveListingService — per-employee leave runs by month."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from datetime import date
from decimal import Decimal
from typing import Optional

from timeledger.aggregation.leave import consolidate
from timeledger.core.config import AppSettings
from timeledger.core.protocols import IEmployeeDirectory
from timeledger.models.leave import LeaveMonth
from timeledger.models.time_entry import TimeEntry


class LeaveListingService:
    def __init__(
        self, *, employees: IEmployeeDirectory, settings: AppSettings | None = None
    ) -> None:
        self._employees = employees
        self._settings = settings or AppSettings()

    def build(
        self, entries: Iterable[TimeEntry], *, year: Optional[int] = None
    ) -> dict[str, tuple[LeaveMonth, ...]]:
        """Leave months keyed by employee id, optionally limited to one calendar year."""
        default = self._settings.report.standard_workday_hours
        by_employee: dict[str, list[TimeEntry]] = defaultdict(list)
        for entry in entries:
            if entry.is_leave and (year is None or entry.date.year == year):
                by_employee[entry.employee_id].append(entry)

        listing: dict[str, tuple[LeaveMonth, ...]] = {}
        for employee_id in sorted(by_employee, key=str.lower):
            employee = self._employees.get_employee(employee_id)

            def standard(month: date, employee=employee) -> Decimal:
                return employee.standard_workday(month, default) if employee else default

            listing[employee_id] = consolidate(by_employee[employee_id], standard)
        return listing
