"""Work/leave aggregator — folds time entries into the mod-period grid.

Each employee is aggregated independently against the shared, immutable
month/week hierarchy, so employees can be processed in parallel.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from datetime import date, timedelta
from decimal import Decimal
from typing import Optional

from timeledger.models.periods import ModMonth, ModWeek
from timeledger.models.report import EmployeeGrid, MonthCell, WeekCell
from timeledger.models.time_entry import TimeEntry

logger = logging.getLogger(__name__)


def _daily_hours(entries: Iterable[TimeEntry]) -> dict[date, Decimal]:
    totals: dict[date, Decimal] = defaultdict(Decimal)
    for entry in entries:
        totals[entry.date] += entry.hours
    return totals


def _week_total(daily: dict[date, Decimal], week: ModWeek) -> Decimal:
    return sum(
        (daily.get(week.start + timedelta(days=d), Decimal("0")) for d in range(7)),
        Decimal("0"),
    )


def aggregate_employee(
    employee_id: str, entries: Iterable[TimeEntry], months: tuple[ModMonth, ...]
) -> Optional[EmployeeGrid]:
    """One employee's row, or None when the employee has no time in the window."""
    daily = _daily_hours(entries)
    cells = tuple(
        MonthCell(
            month=month,
            employee_id=employee_id,
            weeks=tuple(
                WeekCell(week=week, employee_id=employee_id,
                         total_hours=_week_total(daily, week))
                for week in month.weeks
            ),
        )
        for month in months
    )
    grid = EmployeeGrid(employee_id=employee_id, months=cells)
    if not any(cell.has_activity for cell in cells):
        return None
    return grid


def aggregate(
    entries: Iterable[TimeEntry], months: tuple[ModMonth, ...], *, workers: int = 1
) -> tuple[EmployeeGrid, ...]:
    """Per-employee grid over ``months``, ordered by employee id.

    Employees whose every week totals zero are left out of the result.
    """
    by_employee: dict[str, list[TimeEntry]] = defaultdict(list)
    for entry in entries:
        by_employee[entry.employee_id].append(entry)

    employee_ids = sorted(by_employee, key=str.lower)
    if workers > 1 and len(employee_ids) > 1:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            grids = list(pool.map(
                lambda emp: aggregate_employee(emp, by_employee[emp], months), employee_ids
            ))
    else:
        grids = [aggregate_employee(emp, by_employee[emp], months) for emp in employee_ids]

    rows = tuple(g for g in grids if g is not None)
    logger.debug("Aggregated %d of %d employees with activity", len(rows), len(employee_ids))
    return rows
