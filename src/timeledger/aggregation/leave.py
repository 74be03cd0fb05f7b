"""Leave run consolidator — collapses day-by-day leave into contiguous runs."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import date
from decimal import Decimal

from timeledger.models.leave import LeaveMonth, LeavePeriod
from timeledger.models.time_entry import TimeEntry

StandardHours = Decimal | Callable[[date], Decimal]


def consolidate(
    entries: Iterable[TimeEntry], standard_hours: StandardHours
) -> tuple[LeaveMonth, ...]:
    """Group leave entries into calendar months of contiguous leave periods.

    ``standard_hours`` is either a fixed daily figure or a callable returning the
    standard hours for the first day of a month. An entry extends the latest
    period of its month that it continues (same code and status, next calendar
    day) only when its hours equal the month's standard; anything else, such as
    a partial day, seeds a new single-entry period.
    """
    months: dict[date, LeaveMonth] = {}
    leave = sorted((e for e in entries if e.is_leave), key=lambda e: (e.date, (e.code or "").lower()))
    for entry in leave:
        anchor = entry.date.replace(day=1)
        month = months.get(anchor)
        if month is None:
            std = standard_hours(anchor) if callable(standard_hours) else standard_hours
            month = LeaveMonth(month=anchor, standard_hours=Decimal(std))
            months[anchor] = month
        _add(month, entry)
    return tuple(months[k] for k in sorted(months))


def _add(month: LeaveMonth, entry: TimeEntry) -> None:
    if entry.hours == month.standard_hours:
        for period in reversed(month.periods):
            if period.continues_with(entry):
                period.extend(entry)
                return
    month.periods.append(LeavePeriod.seed(entry))
