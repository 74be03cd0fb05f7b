"""Fiscal period generator — builds the month/week grid for a mod period.

Weeks always run Saturday through Friday. A week belongs to the calendar month
containing its Friday, so a week spanning two months lands in the later one.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import date, timedelta

from timeledger.core.exceptions import FiscalWindowNotFoundError, InvalidFiscalWindowError
from timeledger.models.periods import FRIDAY, SATURDAY, FiscalWindow, ModMonth, ModWeek

logger = logging.getLogger(__name__)

ONE_DAY = timedelta(days=1)
ONE_WEEK = timedelta(days=7)


def generate_mod_months(window: FiscalWindow) -> tuple[ModMonth, ...]:
    """Return the window's ModMonths in ascending order, weeks ascending within each."""
    if window.end < window.start:
        raise InvalidFiscalWindowError(window.start, window.end)

    cursor = window.start
    while cursor.weekday() != FRIDAY:
        cursor += ONE_DAY

    months: list[ModMonth] = []
    month_start: date | None = None
    weeks: list[ModWeek] = []
    while cursor < window.end:
        begin = cursor
        while begin.weekday() != SATURDAY:
            begin -= ONE_DAY

        anchor = cursor.replace(day=1)
        if month_start != anchor:
            if month_start is not None and weeks:
                months.append(ModMonth(month=month_start, weeks=tuple(weeks)))
            month_start = anchor
            weeks = []

        weeks.append(ModWeek(start=begin, end=cursor))
        cursor += ONE_WEEK

    if month_start is not None and weeks:
        months.append(ModMonth(month=month_start, weeks=tuple(weeks)))

    logger.debug("Generated %d mod months for %s..%s", len(months), window.start, window.end)
    return tuple(months)


def select_window(windows: Iterable[FiscalWindow], as_of: date,
                  company_id: str = "") -> FiscalWindow:
    """First configured window containing ``as_of``."""
    for window in windows:
        if window.contains(as_of):
            return window
    raise FiscalWindowNotFoundError(as_of, company_id)
