"""Leave run models: consolidated leave periods grouped by month."""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from timeledger.models.time_entry import TimeEntry


class LeavePeriod(BaseModel):
    """Contiguous run of same-code, same-status leave days."""

    code: str
    start: date
    end: date
    status: str = "actual"
    entries: list[TimeEntry] = Field(default_factory=list)

    @classmethod
    def seed(cls, entry: TimeEntry) -> LeavePeriod:
        return cls(
            code=entry.code or "",
            start=entry.date,
            end=entry.date,
            status=entry.status,
            entries=[entry],
        )

    def continues_with(self, entry: TimeEntry) -> bool:
        """True if ``entry`` extends this run by exactly one day."""
        return (
            (entry.code or "").lower() == self.code.lower()
            and entry.status.lower() == self.status.lower()
            and entry.date == self.end + timedelta(days=1)
        )

    def extend(self, entry: TimeEntry) -> None:
        self.entries.append(entry)
        self.end = entry.date

    def hours(self, code: Optional[str] = None, actual: Optional[bool] = None) -> Decimal:
        """Total hours, optionally limited to a leave code and to actual/non-actual status."""
        total = Decimal("0")
        for entry in self.entries:
            if code is not None and (entry.code or "").lower() != code.lower():
                continue
            if actual is not None and (entry.status.lower() == "actual") != actual:
                continue
            total += entry.hours
        return total


class LeaveMonth(BaseModel):
    """A calendar month of leave runs with that month's standard daily hours."""

    month: date
    standard_hours: Decimal
    periods: list[LeavePeriod] = Field(default_factory=list)

    def hours(self, code: Optional[str] = None, actual: Optional[bool] = None) -> Decimal:
        return sum((p.hours(code, actual) for p in self.periods), Decimal("0"))
