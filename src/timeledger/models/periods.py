"""Fiscal window and mod-period (month/week) models."""

from __future__ import annotations

from datetime import date, timedelta

from pydantic import BaseModel, model_validator

FRIDAY = 4
SATURDAY = 5


class FiscalWindow(BaseModel):
    """A company's mod period: the fiscal window timesheets are reported over.

    Supplied externally and not validated on construction; the period generator
    rejects windows whose end precedes their start.
    """

    model_config = {"frozen": True}

    year: int = 0
    start: date
    end: date

    def contains(self, on: date) -> bool:
        return self.start <= on <= self.end


class ModWeek(BaseModel):
    """A Saturday through Friday reporting week."""

    model_config = {"frozen": True}

    start: date
    end: date

    @model_validator(mode="after")
    def _saturday_to_friday(self) -> ModWeek:
        if self.end - self.start != timedelta(days=6) or self.end.weekday() != FRIDAY:
            raise ValueError(
                f"ModWeek must span Saturday to Friday, got {self.start} to {self.end}"
            )
        return self

    def contains(self, on: date) -> bool:
        return self.start <= on <= self.end

    def label(self) -> str:
        return self.end.strftime("%b %d")


class ModMonth(BaseModel):
    """Weeks grouped under the calendar month containing each week's Friday."""

    model_config = {"frozen": True}

    month: date  # first day of the calendar month
    weeks: tuple[ModWeek, ...] = ()

    @property
    def start(self) -> date:
        return self.weeks[0].start

    @property
    def end(self) -> date:
        return self.weeks[-1].end

    def label(self) -> str:
        return self.month.strftime("%b %y")
