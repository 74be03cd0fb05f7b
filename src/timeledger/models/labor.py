"""Labor, assignment, forecast, and work-code models supplied by the directories."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

END_OF_TIME = date(9999, 12, 31)


class LaborCode(BaseModel):
    """A (charge number, extension) pair work can be billed against."""

    model_config = {"frozen": True, "str_strip_whitespace": True}

    charge_number: str
    extension: str = ""
    clin: Optional[str] = None
    slin: Optional[str] = None
    location: Optional[str] = None
    wbs: Optional[str] = None
    sort: int = 0

    def matches(self, charge_number: str, extension: str) -> bool:
        """Case-insensitive (charge number, extension) equality."""
        return (
            self.charge_number.lower() == charge_number.lower()
            and self.extension.lower() == extension.lower()
        )


class ChargeCode(BaseModel):
    """Canonical charge code resolved for a time entry."""

    model_config = {"frozen": True}

    charge_number: str
    extension: str = ""
    premium: str = "1"


class Assignment(BaseModel):
    """An employee's work assignment over a date range."""

    id: int = 0
    site: str = ""
    workcenter: str = ""
    start_date: date = date.min
    end_date: date = END_OF_TIME
    labor_codes: list[LaborCode] = Field(default_factory=list)
    standard_workday: Optional[Decimal] = None  # hours per day; None -> site default

    def covers(self, on: date) -> bool:
        return self.start_date <= on <= self.end_date


class Employee(BaseModel):
    """Employee record as exposed by the assignment directory."""

    employee_id: str
    first_name: str = ""
    last_name: str = ""
    site: str = ""
    assignments: list[Assignment] = Field(default_factory=list)

    @property
    def last_first(self) -> str:
        return f"{self.last_name}, {self.first_name}"

    def active_assignments(self, on: date) -> list[Assignment]:
        return [a for a in sorted(self.assignments, key=lambda a: (a.start_date, a.end_date))
                if a.covers(on)]

    def standard_workday(self, on: date, default: Decimal = Decimal("8.0")) -> Decimal:
        """Standard daily hours from the assignment active on ``on``."""
        hours = default
        for assignment in self.active_assignments(on):
            if assignment.standard_workday is not None:
                hours = assignment.standard_workday
        return hours


class Forecast(BaseModel):
    """Labor codes forecast to be available to a company over a date range."""

    id: int = 0
    company_id: str = ""
    start_date: date
    end_date: date
    labor_codes: list[LaborCode] = Field(default_factory=list)

    def use(self, on: date, company_id: str) -> bool:
        return (
            self.start_date <= on <= self.end_date
            and self.company_id.lower() == company_id.lower()
        )


class Workcode(BaseModel):
    """Team work/leave code with the text used to recognise it on a timesheet."""

    model_config = {"frozen": True}

    id: str
    title: str = ""
    is_leave: bool = False
    search: Optional[str] = None  # substring recognised in timesheet text
    altcode: Optional[str] = None
