"""Aggregated report matrix models: employee x period cells."""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, computed_field

from timeledger.models.periods import FiscalWindow, ModMonth, ModWeek


class WeekCell(BaseModel):
    """One employee's hours for one ModWeek."""

    model_config = {"frozen": True}

    week: ModWeek
    employee_id: str
    total_hours: Decimal = Decimal("0")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def has_activity(self) -> bool:
        return self.total_hours != 0


class MonthCell(BaseModel):
    """One employee's hours for one ModMonth; the total is always the sum of its weeks."""

    model_config = {"frozen": True}

    month: ModMonth
    employee_id: str
    weeks: tuple[WeekCell, ...] = ()

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_hours(self) -> Decimal:
        return sum((w.total_hours for w in self.weeks), Decimal("0"))

    @computed_field  # type: ignore[prop-decorator]
    @property
    def has_activity(self) -> bool:
        return any(w.has_activity for w in self.weeks)


class EmployeeGrid(BaseModel):
    """A full row of the report: one employee across every month of the window."""

    model_config = {"frozen": True}

    employee_id: str
    months: tuple[MonthCell, ...] = ()

    @computed_field  # type: ignore[prop-decorator]
    @property
    def balance(self) -> Decimal:
        return sum((m.total_hours for m in self.months), Decimal("0"))


class ModTimeReport(BaseModel):
    """Mod-time matrix for one fiscal window."""

    model_config = {"frozen": True}

    team_id: str
    site_id: str
    company_id: str
    window: FiscalWindow
    months: tuple[ModMonth, ...] = ()
    rows: tuple[EmployeeGrid, ...] = ()

    def row(self, employee_id: str) -> EmployeeGrid | None:
        for grid in self.rows:
            if grid.employee_id.lower() == employee_id.lower():
                return grid
        return None
