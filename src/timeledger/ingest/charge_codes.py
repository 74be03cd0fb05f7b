"""ChargeCodeResolver — maps an employee/date to a billable charge code.

A code is only ever looked up, never invented: it must be configured on the
employee's active assignment AND forecast for the company on that date.
"""

from __future__ import annotations

from datetime import date
from typing import Optional

from timeledger.core.protocols import IForecastDirectory
from timeledger.models.labor import ChargeCode, Employee, LaborCode


class ChargeCodeResolver:
    """Intersects assignment labor codes with the company forecast."""

    def __init__(
        self, forecasts: IForecastDirectory, company_id: str, default_premium: str = "1"
    ) -> None:
        self._forecasts = forecasts
        self._company_id = company_id
        self._default_premium = default_premium
        self._forecast_cache: dict[date, list[LaborCode]] = {}

    def _forecast(self, on: date) -> list[LaborCode]:
        if on not in self._forecast_cache:
            self._forecast_cache[on] = list(self._forecasts.labor_codes(on, self._company_id))
        return self._forecast_cache[on]

    def candidates(self, employee: Employee, on: date) -> list[LaborCode]:
        """Assignment labor codes (in assignment order) that are also forecast on ``on``."""
        forecast = self._forecast(on)
        found: list[LaborCode] = []
        for assignment in employee.active_assignments(on):
            for code in assignment.labor_codes:
                if any(f.matches(code.charge_number, code.extension) for f in forecast):
                    found.append(code)
        return found

    def resolve(
        self,
        employee: Employee,
        on: date,
        *,
        charge_number: str = "",
        extension: str = "",
        premium: str = "",
    ) -> Optional[ChargeCode]:
        """Return the resolved charge code, or None when nothing intersects.

        When the row names a charge number/extension, an exact match among the
        candidates is preferred over the first candidate.
        """
        candidates = self.candidates(employee, on)
        if not candidates:
            return None

        chosen = candidates[0]
        if charge_number:
            exact = [c for c in candidates if c.matches(charge_number, extension)]
            if exact:
                chosen = exact[0]
            else:
                named = [c for c in candidates
                         if c.charge_number.lower() == charge_number.lower()]
                if named:
                    chosen = named[0]

        return ChargeCode(
            charge_number=chosen.charge_number,
            extension=chosen.extension,
            premium=premium or self._default_premium,
        )
