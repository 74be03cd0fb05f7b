"""ModTimeReportService — the mod-time matrix for a team/site/company."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import date

from timeledger.aggregation.work import aggregate
from timeledger.core.config import AppSettings
from timeledger.core.exceptions import MissingIdentifierError
from timeledger.core.protocols import IEmployeeDirectory, IFiscalWindowSupplier
from timeledger.models.report import ModTimeReport
from timeledger.models.time_entry import TimeEntry
from timeledger.periods.generator import generate_mod_months, select_window

logger = logging.getLogger(__name__)


class ModTimeReportService:
    """Builds the period hierarchy once per request and aggregates modified work time.

    Configuration failures (missing identifiers, no mod period for the date)
    are raised to the caller.
    """

    def __init__(
        self,
        *,
        windows: IFiscalWindowSupplier,
        employees: IEmployeeDirectory | None = None,
        settings: AppSettings | None = None,
    ) -> None:
        self._windows = windows
        self._employees = employees
        self._settings = settings or AppSettings()

    def build(
        self,
        entries: Iterable[TimeEntry],
        *,
        team_id: str,
        site_id: str,
        company_id: str,
        as_of: date,
    ) -> ModTimeReport:
        missing = [name for name, value in (
            ("team_id", team_id), ("site_id", site_id), ("company_id", company_id),
        ) if not value]
        if missing:
            raise MissingIdentifierError(missing)

        window = select_window(self._windows.windows(team_id, company_id), as_of, company_id)
        months = generate_mod_months(window)

        selected = [e for e in entries if e.modified and not e.is_leave]
        if self._employees is not None:
            roster = {emp.employee_id for emp in self._employees.employees(team_id, site_id)}
            selected = [e for e in selected if e.employee_id in roster]

        rows = aggregate(selected, months, workers=self._settings.report.aggregation_workers)
        logger.info("Mod time report %s/%s/%s %s..%s: %d employees",
                    team_id, site_id, company_id, window.start, window.end, len(rows))
        return ModTimeReport(
            team_id=team_id,
            site_id=site_id,
            company_id=company_id,
            window=window,
            months=months,
            rows=rows,
        )
