"""Unit test fixtures — a small team with two employees and a 2024 forecast."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from tests.fakes import MemoryEmployeeDirectory, MemoryForecastDirectory
from timeledger.core.config import AppSettings
from timeledger.models.labor import Assignment, Employee, Forecast, LaborCode, Workcode

COMPANY = "acme"


@pytest.fixture
def settings():
    return AppSettings()


@pytest.fixture
def smith():
    return Employee(
        employee_id="1001",
        first_name="John",
        last_name="Smith",
        site="north",
        assignments=[
            Assignment(
                id=1,
                site="north",
                workcenter="ops",
                start_date=date(2024, 1, 1),
                labor_codes=[
                    LaborCode(charge_number="CN100", extension="A1"),
                    LaborCode(charge_number="CN200", extension="B2"),
                ],
            ),
        ],
    )


@pytest.fixture
def doe():
    return Employee(
        employee_id="1002",
        first_name="Jane",
        last_name="Doe",
        site="north",
        assignments=[
            Assignment(
                id=1,
                site="north",
                workcenter="ops",
                start_date=date(2023, 1, 1),
                labor_codes=[LaborCode(charge_number="CN300", extension="C3")],
                standard_workday=Decimal("10"),
            ),
        ],
    )


@pytest.fixture
def employees(smith, doe):
    return MemoryEmployeeDirectory([smith, doe])


@pytest.fixture
def forecasts():
    return MemoryForecastDirectory([
        Forecast(
            id=1,
            company_id=COMPANY,
            start_date=date(2024, 1, 1),
            end_date=date(2024, 12, 31),
            labor_codes=[
                LaborCode(charge_number="CN100", extension="A1"),
                LaborCode(charge_number="CN200", extension="B2"),
                LaborCode(charge_number="CN300", extension="C3"),
            ],
        ),
    ])


@pytest.fixture
def workcodes():
    return [
        Workcode(id="D", title="Day shift", is_leave=False, search="day"),
        Workcode(id="V", title="Vacation", is_leave=True, search="vacation"),
        Workcode(id="S", title="Sick", is_leave=True, search="sick"),
        Workcode(id="H", title="Holiday", is_leave=True, search="holiday"),
    ]
