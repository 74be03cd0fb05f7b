"""Tests for ChargeCodeResolver."""

from __future__ import annotations

from datetime import date

import pytest

from tests.fakes import MemoryForecastDirectory
from timeledger.ingest.charge_codes import ChargeCodeResolver
from timeledger.models.labor import Forecast, LaborCode


@pytest.fixture
def resolver(forecasts):
    return ChargeCodeResolver(forecasts, "acme")


def test_first_assigned_forecast_code_by_default(resolver, smith):
    charge = resolver.resolve(smith, date(2024, 1, 8))
    assert (charge.charge_number, charge.extension, charge.premium) == ("CN100", "A1", "1")


def test_exact_pairing_preferred(resolver, smith):
    charge = resolver.resolve(smith, date(2024, 1, 8),
                              charge_number="cn200", extension="b2", premium="2")
    assert (charge.charge_number, charge.extension, charge.premium) == ("CN200", "B2", "2")


def test_unknown_row_charge_falls_back_to_first_candidate(resolver, smith):
    charge = resolver.resolve(smith, date(2024, 1, 8), charge_number="ZZZ", extension="9")
    assert charge.charge_number == "CN100"


def test_no_active_assignment(resolver, smith):
    assert resolver.resolve(smith, date(2023, 6, 1)) is None


def test_no_forecast_for_company(forecasts, smith):
    resolver = ChargeCodeResolver(forecasts, "globex")
    assert resolver.resolve(smith, date(2024, 1, 8)) is None


def test_assignment_code_must_be_forecast(smith):
    forecasts = MemoryForecastDirectory([
        Forecast(company_id="acme", start_date=date(2024, 1, 1), end_date=date(2024, 12, 31),
                 labor_codes=[LaborCode(charge_number="CN200", extension="B2")]),
    ])
    resolver = ChargeCodeResolver(forecasts, "acme")
    assert [c.charge_number for c in resolver.candidates(smith, date(2024, 3, 1))] == ["CN200"]
    assert resolver.resolve(smith, date(2024, 3, 1)).charge_number == "CN200"
