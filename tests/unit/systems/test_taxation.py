# tests/unit/systems/test_taxation.py
"""
Company profit/tax adjuster unit tests.
"""

from __future__ import annotations

import math

import pytest

from marketeconomy.host import TaxArea
from marketeconomy.resources import Resource
from marketeconomy.roles import CompanyFinanceState
from marketeconomy.systems.taxation import (
    SkipReason,
    TaxTickSummary,
    adjust_company_tax,
    classify_tax_area,
    per_tick_income,
    skip_reason,
)
from tests.helpers.factories import make_config, mock_company


# ── eligibility ───────────────────────────────────────────────────────────
@pytest.mark.parametrize(
    "overrides, reason",
    [
        ({"employees": None}, SkipReason.NO_EMPLOYEE_BUFFER),
        ({"employees": 0}, SkipReason.EMPTY_EMPLOYEES),
        ({"output_resource": None}, SkipReason.NO_PROCESS_DATA),
        ({"is_industrial": False, "is_service": False}, SkipReason.WRONG_CATEGORY),
        ({"abandoned": True}, SkipReason.ABANDONED_PROPERTY),
    ],
)
def test_skip_reasons(overrides, reason):
    assert skip_reason(mock_company(**overrides)) == reason


def test_eligible_company_has_no_skip_reason():
    assert skip_reason(mock_company()) is None


def test_tax_area_classification():
    assert classify_tax_area(mock_company(output_weight=0.0)) == (TaxArea.OFFICE, None)
    assert classify_tax_area(mock_company(district="docks")) == (TaxArea.INDUSTRIAL, None)
    commercial = mock_company(
        is_industrial=False,
        is_service=True,
        output_resource=Resource.MEALS,
        district="docks",
    )
    assert classify_tax_area(commercial) == (TaxArea.COMMERCIAL, "docks")


# ── per-tick income ───────────────────────────────────────────────────────
def test_per_tick_income():
    cfg = make_config(company_updates_per_day=32, rent_updates_per_day=16)
    assert per_tick_income(6400.0, 160, cfg) == (200, 10, 190)


def test_per_tick_profit_truncates_and_floors():
    cfg = make_config(company_updates_per_day=32, rent_updates_per_day=16)
    assert per_tick_income(100.0, 0, cfg) == (3, 0, 3)
    assert per_tick_income(-500.0, 0, cfg) == (0, 0, 0)
    assert per_tick_income(math.nan, 0, cfg) == (0, 0, 0)


def test_rent_can_wipe_out_income():
    cfg = make_config(company_updates_per_day=32, rent_updates_per_day=16)
    assert per_tick_income(320.0, 800, cfg) == (10, 50, 0)


def test_rent_per_tick_override():
    cfg = make_config(company_updates_per_day=32, rent_updates_per_day=16)
    assert per_tick_income(6400.0, 160, cfg, rent_per_tick=7) == (200, 7, 193)


def test_rent_due_carries_fraction():
    state = CompanyFinanceState()
    assert state.rent_due(40, 16) == (2, 0.5)
    state.rent_accumulator = 0.5
    assert state.rent_due(40, 16) == (3, 0.0)
    # read only
    assert state.rent_accumulator == 0.5


def test_rent_due_without_rent_keeps_carry():
    state = CompanyFinanceState(rent_accumulator=0.25)
    assert state.rent_due(0, 16) == (0, 0.25)


# ── adjustment ────────────────────────────────────────────────────────────
def test_first_sight_replaces_income_and_uses_area_rate():
    cfg = make_config()
    state = CompanyFinanceState()
    company = mock_company(untaxed_income=0, average_tax_rate=25)

    result = adjust_company_tax(company, state, 6400.0, 10, cfg)

    assert result.net_income == 190
    assert result.vanilla_delta == 0
    assert result.adjustment == 190
    assert result.untaxed_income == 190
    assert result.average_tax_rate == 10
    # state is read only
    assert not state.initialized
    assert state.last_untaxed_income == 0


def test_vanilla_delta_is_replaced_by_net_income():
    cfg = make_config()
    state = CompanyFinanceState(last_untaxed_income=100, last_average_tax_rate=20, initialized=True)
    company = mock_company(untaxed_income=150, average_tax_rate=20)

    result = adjust_company_tax(company, state, 6400.0, 10, cfg)

    assert result.vanilla_delta == 50
    assert result.adjustment == 140
    assert result.untaxed_income == 290
    assert result.weight == pytest.approx(190 / 290)
    assert result.average_tax_rate == round(20 + (10 - 20) * (190 / 290))


def test_untaxed_income_floored_at_zero():
    cfg = make_config()
    state = CompanyFinanceState(last_untaxed_income=0, initialized=True)
    company = mock_company(untaxed_income=500, average_tax_rate=12)

    result = adjust_company_tax(company, state, 0.0, None, cfg)
    assert result.net_income == 0
    assert result.adjustment == -500
    assert result.untaxed_income == 0
    assert result.average_tax_rate == 12


def test_average_rate_untouched_without_net_income():
    cfg = make_config()
    state = CompanyFinanceState(last_average_tax_rate=30, initialized=True)
    company = mock_company(average_tax_rate=30, rent=100_000)
    result = adjust_company_tax(company, state, 6400.0, 5, cfg)
    assert result.net_income == 0
    assert result.average_tax_rate == 30


def test_average_rate_is_clamped():
    cfg = make_config()
    state = CompanyFinanceState(last_average_tax_rate=90, initialized=True)
    result = adjust_company_tax(mock_company(), state, 6400.0, 400, cfg)
    assert result.average_tax_rate == 100


def test_sync_caches_persists_result():
    state = CompanyFinanceState()
    state.sync_caches(290, 13)
    assert (state.last_untaxed_income, state.last_average_tax_rate) == (290, 13)
    assert state.initialized


# ── summary ───────────────────────────────────────────────────────────────
def test_tick_summary_counts_and_formats():
    summary = TaxTickSummary(total=4)
    summary.skip(SkipReason.EMPTY_EMPLOYEES)
    summary.skip(SkipReason.EMPTY_EMPLOYEES)
    summary.skip(SkipReason.ABANDONED_PROPERTY)
    summary.processed = 1

    assert summary.skipped == {"empty_employees": 2, "abandoned_property": 1}
    assert str(summary) == (
        "total=4, processed=1, abandoned_property=1, empty_employees=2"
    )
    assert str(TaxTickSummary(total=0)) == "total=0, processed=0"
