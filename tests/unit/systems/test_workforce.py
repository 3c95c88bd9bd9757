# tests/unit/systems/test_workforce.py
"""
Workforce utilization and maintenance unit tests.
"""

from __future__ import annotations

import math

import pytest

from marketeconomy.roles import WorkplaceState
from marketeconomy.systems.workforce import (
    accrue_maintenance,
    daily_maintenance,
    enforce_utilization,
    fitting_workers,
    maintenance_due,
    resolve_capacity,
    settle_maintenance,
)
from tests.helpers.factories import make_config, mock_workplace


# ── capacity ──────────────────────────────────────────────────────────────
def test_fitting_workers_from_lot_data():
    # 0.5 · (4·4) · (1 + 0.5·2) · 1.0 = 16
    assert fitting_workers(4, 4, 2, 0.5, 1.0) == 16
    # ceil(0.3 · 9 · 1.0 · 1.0) = ceil(2.7) = 3
    assert fitting_workers(3, 3, 0, 0.3, 1.0) == 3


@pytest.mark.parametrize(
    "args",
    [
        (0, 4, 1, 1.0, 1.0),
        (4, -1, 1, 1.0, 1.0),
        (4, 4, 1, 0.0, 1.0),
        (4, 4, 1, math.nan, 1.0),
        (4, 4, 1, 1.0, math.inf),
    ],
)
def test_fitting_workers_degenerate_lots(args):
    assert fitting_workers(*args) == 0


def test_resolve_capacity_prefers_explicit_value():
    assert resolve_capacity(mock_workplace(capacity=12, lot_x=9, lot_y=9)) == 12
    derived = mock_workplace(capacity=None, lot_x=2, lot_y=2, max_workers_per_cell=1.0)
    assert resolve_capacity(derived) == 4


# ── utilization ───────────────────────────────────────────────────────────
def test_under_utilized_workplace_is_clamped():
    """capacity 20, staffed 2, share 0.25 -> max_workers <= ceil(0.25 · 20) = 5."""
    cfg = make_config(minimum_utilization_share=0.25)
    result = enforce_utilization(mock_workplace(staffed=2, max_workers=20, capacity=20), cfg)

    assert result.under_utilized
    assert result.utilization == pytest.approx(0.1)
    assert result.max_workers == 5


def test_clamp_never_raises_max_workers():
    cfg = make_config(minimum_utilization_share=0.25)
    result = enforce_utilization(mock_workplace(staffed=0, max_workers=3, capacity=20), cfg)
    assert result.under_utilized
    assert result.max_workers == 3


def test_well_utilized_workplace_untouched():
    cfg = make_config(minimum_utilization_share=0.25)
    result = enforce_utilization(mock_workplace(staffed=10, max_workers=20, capacity=20), cfg)
    assert not result.under_utilized
    assert result.max_workers == 20


def test_unknown_capacity_is_skipped():
    view = mock_workplace(capacity=None)
    assert enforce_utilization(view, make_config()) is None


# ── maintenance ───────────────────────────────────────────────────────────
def test_daily_maintenance_cost():
    cfg = make_config(base_maintenance_per_day=45.0, maintenance_per_capacity=3.5)
    assert daily_maintenance(20, False, cfg) == pytest.approx(115.0)
    assert daily_maintenance(20, True, cfg) == pytest.approx(230.0)


def test_accrual_is_per_tick_share():
    cfg = make_config(company_updates_per_day=32)
    state = WorkplaceState()
    accrued = accrue_maintenance(state, 20, False, cfg)
    assert accrued == pytest.approx(115.0 / 32)
    assert state.accumulated_maintenance == pytest.approx(115.0 / 32)


def test_fee_deducted_once_threshold_is_reached():
    """Daily cost 115 accrues per tick until >= 200, then floor(acc) is charged once."""
    cfg = make_config(
        base_maintenance_per_day=45.0,
        maintenance_per_capacity=3.5,
        maintenance_fee_threshold=200.0,
        company_updates_per_day=32,
    )
    state = WorkplaceState()
    ticks = 0
    while maintenance_due(state, cfg) == 0:
        accrue_maintenance(state, 20, False, cfg)
        ticks += 1
    assert ticks == math.ceil(200.0 / (115.0 / 32))

    before = state.accumulated_maintenance
    due = maintenance_due(state, cfg)
    assert due == math.floor(before)

    settle_maintenance(state, due)
    assert state.maintenance_debt == due
    assert state.accumulated_maintenance == pytest.approx(before - due)
    assert 0.0 <= state.accumulated_maintenance < 1.0
    assert maintenance_due(state, cfg) == 0


def test_strict_mode_charges_whole_units_immediately():
    cfg = make_config(maintenance_strict=True)
    state = WorkplaceState(accumulated_maintenance=3.7)
    assert maintenance_due(state, cfg) == 3

    state.accumulated_maintenance = 0.9
    assert maintenance_due(state, cfg) == 0
