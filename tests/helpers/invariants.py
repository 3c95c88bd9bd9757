# tests/helpers/invariants.py
"""
High-level invariants that must hold after *every* ``Engine.step``.
They deliberately stay coarse-grained so they remain valid even when the
micro-rules evolve.
"""

from __future__ import annotations

import numpy as np

from marketeconomy.engine import Engine
from marketeconomy.systems.labor_market import WAGE_MULTIPLIER_MAX, WAGE_MULTIPLIER_MIN


def assert_basic_invariants(engine: Engine) -> None:
    """
    Raise ``AssertionError`` if any cross-component relationship is violated
    after a tick.
    """
    cfg = engine.config
    lo, hi = cfg.minimum_price_multiplier, cfg.maximum_price_multiplier

    # Market
    # ------
    assert (engine.ledger.supply >= 0).all()
    assert (engine.ledger.demand >= 0).all()
    m = engine.price_book.multiplier
    assert np.isfinite(m).all()
    folded = m[m != 1.0]
    assert ((folded >= lo - 1e-12) & (folded <= hi + 1e-12)).all()

    # Labor
    # -----
    if engine.wage_info is not None:
        assert WAGE_MULTIPLIER_MIN <= engine.wage_info.multiplier <= WAGE_MULTIPLIER_MAX
    if engine.wage_baseline.initialized:
        assert (engine.wage_baseline.wages >= 1).all()
        assert (engine.wage_baseline.last_applied >= 1).all()

    # Workforce
    # ---------
    for entity in engine.workplaces:
        state = engine.workplaces.peek(entity)
        assert state is not None
        assert state.accumulated_maintenance >= 0.0
        assert state.maintenance_debt >= 0

    # Companies
    # ---------
    for entity in engine.companies:
        state = engine.companies.peek(entity)
        assert state is not None
        assert state.last_untaxed_income >= 0
        assert 0 <= state.last_average_tax_rate <= 100

    # Production
    # ----------
    for entity in engine.production:
        state = engine.production.peek(entity)
        assert state is not None
        assert 0.0 <= state.accumulator < 1.0
