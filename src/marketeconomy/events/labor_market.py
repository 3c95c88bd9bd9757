"""
Labor market event.

Re-derives the citywide wage multiplier and rewrites the host wage bands
from the captured baseline. Runs before the host pays wages.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from marketeconomy.core.decorators import event

if TYPE_CHECKING:
    from marketeconomy.engine import Engine


@event
class AdjustWages:
    """
    Scale the five wage bands by the labor-market multiplier.

    Rule
    ----
        w_k = max(1, round(w̄_k · m))

    w̄: Baseline Wage (captured once), m: Wage Multiplier (see
    :func:`marketeconomy.systems.labor_market.evaluate`)

    Without household statistics the baseline is restored.
    """

    flag = "wages"

    def execute(self, engine: Engine) -> None:
        from marketeconomy.host import N_WAGE_LEVELS
        from marketeconomy.systems.labor_market import apply_adjusted_wages, evaluate

        logger = self.get_logger()
        data = engine.gateway.economy_parameters()
        if data is None:
            logger.debug("No economy parameters; wages left untouched")
            return

        info = evaluate(engine.gateway.household_counts(), engine.config)
        apply_adjusted_wages(engine.wage_baseline, data, info)
        engine.wage_info = info

        wages = [int(data.get_wage(level)) for level in range(N_WAGE_LEVELS)]
        engine.analytics.record_wages(engine.tick, wages)
        if info is None:
            engine.trace.record(engine.tick, "wages", "citywide", restored=True)
            return
        engine.trace.record(
            engine.tick,
            "wages",
            "citywide",
            multiplier=info.multiplier,
            unemployment=info.unemployment_rate,
            skilled_share=info.skilled_share,
            low_skill_share=info.low_skill_share,
            penalty=info.penalty,
            premium=info.premium,
            mismatch_premium=info.mismatch_premium,
            wages=tuple(wages),
        )
