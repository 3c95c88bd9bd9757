"""Per-resource market state: the supply/demand ledger and the price book."""

from __future__ import annotations

import numpy as np

from marketeconomy.core.decorators import role
from marketeconomy.resources import N_RESOURCES
from marketeconomy.typing import Bool1D, Float1D, Int1D


@role
class MarketLedger:
    """
    Ephemeral supply/demand accumulators, one slot per resource.

    Single consumer: :func:`marketeconomy.systems.market.get_or_update_multiplier`
    folds a resource's accumulated signal into the price book once and then
    clears the slot. Only the market systems write here.
    """

    supply: Float1D
    demand: Float1D
    last_updated_tick: Int1D  # -1 when never touched
    touched: Bool1D

    @classmethod
    def empty(cls, n: int = N_RESOURCES) -> MarketLedger:
        return cls(
            supply=np.zeros(n, dtype=np.float64),
            demand=np.zeros(n, dtype=np.float64),
            last_updated_tick=np.full(n, -1, dtype=np.int64),
            touched=np.zeros(n, dtype=np.bool_),
        )


@role
class PriceBook:
    """
    Persistent per-resource price state, survives across ticks.

    ``folded_supply`` / ``folded_demand`` keep the last ledger pair consumed
    into ``multiplier`` so prices stay elastic on the tick after the fold.
    ``external_floor`` / ``external_ceiling`` hold the lowest / highest
    external reference price seen this session. All NaN until first seen.
    """

    multiplier: Float1D
    folded_supply: Float1D
    folded_demand: Float1D
    external_floor: Float1D
    external_ceiling: Float1D

    @classmethod
    def empty(cls, n: int = N_RESOURCES) -> PriceBook:
        return cls(
            multiplier=np.ones(n, dtype=np.float64),
            folded_supply=np.full(n, np.nan),
            folded_demand=np.full(n, np.nan),
            external_floor=np.full(n, np.nan),
            external_ceiling=np.full(n, np.nan),
        )
