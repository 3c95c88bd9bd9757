"""
Producer output and market sale settlement.

Producers turn their workforce into output at a per-worker daily rate,
split over the host's company cadence. Fractions carry over in the
producer's :class:`~marketeconomy.roles.ProductionState`; only whole units
reach the host. Stock is sold in batches once it reaches the minimum sale
amount.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from marketeconomy.config import Config
from marketeconomy.host import ProducerView

# floor on a recipe's per-worker rate
MIN_OUTPUT_PER_WORKER = 0.1


@dataclass(slots=True, frozen=True)
class SaleQuote:
    """One settled batch: units sold, unit price and rounded revenue."""

    amount: int
    unit_price: float
    revenue: int


def output_per_worker(view: ProducerView, cfg: Config) -> float:
    rate = view.output_per_worker_per_day
    if rate is None or not math.isfinite(rate):
        return cfg.default_output_per_worker_per_day
    return max(MIN_OUTPUT_PER_WORKER, float(rate))


def desired_output_per_tick(view: ProducerView, cfg: Config) -> float:
    """
    Output the producer's workforce yields in one tick.

    Rule
    ----
        desired = employees · output_per_worker / company_updates_per_day
    """
    if view.employees <= 0:
        return 0.0
    return view.employees * output_per_worker(view, cfg) / max(1, cfg.company_updates_per_day)


def sale_amount(available: int, produced: int, desired: float, batch_size: int, cfg: Config) -> int:
    """
    Units sold this tick out of *available*.

    Rule
    ----
        available < min_sale              ->  0
        batch = max(batch_size, ceil(max(desired, produced)), min_sale)
        sale  = min(clamp(available, min_sale, max_sale), batch)
    """
    lo, hi = cfg.min_sale_amount, cfg.max_sale_per_tick
    if available < lo:
        return 0
    batch = max(batch_size, math.ceil(max(desired, float(produced))), lo)
    return min(min(max(available, lo), hi), batch)


def quote_sale(amount: int, unit_price: float) -> SaleQuote | None:
    """Price a batch; None when the revenue rounds to nothing or is not finite."""
    if amount <= 0 or not math.isfinite(unit_price) or unit_price <= 0.0:
        return None
    revenue = round(unit_price * amount)
    if revenue <= 0:
        return None
    return SaleQuote(amount=amount, unit_price=unit_price, revenue=revenue)
