"""
Workforce utilization enforcer and maintenance accrual.

Staffing limits only ever move *down* towards the utilization floor; the
engine never raises a workplace's maximum workers.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from marketeconomy import logging
from marketeconomy.config import Config
from marketeconomy.host import WorkplaceView
from marketeconomy.roles import WorkplaceState

log = logging.getLogger("marketeconomy.systems.workforce")


def fitting_workers(
    lot_x: int,
    lot_y: int,
    level: int,
    max_workers_per_cell: float,
    space_multiplier: float,
) -> int:
    """
    Worker capacity of a building lot.

    Rule
    ----
        C = ceil(workers_per_cell · lot_x · lot_y · (1 + 0.5·level) · space)

    Returns 0 for empty lots or a non-positive / non-finite capacity.
    """
    if lot_x <= 0 or lot_y <= 0:
        return 0
    capacity = (
        max_workers_per_cell * (lot_x * lot_y) * (1.0 + 0.5 * level) * space_multiplier
    )
    if not math.isfinite(capacity) or capacity <= 0.0:
        return 0
    return math.ceil(capacity)


def resolve_capacity(view: WorkplaceView) -> int:
    """Explicit capacity when the host gives one, else derived from lot data."""
    if view.capacity is not None:
        return max(0, int(view.capacity))
    return fitting_workers(
        view.lot_x,
        view.lot_y,
        view.level,
        view.max_workers_per_cell,
        view.space_multiplier,
    )


@dataclass(slots=True, frozen=True)
class UtilizationResult:
    """Outcome of :func:`enforce_utilization` for one workplace."""

    capacity: int
    utilization: float
    under_utilized: bool
    max_workers: int  # value to write back; never above the host's value


def enforce_utilization(view: WorkplaceView, cfg: Config) -> UtilizationResult | None:
    """
    Clamp maximum staffing towards the minimum utilization floor.

    Rule
    ----
        u = staffed / max(1, C)
        u < share  ->  max_workers = min(max_workers, ceil(share · C))

    Returns
    -------
    UtilizationResult or None
        None when no capacity is known (workplace skipped).
    """
    capacity = resolve_capacity(view)
    if capacity <= 0:
        return None
    share = cfg.minimum_utilization_share
    utilization = max(0, view.staffed) / max(1, capacity)
    under = utilization < share
    max_workers = view.max_workers
    if under:
        max_workers = min(view.max_workers, math.ceil(share * capacity))
    return UtilizationResult(
        capacity=capacity,
        utilization=utilization,
        under_utilized=under,
        max_workers=max_workers,
    )


# ── maintenance ───────────────────────────────────────────────────────────
def daily_maintenance(capacity: int, under_utilized: bool, cfg: Config) -> float:
    """``(base + per_capacity · C)``, times the penalty multiplier when under-utilized."""
    cost = cfg.base_maintenance_per_day + cfg.maintenance_per_capacity * capacity
    if under_utilized:
        cost *= cfg.under_utilization_penalty_multiplier
    return max(0.0, cost)


def accrue_maintenance(
    state: WorkplaceState, capacity: int, under_utilized: bool, cfg: Config
) -> float:
    """Add one tick's share of the daily cost; return the amount accrued."""
    accrued = daily_maintenance(capacity, under_utilized, cfg) / max(
        1, cfg.company_updates_per_day
    )
    state.accumulated_maintenance += accrued
    return accrued


def maintenance_due(state: WorkplaceState, cfg: Config) -> int:
    """
    Integer amount to deduct now, 0 if nothing is due.

    Due once the accumulator reaches the fee threshold, or in strict mode
    as soon as its integer part is non-zero.
    """
    whole = math.floor(state.accumulated_maintenance)
    if whole <= 0:
        return 0
    if cfg.maintenance_strict or state.accumulated_maintenance >= cfg.maintenance_fee_threshold:
        return whole
    return 0


def settle_maintenance(state: WorkplaceState, amount: int) -> None:
    """Book a completed deduction: carry the remainder, grow the debt."""
    state.accumulated_maintenance -= amount
    state.maintenance_debt += amount
