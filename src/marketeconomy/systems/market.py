"""
Supply/demand ledger and price multiplier cache.

The ledger (:class:`~marketeconomy.roles.MarketLedger`) is written only by
``register_*`` and consumed only by :func:`get_or_update_multiplier`, which
folds a resource's accumulated signal into the price book exactly once and
clears the slot.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass

import numpy as np

from marketeconomy import logging
from marketeconomy.config import Config
from marketeconomy.host import MarketTransaction, ResourceSignal
from marketeconomy.resources import (
    PriceComponent,
    Resource,
    category_of,
    is_tradeable,
)
from marketeconomy.roles import MarketLedger, PriceBook
from marketeconomy.systems.pricing import clamp, external_reference_price, lerp

log = logging.getLogger("marketeconomy.systems.market")

# ticks after its last registration that a folded pair still prices a resource
FOLDED_PAIR_MAX_AGE = 1


# ── ledger writes ─────────────────────────────────────────────────────────
def _accumulate(
    target: np.ndarray, ledger: MarketLedger, resource: Resource, amount: float, tick: int
) -> bool:
    if not is_tradeable(resource):
        return False
    amount = float(amount)
    if not math.isfinite(amount):
        return False
    r = int(resource)
    target[r] += max(0.0, amount)
    ledger.touched[r] = True
    ledger.last_updated_tick[r] = tick
    return True


def register_supply(
    ledger: MarketLedger, resource: Resource, amount: float, *, tick: int = 0
) -> bool:
    """
    Add *amount* (clamped at 0) to the resource's supply accumulator.

    Sentinel resources and non-finite amounts are ignored.

    Returns
    -------
    bool
        Whether the ledger was touched.
    """
    return _accumulate(ledger.supply, ledger, resource, amount, tick)


def register_demand(
    ledger: MarketLedger, resource: Resource, amount: float, *, tick: int = 0
) -> bool:
    """Add *amount* (clamped at 0) to the resource's demand accumulator."""
    return _accumulate(ledger.demand, ledger, resource, amount, tick)


def register_transactions(
    ledger: MarketLedger, batch: Iterable[MarketTransaction], *, tick: int = 0
) -> int:
    """
    Fold a batch of recorded transactions into the ledger.

    Non-positive amounts, sentinels and unknown kinds are skipped.

    Returns
    -------
    int
        Number of transactions applied.
    """
    applied = 0
    for tx in batch:
        if not tx.amount > 0:
            continue
        if tx.kind == "supply":
            applied += register_supply(ledger, tx.resource, tx.amount, tick=tick)
        elif tx.kind == "demand":
            applied += register_demand(ledger, tx.resource, tx.amount, tick=tick)
        else:
            log.debug(f"Skipping transaction of unknown kind {tx.kind!r}")
    return applied


def clear_resource(ledger: MarketLedger, resource: Resource) -> None:
    r = int(resource)
    ledger.supply[r] = 0.0
    ledger.demand[r] = 0.0
    ledger.touched[r] = False


# ── resolution ────────────────────────────────────────────────────────────
def _folded_pair_fresh(ledger: MarketLedger, r: int, tick: int | None) -> bool:
    last = int(ledger.last_updated_tick[r])
    return tick is not None and last >= 0 and tick - last <= FOLDED_PAIR_MAX_AGE


def _raw_pair(
    ledger: MarketLedger,
    resource: Resource,
    signal: ResourceSignal | None,
    book: PriceBook | None = None,
    tick: int | None = None,
) -> tuple[float, float] | None:
    r = int(resource)
    pair = signal.supply_demand() if signal is not None else None
    if pair is None and ledger.touched[r]:
        pair = float(ledger.supply[r]), float(ledger.demand[r])
    if pair is None and book is not None and _folded_pair_fresh(ledger, r, tick):
        pair = float(book.folded_supply[r]), float(book.folded_demand[r])
    if pair is None or not (math.isfinite(pair[0]) and math.isfinite(pair[1])):
        return None
    return pair


def try_supply_demand(
    ledger: MarketLedger,
    resource: Resource,
    cfg: Config,
    signal: ResourceSignal | None = None,
    book: PriceBook | None = None,
    *,
    tick: int | None = None,
) -> tuple[float, float] | None:
    """
    Resolve the sanitized (supply, demand) pair of a resource for this tick.

    Rule
    ----
        S, D   = host signal, else ledger accumulators, else the pair last
                 folded into *book* if the ledger was written at most
                 FOLDED_PAIR_MAX_AGE ticks before *tick*; both floored at 1
        neutral category or |S - D| <= tol · (S + D)  ->  ((S+D)/2, (S+D)/2)
        I      = (D - S) / (S + D)
        skew   = min(1, |I| · (1 + sensitivity))
        r      = lerp(1, shortage_ref if I > 0 else surplus_ref, skew)
        S', D' = (S+D) / (1 + r),  (S+D) - S'

    The skewed pair keeps the total volume and has ``D'/S' = r``.

    Returns
    -------
    tuple[float, float] or None
        None when neither a host signal nor ledger data exist.
    """
    if not is_tradeable(resource):
        return None
    pair = _raw_pair(ledger, resource, signal, book, tick)
    if pair is None:
        return None

    s = max(1.0, pair[0])
    d = max(1.0, pair[1])
    total = s + d
    half = 0.5 * total

    if category_of(resource) in cfg.neutral_categories:
        return half, half
    if abs(s - d) <= cfg.demand_tolerance * total:
        return half, half

    imbalance = (d - s) / total
    skew = min(1.0, abs(imbalance) * (1.0 + cfg.sensitivity))
    target = cfg.shortage_reference_ratio if imbalance > 0 else cfg.surplus_reference_ratio
    ratio = lerp(1.0, target, skew)

    skewed_supply = max(1.0, total / (1.0 + ratio))
    skewed_demand = max(1.0, total - skewed_supply)
    return skewed_supply, skewed_demand


# ── multiplier cache ──────────────────────────────────────────────────────
def get_or_update_multiplier(
    ledger: MarketLedger, book: PriceBook, resource: Resource, cfg: Config
) -> float:
    """
    Fold the resource's ledger signal into the cached price multiplier.

    Rule
    ----
        r = clamp(max(1, D) / max(1, S), min_mult, max_mult)
        m = clamp(lerp(m_prev, r, smoothing), min_mult, max_mult)

    Neutral categories use r = 1. The consumed pair is kept on the book
    and the ledger slot is cleared. Without ledger entries the cached
    multiplier is returned unchanged.
    """
    if not is_tradeable(resource):
        return 1.0
    r = int(resource)
    if not ledger.touched[r]:
        return float(book.multiplier[r])

    lo, hi = sorted((cfg.minimum_price_multiplier, cfg.maximum_price_multiplier))
    supply = max(1.0, float(ledger.supply[r]))
    demand = max(1.0, float(ledger.demand[r]))
    book.folded_supply[r] = supply
    book.folded_demand[r] = demand
    clear_resource(ledger, resource)
    ratio = 1.0 if category_of(resource) in cfg.neutral_categories else demand / supply

    if not math.isfinite(ratio):
        return float(book.multiplier[r])

    previous = float(book.multiplier[r])
    smoothing = clamp(cfg.multiplier_smoothing, 1e-6, 1.0)
    updated = clamp(lerp(previous, clamp(ratio, lo, hi), smoothing), lo, hi)
    book.multiplier[r] = updated
    return updated


def adjust_price_component(
    book: PriceBook,
    resource: Resource,
    industrial: float,
    service: float,
    component: PriceComponent,
    cfg: Config,
) -> float:
    """
    Scale the industrial/service parts of a split price by the cached multiplier.

    Rule
    ----
        I' = I · m · industrial_bias,  S' = S · m · service_bias
        MARKET -> I' + S',  INDUSTRIAL -> I',  SERVICE -> S'

    Sentinel resources and non-positive totals pass the requested component
    through unchanged.
    """
    industrial = max(0.0, float(industrial))
    service = max(0.0, float(service))
    component = PriceComponent(component)

    def pick(i: float, s: float) -> float:
        if component is PriceComponent.INDUSTRIAL:
            return i
        if component is PriceComponent.SERVICE:
            return s
        return i + s

    if not is_tradeable(resource) or industrial + service <= 0.0:
        return pick(industrial, service)

    multiplier = float(book.multiplier[int(resource)])
    adjusted_i = industrial * multiplier * max(0.0, cfg.industrial_component_bias)
    adjusted_s = service * multiplier * max(0.0, cfg.service_component_bias)
    result = pick(adjusted_i, adjusted_s)
    if not math.isfinite(result):
        return pick(industrial, service)
    return result


# ── external trade reference ──────────────────────────────────────────────
def update_external_bounds(
    book: PriceBook, resource: Resource, signal: ResourceSignal | None
) -> float | None:
    """
    Track the lowest / highest external reference price seen this session.

    Returns the current external price, or None when trade gives none.
    """
    price = external_reference_price(signal, math.nan)
    if not math.isfinite(price):
        return None
    r = int(resource)
    floor, ceiling = book.external_floor[r], book.external_ceiling[r]
    book.external_floor[r] = price if np.isnan(floor) else min(floor, price)
    book.external_ceiling[r] = price if np.isnan(ceiling) else max(ceiling, price)
    return price


# ── snapshot ──────────────────────────────────────────────────────────────
@dataclass(slots=True, frozen=True)
class MarketSnapshot:
    """Read-only view of one resource's market for display and telemetry."""

    resource: Resource
    supply: float
    demand: float
    trade_balance: int
    trade_worth: int
    processing_workers: tuple[int, int]
    service_workers: tuple[int, int]
    processing_companies: int
    service_companies: int
    multiplier: float
    external_price: float
    external_floor: float
    external_ceiling: float

    def __str__(self) -> str:
        return (
            f"{self.resource.name}: Supply={self.supply:g}, "
            f"Demand={self.demand:g}, Trade={self.trade_balance}"
        )


def snapshot(
    ledger: MarketLedger,
    book: PriceBook,
    resource: Resource,
    signal: ResourceSignal | None,
    *,
    tick: int | None = None,
) -> MarketSnapshot:
    """Build a :class:`MarketSnapshot`; supply and demand are floored at 1."""
    resource = Resource(resource)
    r = int(resource)
    pair = _raw_pair(ledger, resource, signal, book, tick) or (1.0, 1.0)
    sig = signal if signal is not None else ResourceSignal()
    return MarketSnapshot(
        resource=resource,
        supply=max(1.0, pair[0]),
        demand=max(1.0, pair[1]),
        trade_balance=sig.trade_balance,
        trade_worth=sig.trade_worth,
        processing_workers=sig.processing_workers,
        service_workers=sig.service_workers,
        processing_companies=sig.processing_companies,
        service_companies=sig.service_companies,
        multiplier=float(book.multiplier[r]),
        external_price=external_reference_price(signal, math.nan),
        external_floor=float(book.external_floor[r]),
        external_ceiling=float(book.external_ceiling[r]),
    )
