"""
Elastic price calculator.

Pure functions: no engine state, no host access, no logging side effects
beyond DEEP_DEBUG traces. Every non-finite intermediate short-circuits to
the vanilla price.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from marketeconomy import logging
from marketeconomy.config import Config
from marketeconomy.host import HouseholdCounts, ResourceSignal
from marketeconomy.resources import Resource, is_sentinel

log = logging.getLogger("marketeconomy.systems.pricing")

# Keeps the logit finite when vanilla sits on a band edge
_EPSILON = 1e-4
# Logistic argument clamp; sigmoid(±60) is 0/1 to double precision
_LOGISTIC_LIMIT = 60.0
_EXPONENT_MIN = 0.25
_EXPONENT_MAX = 3.0
_SMOOTHING_MIN = 1e-3

EDUCATION_MULTIPLIER_MIN = 0.5
EDUCATION_MULTIPLIER_MAX = 1.8


# ── scalar helpers ────────────────────────────────────────────────────────
def clamp(x: float, lo: float, hi: float) -> float:
    return lo if x < lo else hi if x > hi else x


def lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


def logit(p: float) -> float:
    return math.log(p / (1.0 - p))


def sigmoid(x: float) -> float:
    return 1.0 / (1.0 + math.exp(-x))


def price_band(vanilla_price: float, cfg: Config) -> tuple[float, float]:
    """Return ``(min_price, max_price)`` with the multipliers put in order."""
    lo, hi = sorted((cfg.minimum_price_multiplier, cfg.maximum_price_multiplier))
    return vanilla_price * lo, vanilla_price * hi


# ── metrics ───────────────────────────────────────────────────────────────
@dataclass(slots=True, frozen=True)
class ElasticPriceMetrics:
    """
    Every intermediate term of one elastic price computation.

    ``bypass`` names why the vanilla price was returned unchanged
    (``"sentinel"``, ``"non_positive"``, ``"non_finite"``) and is ``None``
    for a regular computation.
    """

    resource: Resource
    vanilla_price: float
    supply: float = math.nan
    demand: float = math.nan
    ratio: float = 1.0
    exponent: float = math.nan
    anchoring: float = math.nan
    smoothing: float = math.nan
    bias: float = 0.0
    raw_price: float = math.nan
    anchored_price: float = math.nan
    min_price: float = math.nan
    max_price: float = math.nan
    elastic_price: float = math.nan
    blended_price: float = math.nan
    final_price: float = math.nan
    bypass: str | None = None

    @property
    def multiplier(self) -> float:
        """Final price as a multiple of the vanilla price."""
        if self.vanilla_price > 0 and math.isfinite(self.final_price):
            return self.final_price / self.vanilla_price
        return 1.0


def _bypass(
    resource: Resource, vanilla_price: float, reason: str
) -> tuple[float, ElasticPriceMetrics]:
    return vanilla_price, ElasticPriceMetrics(
        resource=resource,
        vanilla_price=vanilla_price,
        final_price=vanilla_price,
        bypass=reason,
    )


# ── the calculator ────────────────────────────────────────────────────────
def compute_elastic_price(
    resource: Resource,
    vanilla_price: float,
    supply: float,
    demand: float,
    cfg: Config,
) -> tuple[float, ElasticPriceMetrics]:
    """
    Map a vanilla price and a supply/demand pair to a bounded price.

    Rule
    ----
        r      = max(1, D) / max(1, S)
        k      = lerp(0.25, 3.0, sensitivity)
        P_raw  = P_v · r^k
        P_anc  = lerp(P_raw, P_v, anchoring)
        [P_lo, P_hi] = P_v · [min_mult, max_mult],  W = P_hi - P_lo
        b      = logit(clamp((P_v - P_lo) / W, ε, 1 - ε))
        σ      = sigmoid(clamp((P_anc - P_v) / (smoothing · W/2) + b, -60, 60))
        P_el   = P_lo + W · σ
        P      = clamp(lerp(P_el, P_v, external_influence), P_lo, P_hi)

    P_v: Vanilla Price, S: Supply, D: Demand

    The logistic bias centres the curve on the vanilla price's position in
    the band, so a balanced market (r = 1) maps back to exactly P_v.

    Parameters
    ----------
    resource : Resource
        Priced resource. Sentinels are returned unchanged.
    vanilla_price : float
        Host price before adjustment. Non-positive prices bypass.
    supply, demand : float
        Signal pair; floored at 1.
    cfg : Config
        Engine configuration.

    Returns
    -------
    tuple[float, ElasticPriceMetrics]
        Final price and every intermediate term.
    """
    vanilla = float(vanilla_price)
    if is_sentinel(resource):
        return _bypass(resource, vanilla, "sentinel")
    if not math.isfinite(vanilla) or not math.isfinite(supply) or not math.isfinite(demand):
        return _bypass(resource, vanilla, "non_finite")
    if vanilla <= 0.0:
        return _bypass(resource, vanilla, "non_positive")

    s = max(1.0, float(supply))
    d = max(1.0, float(demand))
    ratio = d / s

    exponent = lerp(_EXPONENT_MIN, _EXPONENT_MAX, clamp(cfg.sensitivity, 0.0, 1.0))
    try:
        raw = vanilla * ratio**exponent
    except OverflowError:
        return _bypass(resource, vanilla, "non_finite")
    anchoring = clamp(cfg.price_anchoring_strength, 0.0, 1.0)
    anchored = lerp(raw, vanilla, anchoring)

    min_price, max_price = price_band(vanilla, cfg)
    width = max_price - min_price
    smoothing = clamp(cfg.logistic_smoothing_scale, _SMOOTHING_MIN, 1.0)

    if width <= 0.0:
        # Collapsed band: the only admissible price is the band itself
        bias, elastic = 0.0, min_price
    else:
        position = clamp((vanilla - min_price) / width, _EPSILON, 1.0 - _EPSILON)
        bias = logit(position)
        x = (anchored - vanilla) / (smoothing * 0.5 * width) + bias
        elastic = min_price + width * sigmoid(clamp(x, -_LOGISTIC_LIMIT, _LOGISTIC_LIMIT))

    influence = clamp(cfg.external_price_influence, 0.0, 1.0)
    blended = lerp(elastic, vanilla, influence)
    final = clamp(blended, min_price, max_price)

    if not all(map(math.isfinite, (raw, anchored, elastic, blended, final))):
        return _bypass(resource, vanilla, "non_finite")

    metrics = ElasticPriceMetrics(
        resource=resource,
        vanilla_price=vanilla,
        supply=s,
        demand=d,
        ratio=ratio,
        exponent=exponent,
        anchoring=anchoring,
        smoothing=smoothing,
        bias=bias,
        raw_price=raw,
        anchored_price=anchored,
        min_price=min_price,
        max_price=max_price,
        elastic_price=elastic,
        blended_price=blended,
        final_price=final,
    )
    log.deep(
        "%s: ratio=%.3f exponent=%.2f raw=%.2f anchored=%.2f elastic=%.2f "
        "blended=%.2f final=%.2f",
        resource.name,
        ratio,
        exponent,
        raw,
        anchored,
        elastic,
        blended,
        final,
    )
    return final, metrics


# ── supplementary price signals ──────────────────────────────────────────
def external_reference_price(signal: ResourceSignal | None, fallback: float) -> float:
    """
    Unit price implied by external trade: ``|trade_worth| / |trade_balance|``.

    Returns *fallback* when there is no trade or the quotient is not a
    positive finite number.
    """
    if signal is None:
        return fallback
    amount = abs(signal.trade_balance)
    if amount <= 0:
        return fallback
    external = abs(signal.trade_worth) / amount
    if not math.isfinite(external) or external <= 0.0:
        return fallback
    return external


def education_multiplier(counts: HouseholdCounts | None, cfg: Config) -> float:
    """
    Price multiplier from the citywide share of well/highly educated workers.

    Rule
    ----
        e = (well + highly) / max(1, workable)
        δ = e - baseline
        m = clamp(1 + δ · (premium if δ >= 0 else penalty), 0.5, 1.8)

    Returns 1.0 without household data.
    """
    if counts is None:
        return 1.0
    workable = max(1, counts.workable)
    educated = max(0, counts.well_educated) + max(0, counts.highly_educated)
    delta = educated / workable - clamp(cfg.education_baseline, 0.0, 1.0)
    strength = (
        cfg.education_premium_strength if delta >= 0.0 else cfg.education_penalty_strength
    )
    multiplier = 1.0 + delta * max(0.0, strength)
    if not math.isfinite(multiplier):
        return 1.0
    return clamp(multiplier, EDUCATION_MULTIPLIER_MIN, EDUCATION_MULTIPLIER_MAX)
