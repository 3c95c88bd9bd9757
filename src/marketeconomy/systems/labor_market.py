"""
Labor market regulator.

Two states: *uninitialized* (no baseline captured) and *initialized*
(baseline held and restorable at any time). The baseline is captured once
per session and is the sole restore target, so every adjustment can be
undone exactly.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from marketeconomy import logging
from marketeconomy.config import Config
from marketeconomy.host import N_WAGE_LEVELS, HouseholdCounts, WageBandAccessor
from marketeconomy.roles import WageBaseline
from marketeconomy.systems.pricing import clamp

log = logging.getLogger("marketeconomy.systems.labor_market")

WAGE_MULTIPLIER_MIN = 0.5
WAGE_MULTIPLIER_MAX = 1.75
# Skilled share below which a skill-shortage premium kicks in
SKILLED_SHARE_TARGET = 0.3


def saturate(x: float) -> float:
    return clamp(x, 0.0, 1.0)


@dataclass(slots=True, frozen=True)
class WageAdjustmentInfo:
    """Labor statistics and the wage multiplier derived from them."""

    workforce: int
    employed: int
    unemployment_rate: float
    skilled_share: float
    low_skill_share: float
    skill_shortage: float
    education_mismatch: float
    penalty: float
    premium: float
    mismatch_premium: float
    multiplier: float


def evaluate(counts: HouseholdCounts | None, cfg: Config) -> WageAdjustmentInfo | None:
    """
    Compute the citywide wage multiplier.

    Rule
    ----
        W  = max(1, workable),  E = min(W, employed)
        u  = 1 - E / W
        s  = (well + highly) / W,   l = poorly / W
        shortage = saturate(0.3 - s)
        mismatch = saturate(l - s)
        m  = clamp(1 - u·penalty + shortage·premium + mismatch·mismatch_premium,
                   0.5, 1.75)

    Returns
    -------
    WageAdjustmentInfo or None
        None without household data or on a non-finite result.
    """
    if counts is None:
        return None

    workforce = max(1, counts.workable)
    employed = min(workforce, max(0, counts.employed))
    unemployment = 1.0 - employed / workforce

    skilled = max(0, counts.well_educated) + max(0, counts.highly_educated)
    low_skilled = max(0, counts.poorly_educated)
    skilled_share = skilled / workforce
    low_skill_share = low_skilled / workforce
    shortage = saturate(SKILLED_SHARE_TARGET - skilled_share)
    mismatch = saturate(low_skill_share - skilled_share)

    penalty = unemployment * max(0.0, cfg.unemployment_wage_penalty)
    premium = shortage * max(0.0, cfg.skill_shortage_premium)
    mismatch_premium = mismatch * max(0.0, cfg.education_mismatch_premium)
    raw = 1.0 - penalty + premium + mismatch_premium
    if not math.isfinite(raw):
        return None
    multiplier = clamp(raw, WAGE_MULTIPLIER_MIN, WAGE_MULTIPLIER_MAX)

    log.debug(
        f"Wage data: workforce={workforce}, employed={employed}, "
        f"unemployment={unemployment:.1%}, skilled={skilled_share:.1%}, "
        f"low_skill={low_skill_share:.1%}, multiplier={multiplier:.3f}"
    )
    return WageAdjustmentInfo(
        workforce=workforce,
        employed=employed,
        unemployment_rate=unemployment,
        skilled_share=skilled_share,
        low_skill_share=low_skill_share,
        skill_shortage=shortage,
        education_mismatch=mismatch,
        penalty=penalty,
        premium=premium,
        mismatch_premium=mismatch_premium,
        multiplier=multiplier,
    )


# ── baseline ──────────────────────────────────────────────────────────────
def capture_baseline(baseline: WageBaseline, data: WageBandAccessor) -> None:
    """Copy the host wage bands into the baseline (unconditionally)."""
    for level in range(N_WAGE_LEVELS):
        baseline.wages[level] = int(data.get_wage(level))
    baseline.last_applied[:] = baseline.wages
    baseline.last_multiplier = 1.0
    baseline.initialized = True
    log.info(f"Captured baseline wages: {tuple(int(w) for w in baseline.wages)}")


def ensure_baseline(baseline: WageBaseline, data: WageBandAccessor) -> bool:
    """
    Capture the baseline unless one is already held.

    Returns
    -------
    bool
        True if captured now, False if a baseline already existed.
    """
    if baseline.initialized:
        return False
    capture_baseline(baseline, data)
    return True


def restore_baseline(baseline: WageBaseline, data: WageBandAccessor) -> bool:
    """
    Write the captured baseline back into the host wage bands.

    Returns
    -------
    bool
        False (and no write) when no baseline is held.
    """
    if not baseline.initialized:
        return False
    for level in range(N_WAGE_LEVELS):
        data.set_wage(level, int(baseline.wages[level]))
    baseline.last_applied[:] = baseline.wages
    baseline.last_multiplier = 1.0
    return True


def clear_baseline(baseline: WageBaseline) -> None:
    """Forget the baseline (engine teardown / wages disabled)."""
    baseline.wages.fill(0)
    baseline.last_applied.fill(0)
    baseline.last_multiplier = 1.0
    baseline.initialized = False


# ── applying ──────────────────────────────────────────────────────────────
def adjust_level(baseline: WageBaseline, level: int, multiplier: float) -> int:
    """``max(1, round(baseline[level] · multiplier))``"""
    adjusted = max(1, round(int(baseline.wages[level]) * multiplier))
    baseline.last_applied[level] = adjusted
    return adjusted


def apply_adjusted_wages(
    baseline: WageBaseline,
    data: WageBandAccessor,
    info: WageAdjustmentInfo | None,
) -> None:
    """
    Set every wage band to its baseline scaled by ``info.multiplier``.

    Captures the baseline first if needed. Without statistics the baseline
    is restored instead of guessing.
    """
    ensure_baseline(baseline, data)
    if info is None or not math.isfinite(info.multiplier):
        restore_baseline(baseline, data)
        return

    for level in range(N_WAGE_LEVELS):
        data.set_wage(level, adjust_level(baseline, level, info.multiplier))
    baseline.last_multiplier = info.multiplier
    log.debug(
        f"Applied wage multiplier {info.multiplier:.2f} -> "
        f"wages={tuple(int(w) for w in baseline.last_applied)} "
        f"baseline={tuple(int(w) for w in baseline.wages)}"
    )


def apply_wage_multiplier(current_wage: int, info: WageAdjustmentInfo | None) -> int:
    """Scale a single wage: ``max(1, int(wage · multiplier))``; identity without data."""
    if info is None or not math.isfinite(info.multiplier):
        return current_wage
    return int(max(1.0, current_wage * info.multiplier))
