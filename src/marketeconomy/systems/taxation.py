"""
Company profit/tax adjuster.

Replaces the host's revenue-based taxable income with a profit-minus-rent
figure and blends an area tax rate into each company's average rate.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from marketeconomy.config import Config
from marketeconomy.host import CompanyView, TaxArea
from marketeconomy.roles import CompanyFinanceState
from marketeconomy.systems.pricing import lerp

TAX_RATE_MIN = 0
TAX_RATE_MAX = 100


class SkipReason:
    NO_EMPLOYEE_BUFFER = "no_employee_buffer"
    EMPTY_EMPLOYEES = "empty_employees"
    NO_PROCESS_DATA = "no_process_data"
    WRONG_CATEGORY = "wrong_category"
    ABANDONED_PROPERTY = "abandoned_property"
    NO_PROFIT_FORMULA = "no_profit_formula"


def skip_reason(company: CompanyView) -> str | None:
    """Why a company is not adjusted this tick, or None if it is eligible."""
    if company.employees is None:
        return SkipReason.NO_EMPLOYEE_BUFFER
    if company.employees <= 0:
        return SkipReason.EMPTY_EMPLOYEES
    if company.output_resource is None:
        return SkipReason.NO_PROCESS_DATA
    if not (company.is_industrial or company.is_service):
        return SkipReason.WRONG_CATEGORY
    if company.abandoned:
        return SkipReason.ABANDONED_PROPERTY
    return None


def classify_tax_area(company: CompanyView) -> tuple[TaxArea, object]:
    """
    Tax area and district used to look up the company's rate.

    Zero-weight output is taxed as office, other industrial output as
    industrial, everything else as commercial. The district is only passed
    on for commercial companies (district modifiers apply there).
    """
    if company.output_weight == 0.0:
        return TaxArea.OFFICE, None
    if company.is_industrial:
        return TaxArea.INDUSTRIAL, None
    return TaxArea.COMMERCIAL, company.district


@dataclass(slots=True, frozen=True)
class TaxAdjustment:
    """Result of :func:`adjust_company_tax` for one company."""

    profit_per_tick: int
    rent_per_tick: int
    net_income: int
    vanilla_delta: int
    adjustment: int
    untaxed_income: int
    average_tax_rate: int
    weight: float = 0.0


def per_tick_income(
    profit_per_day: float, rent: int, cfg: Config, rent_per_tick: int | None = None
) -> tuple[int, int, int]:
    """
    Convert daily profit and rent into per-tick figures.

    *rent_per_tick*, when given, replaces the rounded per-tick rent (used
    with fractional rent carry).

    Returns
    -------
    tuple[int, int, int]
        ``(profit_per_tick, rent_per_tick, net_income)``
    """
    if not math.isfinite(profit_per_day):
        profit_per_day = 0.0
    profit = max(0, int(profit_per_day / max(1, cfg.company_updates_per_day)))
    if rent_per_tick is not None:
        rent_tick = max(0, rent_per_tick)
    elif rent > 0:
        rent_tick = round(rent / max(1, cfg.rent_updates_per_day))
    else:
        rent_tick = 0
    return profit, rent_tick, max(0, profit - rent_tick)


def adjust_company_tax(
    company: CompanyView,
    state: CompanyFinanceState,
    profit_per_day: float,
    area_rate: int | None,
    cfg: Config,
    rent_per_tick: int | None = None,
) -> TaxAdjustment:
    """
    Recompute one company's taxable income and average tax rate.

    Rule
    ----
        π   = max(0, trunc(profit_per_day / updates_per_day))
        ρ   = round(rent / rent_updates_per_day)
        N   = max(0, π - ρ)
        Δv  = untaxed_now - untaxed_last
        U'  = max(0, untaxed_now + (N - Δv))
        N > 0:  w  = N / max(1, N + untaxed_last)
                T' = clamp(round(lerp(T_prev, area_rate, w)), 0, 100)

    ``T_prev`` is the last rate the engine stored, or the area rate for a
    company seen for the first time. *state* is read only; the caller
    persists the result with ``state.sync_caches`` once the host accepted it.
    """
    profit, rent_tick, net = per_tick_income(
        profit_per_day, company.rent, cfg, rent_per_tick
    )
    previous_untaxed = state.last_untaxed_income
    vanilla_delta = company.untaxed_income - previous_untaxed
    adjustment = net - vanilla_delta

    untaxed = company.untaxed_income
    if adjustment != 0:
        untaxed = max(0, untaxed + adjustment)

    average = company.average_tax_rate
    weight = 0.0
    if net > 0 and area_rate is not None:
        weight = net / max(1, net + previous_untaxed)
        previous_average = state.last_average_tax_rate if state.initialized else area_rate
        blended = round(lerp(previous_average, area_rate, weight))
        average = min(max(blended, TAX_RATE_MIN), TAX_RATE_MAX)

    return TaxAdjustment(
        profit_per_tick=profit,
        rent_per_tick=rent_tick,
        net_income=net,
        vanilla_delta=vanilla_delta,
        adjustment=adjustment,
        untaxed_income=untaxed,
        average_tax_rate=average,
        weight=weight,
    )


@dataclass(slots=True)
class TaxTickSummary:
    """Counters of one company-profit tick."""

    total: int = 0
    processed: int = 0
    skipped: dict[str, int] = field(default_factory=dict)

    def skip(self, reason: str) -> None:
        self.skipped[reason] = self.skipped.get(reason, 0) + 1

    def __str__(self) -> str:
        parts = ", ".join(f"{k}={v}" for k, v in sorted(self.skipped.items()))
        return f"total={self.total}, processed={self.processed}" + (
            f", {parts}" if parts else ""
        )
