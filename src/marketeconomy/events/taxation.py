"""
Company profit/tax event.

Runs before the host collects taxes. Inert unless ``company_profit`` is
enabled.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from marketeconomy.core.decorators import event

if TYPE_CHECKING:
    from marketeconomy.engine import Engine


@event
class AdjustCompanyProfits:
    """
    Replace revenue-based taxable income with profit minus rent.

    Rule
    ----
        N  = max(0, profit_per_tick - rent_per_tick)
        U' = max(0, U + N - (U - U_last))
        T' = round(lerp(T_last, T_area, N / max(1, N + U_last)))   if N > 0

    U: Untaxed Income, T: Average Tax Rate
    """

    flag = "company_profit"

    def execute(self, engine: Engine) -> None:
        from marketeconomy.errors import MissingDependencyError
        from marketeconomy.systems.taxation import (
            SkipReason,
            TaxTickSummary,
            adjust_company_tax,
            classify_tax_area,
            per_tick_income,
            skip_reason,
        )

        logger = self.get_logger()
        companies = engine.gateway.taxpayers()
        if companies is None:
            return

        cfg = engine.config
        tracker = engine.companies
        summary = TaxTickSummary(total=len(companies))

        for company in companies:
            reason = skip_reason(company)
            if reason is not None:
                summary.skip(reason)
                continue

            profit_per_day = engine.gateway.company_profit_per_day(company)
            if profit_per_day is None:
                summary.skip(SkipReason.NO_PROFIT_FORMULA)
                continue

            state = tracker.get(company.entity)
            rent_tick: int | None = None
            rent_carry = state.rent_accumulator
            if cfg.rent_carry_fraction:
                rent_tick, rent_carry = state.rent_due(
                    company.rent, cfg.rent_updates_per_day
                )

            area_rate = None
            _, _, net = per_tick_income(profit_per_day, company.rent, cfg, rent_tick)
            if net > 0:
                area, district = classify_tax_area(company)
                area_rate = engine.gateway.tax_rate(area, company.output_resource, district)

            result = adjust_company_tax(
                company, state, profit_per_day, area_rate, cfg, rent_tick
            )
            try:
                engine.gateway.set_taxpayer(
                    company.entity, result.untaxed_income, result.average_tax_rate
                )
            except MissingDependencyError as exc:
                logger.warning(f"Tax update for {company.entity} skipped: {exc}")
                continue
            state.sync_caches(result.untaxed_income, result.average_tax_rate)
            state.rent_accumulator = rent_carry
            summary.processed += 1

            engine.trace.record(
                engine.tick,
                "tax",
                company.entity,
                profit_per_tick=result.profit_per_tick,
                rent_per_tick=result.rent_per_tick,
                net_income=result.net_income,
                vanilla_delta=result.vanilla_delta,
                adjustment=result.adjustment,
                untaxed=result.untaxed_income,
                average_tax_rate=result.average_tax_rate,
                weight=result.weight,
            )

        tracker.prune(company.entity for company in companies)
        engine.last_tax_summary = summary
        logger.debug(f"Company profit adjustment: {summary}")
