"""
Market pricing and sale settlement events.

Folds each resource's ledger signal into the cached price multiplier and
tracks external trade reference prices. The per-sale price itself is
computed at the call-site (``Engine.compute_price``) because the vanilla
price is only known there.
Producers opted into engine-settled sales are paid at that price by
:class:`SettleMarketSales`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from marketeconomy.core.decorators import event

if TYPE_CHECKING:
    from marketeconomy.engine import Engine


@event
class UpdateMarketPrices:
    """
    Refresh the per-resource multiplier cache.

    Rule
    ----
        m_r = clamp(lerp(m_r, clamp(D_r / S_r, lo, hi), smoothing), lo, hi)

    S, D: Ledger Supply / Demand (floored at 1), lo/hi: Price Multiplier Band

    Resources without ledger entries keep their cached multiplier.
    """

    flag = "pricing"

    def execute(self, engine: Engine) -> None:
        from marketeconomy import logging
        from marketeconomy.resources import Resource, is_tradeable
        from marketeconomy.systems.market import (
            get_or_update_multiplier,
            update_external_bounds,
        )

        logger = self.get_logger()
        ledger, book, cfg = engine.ledger, engine.price_book, engine.config
        refreshed = 0

        for resource in Resource:
            if not is_tradeable(resource):
                continue
            signal = engine.gateway.resource_signal(resource)
            external = update_external_bounds(book, resource, signal)

            if not ledger.touched[int(resource)]:
                continue
            supply = float(ledger.supply[int(resource)])
            demand = float(ledger.demand[int(resource)])
            multiplier = get_or_update_multiplier(ledger, book, resource, cfg)
            refreshed += 1

            engine.trace.record(
                engine.tick,
                "multiplier",
                resource.name,
                supply=supply,
                demand=demand,
                multiplier=multiplier,
                external_price=external,
            )
            if logger.isEnabledFor(logging.DEEP_DEBUG):
                logger.deep(
                    f"{resource.name}: supply={supply:.1f} demand={demand:.1f} "
                    f"multiplier={multiplier:.3f}"
                )

        logger.debug(f"Refreshed {refreshed} price multipliers")


@event
class SettleMarketSales:
    """
    Produce output and sell stock at the current market price.

    Rule
    ----
        produced = whole units of acc + employees · rate / ticks_per_day
        sale     = min(clamp(stock + produced, min_sale, max_sale), batch)
        price    = elastic(I + S)  (weight > 0)  or  S · m  (weight == 0)
        stock -= sale,  money += round(price · sale)

    I, S: Vanilla industrial / service price parts, m: Cached multiplier

    Sales of material goods are registered as equal supply and demand so
    the ledger sees traded volume.
    """

    flag = "market_sales"

    def execute(self, engine: Engine) -> None:
        from marketeconomy.errors import MissingDependencyError
        from marketeconomy.resources import PriceComponent, Resource, is_tradeable
        from marketeconomy.systems.sales import (
            desired_output_per_tick,
            quote_sale,
            sale_amount,
        )

        logger = self.get_logger()
        views = engine.gateway.producers()
        if views is None:
            return

        cfg = engine.config
        tracker = engine.production
        sold = revenue = 0

        for view in views:
            resource = view.output_resource
            if resource is None or not is_tradeable(resource):
                continue

            state = tracker.get(view.entity)
            carried = state.accumulator
            desired = desired_output_per_tick(view, cfg)
            produced = state.accumulate(desired)
            if produced > 0:
                try:
                    engine.gateway.transfer(view.entity, resource, produced)
                except MissingDependencyError as exc:
                    state.accumulator = carried
                    logger.warning(f"Output of {view.entity} deferred: {exc}")
                    continue

            amount = sale_amount(view.stock + produced, produced, desired, view.batch_size, cfg)
            if amount == 0:
                continue

            industrial = max(0.0, view.industrial_price)
            service = max(0.0, view.service_price)
            if view.output_weight == 0:
                unit = engine.adjust_price_component(
                    resource, industrial, service, PriceComponent.SERVICE
                )
            else:
                unit = engine.compute_price(resource, industrial + service)
            quote = quote_sale(amount, unit)
            if quote is None:
                continue

            try:
                engine.gateway.transfer(view.entity, resource, -quote.amount)
                engine.gateway.transfer(view.entity, Resource.MONEY, quote.revenue)
            except MissingDependencyError as exc:
                logger.warning(f"Sale of {view.entity} skipped: {exc}")
                continue

            if view.output_weight != 0:
                engine.register_supply(resource, quote.amount)
                engine.register_demand(resource, quote.amount)
            sold += 1
            revenue += quote.revenue

            engine.trace.record(
                engine.tick,
                "sale",
                view.entity,
                resource=resource.name,
                produced=produced,
                amount=quote.amount,
                unit_price=quote.unit_price,
                revenue=quote.revenue,
            )

        pruned = tracker.prune(view.entity for view in views)
        logger.debug(f"Producers: seen={len(views)}, sold={sold}, revenue={revenue}, pruned={pruned}")
