"""Unit tests for the per-tick events, run one at a time against FakeHost."""

import pytest

from marketeconomy.host import ResourceSignal
from marketeconomy.resources import Resource
from marketeconomy.systems.taxation import SkipReason
from tests.helpers.factories import (
    FakeHost,
    make_engine,
    mock_company,
    mock_producer,
    mock_workplace,
)


def run_event(engine, name):
    engine.tick += 1
    engine.get_event(name).execute(engine)


# ── adjust_wages ──────────────────────────────────────────────────────────
class TestAdjustWages:
    def test_rewrites_bands_and_records(self, engine, host):
        run_event(engine, "adjust_wages")

        assert host.parameters.wages == [1176, 1960, 2450, 2940, 3430]
        assert engine.wage_info.multiplier == pytest.approx(0.98)
        assert engine.analytics.wage_samples[-1].levels == (1176, 1960, 2450, 2940, 3430)
        record = engine.trace.last("wages")
        assert record.values["multiplier"] == pytest.approx(0.98)
        assert record.values["wages"] == (1176, 1960, 2450, 2940, 3430)

    def test_without_parameters_does_nothing(self):
        engine = make_engine(FakeHost(parameters=None))
        run_event(engine, "adjust_wages")
        assert engine.wage_info is None
        assert not engine.wage_baseline.initialized
        assert engine.analytics.wage_samples == []

    def test_without_statistics_restores_baseline(self, engine, host):
        run_event(engine, "adjust_wages")
        host.counts = None
        run_event(engine, "adjust_wages")

        assert host.parameters.wages == [1200, 2000, 2500, 3000, 3500]
        assert engine.wage_info is None
        assert engine.trace.last("wages").values == {"restored": True}


# ── update_market_prices ──────────────────────────────────────────────────
class TestUpdateMarketPrices:
    def test_folds_only_touched_resources(self, engine):
        engine.register_supply(Resource.COAL, 100.0)
        engine.register_demand(Resource.COAL, 120.0)
        engine.price_book.multiplier[int(Resource.ORE)] = 1.7

        run_event(engine, "update_market_prices")

        assert engine.price_book.multiplier[int(Resource.COAL)] == pytest.approx(1.2)
        assert engine.price_book.multiplier[int(Resource.ORE)] == 1.7
        records = engine.trace.records("multiplier")
        assert [r.subject for r in records] == ["COAL"]
        assert records[0].values["supply"] == 100.0

    def test_tracks_external_reference_prices(self, engine, host):
        host.signals[Resource.FISH] = ResourceSignal(trade_balance=-4, trade_worth=-200)
        run_event(engine, "update_market_prices")
        host.signals[Resource.FISH] = ResourceSignal(trade_balance=5, trade_worth=300)
        run_event(engine, "update_market_prices")

        r = int(Resource.FISH)
        assert engine.price_book.external_floor[r] == 50.0
        assert engine.price_book.external_ceiling[r] == 60.0

    def test_sentinels_never_touched(self, engine, host):
        host.signals[Resource.MONEY] = ResourceSignal(trade_balance=1, trade_worth=1)
        run_event(engine, "update_market_prices")
        assert engine.price_book.multiplier[int(Resource.MONEY)] == 1.0


# ── enforce_workforce_utilization ─────────────────────────────────────────
class TestEnforceWorkforceUtilization:
    def test_clamps_and_tracks(self, engine, host):
        run_event(engine, "enforce_workforce_utilization")

        assert host.max_worker_writes == [(1, 5)]
        state = engine.workplaces.peek(1)
        assert state.max_workers == 5
        assert state.staffed_count == 2
        assert state.accumulated_maintenance == pytest.approx(230.0 / 32)
        assert engine.workplaces.peek(2).max_workers == 20

    def test_second_tick_does_not_rewrite(self, engine, host):
        run_event(engine, "enforce_workforce_utilization")
        run_event(engine, "enforce_workforce_utilization")
        assert host.max_worker_writes == [(1, 5)]

    def test_workplace_without_capacity_skipped(self, engine, host):
        host.workplace_views = [mock_workplace(9, capacity=None)]
        run_event(engine, "enforce_workforce_utilization")
        assert 9 not in engine.workplaces
        assert host.max_worker_writes == []

    def test_capacity_from_lot_data(self, engine, host):
        host.workplace_views = [
            mock_workplace(
                3, capacity=None, staffed=0, max_workers=40,
                lot_x=4, lot_y=4, max_workers_per_cell=2.0,
            )
        ]
        run_event(engine, "enforce_workforce_utilization")
        # capacity 32 -> ceil(0.25 · 32) = 8
        assert host.max_worker_writes == [(3, 8)]

    def test_failed_transfer_keeps_accumulator(self, host):
        engine = make_engine(host, maintenance_strict=True)
        host.missing.add("transfer")

        run_event(engine, "enforce_workforce_utilization")

        state = engine.workplaces.peek(1)
        assert state.maintenance_debt == 0
        assert state.accumulated_maintenance == pytest.approx(230.0 / 32)
        assert host.transfers == []

        host.missing.clear()
        run_event(engine, "enforce_workforce_utilization")
        assert host.transfers[0] == (1, Resource.MONEY, -14)
        assert engine.workplaces.peek(1).maintenance_debt == 14

    def test_unavailable_workplaces_keep_tracker(self, engine, host):
        run_event(engine, "enforce_workforce_utilization")
        host.missing.add("workplaces")
        run_event(engine, "enforce_workforce_utilization")
        assert len(engine.workplaces) == 2


# ── adjust_company_profits ────────────────────────────────────────────────
class TestAdjustCompanyProfits:
    def test_summary_counts_skips(self, engine, host):
        host.company_views = [
            mock_company(100),
            mock_company(102, employees=0),
            mock_company(103, abandoned=True),
            mock_company(104, is_industrial=False),
        ]
        run_event(engine, "adjust_company_profits")

        summary = engine.last_tax_summary
        assert summary.total == 4
        assert summary.processed == 1
        assert summary.skipped == {
            SkipReason.EMPTY_EMPLOYEES: 1,
            SkipReason.ABANDONED_PROPERTY: 1,
            SkipReason.WRONG_CATEGORY: 1,
        }
        assert [w[0] for w in host.taxpayer_writes] == [100]

    def test_missing_profit_formula_skips(self, engine, host):
        host.missing.add("company_profit_per_day")
        run_event(engine, "adjust_company_profits")
        assert engine.last_tax_summary.skipped == {SkipReason.NO_PROFIT_FORMULA: 2}
        assert host.taxpayer_writes == []

    def test_unavailable_taxpayers_is_noop(self, engine, host):
        host.missing.add("taxpayers")
        run_event(engine, "adjust_company_profits")
        assert engine.last_tax_summary is None

    def test_office_output_uses_office_rate(self, engine, host):
        host.company_views = [mock_company(100, output_weight=0.0)]
        run_event(engine, "adjust_company_profits")
        assert host.taxpayer_writes == [(100, 190, 9)]

    def test_no_rate_lookup_without_net_income(self, engine, host):
        host.profits[100] = 0.0
        host.company_views = [mock_company(100, average_tax_rate=14)]
        run_event(engine, "adjust_company_profits")

        assert host.tax_rate_queries == []
        assert host.taxpayer_writes == [(100, 0, 14)]

    def test_fractional_rent_is_carried(self, host):
        engine = make_engine(host, enable_company_profit=True, rent_carry_fraction=True)
        host.company_views = [mock_company(100, rent=40)]

        run_event(engine, "adjust_company_profits")
        assert engine.companies.peek(100).rent_accumulator == 0.5
        run_event(engine, "adjust_company_profits")

        rents = [r.values["rent_per_tick"] for r in engine.trace.records("tax", subject=100)]
        assert rents == [2, 3]
        assert engine.companies.peek(100).rent_accumulator == 0.0

    def test_trace_records_adjustment(self, engine):
        run_event(engine, "adjust_company_profits")
        record = engine.trace.records("tax", subject=100)[-1]
        assert record.values["net_income"] == 190
        assert record.values["rent_per_tick"] == 10
        assert record.values["weight"] == pytest.approx(1.0)


# ── settle_market_sales ───────────────────────────────────────────────────
class TestSettleMarketSales:
    def test_produces_and_sells_at_market_price(self, engine, host):
        host.producer_views = [mock_producer(200)]
        run_event(engine, "settle_market_sales")

        assert host.transfers == [
            (200, Resource.WOOD, 3),
            (200, Resource.WOOD, -20),
            (200, Resource.MONEY, 2000),
        ]
        r = int(Resource.WOOD)
        assert engine.ledger.supply[r] == 20.0
        assert engine.ledger.demand[r] == 20.0
        record = engine.trace.last("sale")
        assert record.subject == "200"
        assert record.values["revenue"] == 2000

    def test_elastic_price_raises_revenue(self, engine, host):
        host.producer_views = [mock_producer(200, output_resource=Resource.STEEL)]
        expected = engine.compute_price(Resource.STEEL, 100.0)
        assert expected > 100.0

        run_event(engine, "settle_market_sales")
        assert host.transfers[-1] == (200, Resource.MONEY, round(expected * 20))

    def test_immaterial_output_sold_at_service_price(self, engine, host):
        host.producer_views = host.producer_views[1:]
        engine.price_book.multiplier[int(Resource.SOFTWARE)] = 1.5
        run_event(engine, "settle_market_sales")

        assert host.transfers == [
            (201, Resource.SOFTWARE, -20),
            (201, Resource.MONEY, 900),
        ]
        assert not engine.ledger.touched[int(Resource.SOFTWARE)]

    def test_small_stock_is_kept(self, engine, host):
        host.producer_views = [mock_producer(200, employees=5, stock=0)]
        run_event(engine, "settle_market_sales")
        run_event(engine, "settle_market_sales")

        # 30/32 units a tick: one whole unit after two ticks, nothing sold
        assert host.transfers == [(200, Resource.WOOD, 1)]
        assert engine.production.peek(200).accumulator == 0.875

    def test_failed_output_write_keeps_accumulator(self, engine, host):
        host.producer_views = [mock_producer(200, employees=5, stock=0)]
        run_event(engine, "settle_market_sales")
        host.missing.add("transfer")
        run_event(engine, "settle_market_sales")

        assert engine.production.peek(200).accumulator == 0.9375
        assert host.transfers == []

    def test_unavailable_producers_keep_tracker(self, engine, host):
        run_event(engine, "settle_market_sales")
        assert len(engine.production) == 2
        host.missing.add("producers")
        run_event(engine, "settle_market_sales")
        assert len(engine.production) == 2

        host.missing.clear()
        host.producer_views = host.producer_views[:1]
        run_event(engine, "settle_market_sales")
        assert list(engine.production) == [200]
