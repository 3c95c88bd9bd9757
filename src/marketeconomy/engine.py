"""
Engine facade.

An :class:`Engine` owns one economic state space (ledger, price book, wage
baseline, per-entity trackers), drives it through the event pipeline once
per host tick and exposes the call-sites the host invokes in between
(price, price component, wage, ledger registration).

Nothing in here raises into the host: each call-site runs under a guard
that logs the exception and hands back the vanilla value.
"""

from __future__ import annotations

import dataclasses
import math
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

import marketeconomy.events  # noqa: F401 - needed to register events
from marketeconomy.config import Config, ConfigValidator, build_config, load_config
from marketeconomy.core.pipeline import Pipeline
from marketeconomy.diagnostics import AnalyticsRecorder, DiagnosticsTrace
from marketeconomy.errors import InsufficientDataError, InvalidNumericError
from marketeconomy.host import EconomyHost, HostGateway, MarketTransaction
from marketeconomy.logging import configure_logging, getLogger
from marketeconomy.resources import PriceComponent, Resource
from marketeconomy.roles import (
    CompanyFinanceState,
    EntityTracker,
    MarketLedger,
    PriceBook,
    ProductionState,
    WageBaseline,
    WorkplaceState,
)
from marketeconomy.systems import labor_market, market
from marketeconomy.systems.labor_market import WageAdjustmentInfo
from marketeconomy.systems.market import MarketSnapshot
from marketeconomy.systems.pricing import (
    clamp,
    compute_elastic_price,
    education_multiplier,
)
from marketeconomy.systems.taxation import TaxTickSummary

__all__ = ["FEATURES", "Engine"]

log = getLogger(__name__)

# feature name -> Config flag
FEATURES: dict[str, str] = {
    "pricing": "enable_pricing",
    "wages": "enable_wages",
    "utilization": "enable_utilization",
    "company_profit": "enable_company_profit",
    "market_sales": "enable_market_sales",
}


def _vanilla_component(
    industrial: float, service: float, component: PriceComponent | str
) -> float:
    if component == PriceComponent.INDUSTRIAL:
        return industrial
    if component == PriceComponent.SERVICE:
        return service
    return industrial + service


@dataclass(slots=True)
class Engine:
    """
    Adaptive regulation engine embedded in one host simulation.

    One call to `run` → *n* calls to `step`; call-sites may be invoked any
    number of times between steps.

    Attributes
    ----------
    config : Config
        Immutable configuration; replace with :meth:`use_config`.
    gateway : HostGateway
        Dependency-aware access to the host.
    pipeline : Pipeline
        Tick steps in execution order. May be edited between ticks.
    ledger, price_book : MarketLedger, PriceBook
        Per-resource market state.
    wage_baseline : WageBaseline
        Captured vanilla wage bands.
    workplaces, companies, production : EntityTracker
        Per-entity state, pruned against the entities the host reports.
    trace : DiagnosticsTrace
        Bounded diagnostic history.
    analytics : AnalyticsRecorder
        Capped wage/price sample history.
    tick : int
        Number of completed steps.
    """

    config: Config
    gateway: HostGateway
    pipeline: Pipeline
    ledger: MarketLedger
    price_book: PriceBook
    wage_baseline: WageBaseline
    workplaces: EntityTracker[WorkplaceState]
    companies: EntityTracker[CompanyFinanceState]
    production: EntityTracker[ProductionState]
    trace: DiagnosticsTrace
    analytics: AnalyticsRecorder
    tick: int = 0
    wage_info: WageAdjustmentInfo | None = None
    last_tax_summary: TaxTickSummary | None = None
    _enabled: set[str] = field(default_factory=set, repr=False)
    _wage_restore_pending: bool = field(default=False, repr=False)

    # construction
    # ---------------------------------------------------------------------
    @classmethod
    def init(
        cls,
        config: str | Path | Mapping[str, Any] | None = None,
        *,
        host: EconomyHost,
        pipeline_path: str | Path | None = None,
        **overrides: Any,  # anything here wins last
    ) -> Engine:
        """
        Build an Engine bound to *host*.

        Order of precedence (later overrides earlier):

            1. package defaults  (marketeconomy/defaults.yml)
            2. *config*  (Path / str / Mapping / None)
            3. explicit keyword arguments (**overrides)

        *pipeline_path* replaces ``default_pipeline.yml`` with a custom
        event order; it is validated before any event is built.

        Raises
        ------
        ConfigurationError
            If *overrides* or the pipeline file are invalid. A broken
            *config* file only warns.

        Examples
        --------
        >>> engine = Engine.init(host=my_host, sensitivity=0.4)  # doctest: +SKIP
        >>> engine.step()  # doctest: +SKIP
        """
        cfg = load_config(config, **overrides)
        configure_logging(cfg.logging)

        if pipeline_path is not None:
            ConfigValidator.validate_pipeline_yaml(str(pipeline_path))
            pipeline = Pipeline.from_yaml(pipeline_path)
        else:
            pipeline = Pipeline.default()

        engine = cls(
            config=cfg,
            gateway=HostGateway(host),
            pipeline=pipeline,
            ledger=MarketLedger.empty(),
            price_book=PriceBook.empty(),
            wage_baseline=WageBaseline.empty(),
            workplaces=EntityTracker(WorkplaceState),
            companies=EntityTracker(CompanyFinanceState),
            production=EntityTracker(ProductionState),
            trace=DiagnosticsTrace(cfg.trace_capacity),
            analytics=AnalyticsRecorder(cfg.analytics_max_samples),
        )
        engine._enabled = {name for name, flag in FEATURES.items() if getattr(cfg, flag)}
        log.info(
            f"Engine initialised: features={sorted(engine._enabled)}, "
            f"pipeline={engine.pipeline.names}"
        )
        return engine

    # tick
    # ---------------------------------------------------------------------
    def step(self) -> list[str]:
        """
        Advance the engine by one host tick.

        Returns
        -------
        list[str]
            Names of events that failed this tick (their effects fall back
            to vanilla behaviour).
        """
        self.tick += 1
        if self._wage_restore_pending and not self.is_enabled("wages"):
            self._release_wages()
        failed = self.pipeline.execute(self)
        if failed:
            log.warning(f"Tick {self.tick}: events failed: {failed}")
        return failed

    def run(self, n_ticks: int) -> None:
        """Call :meth:`step` *n_ticks* times."""
        for _ in range(int(n_ticks)):
            self.step()

    # features
    # ---------------------------------------------------------------------
    def is_enabled(self, name: str) -> bool:
        return name in self._enabled

    @staticmethod
    def _check_feature(name: str) -> None:
        if name not in FEATURES:
            raise ValueError(
                f"Unknown feature '{name}'. Available features: {list(FEATURES)}"
            )

    def enable(self, name: str) -> None:
        """
        Enable a sub-engine (``pricing``, ``wages``, ``utilization``,
        ``company_profit``, ``market_sales``).

        Raises
        ------
        ValueError
            If *name* is not a known feature.
        """
        self._check_feature(name)
        if name == "wages" and self._wage_restore_pending:
            # the held baseline is reused, so nothing compounds
            self._wage_restore_pending = False
            log.info("Pending wage restore cancelled; keeping captured baseline")
        self._enabled.add(name)
        log.info(f"Feature '{name}' enabled")

    def disable(self, name: str) -> None:
        """
        Disable a sub-engine.

        Disabling ``wages`` writes the captured baseline back into the host
        wage bands and forgets it; the next enabled tick captures afresh.
        If the wage bands cannot be written, the baseline is kept and the
        restore is retried on every following :meth:`step`.

        Raises
        ------
        ValueError
            If *name* is not a known feature.
        """
        self._check_feature(name)
        if name == "wages":
            self._release_wages()
        self._enabled.discard(name)
        log.info(f"Feature '{name}' disabled")

    def _release_wages(self) -> bool:
        """Restore and forget the baseline; keep it pending if the host is unavailable."""
        self.wage_info = None
        restored = not self.wage_baseline.initialized
        if not restored:
            try:
                data = self.gateway.economy_parameters()
                if data is not None:
                    restored = labor_market.restore_baseline(self.wage_baseline, data)
            except Exception:
                log.exception("Could not restore baseline wages")

        if not restored:
            if not self._wage_restore_pending:
                log.warning("Wage bands unavailable; baseline kept until restore succeeds")
            self._wage_restore_pending = True
            return False

        if self._wage_restore_pending:
            log.info("Pending baseline wage restore completed")
        labor_market.clear_baseline(self.wage_baseline)
        self._wage_restore_pending = False
        return True

    def use_config(self, **overrides: Any) -> Config:
        """
        Rebuild the configuration with *overrides* applied.

        Feature flags among *overrides* enable/disable the matching
        sub-engine. Call between ticks.

        Raises
        ------
        ConfigurationError
            If the resulting configuration is invalid (the current one is
            kept).
        """
        current = {f.name: getattr(self.config, f.name) for f in dataclasses.fields(Config)}
        current["neutral_categories"] = sorted(c.value for c in self.config.neutral_categories)
        cfg = build_config({**current, **overrides})

        self.config = cfg
        configure_logging(cfg.logging)
        if cfg.trace_capacity != self.trace.capacity:
            self.trace = DiagnosticsTrace(cfg.trace_capacity)
        self.analytics.max_samples = cfg.analytics_max_samples
        for name, flag in FEATURES.items():
            if flag not in overrides:
                continue
            if getattr(cfg, flag):
                self.enable(name)
            else:
                self.disable(name)
        return cfg

    def teardown(self) -> None:
        """Disable every sub-engine, restoring vanilla wages."""
        for name in list(FEATURES):
            if self.is_enabled(name):
                self.disable(name)
            elif name == "wages" and self._wage_restore_pending:
                self._release_wages()
        self.workplaces.clear()
        self.companies.clear()
        self.production.clear()

    def reset_world(self) -> None:
        """Forget all economic state, e.g. when the host loads another world."""
        self.ledger = MarketLedger.empty()
        self.price_book = PriceBook.empty()
        labor_market.clear_baseline(self.wage_baseline)
        self._wage_restore_pending = False
        self.workplaces.clear()
        self.companies.clear()
        self.production.clear()
        self.trace.clear()
        self.analytics.clear()
        self.wage_info = None
        self.last_tax_summary = None
        self.tick = 0
        log.info("World state reset")

    # call-sites
    # ---------------------------------------------------------------------
    def compute_price(self, resource: Resource | int, vanilla_price: float) -> float:
        """
        Market-adjusted price of one unit of *resource*.

        Returns *vanilla_price* unchanged when pricing is disabled, no
        supply/demand data exist, or anything goes wrong.
        """
        if not self.is_enabled("pricing"):
            return vanilla_price
        try:
            return self._compute_price(Resource(resource), float(vanilla_price))
        except InsufficientDataError:
            return vanilla_price
        except InvalidNumericError as exc:
            log.debug(f"{exc}; using vanilla price")
            return vanilla_price
        except Exception:
            log.exception(f"Elastic price for {resource} failed; using vanilla price")
            return vanilla_price

    def _compute_price(self, resource: Resource, vanilla: float) -> float:
        cfg = self.config
        signal = self.gateway.resource_signal(resource)
        pair = market.try_supply_demand(
            self.ledger, resource, cfg, signal, self.price_book, tick=self.tick
        )
        if pair is None:
            raise InsufficientDataError(f"No supply/demand data for {resource.name}")

        price, metrics = compute_elastic_price(resource, vanilla, pair[0], pair[1], cfg)
        if metrics.bypass == "non_finite":
            raise InvalidNumericError(f"Non-finite price term for {resource.name}")
        if metrics.bypass is not None:
            return vanilla

        factor = 1.0
        if cfg.education_pricing:
            factor = education_multiplier(self.gateway.household_counts(), cfg)
            price = clamp(price * factor, metrics.min_price, metrics.max_price)
        if not math.isfinite(price):
            raise InvalidNumericError(
                f"Non-finite education-adjusted price for {resource.name}"
            )

        self.trace.record(
            self.tick,
            "price",
            resource.name,
            vanilla=vanilla,
            supply=metrics.supply,
            demand=metrics.demand,
            elastic=metrics.elastic_price,
            education=factor,
            final=price,
        )
        self.analytics.record_price(self.tick, resource, price)
        return price

    def adjust_price_component(
        self,
        resource: Resource | int,
        industrial: float,
        service: float,
        component: PriceComponent | str = PriceComponent.MARKET,
    ) -> float:
        """
        Split-price call-site: scale industrial/service parts by the cached
        multiplier and return the requested component.
        """
        if not self.is_enabled("pricing"):
            return _vanilla_component(industrial, service, component)
        try:
            return market.adjust_price_component(
                self.price_book, Resource(resource), industrial, service, component, self.config
            )
        except Exception:
            log.exception(f"Price component for {resource} failed; using vanilla price")
            return _vanilla_component(industrial, service, component)

    def compute_wage(self, current_wage: int) -> int:
        """Scale one worker's wage by the current wage multiplier."""
        if not self.is_enabled("wages"):
            return current_wage
        try:
            return labor_market.apply_wage_multiplier(int(current_wage), self.wage_info)
        except Exception:
            log.exception("Wage adjustment failed; using vanilla wage")
            return current_wage

    def register_supply(self, resource: Resource | int, amount: float) -> bool:
        """Add *amount* to the resource's supply accumulator."""
        if not self.is_enabled("pricing"):
            return False
        try:
            return market.register_supply(
                self.ledger, Resource(resource), amount, tick=self.tick
            )
        except Exception:
            log.exception(f"Supply registration for {resource} failed")
            return False

    def register_demand(self, resource: Resource | int, amount: float) -> bool:
        """Add *amount* to the resource's demand accumulator."""
        if not self.is_enabled("pricing"):
            return False
        try:
            return market.register_demand(
                self.ledger, Resource(resource), amount, tick=self.tick
            )
        except Exception:
            log.exception(f"Demand registration for {resource} failed")
            return False

    def register_transactions(self, batch: Iterable[MarketTransaction]) -> int:
        """Fold a batch of transactions into the ledger; returns the count applied."""
        if not self.is_enabled("pricing"):
            return 0
        try:
            return market.register_transactions(self.ledger, batch, tick=self.tick)
        except Exception:
            log.exception("Transaction batch registration failed")
            return 0

    # inspection
    # ---------------------------------------------------------------------
    def snapshot(self, resource: Resource | int) -> MarketSnapshot | None:
        """
        Current market view of *resource* (host signal plus cached state).

        Returns None for an unknown resource id or when the view cannot be
        built.
        """
        try:
            resource = Resource(resource)
        except ValueError:
            log.debug(f"No market snapshot for unknown resource {resource!r}")
            return None
        try:
            signal = self.gateway.resource_signal(resource)
            return market.snapshot(
                self.ledger, self.price_book, resource, signal, tick=self.tick
            )
        except Exception:
            log.exception(f"Market snapshot for {resource} failed")
            return None

    def get_role(self, name: str) -> Any:
        """
        Get a state container by name (case-insensitive).

        Raises
        ------
        ValueError
            If role name not found.
        """
        role_map = {
            "marketledger": self.ledger,
            "pricebook": self.price_book,
            "wagebaseline": self.wage_baseline,
            "workplaces": self.workplaces,
            "companies": self.companies,
            "production": self.production,
        }
        key = name.lower().replace("_", "")
        if key not in role_map:
            raise ValueError(
                f"Role '{name}' not found. Available roles: "
                "['MarketLedger', 'PriceBook', 'WageBaseline', "
                "'Workplaces', 'Companies', 'Production']"
            )
        return role_map[key]

    def get_event(self, name: str) -> Any:
        """
        Get event instance from pipeline by name.

        Raises
        ------
        KeyError
            If event not found in pipeline.
        """
        for event in self.pipeline.events:
            if event.name == name:
                return event
        raise KeyError(
            f"Event '{name}' not found in pipeline. Available: {self.pipeline.names}"
        )
