"""
Host collaborator interface.

The engine never reaches into the city simulation directly. Everything it
reads or writes goes through an object implementing :class:`EconomyHost`.
Host methods may raise :class:`~marketeconomy.errors.MissingDependencyError`
when the backing subsystem is not available; :class:`HostGateway` turns
that into ``None``, warns once per dependency and
retries on the next call.

Record types
------------
ResourceSignal
    Aggregate per-resource economic data (production, consumption, trade,
    company workers).
HouseholdCounts
    Citywide workforce and education statistics.
WorkplaceView
    One workplace: staffing, capacity (or lot data to derive it).
CompanyView
    One taxpaying company: roster size, recipe output, rent, tax state.
ProducerView
    One producing company: output stock, recipe rate and vanilla price parts.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Protocol, TypeVar, runtime_checkable

from marketeconomy import logging
from marketeconomy.errors import MissingDependencyError
from marketeconomy.resources import Resource
from marketeconomy.typing import EntityId

log = logging.getLogger("marketeconomy.host")

T = TypeVar("T")

N_WAGE_LEVELS = 5


class TaxArea(str, Enum):
    """Tax classification of a company."""

    COMMERCIAL = "commercial"
    INDUSTRIAL = "industrial"
    OFFICE = "office"


@dataclass(slots=True, frozen=True)
class ResourceSignal:
    """
    Aggregate economic data for one resource.

    ``production`` / ``consumption`` are the preferred supply/demand source.
    When the host cannot provide them, the (current, max) worker pairs of
    processing and service companies stand in: current workers as supply,
    worker demand as demand.
    """

    production: float | None = None
    consumption: float | None = None
    trade_balance: int = 0
    trade_worth: int = 0
    processing_workers: tuple[int, int] = (0, 0)
    service_workers: tuple[int, int] = (0, 0)
    processing_companies: int = 0
    service_companies: int = 0

    def supply_demand(self) -> tuple[float, float] | None:
        """Return raw (supply, demand) or None when the signal carries neither."""
        if self.production is not None and self.consumption is not None:
            s, d = float(self.production), float(self.consumption)
            if math.isfinite(s) and math.isfinite(d):
                return s, d
        workers_s = self.processing_workers[0] + self.service_workers[0]
        workers_d = self.processing_workers[1] + self.service_workers[1]
        if workers_s > 0 or workers_d > 0:
            return float(workers_s), float(workers_d)
        return None


@dataclass(slots=True, frozen=True)
class HouseholdCounts:
    """Citywide workforce statistics."""

    workable: int
    employed: int
    uneducated: int = 0
    poorly_educated: int = 0
    educated: int = 0
    well_educated: int = 0
    highly_educated: int = 0


@dataclass(slots=True, frozen=True)
class WorkplaceView:
    """
    One workplace as seen by the utilization enforcer.

    ``capacity`` is the maximum staffing the building supports. When the
    host leaves it as ``None`` it is derived from the lot data with
    :func:`marketeconomy.systems.workforce.fitting_workers`.
    """

    entity: EntityId
    staffed: int
    max_workers: int
    capacity: int | None = None
    lot_x: int = 0
    lot_y: int = 0
    level: int = 0
    max_workers_per_cell: float = 0.0
    space_multiplier: float = 1.0


@dataclass(slots=True, frozen=True)
class CompanyView:
    """
    One taxpaying company.

    ``employees`` is ``None`` when the company has no employee roster at
    all, ``output_resource`` is ``None`` when its recipe cannot be resolved.
    ``output_weight == 0`` marks office (immaterial) output.
    """

    entity: EntityId
    employees: int | None
    output_resource: Resource | None
    untaxed_income: int
    average_tax_rate: int
    rent: int = 0
    output_weight: float = 1.0
    is_industrial: bool = False
    is_service: bool = False
    abandoned: bool = False
    district: Any = None


@dataclass(slots=True, frozen=True)
class ProducerView:
    """
    One company whose output the engine sells at market prices.

    ``stock`` is the output currently held. ``industrial_price`` and
    ``service_price`` are the vanilla price parts of one unit;
    ``output_weight == 0`` marks immaterial output sold at its service price.
    ``output_per_worker_per_day`` is ``None`` when the recipe gives no rate.
    """

    entity: EntityId
    output_resource: Resource | None
    employees: int
    stock: int
    industrial_price: float
    service_price: float
    output_weight: float = 1.0
    batch_size: int = 0
    output_per_worker_per_day: float | None = None


@dataclass(slots=True, frozen=True)
class MarketTransaction:
    """A recorded market movement folded into the ledger."""

    resource: Resource
    amount: float
    kind: str = "supply"  # "supply" or "demand"


@runtime_checkable
class WageBandAccessor(Protocol):
    """Get/set access to the five host wage bands (levels 0..4)."""

    def get_wage(self, level: int) -> int: ...

    def set_wage(self, level: int, value: int) -> None: ...


@dataclass(slots=True)
class EconomyParameters:
    """In-memory wage bands implementing :class:`WageBandAccessor`."""

    wages: list[int] = field(default_factory=lambda: [1200, 2000, 2500, 3000, 3500])

    def get_wage(self, level: int) -> int:
        return self.wages[level]

    def set_wage(self, level: int, value: int) -> None:
        self.wages[level] = int(value)


class EconomyHost(Protocol):
    """
    Operations the engine consumes from the city simulation.

    Every method may raise :class:`MissingDependencyError`.
    """

    def resource_signal(self, resource: Resource) -> ResourceSignal | None: ...

    def household_counts(self) -> HouseholdCounts | None: ...

    def economy_parameters(self) -> WageBandAccessor | None: ...

    def workplaces(self) -> Iterable[WorkplaceView]: ...

    def set_max_workers(self, entity: EntityId, value: int) -> None: ...

    def taxpayers(self) -> Iterable[CompanyView]: ...

    def company_profit_per_day(self, company: CompanyView) -> float: ...

    def tax_rate(self, area: TaxArea, resource: Resource | None, district: Any) -> int: ...

    def set_taxpayer(
        self, entity: EntityId, untaxed_income: int, average_tax_rate: int
    ) -> None: ...

    def producers(self) -> Iterable[ProducerView]: ...

    def transfer(self, entity: EntityId, resource: Resource, amount: int) -> None: ...


class HostGateway:
    """
    Dependency-aware wrapper around an :class:`EconomyHost`.

    Read methods return ``None`` when the host raises
    :class:`MissingDependencyError`. The first failure per dependency is
    logged at WARNING; repeats are silent until the dependency resolves
    again, at which point recovery is logged at INFO.
    """

    def __init__(self, host: EconomyHost) -> None:
        self.host = host
        # call name -> dependency name reported by the host
        self._missing: dict[str, str] = {}

    @property
    def missing(self) -> frozenset[str]:
        """Dependencies currently unresolved."""
        return frozenset(self._missing.values())

    def _call(self, call: str, fn: Callable[..., T], *args: Any) -> T | None:
        try:
            result = fn(*args)
        except MissingDependencyError as exc:
            if exc.dependency not in self._missing.values():
                log.warning("%s; falling back to vanilla behaviour", exc)
            self._missing[call] = exc.dependency
            return None
        dependency = self._missing.pop(call, None)
        if dependency is not None and dependency not in self._missing.values():
            log.info("Host dependency '%s' resolved", dependency)
        return result

    def resource_signal(self, resource: Resource) -> ResourceSignal | None:
        return self._call("resource_signal", self.host.resource_signal, resource)

    def household_counts(self) -> HouseholdCounts | None:
        return self._call("household_counts", self.host.household_counts)

    def economy_parameters(self) -> WageBandAccessor | None:
        return self._call("economy_parameters", self.host.economy_parameters)

    # None (not []) when unavailable, so callers never prune trackers
    # against an empty active set they did not actually observe.
    def workplaces(self) -> list[WorkplaceView] | None:
        return self._call("workplaces", lambda: list(self.host.workplaces()))

    def taxpayers(self) -> list[CompanyView] | None:
        return self._call("taxpayers", lambda: list(self.host.taxpayers()))

    def company_profit_per_day(self, company: CompanyView) -> float | None:
        return self._call(
            "company_profit_per_day", self.host.company_profit_per_day, company
        )

    def tax_rate(self, area: TaxArea, resource: Resource | None, district: Any) -> int | None:
        return self._call("tax_rate", self.host.tax_rate, area, resource, district)

    def producers(self) -> list[ProducerView] | None:
        return self._call("producers", lambda: list(self.host.producers()))

    # Writes propagate MissingDependencyError: a lost write must not be
    # mistaken for a successful one by the caller.
    def set_max_workers(self, entity: EntityId, value: int) -> None:
        self.host.set_max_workers(entity, value)

    def set_taxpayer(
        self, entity: EntityId, untaxed_income: int, average_tax_rate: int
    ) -> None:
        self.host.set_taxpayer(entity, untaxed_income, average_tax_rate)

    def transfer(self, entity: EntityId, resource: Resource, amount: int) -> None:
        self.host.transfer(entity, resource, amount)


__all__ = [
    "N_WAGE_LEVELS",
    "CompanyView",
    "EconomyHost",
    "EconomyParameters",
    "HostGateway",
    "HouseholdCounts",
    "MarketTransaction",
    "ProducerView",
    "ResourceSignal",
    "TaxArea",
    "WageBandAccessor",
    "WorkplaceView",
]
