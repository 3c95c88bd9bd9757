"""
Market Economy - Adaptive Economic Regulation for City Simulations
==================================================================

Market Economy sits between a city simulation (the *host*) and its
economy. Once per host tick it re-derives its bounded adjustments:

- elastic commodity prices from live supply/demand signals,
- a citywide wage multiplier from labor statistics, applied to a
  reversible baseline,
- minimum staffing and maintenance fees for workplaces,
- profit-based taxable income for companies,
- optionally, producer output sold at the elastic market price.

Quick Start
-----------
>>> import marketeconomy as me
>>> engine = me.Engine.init(host=my_host)  # doctest: +SKIP
>>> engine.step()  # doctest: +SKIP
>>> price = engine.compute_price(me.Resource.STEEL, 1000.0)  # doctest: +SKIP

Custom configuration via kwargs or YAML:

>>> engine = me.Engine.init("economy.yml", host=my_host, sensitivity=0.4)  # doctest: +SKIP

Key Concepts
------------
**Host**
  Everything the engine reads or writes goes through an object implementing
  :class:`EconomyHost`. Missing host subsystems degrade the affected
  sub-engine to vanilla behaviour; they never raise into the host.

**Event Pipeline**
  Each tick executes ``adjust_wages``, ``update_market_prices``,
  ``settle_market_sales``, ``enforce_workforce_utilization`` and
  ``adjust_company_profits`` in that order (see ``default_pipeline.yml``
  or pass ``pipeline_path`` to :meth:`Engine.init`).

**Call-sites**
  Prices, price components, single wages and ledger registrations are
  computed on demand through :class:`Engine` methods.

Public API
----------
Engine
    Engine facade: construction, tick, call-sites, enable/disable.
Config, load_config
    Immutable configuration and its loader.
Resource, ResourceCategory, PriceComponent
    Resource enumeration.
EconomyHost, EconomyParameters, HostGateway
    Host collaborator interface.
Role, Event, Pipeline, role, event
    Extension points for custom state and tick steps.

Notes
-----
- Configuration precedence: defaults.yml → user config → kwargs
- Pipeline events execute in explicit order
"""

from __future__ import annotations

__version__: str = "0.1.0"

from . import logging  # noqa: E402 (circular‑safe)
from .config import Config, ConfigValidator, load_config
from .core import (
    Event,
    Pipeline,
    Role,
    event,
    get_event,
    get_role,
    list_events,
    list_roles,
    role,
)
from .engine import Engine
from .errors import (
    ConfigurationError,
    EconomyEngineError,
    InsufficientDataError,
    InvalidNumericError,
    MissingDependencyError,
)
from .host import (
    CompanyView,
    EconomyHost,
    EconomyParameters,
    HostGateway,
    HouseholdCounts,
    MarketTransaction,
    ProducerView,
    ResourceSignal,
    TaxArea,
    WorkplaceView,
)
from .resources import PriceComponent, Resource, ResourceCategory

__all__ = [
    "CompanyView",
    "Config",
    "ConfigValidator",
    "ConfigurationError",
    "EconomyEngineError",
    "EconomyHost",
    "EconomyParameters",
    "Engine",
    "Event",
    "HostGateway",
    "HouseholdCounts",
    "InsufficientDataError",
    "InvalidNumericError",
    "MarketTransaction",
    "MissingDependencyError",
    "Pipeline",
    "PriceComponent",
    "ProducerView",
    "Resource",
    "ResourceCategory",
    "ResourceSignal",
    "Role",
    "TaxArea",
    "WorkplaceView",
    "__version__",
    "event",
    "get_event",
    "get_role",
    "list_events",
    "list_roles",
    "logging",
    "role",
]
