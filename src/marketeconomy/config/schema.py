"""
Configuration dataclass for engine parameters.

This module defines the Config dataclass, which groups every tunable knob
of the four sub-engines in one immutable object. Config instances are
created by :func:`marketeconomy.config.load_config` after merging package
defaults, a user YAML file and keyword overrides.

Design Notes
------------
- Immutable (frozen=True): the configuration never changes during a tick.
  ``Engine.use_config`` swaps in a new instance between ticks.
- Memory-efficient (slots=True)
- Simple dataclass, no methods - validation happens in ConfigValidator

See Also
--------
ConfigValidator : Centralized validation for configuration parameters
load_config : Builds a Config from defaults, YAML and overrides
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from marketeconomy.resources import ResourceCategory


@dataclass(slots=True, frozen=True)
class Config:
    """
    Immutable configuration for the regulation engine.

    Parameters
    ----------
    minimum_price_multiplier : float
        Lower edge of the price band as a multiple of the vanilla price.
    maximum_price_multiplier : float
        Upper edge of the price band. Swapped with the minimum if inverted.
    sensitivity : float
        Reaction strength to supply/demand imbalance (0 to 1). Maps to the
        elasticity exponent ``lerp(0.25, 3.0, sensitivity)``.
    external_price_influence : float
        Blend weight pulling the elastic price back to vanilla (0 to 1).
    demand_tolerance : float
        Relative imbalance treated as balanced (0 to 1).
    price_anchoring_strength : float
        Pull of the raw power-law price towards vanilla (0 to 1).
    logistic_smoothing_scale : float
        Width of the logistic band compression (0 exclusive to 1).
    industrial_component_bias, service_component_bias : float
        Extra factor on the industrial / service price component (>= 0).
    shortage_reference_ratio : float
        Demand/supply ratio a fully skewed shortage maps to (>= 1).
    surplus_reference_ratio : float
        Demand/supply ratio a fully skewed surplus maps to (0 exclusive to 1).
    neutral_categories : frozenset of ResourceCategory
        Categories always reported as a 50/50 supply/demand split.
    multiplier_smoothing : float
        EMA weight of a fresh ratio in the cached multiplier (0 exclusive
        to 1; 1 stores the clamped ratio directly).
    education_pricing : bool
        Apply the education-share price multiplier after elasticity.
    education_baseline, education_premium_strength, education_penalty_strength : float
        Parameters of the education price multiplier.
    unemployment_wage_penalty, skill_shortage_premium, education_mismatch_premium : float
        Weights of the wage multiplier terms (>= 0).
    minimum_utilization_share : float
        Staffing floor share of capacity (0.05 to 0.95).
    base_maintenance_per_day, maintenance_per_capacity : float
        Daily maintenance cost = base + per_capacity * capacity.
    under_utilization_penalty_multiplier : float
        Factor on the daily cost while a workplace is under-utilized.
    maintenance_fee_threshold : float
        Accumulated maintenance that triggers a deduction.
    maintenance_strict : bool
        Deduct whenever the integer part is non-zero, ignoring the threshold.
    company_updates_per_day, rent_updates_per_day : int
        Host update cadences used to convert daily figures to ticks.
    rent_carry_fraction : bool
        Charge whole rent units per tick and carry the fraction to the next
        tick instead of rounding each tick.
    min_sale_amount, max_sale_per_tick : int
        Smallest stock a producer sells from and the largest batch it sells
        in one tick.
    default_output_per_worker_per_day : float
        Daily output of one worker when the host reports no recipe rate.
    enable_pricing, enable_wages, enable_utilization, enable_company_profit : bool
        Initial sub-engine feature flags.
    enable_market_sales : bool
        Settle producer sales at elastic prices (off: the host sells).
    trace_capacity : int
        Maximum diagnostic trace records kept (0 disables tracing).
    analytics_max_samples : int
        Sample cap of the analytics recorder (floored at 32).
    logging : dict
        ``default_level``, per-event ``events`` and ``diagnostics_file``.

    Examples
    --------
    >>> from marketeconomy.config import Config
    >>> cfg = Config(sensitivity=0.5)
    >>> cfg.maximum_price_multiplier
    2.5
    """

    # Elastic pricing
    minimum_price_multiplier: float = 0.5
    maximum_price_multiplier: float = 2.5
    sensitivity: float = 0.65
    external_price_influence: float = 0.35
    demand_tolerance: float = 0.05
    price_anchoring_strength: float = 0.25
    logistic_smoothing_scale: float = 0.5
    industrial_component_bias: float = 1.0
    service_component_bias: float = 1.0

    # Supply/demand ledger
    shortage_reference_ratio: float = 3.0
    surplus_reference_ratio: float = 1.0 / 3.0
    neutral_categories: frozenset[ResourceCategory] = frozenset(
        {ResourceCategory.IMMATERIAL}
    )
    multiplier_smoothing: float = 1.0

    # Education-driven price multiplier
    education_pricing: bool = False
    education_baseline: float = 0.25
    education_premium_strength: float = 0.6
    education_penalty_strength: float = 0.35

    # Labor market
    unemployment_wage_penalty: float = 0.6
    skill_shortage_premium: float = 0.8
    education_mismatch_premium: float = 0.2

    # Workforce utilization / maintenance
    minimum_utilization_share: float = 0.25
    base_maintenance_per_day: float = 45.0
    maintenance_per_capacity: float = 3.5
    under_utilization_penalty_multiplier: float = 2.0
    maintenance_fee_threshold: float = 200.0
    maintenance_strict: bool = False

    # Host cadences
    company_updates_per_day: int = 32
    rent_updates_per_day: int = 16
    rent_carry_fraction: bool = False

    # Market sales
    min_sale_amount: int = 20
    max_sale_per_tick: int = 1000
    default_output_per_worker_per_day: float = 6.0

    # Feature flags
    enable_pricing: bool = True
    enable_wages: bool = True
    enable_utilization: bool = True
    enable_company_profit: bool = False
    enable_market_sales: bool = False

    # Diagnostics
    trace_capacity: int = 4096
    analytics_max_samples: int = 2048
    logging: dict[str, Any] = field(default_factory=dict)
