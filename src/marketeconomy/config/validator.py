"""Centralized configuration validation for the market economy engine."""

from __future__ import annotations

import math
import warnings
from typing import Any

from marketeconomy.errors import ConfigurationError
from marketeconomy.resources import parse_categories

# Floor applied to the minimum utilization share
MIN_UTILIZATION_FLOOR = 0.05
# Ceiling applied to the minimum utilization share
MIN_UTILIZATION_CEILING = 0.95
# Smallest sample cap of the analytics recorder
MIN_ANALYTICS_SAMPLES = 32


class ConfigValidator:
    """
    Centralized validation for engine configuration.

    All validation happens once per configuration load to ensure:
    - Type correctness
    - Valid parameter ranges
    - Relationship constraints between parameters
    - Clear error messages with actionable feedback

    ``normalize`` runs before validation and repairs the few mistakes the
    engine tolerates (inverted price band, out-of-range utilization floor).
    """

    VALID_LOG_LEVELS = {
        "DEEP",
        "DEEP_DEBUG",
        "DEBUG",
        "INFO",
        "WARNING",
        "ERROR",
        "CRITICAL",
    }

    INT_PARAMS = (
        "company_updates_per_day",
        "rent_updates_per_day",
        "min_sale_amount",
        "max_sale_per_tick",
        "trace_capacity",
        "analytics_max_samples",
    )

    FLOAT_PARAMS = (
        "minimum_price_multiplier",
        "maximum_price_multiplier",
        "sensitivity",
        "external_price_influence",
        "demand_tolerance",
        "price_anchoring_strength",
        "logistic_smoothing_scale",
        "industrial_component_bias",
        "service_component_bias",
        "shortage_reference_ratio",
        "surplus_reference_ratio",
        "multiplier_smoothing",
        "education_baseline",
        "education_premium_strength",
        "education_penalty_strength",
        "unemployment_wage_penalty",
        "skill_shortage_premium",
        "education_mismatch_premium",
        "minimum_utilization_share",
        "base_maintenance_per_day",
        "maintenance_per_capacity",
        "under_utilization_penalty_multiplier",
        "maintenance_fee_threshold",
        "default_output_per_worker_per_day",
    )

    BOOL_PARAMS = (
        "education_pricing",
        "maintenance_strict",
        "rent_carry_fraction",
        "enable_pricing",
        "enable_wages",
        "enable_utilization",
        "enable_company_profit",
        "enable_market_sales",
    )

    @staticmethod
    def normalize(cfg: dict[str, Any]) -> dict[str, Any]:
        """
        Repair tolerated mistakes in a merged configuration dictionary.

        - An inverted price band (min > max) is swapped, with a warning.
        - ``minimum_utilization_share`` is clamped into [0.05, 0.95].
        - ``analytics_max_samples`` is raised to at least 32.

        Parameters
        ----------
        cfg : dict
            Merged configuration. Not modified.

        Returns
        -------
        dict
            A normalized copy.
        """
        out = dict(cfg)

        lo = out.get("minimum_price_multiplier")
        hi = out.get("maximum_price_multiplier")
        if (
            isinstance(lo, (int, float))
            and isinstance(hi, (int, float))
            and not isinstance(lo, bool)
            and not isinstance(hi, bool)
            and lo > hi
        ):
            warnings.warn(
                f"minimum_price_multiplier ({lo}) > maximum_price_multiplier "
                f"({hi}); swapping the bounds.",
                UserWarning,
                stacklevel=3,
            )
            out["minimum_price_multiplier"], out["maximum_price_multiplier"] = hi, lo

        share = out.get("minimum_utilization_share")
        if isinstance(share, (int, float)) and not isinstance(share, bool):
            out["minimum_utilization_share"] = min(
                max(float(share), MIN_UTILIZATION_FLOOR), MIN_UTILIZATION_CEILING
            )

        samples = out.get("analytics_max_samples")
        if isinstance(samples, int) and not isinstance(samples, bool):
            out["analytics_max_samples"] = max(samples, MIN_ANALYTICS_SAMPLES)

        return out

    @staticmethod
    def validate_config(cfg: dict[str, Any]) -> None:
        """
        Validate all configuration parameters.

        Parameters
        ----------
        cfg : dict
            Configuration dictionary to validate.

        Raises
        ------
        ConfigurationError
            If any validation check fails.
        """
        # Type checking
        ConfigValidator._validate_types(cfg)

        # Range validation
        ConfigValidator._validate_ranges(cfg)

        # Relationship constraints
        ConfigValidator._validate_relationships(cfg)

        # Resource categories
        if "neutral_categories" in cfg:
            ConfigValidator._validate_categories(cfg["neutral_categories"])

        # Logging configuration
        if "logging" in cfg:
            ConfigValidator._validate_logging(cfg["logging"])

    @staticmethod
    def _validate_types(cfg: dict[str, Any]) -> None:
        """
        Ensure correct types for configuration parameters.

        Raises
        ------
        ConfigurationError
            If any parameter has incorrect type or is not finite.
        """
        for key in ConfigValidator.INT_PARAMS:
            if key not in cfg:
                continue
            val = cfg[key]
            if isinstance(val, bool) or not isinstance(val, int):
                raise ConfigurationError(
                    f"Config parameter '{key}' must be int, got {type(val).__name__}"
                )

        # Accept int or float
        for key in ConfigValidator.FLOAT_PARAMS:
            if key not in cfg:
                continue
            val = cfg[key]
            if isinstance(val, bool) or not isinstance(val, (int, float)):
                raise ConfigurationError(
                    f"Config parameter '{key}' must be float, got {type(val).__name__}"
                )
            if not math.isfinite(val):
                raise ConfigurationError(f"Config parameter '{key}' must be finite, got {val}")

        for key in ConfigValidator.BOOL_PARAMS:
            if key not in cfg:
                continue
            val = cfg[key]
            if not isinstance(val, bool):
                raise ConfigurationError(
                    f"Config parameter '{key}' must be bool, got {type(val).__name__}"
                )

    @staticmethod
    def _validate_ranges(cfg: dict[str, Any]) -> None:
        """
        Ensure parameters are in valid ranges.

        Raises
        ------
        ConfigurationError
            If any parameter is out of valid range.
        """
        # (min_val, max_val) tuples, None means unbounded
        constraints: dict[str, tuple[float | None, float | None]] = {
            # Price band (multiples of vanilla)
            "minimum_price_multiplier": (0.0, None),
            "maximum_price_multiplier": (0.0, None),
            # Unit-interval weights
            "sensitivity": (0.0, 1.0),
            "external_price_influence": (0.0, 1.0),
            "demand_tolerance": (0.0, 1.0),
            "price_anchoring_strength": (0.0, 1.0),
            "logistic_smoothing_scale": (0.0, 1.0),
            "multiplier_smoothing": (0.0, 1.0),
            # Component biases
            "industrial_component_bias": (0.0, None),
            "service_component_bias": (0.0, None),
            # Ledger reference ratios
            "shortage_reference_ratio": (1.0, None),
            "surplus_reference_ratio": (0.0, 1.0),
            # Education multiplier
            "education_baseline": (0.0, 1.0),
            "education_premium_strength": (0.0, None),
            "education_penalty_strength": (0.0, None),
            # Wage multiplier weights
            "unemployment_wage_penalty": (0.0, None),
            "skill_shortage_premium": (0.0, None),
            "education_mismatch_premium": (0.0, None),
            # Workforce / maintenance
            "minimum_utilization_share": (
                MIN_UTILIZATION_FLOOR,
                MIN_UTILIZATION_CEILING,
            ),
            "base_maintenance_per_day": (0.0, None),
            "maintenance_per_capacity": (0.0, None),
            "under_utilization_penalty_multiplier": (0.0, None),
            "maintenance_fee_threshold": (0.0, None),
            # Host cadences (positive)
            "company_updates_per_day": (1, None),
            "rent_updates_per_day": (1, None),
            # Market sales
            "min_sale_amount": (1, None),
            "max_sale_per_tick": (1, None),
            "default_output_per_worker_per_day": (0.1, None),
            # Diagnostics
            "trace_capacity": (0, None),
            "analytics_max_samples": (MIN_ANALYTICS_SAMPLES, None),
        }

        for key, (min_val, max_val) in constraints.items():
            if key not in cfg:
                continue

            val = cfg[key]

            if min_val is not None and val < min_val:
                raise ConfigurationError(
                    f"Config parameter '{key}' must be >= {min_val}, got {val}"
                )

            if max_val is not None and val > max_val:
                raise ConfigurationError(
                    f"Config parameter '{key}' must be <= {max_val}, got {val}"
                )

        # Exclusive lower bounds
        for key in (
            "logistic_smoothing_scale",
            "multiplier_smoothing",
            "surplus_reference_ratio",
        ):
            if key in cfg and cfg[key] <= 0.0:
                raise ConfigurationError(f"Config parameter '{key}' must be > 0, got {cfg[key]}")

    @staticmethod
    def _validate_relationships(cfg: dict[str, Any]) -> None:
        """
        Validate cross-parameter constraints.

        Raises
        ------
        ConfigurationError
            If the price band is still inverted after normalization, or the
            sale bounds are inverted.
        """
        lo = cfg.get("minimum_price_multiplier")
        hi = cfg.get("maximum_price_multiplier")
        if lo is not None and hi is not None:
            if lo > hi:
                raise ConfigurationError(
                    f"minimum_price_multiplier ({lo}) must be <= "
                    f"maximum_price_multiplier ({hi})"
                )
            if lo == hi:
                warnings.warn(
                    f"Price band collapsed (min == max == {lo}). "
                    f"Elastic prices will be pinned to vanilla * {lo}.",
                    UserWarning,
                    stacklevel=3,
                )

        lo_sale = cfg.get("min_sale_amount")
        hi_sale = cfg.get("max_sale_per_tick")
        if lo_sale is not None and hi_sale is not None and lo_sale > hi_sale:
            raise ConfigurationError(
                f"min_sale_amount ({lo_sale}) must be <= max_sale_per_tick ({hi_sale})"
            )

        # Full external influence makes the whole pricing pipeline a no-op
        if cfg.get("external_price_influence") == 1.0 and cfg.get(
            "enable_pricing", True
        ):
            warnings.warn(
                "external_price_influence is 1.0: elastic pricing is enabled "
                "but every price resolves to the vanilla price.",
                UserWarning,
                stacklevel=3,
            )

    @staticmethod
    def _validate_categories(names: Any) -> None:
        """
        Validate ``neutral_categories``.

        Raises
        ------
        ConfigurationError
            If the value is not a list of known category names.
        """
        if isinstance(names, (str, bytes)) or not isinstance(
            names, (list, tuple, set, frozenset)
        ):
            raise ConfigurationError(
                "Config parameter 'neutral_categories' must be a list, "
                f"got {type(names).__name__}"
            )
        try:
            parse_categories(tuple(names))
        except ValueError as exc:
            raise ConfigurationError(str(exc)) from exc

    @staticmethod
    def _validate_logging(log_config: dict[str, Any]) -> None:
        """
        Validate logging configuration.

        Parameters
        ----------
        log_config : dict
            Logging configuration dictionary with keys:
            - default_level: str (e.g., 'INFO', 'DEBUG')
            - events: dict[str, str] (per-event overrides)
            - diagnostics_file: str or None

        Raises
        ------
        ConfigurationError
            If logging configuration is invalid.
        """
        if not isinstance(log_config, dict):
            raise ConfigurationError(
                f"Logging config must be dict, got {type(log_config).__name__}"
            )

        if "default_level" in log_config:
            level = log_config["default_level"]
            if not isinstance(level, str):
                raise ConfigurationError(
                    f"Logging default_level must be str, got {type(level).__name__}"
                )

            if level.upper() not in ConfigValidator.VALID_LOG_LEVELS:
                raise ConfigurationError(
                    f"Invalid log level '{level}'. "
                    f"Must be one of {ConfigValidator.VALID_LOG_LEVELS}"
                )

        events = log_config.get("events")
        if events is not None:
            if not isinstance(events, dict):
                raise ConfigurationError(
                    f"Logging events must be dict, got {type(events).__name__}"
                )

            for event_name, level in events.items():
                if not isinstance(event_name, str):
                    raise ConfigurationError(
                        f"Event name must be str, got {type(event_name).__name__}"
                    )

                if not isinstance(level, str):
                    raise ConfigurationError(
                        f"Log level for event '{event_name}' must be str, "
                        f"got {type(level).__name__}"
                    )

                if level.upper() not in ConfigValidator.VALID_LOG_LEVELS:
                    raise ConfigurationError(
                        f"Invalid log level '{level}' for event '{event_name}'. "
                        f"Must be one of {ConfigValidator.VALID_LOG_LEVELS}"
                    )

        path = log_config.get("diagnostics_file")
        if path is not None and not isinstance(path, str):
            raise ConfigurationError(
                "Logging diagnostics_file must be str or None, "
                f"got {type(path).__name__}"
            )

    @staticmethod
    def validate_pipeline_yaml(yaml_path: str) -> None:
        """
        Validate pipeline YAML file structure and event references.

        Parameters
        ----------
        yaml_path : str
            Path to pipeline YAML file.

        Raises
        ------
        ConfigurationError
            If YAML structure is invalid or references unknown events.
        """
        from pathlib import Path

        import yaml

        from marketeconomy.core.registry import list_events

        with open(Path(yaml_path)) as f:
            config = yaml.safe_load(f)

        if not isinstance(config, dict):
            raise ConfigurationError(
                f"Pipeline YAML must be a dictionary, got {type(config).__name__}"
            )

        if "events" not in config:
            raise ConfigurationError(f"Pipeline YAML must have 'events' key: {yaml_path}")

        event_entries = config["events"]
        if not isinstance(event_entries, list):
            raise ConfigurationError(
                f"Pipeline 'events' must be a list, got {type(event_entries).__name__}"
            )

        registered_events = set(list_events())
        for i, entry in enumerate(event_entries):
            if not isinstance(entry, str):
                raise ConfigurationError(
                    f"Event entry at index {i} must be str, got {type(entry).__name__}"
                )
            if entry.strip() not in registered_events:
                raise ConfigurationError(
                    f"Event '{entry}' not found in registry. "
                    f"Available events: {sorted(registered_events)}"
                )
