"""
Configuration loading.

Precedence (lowest to highest):

1. package ``defaults.yml``
2. user YAML file or mapping
3. keyword overrides

A missing configuration file is regenerated from the package defaults and a
corrupt or invalid one is ignored with a warning. Neither blocks engine
startup. Invalid keyword overrides are programmer errors and raise.
"""

from __future__ import annotations

import dataclasses
import warnings
from collections.abc import Mapping
from importlib import resources
from pathlib import Path
from typing import Any

import yaml

from marketeconomy import logging
from marketeconomy.config.schema import Config
from marketeconomy.config.validator import ConfigValidator
from marketeconomy.resources import parse_categories

log = logging.getLogger("marketeconomy.config")

_CONFIG_FIELDS = frozenset(f.name for f in dataclasses.fields(Config))


def _read_yaml(obj: str | Path | Mapping[str, Any] | None) -> dict[str, Any]:
    """Return a plain dict - {} if *obj* is None."""
    if obj is None:
        return {}
    if isinstance(obj, Mapping):
        return dict(obj)
    p = Path(obj)
    with p.open("rt", encoding="utf-8") as fh:
        data = yaml.safe_load(fh) or {}
    if not isinstance(data, Mapping):
        raise TypeError(f"config root must be mapping, got {type(data)!r}")
    return dict(data)


def _package_defaults_text() -> str:
    return resources.files("marketeconomy").joinpath("defaults.yml").read_text()


def _package_defaults() -> dict[str, Any]:
    """Load marketeconomy/defaults.yml"""
    return yaml.safe_load(_package_defaults_text()) or {}


def write_default_config(path: str | Path) -> Path:
    """
    Write the package defaults to *path*, creating parent directories.

    Returns
    -------
    Path
        The written file.
    """
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(_package_defaults_text(), encoding="utf-8")
    return p


def _load_user(config: str | Path | Mapping[str, Any] | None) -> dict[str, Any]:
    """Read user configuration, degrading to {} on missing/corrupt files."""
    try:
        return _read_yaml(config)
    except FileNotFoundError:
        log.warning("Configuration file %s missing; regenerating defaults", config)
        try:
            write_default_config(config)  # type: ignore[arg-type]
        except OSError as exc:
            log.warning("Could not write default configuration to %s: %s", config, exc)
        return {}
    except (OSError, UnicodeDecodeError, yaml.YAMLError, TypeError) as exc:
        log.warning(
            "Configuration %s is unreadable (%s); using defaults", config, exc
        )
        return {}


def build_config(cfg: dict[str, Any]) -> Config:
    """
    Normalize, validate and freeze a merged configuration dictionary.

    Unknown keys are ignored with a warning.

    Raises
    ------
    ConfigurationError
        If validation fails.
    """
    cfg = ConfigValidator.normalize(cfg)
    ConfigValidator.validate_config(cfg)

    unknown = sorted(set(cfg) - _CONFIG_FIELDS)
    if unknown:
        warnings.warn(
            f"Ignoring unknown configuration keys: {unknown}",
            UserWarning,
            stacklevel=3,
        )

    params = {k: v for k, v in cfg.items() if k in _CONFIG_FIELDS}
    if "neutral_categories" in params:
        params["neutral_categories"] = parse_categories(
            tuple(params["neutral_categories"])
        )
    for key in ConfigValidator.FLOAT_PARAMS:
        if key in params:
            params[key] = float(params[key])
    params["logging"] = dict(params.get("logging") or {})
    return Config(**params)


def load_config(
    config: str | Path | Mapping[str, Any] | None = None, **overrides: Any
) -> Config:
    """
    Build a :class:`Config` from package defaults, *config* and *overrides*.

    Parameters
    ----------
    config : str, Path, Mapping or None
        Path to a YAML file, or a mapping of parameters.
    **overrides
        Highest-precedence parameter overrides.

    Returns
    -------
    Config
        Frozen configuration.

    Raises
    ------
    ConfigurationError
        If *overrides* (on top of the defaults) are invalid.

    Examples
    --------
    >>> cfg = load_config(sensitivity=0.3)
    >>> cfg.sensitivity
    0.3
    """
    defaults = _package_defaults()
    user = _load_user(config)

    if user:
        merged = {**defaults, **user, **overrides}
        try:
            return build_config(merged)
        except (ValueError, TypeError) as exc:
            log.warning("Configuration %s is invalid (%s); using defaults", config, exc)

    return build_config({**defaults, **overrides})
