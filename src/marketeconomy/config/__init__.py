"""Configuration module for the market economy engine."""

from marketeconomy.config.loader import build_config, load_config, write_default_config
from marketeconomy.config.schema import Config
from marketeconomy.config.validator import ConfigValidator

__all__ = [
    "Config",
    "ConfigValidator",
    "build_config",
    "load_config",
    "write_default_config",
]
