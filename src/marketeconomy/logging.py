"""
Custom logging configuration for the market economy engine.

Extends Python's standard logging with a custom DEEP_DEBUG level (5)
for very verbose output (every intermediate elasticity term, every
per-entity maintenance accrual). Provides EconLogger with a ``deep()``
method and helpers to apply the ``logging`` section of the engine
configuration.

Log Levels
----------
- CRITICAL (50): Critical errors
- ERROR (40): Errors, e.g. an engine step that failed and fell back
- WARNING (30): Missing host dependencies, corrupt configuration
- INFO (20): Lifecycle messages (default)
- DEBUG (10): Per-tick summaries
- DEEP_DEBUG (5): Per-resource / per-entity detail

Examples
--------
>>> from marketeconomy import logging
>>> logger = logging.getLogger("marketeconomy.events.adjust_wages")
>>> logger.info("Event executing")
>>> logger.deep("ratio=%.3f", 1.25)

Configure per-event log levels:

>>> import marketeconomy as me
>>> log_config = {
...     "default_level": "INFO",
...     "events": {"update_market_prices": "DEBUG"},
... }
>>> engine = me.Engine.init(host=my_host, logging=log_config)

See Also
--------
Event.get_logger : Get logger for specific event
"""

import logging
import os
from typing import Any

(CRITICAL, ERROR, WARNING, INFO, DEBUG) = (
    logging.CRITICAL,
    logging.ERROR,
    logging.WARNING,
    logging.INFO,
    logging.DEBUG,
)
DEEP_DEBUG = 5
logging.addLevelName(DEEP_DEBUG, "DEEP")

ROOT_LOGGER = "marketeconomy"
DIAGNOSTICS_LOGGER = "marketeconomy.diagnostics"


class EconLogger(logging.Logger):
    """
    Custom logger with DEEP_DEBUG level support.

    Examples
    --------
    >>> logger = EconLogger("test")
    >>> logger.setLevel(5)  # DEEP_DEBUG
    >>> logger.deep("Very verbose message")
    """

    def deep(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """
        Log message at DEEP_DEBUG level (5).

        Parameters
        ----------
        msg : str
            Message format string.
        *args : Any
            Arguments for message formatting.
        **kwargs : Any
            Additional logging kwargs.
        """
        if self.isEnabledFor(DEEP_DEBUG):
            self._log(DEEP_DEBUG, msg, args, **kwargs)


# Make the logging module hand out our subclass from now on
logging.setLoggerClass(EconLogger)


def getLogger(name: str | None = None) -> EconLogger:
    """
    Get an EconLogger instance.

    Convenience wrapper around logging.getLogger() that returns
    an EconLogger instance with DEEP_DEBUG support.

    Parameters
    ----------
    name : str, optional
        Logger name. If None, returns root logger.

    Returns
    -------
    EconLogger
        Logger instance with deep() method.
    """
    return logging.getLogger(name)  # type: ignore[return-value]


def _level(name: str) -> int:
    name = name.upper()
    if name in ("DEEP", "DEEP_DEBUG"):
        return DEEP_DEBUG
    return int(getattr(logging, name))


def configure_logging(log_config: dict[str, Any]) -> None:
    """
    Apply the ``logging`` section of the engine configuration.

    Parameters
    ----------
    log_config : dict
        Logging configuration with keys:
        - default_level: str (e.g., 'INFO', 'DEBUG')
        - events: dict[str, str] (per-event overrides)
        - diagnostics_file: str or None (attach a FileHandler to the
          diagnostics logger)
    """
    default_level = log_config.get("default_level", "INFO")
    logging.getLogger(ROOT_LOGGER).setLevel(_level(default_level))

    for event_name, level in (log_config.get("events") or {}).items():
        logging.getLogger(f"{ROOT_LOGGER}.events.{event_name}").setLevel(
            _level(level)
        )

    path = log_config.get("diagnostics_file")
    if path:
        diag = logging.getLogger(DIAGNOSTICS_LOGGER)
        target = os.path.abspath(path)
        already = any(
            isinstance(h, logging.FileHandler) and h.baseFilename == target
            for h in diag.handlers
        )
        if not already:
            handler = logging.FileHandler(path, encoding="utf-8")
            handler.setFormatter(
                logging.Formatter("[%(asctime)s] %(name)s %(message)s")
            )
            diag.addHandler(handler)
            diag.setLevel(DEBUG)
