"""
Error kinds raised inside the engine.

None of these ever leave a per-tick call into the host: the engine recovers
locally and falls back to vanilla behaviour. They exist so host adapters
and internal helpers can signal *which* kind of degradation happened.
"""

from __future__ import annotations


class EconomyEngineError(Exception):
    """Base class for engine errors."""


class MissingDependencyError(EconomyEngineError):
    """
    A required host subsystem cannot be resolved.

    Host adapters raise this from any ``EconomyHost`` method whose backing
    subsystem is not (yet) available. The engine degrades to pass-through
    and retries on the next tick.

    Parameters
    ----------
    dependency : str
        Stable name of the missing subsystem (used to log once per name).
    """

    def __init__(self, dependency: str, message: str | None = None) -> None:
        self.dependency = dependency
        super().__init__(message or f"Host dependency '{dependency}' unavailable")


class InsufficientDataError(EconomyEngineError):
    """No supply/demand or workforce signal exists (expected steady state)."""


class InvalidNumericError(EconomyEngineError):
    """A NaN or infinity appeared in a computed ratio, price or wage."""


class ConfigurationError(EconomyEngineError, ValueError):
    """Configuration could not be loaded or failed validation."""


__all__ = [
    "ConfigurationError",
    "EconomyEngineError",
    "InsufficientDataError",
    "InvalidNumericError",
    "MissingDependencyError",
]
