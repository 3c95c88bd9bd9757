"""Event (system step) base class definition."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar

from marketeconomy import logging

if TYPE_CHECKING:
    from marketeconomy.engine import Engine


def _camel_to_snake(name: str) -> str:
    """Convert CamelCase to snake_case."""
    s1 = re.sub("(.)([A-Z][a-z]+)", r"\1_\2", name)
    return re.sub("([a-z0-9])([A-Z])", r"\1_\2", s1).lower()


@dataclass(slots=True)
class Event(ABC):
    """
    Base class for the per-tick steps of the engine.

    An Event wraps one sub-engine's tick: it reads the host through the
    engine's gateway, calls the pure functions in :mod:`marketeconomy.systems`
    and writes state back into the engine's roles. The :class:`Pipeline`
    runs events in the exact order configured.

    Notes
    -----
    Subclasses are registered automatically under ``name`` (snake_case of
    the class name unless given explicitly). Each event exposes a feature
    ``flag``; the pipeline skips events whose flag is disabled on the
    engine.
    """

    name: ClassVar[str] = ""
    flag: ClassVar[str | None] = None

    def __init_subclass__(cls, name: str = "", **kwargs: Any) -> None:
        super(Event, cls).__init_subclass__(**kwargs)

        # @dataclass(slots=True) rebuilds the class and calls this hook again
        # without the custom name, so keep a name already set.
        if name != "":
            cls.name = name
        elif cls.name == "":
            cls.name = _camel_to_snake(cls.__name__)

        from marketeconomy.core.registry import _EVENT_REGISTRY

        _EVENT_REGISTRY[cls.name] = cls

    def get_logger(self) -> logging.EconLogger:
        """
        Get the logger for this event.

        Logger name format: ``marketeconomy.events.{event_name}``. Per-event
        levels are set through the ``logging.events`` configuration section::

            logging:
              events:
                update_market_prices: DEBUG
        """
        return logging.getLogger(f"marketeconomy.events.{self.name}")

    @abstractmethod
    def execute(self, engine: Engine) -> None:
        """
        Run one tick of this step against *engine*.

        Mutates engine state and host state in place.
        """

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"
