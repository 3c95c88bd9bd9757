"""Event pipeline with explicit execution order."""

from __future__ import annotations

from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from typing import TYPE_CHECKING

import yaml

from marketeconomy.core.event import Event
from marketeconomy.core.registry import get_event

if TYPE_CHECKING:
    from marketeconomy.engine import Engine


@dataclass(slots=True)
class Pipeline:
    """
    Ordered list of engine steps executed once per tick.

    Every event runs inside its own guard: an exception raised by one step
    is logged with traceback on that event's logger and the remaining steps
    still run. A failing step therefore degrades only its own sub-engine to
    vanilla behaviour for the tick.

    Attributes
    ----------
    events : list[Event]
        Event instances in execution order.

    See Also
    --------
    Pipeline.from_event_list : Build pipeline from event name list
    Pipeline.default : The packaged default order
    """

    events: list[Event] = field(default_factory=list)
    _event_map: dict[str, Event] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self) -> None:
        self._event_map = {event.name: event for event in self.events}

    @classmethod
    def from_event_list(cls, event_names: list[str]) -> Pipeline:
        """
        Build pipeline from ordered list of event names.

        Raises
        ------
        KeyError
            If an event name is not registered.
        """
        return cls(events=[get_event(name)() for name in event_names])

    @classmethod
    def from_yaml(cls, yaml_path: str | Path) -> Pipeline:
        """
        Build pipeline from a YAML file with an ``events`` list.

        Examples
        --------
        .. code-block:: yaml

            events:
              - adjust_wages
              - update_market_prices

        Raises
        ------
        ValueError
            If the file has no ``events`` list.
        """
        yaml_path = Path(yaml_path)
        with open(yaml_path, encoding="utf-8") as f:
            config = yaml.safe_load(f)

        if not isinstance(config, dict) or not isinstance(config.get("events"), list):
            raise ValueError(f"YAML file must have an 'events' list: {yaml_path}")

        return cls.from_event_list([str(name).strip() for name in config["events"]])

    @classmethod
    def default(cls) -> Pipeline:
        """Load ``default_pipeline.yml`` shipped with the package."""
        # Importing the package registers the built-in events.
        import marketeconomy.events  # noqa: F401

        traversable = resources.files("marketeconomy") / "default_pipeline.yml"
        with resources.as_file(traversable) as yaml_fs_path:
            return cls.from_yaml(Path(yaml_fs_path))

    def execute(self, engine: Engine) -> list[str]:
        """
        Execute all enabled events in pipeline order.

        Returns
        -------
        list[str]
            Names of events that raised (and were recovered from).
        """
        failed = []
        for event in self.events:
            if event.flag is not None and not engine.is_enabled(event.flag):
                continue
            try:
                event.execute(engine)
            except Exception:
                event.get_logger().exception(
                    "Event '%s' failed; continuing with vanilla behaviour", event.name
                )
                failed.append(event.name)
        return failed

    def insert_after(self, after: str, event: Event | str) -> None:
        """
        Insert event after the named event.

        Raises
        ------
        ValueError
            If *after* is not in the pipeline.
        """
        if after not in self._event_map:
            raise ValueError(f"Event '{after}' not found in pipeline")
        if isinstance(event, str):
            event = get_event(event)()
        idx = self.events.index(self._event_map[after])
        self.events.insert(idx + 1, event)
        self._event_map[event.name] = event

    def remove(self, event_name: str) -> None:
        """
        Remove event from pipeline.

        Raises
        ------
        ValueError
            If the event is not in the pipeline.
        """
        if event_name not in self._event_map:
            raise ValueError(f"Event '{event_name}' not found in pipeline")
        self.events.remove(self._event_map.pop(event_name))

    def replace(self, old_name: str, new_event: Event | str) -> None:
        """
        Replace the named event with another.

        Raises
        ------
        ValueError
            If *old_name* is not in the pipeline.
        """
        if old_name not in self._event_map:
            raise ValueError(f"Event '{old_name}' not found in pipeline")
        if isinstance(new_event, str):
            new_event = get_event(new_event)()
        idx = self.events.index(self._event_map.pop(old_name))
        self.events[idx] = new_event
        self._event_map[new_event.name] = new_event

    @property
    def names(self) -> list[str]:
        """Event names in execution order."""
        return [event.name for event in self.events]

    def __len__(self) -> int:
        return len(self.events)

    def __repr__(self) -> str:
        return f"Pipeline(n_events={len(self.events)})"
