"""Per-entity state tables, pruned against the host's active set each tick."""

from __future__ import annotations

import math
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from typing import Generic, TypeVar

from marketeconomy.typing import EntityId

S = TypeVar("S")


@dataclass(slots=True)
class WorkplaceState:
    """Utilization / maintenance bookkeeping of one workplace."""

    staffed_count: int = 0
    max_workers: int = 0
    accumulated_maintenance: float = 0.0
    maintenance_debt: int = 0
    under_utilized: bool = False


@dataclass(slots=True)
class CompanyFinanceState:
    """Tax bookkeeping of one company between ticks."""

    rent_accumulator: float = 0.0
    last_untaxed_income: int = 0
    last_average_tax_rate: int = 0
    initialized: bool = False

    def rent_due(self, rent_per_day: int, updates_per_day: int) -> tuple[int, float]:
        """
        Whole rent units owed this tick and the fraction left to carry.

        Nothing is stored; assign the carry to ``rent_accumulator`` once the
        tick's tax write went through.
        """
        if rent_per_day <= 0:
            return 0, self.rent_accumulator
        total = self.rent_accumulator + rent_per_day / max(1, updates_per_day)
        due = math.floor(total)
        return due, total - due

    def sync_caches(self, untaxed_income: int, average_tax_rate: int) -> None:
        self.last_untaxed_income = untaxed_income
        self.last_average_tax_rate = average_tax_rate
        self.initialized = True


@dataclass(slots=True)
class ProductionState:
    """Fractional output of one producer not yet turned into whole units."""

    accumulator: float = 0.0

    def accumulate(self, units: float) -> int:
        """Add *units* (negatives count as 0) and return the whole units completed."""
        total = self.accumulator + max(0.0, units)
        whole = math.floor(total)
        self.accumulator = total - whole
        return whole


class EntityTracker(Generic[S]):
    """
    Map from stable entity id to lazily created state.

    Examples
    --------
    >>> tracker = EntityTracker(WorkplaceState)
    >>> tracker.get(7).maintenance_debt
    0
    >>> tracker.prune(active=[])
    1
    """

    def __init__(self, factory: Callable[[], S]) -> None:
        self._factory = factory
        self._states: dict[EntityId, S] = {}

    def get(self, entity: EntityId) -> S:
        """Return the entity's state, creating it on first sight."""
        state = self._states.get(entity)
        if state is None:
            state = self._states[entity] = self._factory()
        return state

    def peek(self, entity: EntityId) -> S | None:
        return self._states.get(entity)

    def prune(self, active: Iterable[EntityId]) -> int:
        """Drop every entity absent from *active*; return how many were dropped."""
        keep = set(active)
        stale = [e for e in self._states if e not in keep]
        for entity in stale:
            del self._states[entity]
        return len(stale)

    def clear(self) -> None:
        self._states.clear()

    def __contains__(self, entity: object) -> bool:
        return entity in self._states

    def __len__(self) -> int:
        return len(self._states)

    def __iter__(self) -> Iterator[EntityId]:
        return iter(self._states)
