"""
Diagnostics trace and analytics recorder.

:class:`DiagnosticsTrace` keeps a bounded per-tick record of every price,
multiplier, wage, staffing and tax decision, enough to reconstruct why a
value changed. Each record is also emitted at DEBUG on the
``marketeconomy.diagnostics`` logger, which ``logging.diagnostics_file``
routes to a file.

:class:`AnalyticsRecorder` samples wage bands and per-resource prices into
capped histories for charting.

Note: pandas is an optional dependency. It is only required for
``AnalyticsRecorder.to_dataframe``. Install with:
pip install market-economy[pandas] or pip install pandas
"""

from __future__ import annotations

import math
from collections import deque
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from marketeconomy import logging
from marketeconomy.logging import DIAGNOSTICS_LOGGER
from marketeconomy.resources import Resource, is_tradeable

if TYPE_CHECKING:  # pragma: no cover
    from pandas import DataFrame

log = logging.getLogger(DIAGNOSTICS_LOGGER)

MIN_SAMPLES = 32


def _import_pandas() -> Any:
    """
    Lazily import pandas with helpful error message if not installed.

    Raises
    ------
    ImportError
        If pandas is not installed.
    """
    try:
        import pandas as pd

        return pd
    except ImportError:  # pragma: no cover
        raise ImportError(
            "pandas is required for DataFrame export. "
            "Install it with: pip install pandas"
        ) from None


# ── trace ─────────────────────────────────────────────────────────────────
@dataclass(slots=True, frozen=True)
class TraceRecord:
    """One diagnostic record."""

    tick: int
    category: str  # "price", "multiplier", "wages", "workforce", "tax", ...
    subject: str  # resource name or entity id
    values: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        body = ", ".join(
            f"{k}={v:.4g}" if isinstance(v, float) else f"{k}={v}"
            for k, v in self.values.items()
        )
        return f"[{self.category}] tick={self.tick} {self.subject}: {body}"


class DiagnosticsTrace:
    """
    Bounded in-memory trace (oldest records drop first).

    Parameters
    ----------
    capacity : int
        Maximum records kept; 0 disables recording (the log line is still
        emitted).
    """

    def __init__(self, capacity: int = 4096) -> None:
        self._records: deque[TraceRecord] = deque(maxlen=max(0, capacity))

    @property
    def capacity(self) -> int:
        return self._records.maxlen or 0

    def record(self, tick: int, category: str, subject: object, **values: Any) -> None:
        rec = TraceRecord(tick=tick, category=category, subject=str(subject), values=values)
        if self.capacity:
            self._records.append(rec)
        if log.isEnabledFor(logging.DEBUG):
            log.debug(str(rec))

    def records(
        self, category: str | None = None, subject: object | None = None
    ) -> list[TraceRecord]:
        """Records filtered by category and/or subject, oldest first."""
        return [
            r
            for r in self._records
            if (category is None or r.category == category)
            and (subject is None or r.subject == str(subject))
        ]

    def last(self, category: str | None = None) -> TraceRecord | None:
        for rec in reversed(self._records):
            if category is None or rec.category == category:
                return rec
        return None

    def clear(self) -> None:
        self._records.clear()

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[TraceRecord]:
        return iter(self._records)


# ── analytics ─────────────────────────────────────────────────────────────
@dataclass(slots=True, frozen=True)
class WageSample:
    tick: int
    levels: tuple[int, int, int, int, int]


@dataclass(slots=True, frozen=True)
class PriceSample:
    tick: int
    price: float


class AnalyticsRecorder:
    """
    Capped histories of wage bands and per-resource prices.

    At most one sample per tick and series: a later sample in the same tick
    replaces the previous one. Sentinel resources and non-finite or
    non-positive prices are ignored.

    Parameters
    ----------
    max_samples : int
        Cap per series; floored at 32.
    """

    def __init__(self, max_samples: int = 2048) -> None:
        self._max_samples = max(MIN_SAMPLES, max_samples)
        self._wages: list[WageSample] = []
        self._prices: dict[Resource, list[PriceSample]] = {}

    @property
    def max_samples(self) -> int:
        return self._max_samples

    @max_samples.setter
    def max_samples(self, value: int) -> None:
        self._max_samples = max(MIN_SAMPLES, int(value))
        self._trim(self._wages)
        for series in self._prices.values():
            self._trim(series)

    def _trim(self, series: list) -> None:  # type: ignore[type-arg]
        excess = len(series) - self._max_samples
        if excess > 0:
            del series[:excess]

    def record_wages(self, tick: int, wages: Sequence[int]) -> None:
        sample = WageSample(tick=tick, levels=tuple(int(w) for w in wages[:5]))  # type: ignore[arg-type]
        if self._wages and self._wages[-1].tick == tick:
            self._wages[-1] = sample
        else:
            self._wages.append(sample)
            self._trim(self._wages)

    def record_price(self, tick: int, resource: Resource, price: float) -> bool:
        if not is_tradeable(resource) or not math.isfinite(price) or price <= 0.0:
            return False
        series = self._prices.setdefault(Resource(resource), [])
        sample = PriceSample(tick=tick, price=float(price))
        if series and series[-1].tick == tick:
            series[-1] = sample
        else:
            series.append(sample)
            self._trim(series)
        return True

    @property
    def wage_samples(self) -> list[WageSample]:
        return list(self._wages)

    def price_samples(self, resource: Resource) -> list[PriceSample]:
        return list(self._prices.get(Resource(resource), ()))

    def latest_price(self, resource: Resource) -> float | None:
        series = self._prices.get(Resource(resource))
        return series[-1].price if series else None

    @property
    def tracked_resources(self) -> list[Resource]:
        """Resources with price samples, in first-seen order."""
        return list(self._prices)

    def clear(self) -> None:
        self._wages.clear()
        self._prices.clear()

    def to_dataframe(self) -> DataFrame:
        """
        Export samples as a long-format DataFrame.

        Columns: ``tick``, ``series`` (``wage_level_0`` .. ``wage_level_4`` or
        the resource name) and ``value``.

        Raises
        ------
        ImportError
            If pandas is not installed.
        """
        pd = _import_pandas()
        rows: list[tuple[int, str, float]] = []
        for ws in self._wages:
            rows.extend((ws.tick, f"wage_level_{i}", float(w)) for i, w in enumerate(ws.levels))
        for resource, series in self._prices.items():
            rows.extend((ps.tick, resource.name.lower(), ps.price) for ps in series)
        return pd.DataFrame(rows, columns=["tick", "series", "value"])
