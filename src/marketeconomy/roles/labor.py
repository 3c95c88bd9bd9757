"""Citywide wage baseline."""

from __future__ import annotations

import numpy as np

from marketeconomy.core.decorators import role
from marketeconomy.host import N_WAGE_LEVELS
from marketeconomy.typing import Int1D


@role
class WageBaseline:
    """
    The five host wage bands as captured before any adjustment.

    Captured at most once per session (``initialized``) and the only target
    of a restore. ``last_applied`` mirrors what the engine last wrote to the
    host; ``last_multiplier`` is the multiplier behind it.
    """

    wages: Int1D
    last_applied: Int1D
    initialized: bool = False
    last_multiplier: float = 1.0

    @classmethod
    def empty(cls) -> WageBaseline:
        return cls(
            wages=np.zeros(N_WAGE_LEVELS, dtype=np.int64),
            last_applied=np.zeros(N_WAGE_LEVELS, dtype=np.int64),
        )
