"""
Type aliases for the market economy engine.

Per-resource state is stored in fixed-length NumPy arrays indexed by
``int(Resource)``; these aliases name the array kinds.
"""

from typing import TypeAlias

import numpy as np
from numpy.typing import NDArray

Float1D: TypeAlias = NDArray[np.float64]
Int1D: TypeAlias = NDArray[np.int64]
Bool1D: TypeAlias = NDArray[np.bool_]

EntityId: TypeAlias = int
"""Stable host entity identifier (index/version packed by the host)."""

__all__ = [
    "Bool1D",
    "EntityId",
    "Float1D",
    "Int1D",
]
