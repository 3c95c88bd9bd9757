# tests/__init__.py

from tests.helpers.factories import FakeHost, make_config, make_engine
from tests.helpers.invariants import assert_basic_invariants

__all__ = [
    "FakeHost",
    "assert_basic_invariants",
    "make_config",
    "make_engine",
]
