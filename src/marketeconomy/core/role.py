"""Role (state container) base class."""

from __future__ import annotations

from abc import ABC
from dataclasses import dataclass
from typing import Any, ClassVar


@dataclass(slots=True)
class Role(ABC):
    """
    Base class for engine state containers.

    A Role holds NumPy arrays (indexed by ``int(Resource)``) or per-entity
    tables owned by one sub-engine. Roles carry no behaviour of their own
    beyond trivial accessors; the functions in :mod:`marketeconomy.systems`
    read and mutate them.

    Subclasses register themselves by name on definition.
    """

    name: ClassVar[str | None] = None

    def __init_subclass__(cls, name: str | None = None, **kwargs: Any) -> None:
        super(Role, cls).__init_subclass__(**kwargs)

        # @dataclass(slots=True) rebuilds the class and calls this hook again
        # without the custom name, so keep a name already set.
        if name is not None:
            cls.name = name
        elif cls.name is None:
            cls.name = cls.__name__

        from marketeconomy.core.registry import _ROLE_REGISTRY

        _ROLE_REGISTRY[cls.name] = cls

    def __repr__(self) -> str:
        fields = getattr(self, "__dataclass_fields__", {})
        return f"{self.name or type(self).__name__}(fields={len(fields)})"
