"""
Decorators for terse Role and Event definitions.

``@role`` and ``@event`` turn a plain class into a slotted dataclass that
inherits from :class:`Role` / :class:`Event`, which registers it::

    @event
    class UpdateMarketPrices:
        flag = "pricing"

        def execute(self, engine: Engine) -> None:
            ...
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, TypeVar

T = TypeVar("T")


def _rebase(cls: type, base: type) -> type:
    """Recreate *cls* with *base* as its only parent (keeps slots working)."""
    if issubclass(cls, base):
        return cls
    namespace: dict[str, Any] = {
        "__module__": cls.__module__,
        "__qualname__": cls.__qualname__,
        "__doc__": cls.__doc__,
        "__annotations__": getattr(cls, "__annotations__", {}),
    }
    # Raw descriptors, so classmethods bind to the new class
    for attr_name, value in vars(cls).items():
        if not attr_name.startswith("__"):
            namespace[attr_name] = value
    return type(cls.__name__, (base,), namespace)


def _decorate(
    base: type,
    cls: type[T] | None,
    name: str | None,
    dataclass_kwargs: dict[str, Any],
) -> type[T] | Callable[[type[T]], type[T]]:
    dataclass_kwargs.setdefault("slots", True)

    def decorator(cls: type[T]) -> type[T]:
        new = _rebase(cls, base)
        if name is not None:
            new.name = name  # type: ignore[attr-defined]
        return dataclass(**dataclass_kwargs)(new)  # type: ignore[no-any-return]

    return decorator if cls is None else decorator(cls)


def role(
    cls: type[T] | None = None, *, name: str | None = None, **dataclass_kwargs: Any
) -> type[T] | Callable[[type[T]], type[T]]:
    """Define a :class:`Role`; usable as ``@role`` or ``@role(name=...)``."""
    from marketeconomy.core.role import Role

    return _decorate(Role, cls, name, dataclass_kwargs)


def event(
    cls: type[T] | None = None, *, name: str | None = None, **dataclass_kwargs: Any
) -> type[T] | Callable[[type[T]], type[T]]:
    """Define an :class:`Event`; usable as ``@event`` or ``@event(name=...)``."""
    from marketeconomy.core.event import Event

    return _decorate(Event, cls, name, dataclass_kwargs)
