"""Registry of role and event classes, keyed by name."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from marketeconomy.core.event import Event
    from marketeconomy.core.role import Role

_ROLE_REGISTRY: dict[str, type[Role]] = {}
_EVENT_REGISTRY: dict[str, type[Event]] = {}


def _lookup(registry: dict, kind: str, name: str):  # type: ignore[no-untyped-def]
    try:
        return registry[name]
    except KeyError:
        available = ", ".join(sorted(registry))
        raise KeyError(
            f"{kind} '{name}' not found in registry. Available: {available}"
        ) from None


def get_role(name: str) -> type[Role]:
    """
    Retrieve a role class by name.

    Raises
    ------
    KeyError
        If the role name is not registered.
    """
    return _lookup(_ROLE_REGISTRY, "Role", name)  # type: ignore[no-any-return]


def get_event(name: str) -> type[Event]:
    """
    Retrieve an event class by name.

    Raises
    ------
    KeyError
        If the event name is not registered.
    """
    return _lookup(_EVENT_REGISTRY, "Event", name)  # type: ignore[no-any-return]


def list_roles() -> list[str]:
    """Return sorted list of all registered role names."""
    return sorted(_ROLE_REGISTRY)


def list_events() -> list[str]:
    """Return sorted list of all registered event names."""
    return sorted(_EVENT_REGISTRY)
