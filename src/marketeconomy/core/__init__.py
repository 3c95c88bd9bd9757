"""Core infrastructure: roles, events, registry and pipeline."""

from typing import Any, Callable

from marketeconomy.core.decorators import event as event_decorator
from marketeconomy.core.decorators import role as role_decorator
from marketeconomy.core.event import Event
from marketeconomy.core.pipeline import Pipeline
from marketeconomy.core.registry import get_event, get_role, list_events, list_roles
from marketeconomy.core.role import Role

# Decorator functions under their public names (shadow the submodule names)
event: Callable[..., Any] = event_decorator
role: Callable[..., Any] = role_decorator

__all__ = [
    "Event",
    "Pipeline",
    "Role",
    "event",
    "get_event",
    "get_role",
    "list_events",
    "list_roles",
    "role",
]
