"""Pytest configuration and fixtures for marketeconomy tests."""

import os
from pathlib import Path

import pytest

import marketeconomy.events  # noqa: F401 - register all events
from marketeconomy import logging
from marketeconomy.engine import Engine
from tests.helpers.factories import FakeHost, make_engine


@pytest.fixture
def clean_registry():
    """
    Save registry state, clear it for the test, then restore it.

    Request explicitly from tests that define throwaway roles or events.
    DO NOT use autouse=True: integration tests rely on the built-in events
    being registered.
    """
    # noinspection PyProtectedMember
    from marketeconomy.core.registry import _EVENT_REGISTRY, _ROLE_REGISTRY

    saved_roles = dict(_ROLE_REGISTRY)
    saved_events = dict(_EVENT_REGISTRY)

    _ROLE_REGISTRY.clear()
    _EVENT_REGISTRY.clear()

    yield

    _ROLE_REGISTRY.clear()
    _ROLE_REGISTRY.update(saved_roles)
    _EVENT_REGISTRY.clear()
    _EVENT_REGISTRY.update(saved_events)


@pytest.fixture
def host() -> FakeHost:
    """A small city with market, labor, workplace and company data."""
    return FakeHost.populated()


@pytest.fixture
def engine(host: FakeHost) -> Engine:
    """Engine bound to the populated fake host, every feature enabled."""
    return make_engine(host, enable_company_profit=True)


@pytest.fixture(autouse=True)
def mute_marketeconomy_logs(caplog):
    # COVERAGE_RUN executes every log statement; other runs keep tests fast
    if os.environ.get("COVERAGE_RUN") == "true":
        level = logging.DEBUG
    else:
        level = logging.ERROR

    caplog.set_level(level, logger="marketeconomy")
    logging.getLogger("marketeconomy").setLevel(level)


_DIRECTORY_MARKERS = {"integration": "integration", "property": "invariants"}


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    """Mark every test under tests/integration/ and tests/property/."""
    root = Path(__file__).parent
    for item in items:
        try:
            top = item.path.relative_to(root).parts[0]
        except (ValueError, IndexError):
            continue
        marker = _DIRECTORY_MARKERS.get(top)
        if marker is not None:
            item.add_marker(getattr(pytest.mark, marker))
