"""Tests for registry system and the @role / @event decorators."""

from dataclasses import dataclass

import numpy as np
import pytest

from marketeconomy.core import Event, Role, event, get_event, get_role, role
from marketeconomy.core.registry import list_events, list_roles
from marketeconomy.typing import Float1D


def test_builtin_events_registered():
    """Importing the package registers the four built-in steps."""
    for name in (
        "adjust_wages",
        "update_market_prices",
        "enforce_workforce_utilization",
        "adjust_company_profits",
    ):
        assert name in list_events()


def test_builtin_roles_registered():
    assert {"MarketLedger", "PriceBook", "WageBaseline"} <= set(list_roles())


def test_builtin_event_flags():
    assert get_event("adjust_wages").flag == "wages"
    assert get_event("update_market_prices").flag == "pricing"
    assert get_event("enforce_workforce_utilization").flag == "utilization"
    assert get_event("adjust_company_profits").flag == "company_profit"


def test_role_auto_registration(clean_registry):
    """Roles are auto-registered via __init_subclass__ (no decorator)."""

    @dataclass(slots=True)
    class CurrencyReserve(Role):
        balance: Float1D

    assert get_role("CurrencyReserve") is CurrencyReserve
    assert list_roles() == ["CurrencyReserve"]


def test_event_auto_registration_uses_snake_case(clean_registry):
    """Event names default to snake_case of the class name."""

    @dataclass(slots=True)
    class CollectImportDuties(Event):
        def execute(self, engine):
            pass

    assert CollectImportDuties.name == "collect_import_duties"
    assert get_event("collect_import_duties") is CollectImportDuties


def test_event_custom_name(clean_registry):
    @dataclass(slots=True)
    class Anything(Event, name="settle_rent"):
        def execute(self, engine):
            pass

    assert get_event("settle_rent") is Anything


def test_missing_names_raise_with_available_list(clean_registry):
    @dataclass(slots=True)
    class OnlyOne(Event):
        def execute(self, engine):
            pass

    with pytest.raises(KeyError, match="only_one"):
        get_event("missing_event")
    with pytest.raises(KeyError, match="Role 'Nope' not found"):
        get_role("Nope")


class TestDecorators:
    """The decorators rebase plain classes onto Role / Event."""

    def test_role_without_parens(self, clean_registry):
        @role
        class FuelStock:
            """Test role."""

            litres: Float1D

        assert issubclass(FuelStock, Role)
        assert hasattr(FuelStock, "__slots__")
        assert get_role("FuelStock") is FuelStock

        stock = FuelStock(litres=np.array([1.0, 2.0]))
        np.testing.assert_array_equal(stock.litres, [1.0, 2.0])

    def test_role_with_custom_name(self, clean_registry):
        @role(name="Reserve")
        class Whatever:
            amount: Float1D

        assert get_role("Reserve") is Whatever

    def test_event_without_parens(self, clean_registry):
        calls = []

        @event
        class RecordTick:
            flag = "pricing"

            def execute(self, engine):
                calls.append(engine)

        assert issubclass(RecordTick, Event)
        assert RecordTick.flag == "pricing"
        assert get_event("record_tick") is RecordTick

        RecordTick().execute("engine")
        assert calls == ["engine"]

    def test_event_with_custom_name(self, clean_registry):
        @event(name="levy_tolls")
        class TollCollector:
            def execute(self, engine):
                pass

        assert TollCollector.name == "levy_tolls"
        assert get_event("levy_tolls") is TollCollector

    def test_existing_subclass_is_not_rebased(self, clean_registry):
        @event
        class AlreadyEvent(Event):
            def execute(self, engine):
                pass

        assert AlreadyEvent.__mro__[1] is Event


def test_event_logger_name():
    instance = get_event("adjust_wages")()
    assert instance.get_logger().name == "marketeconomy.events.adjust_wages"
    assert repr(instance) == "AdjustWages(name='adjust_wages')"


def test_role_repr():
    assert repr(get_role("PriceBook").empty()) == "PriceBook(fields=5)"
