"""State containers owned by the engine."""

from marketeconomy.roles.labor import WageBaseline
from marketeconomy.roles.market import MarketLedger, PriceBook
from marketeconomy.roles.trackers import (
    CompanyFinanceState,
    EntityTracker,
    ProductionState,
    WorkplaceState,
)

__all__ = [
    "CompanyFinanceState",
    "EntityTracker",
    "MarketLedger",
    "PriceBook",
    "ProductionState",
    "WageBaseline",
    "WorkplaceState",
]
