"""Event classes of the economy engine.

Importing this package registers every built-in event:

- labor_market.py → AdjustWages
- market.py → UpdateMarketPrices, SettleMarketSales
- workforce.py → EnforceWorkforceUtilization
- taxation.py → AdjustCompanyProfits
"""

# Import all events to trigger auto-registration
from marketeconomy.events.labor_market import AdjustWages
from marketeconomy.events.market import SettleMarketSales, UpdateMarketPrices
from marketeconomy.events.taxation import AdjustCompanyProfits
from marketeconomy.events.workforce import EnforceWorkforceUtilization

__all__ = [
    "AdjustCompanyProfits",
    "AdjustWages",
    "EnforceWorkforceUtilization",
    "SettleMarketSales",
    "UpdateMarketPrices",
]
