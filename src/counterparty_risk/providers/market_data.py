"""
Market and Macroeconomic Data Provider

Snapshots of market conditions and macroeconomic indicators. The static
provider returns a fixed snapshot and stands in for a live economic feed.
"""

from dataclasses import dataclass, field
from typing import Optional

from ..models.results import Serializable, utc_timestamp


@dataclass(frozen=True)
class MarketConditions(Serializable):
    """Market-wide risk indicators"""
    sp500_change: float = 0.0
    volatility_index: float = 20.0
    treasury_10y: Optional[float] = None
    treasury_2y: Optional[float] = None
    dollar_index: Optional[float] = None
    investment_grade_spread: Optional[float] = None
    high_yield_spread: float = 0.0
    risk_environment: str = "medium"
    timestamp: str = field(default_factory=utc_timestamp)
    note: Optional[str] = None


@dataclass(frozen=True)
class MacroSnapshot(Serializable):
    """Macroeconomic indicators"""
    gdp_growth: float = 2.0
    inflation_rate: float = 2.0
    unemployment_rate: Optional[float] = None
    federal_rate: Optional[float] = None
    rate_trend: Optional[str] = None
    economic_cycle: str = "uncertain"
    geopolitical_risk: str = "moderate"


def classify_market_environment(volatility_index: float, high_yield_spread: float) -> str:
    """Overall market risk environment from volatility and credit spreads"""
    if volatility_index > 30 or high_yield_spread > 8:
        return "high"
    if volatility_index > 20 or high_yield_spread > 5:
        return "medium"
    return "low"


class StaticMarketDataProvider:
    """Fixed market and macro snapshot"""

    def __init__(self, market: Optional[MarketConditions] = None,
                 macro: Optional[MacroSnapshot] = None):
        self._market = market
        self._macro = macro

    async def get_market_conditions(self) -> MarketConditions:
        if self._market is not None:
            return self._market

        volatility_index = 18.5
        high_yield_spread = 4.8
        return MarketConditions(
            sp500_change=-0.5,
            volatility_index=volatility_index,
            treasury_10y=4.2,
            treasury_2y=4.5,
            dollar_index=103.2,
            investment_grade_spread=1.2,
            high_yield_spread=high_yield_spread,
            risk_environment=classify_market_environment(volatility_index, high_yield_spread)
        )

    async def get_macro_snapshot(self) -> MacroSnapshot:
        if self._macro is not None:
            return self._macro

        return MacroSnapshot(
            gdp_growth=2.1,
            inflation_rate=3.2,
            unemployment_rate=3.7,
            federal_rate=5.25,
            rate_trend="rising",
            economic_cycle="late-cycle",
            geopolitical_risk="moderate"
        )
