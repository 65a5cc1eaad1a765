"""
External Data Providers Package

Opaque collaborators the analyzers consume:
- Company financial metrics (Alpha Vantage) with a deterministic mock fallback
- Legal case search (CourtListener) with a mock fallback
- Text translation (LibreTranslate) with a pass-through fallback
- Market and macroeconomic snapshots
"""

from .base import HttpProvider, ProviderError

from .financial_data import (
    AlphaVantageClient,
    EarningsQuarter,
    FinancialMetrics,
    mock_financials,
    parse_number
)

from .case_law import (
    CaseSummary,
    CourtListenerClient,
    MOCK_SEARCH_RESULTS
)

from .translation import (
    TranslationClient,
    TranslationResult,
    DEFAULT_LANGUAGES
)

from .market_data import (
    MarketConditions,
    MacroSnapshot,
    StaticMarketDataProvider,
    classify_market_environment
)

__all__ = [
    "HttpProvider",
    "ProviderError",
    "AlphaVantageClient",
    "EarningsQuarter",
    "FinancialMetrics",
    "mock_financials",
    "parse_number",
    "CaseSummary",
    "CourtListenerClient",
    "MOCK_SEARCH_RESULTS",
    "TranslationClient",
    "TranslationResult",
    "DEFAULT_LANGUAGES",
    "MarketConditions",
    "MacroSnapshot",
    "StaticMarketDataProvider",
    "classify_market_environment"
]
