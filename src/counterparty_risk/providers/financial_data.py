"""
Company Financial Data Provider

Fetches company overview and quarterly earnings from Alpha Vantage and
normalizes them into FinancialMetrics. A deterministic mock shape is
available for when the provider cannot be reached.
"""

import logging
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Mapping, Optional, Tuple

import httpx

from ..models.results import Serializable
from .base import HttpProvider, ProviderError

logger = logging.getLogger(__name__)


def parse_number(value: Any) -> Optional[float]:
    """Parse provider numeric strings; missing or malformed values become None"""
    if value is None or value in ("", "None", "-"):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


@dataclass(frozen=True)
class EarningsQuarter(Serializable):
    """One reported quarter against analyst estimates"""
    date: Optional[str]
    reported_eps: Optional[float]
    estimated_eps: Optional[float]
    surprise: Optional[float]
    surprise_percentage: Optional[float]

    @property
    def missed_estimate(self) -> bool:
        return self.surprise is not None and self.surprise < 0


@dataclass(frozen=True)
class FinancialMetrics(Serializable):
    """Normalized company financial metrics"""
    market_cap: Optional[float] = None
    pe_ratio: Optional[float] = None
    peg_ratio: Optional[float] = None
    book_value: Optional[float] = None
    dividend_yield: Optional[float] = None
    eps: Optional[float] = None
    beta: Optional[float] = None
    week52_high: Optional[float] = None
    week52_low: Optional[float] = None
    profit_margin: Optional[float] = None
    operating_margin: Optional[float] = None
    return_on_assets: Optional[float] = None
    return_on_equity: Optional[float] = None
    revenue_ttm: Optional[float] = None
    gross_profit_ttm: Optional[float] = None
    debt_to_equity: Optional[float] = None
    current_ratio: Optional[float] = None
    quick_ratio: Optional[float] = None
    earnings: Tuple[EarningsQuarter, ...] = ()
    data_quality: float = 0.0
    note: Optional[str] = None
    is_mock: bool = False

    # Alpha Vantage OVERVIEW field for each metric
    OVERVIEW_FIELDS = {
        "market_cap": "MarketCapitalization",
        "pe_ratio": "PERatio",
        "peg_ratio": "PEGRatio",
        "book_value": "BookValue",
        "dividend_yield": "DividendYield",
        "eps": "EPS",
        "beta": "Beta",
        "week52_high": "52WeekHigh",
        "week52_low": "52WeekLow",
        "profit_margin": "ProfitMargin",
        "operating_margin": "OperatingMarginTTM",
        "return_on_assets": "ReturnOnAssetsTTM",
        "return_on_equity": "ReturnOnEquityTTM",
        "revenue_ttm": "RevenueTTM",
        "gross_profit_ttm": "GrossProfitTTM",
        "debt_to_equity": "DebtToEquityRatio",
        "current_ratio": "CurrentRatio",
        "quick_ratio": "QuickRatio",
    }

    @classmethod
    def metric_names(cls) -> List[str]:
        return list(cls.OVERVIEW_FIELDS)

    @classmethod
    def from_alpha_vantage(cls, overview: Mapping[str, Any],
                           quarterly_earnings: List[Mapping[str, Any]]) -> "FinancialMetrics":
        """Build metrics from raw OVERVIEW and EARNINGS payloads"""
        metrics = {
            name: parse_number(overview.get(source))
            for name, source in cls.OVERVIEW_FIELDS.items()
        }
        earnings = tuple(
            EarningsQuarter(
                date=quarter.get("fiscalDateEnding"),
                reported_eps=parse_number(quarter.get("reportedEPS")),
                estimated_eps=parse_number(quarter.get("estimatedEPS")),
                surprise=parse_number(quarter.get("surprise")),
                surprise_percentage=parse_number(quarter.get("surprisePercentage"))
            )
            for quarter in quarterly_earnings[:4]
        )
        return cls(**metrics, earnings=earnings, data_quality=cls._assess_data_quality(metrics))

    @staticmethod
    def _assess_data_quality(metrics: Mapping[str, Optional[float]]) -> float:
        """Share of metrics with a usable non-zero value"""
        if not metrics:
            return 0.0
        valid = sum(1 for value in metrics.values() if value not in (None, 0))
        return valid / len(metrics)

    def with_overrides(self, overrides: Mapping[str, Any]) -> "FinancialMetrics":
        """Apply caller-supplied metric values over fetched ones"""
        if not overrides:
            return self
        names = set(self.metric_names())
        values = {
            name: parse_number(value)
            for name, value in overrides.items()
            if name in names
        }
        if not values:
            return self
        updated = replace(self, **values)
        metrics = {name: getattr(updated, name) for name in self.metric_names()}
        return replace(updated, data_quality=max(self.data_quality, self._assess_data_quality(metrics)))


def mock_financials(symbol: str) -> FinancialMetrics:
    """Deterministic fallback metrics used when the provider is unavailable"""
    return FinancialMetrics(
        market_cap=1000000000,
        pe_ratio=15.5,
        debt_to_equity=0.4,
        current_ratio=1.8,
        profit_margin=0.12,
        return_on_equity=0.15,
        data_quality=0.5,
        note=f"Mock data for {symbol} - real API unavailable",
        is_mock=True
    )


class AlphaVantageClient(HttpProvider):
    """Company overview and earnings from the Alpha Vantage API"""

    def __init__(self, api_key: str = "demo",
                 base_url: str = "https://www.alphavantage.co/query",
                 client: Optional[httpx.AsyncClient] = None,
                 timeout: float = 10.0):
        super().__init__(client=client, timeout=timeout)
        self.api_key = api_key
        self.base_url = base_url

    async def get_company_overview(self, symbol: str) -> Dict[str, Any]:
        data = await self._get_json(self.base_url, params={
            "function": "OVERVIEW",
            "symbol": symbol,
            "apikey": self.api_key
        })
        # Rate-limit and unknown-symbol responses come back as 200 with a note
        if not isinstance(data, dict) or not data.get("Symbol"):
            note = data.get("Note") or data.get("Information") if isinstance(data, dict) else None
            raise ProviderError(f"No company overview for {symbol}: {note or 'empty response'}")
        return data

    async def get_quarterly_earnings(self, symbol: str) -> List[Dict[str, Any]]:
        data = await self._get_json(self.base_url, params={
            "function": "EARNINGS",
            "symbol": symbol,
            "apikey": self.api_key
        })
        if not isinstance(data, dict):
            return []
        return list(data.get("quarterlyEarnings") or [])

    async def fetch_financials(self, symbol: str) -> FinancialMetrics:
        """Overview plus the last four quarters of earnings for one company"""
        overview = await self.get_company_overview(symbol)
        earnings = await self.get_quarterly_earnings(symbol)
        logger.info(f"Fetched financials for {symbol} ({len(earnings)} earnings quarters)")
        try:
            return FinancialMetrics.from_alpha_vantage(overview, earnings)
        except (AttributeError, TypeError, ValueError) as e:
            raise ProviderError(f"Malformed financial payload for {symbol}: {e}") from e
