"""
Financial Risk Analyzer

Scores a counterparty's financial risk from four independently-fetched
inputs:
- Company financial metrics (provider, or deterministic mock data)
- Market conditions (volatility and credit spreads)
- Industry trend profile and risk multiplier
- Macroeconomic snapshot

Each input may fail on its own; scoring uses whatever arrived.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Tuple

from ..models.results import Deduction, Serializable, utc_timestamp
from ..models.risk_config import FinancialRiskConfig, RiskBands, RiskLevel
from ..providers.financial_data import FinancialMetrics, mock_financials
from ..providers.market_data import MacroSnapshot, MarketConditions, StaticMarketDataProvider
from ..utils.concurrency import gather_settled

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IndustryTrends(Serializable):
    """Qualitative industry profile with its risk multiplier"""
    industry: str
    growth: str
    cyclicality: str
    regulation: str
    competition: str
    barriers: str
    risk_multiplier: float


@dataclass(frozen=True)
class FinancialRiskAssessment(Serializable):
    """Financial risk score for one counterparty"""
    counterparty: Optional[str]
    industry: str
    overall_score: float
    risk_level: RiskLevel
    deductions: Tuple[Deduction, ...]
    breakdown: Mapping[str, str]
    recommendations: Tuple[str, ...]
    financial_data: Optional[FinancialMetrics] = None
    market_conditions: Optional[MarketConditions] = None
    industry_trends: Optional[IndustryTrends] = None
    macro_factors: Optional[MacroSnapshot] = None
    max_score: int = 100
    timestamp: str = field(default_factory=utc_timestamp)
    degraded: bool = False

    @classmethod
    def default(cls, counterparty: Optional[str], industry: str,
                default_score: float = 70) -> "FinancialRiskAssessment":
        """Degraded assessment used when no financial input could be scored"""
        return cls(
            counterparty=counterparty,
            industry=industry,
            overall_score=default_score,
            risk_level=RiskLevel.MEDIUM,
            deductions=(Deduction(
                category="Data Availability",
                points_deducted=100 - default_score,
                reason="Limited financial data available for analysis"
            ),),
            breakdown={
                "financial": "unavailable",
                "market": "limited",
                "industry": "general",
                "macro": "general"
            },
            recommendations=(
                "Request recent financial statements for detailed analysis",
                "Consider manual review due to limited automated analysis"
            ),
            degraded=True
        )


class FinancialRiskAnalyzer:
    """Financial risk assessment over market, industry and company data"""

    def __init__(self, config: Optional[FinancialRiskConfig] = None,
                 bands: Optional[RiskBands] = None,
                 metrics_provider: Any = None,
                 market_provider: Any = None):
        """
        Initialize the analyzer

        Args:
            config: Thresholds, point values and industry profiles
            bands: Score bands for the risk level
            metrics_provider: Object exposing ``async fetch_financials(symbol)``;
                when absent mock metrics are used
            market_provider: Object exposing ``get_market_conditions`` and
                ``get_macro_snapshot`` coroutines
        """
        self.config = config or FinancialRiskConfig()
        self.bands = bands or RiskBands()
        self.metrics_provider = metrics_provider
        self.market_provider = market_provider or StaticMarketDataProvider()

    async def assess_financial_risk(self, counterparty: Optional[str],
                                    industry: str = "default",
                                    additional_data: Optional[Mapping[str, Any]] = None) -> FinancialRiskAssessment:
        """Fetch all inputs concurrently and score whichever succeeded"""
        industry = industry or "default"
        try:
            results = await gather_settled({
                "financial": self.get_company_financials(counterparty, additional_data),
                "market": self.assess_market_conditions(),
                "industry": self.analyze_industry_trends(industry),
                "macro": self.evaluate_macroeconomic_factors(),
            })

            if not any(result.ok for result in results.values()):
                logger.warning(f"No financial inputs available for {counterparty}")
                return FinancialRiskAssessment.default(counterparty, industry, self.config.default_score)

            return self.calculate_risk_score(
                counterparty,
                industry,
                financial_data=results["financial"].unwrap_or(None),
                market_conditions=results["market"].unwrap_or(None),
                industry_trends=results["industry"].unwrap_or(None),
                macro_factors=results["macro"].unwrap_or(None)
            )
        except Exception as e:
            logger.error(f"Financial risk assessment error: {e}")
            return FinancialRiskAssessment.default(counterparty, industry, self.config.default_score)

    async def get_company_financials(self, symbol: Optional[str],
                                     overrides: Optional[Mapping[str, Any]] = None) -> FinancialMetrics:
        """Provider metrics with caller overrides applied; mock data on provider failure"""
        if self.metrics_provider is None:
            metrics = mock_financials(symbol)
        else:
            try:
                metrics = await self.metrics_provider.fetch_financials(symbol)
            except Exception as e:
                logger.warning(f"Financial data unavailable for {symbol}, using mock data: {e}")
                metrics = mock_financials(symbol)
        return metrics.with_overrides(overrides or {})

    async def assess_market_conditions(self) -> MarketConditions:
        return await self.market_provider.get_market_conditions()

    async def analyze_industry_trends(self, industry: str) -> IndustryTrends:
        profile = self.config.get_industry_profile(industry)
        return IndustryTrends(industry=industry, **profile.to_dict())

    async def evaluate_macroeconomic_factors(self) -> MacroSnapshot:
        return await self.market_provider.get_macro_snapshot()

    def calculate_risk_score(self, counterparty: Optional[str], industry: str,
                             financial_data: Optional[FinancialMetrics] = None,
                             market_conditions: Optional[MarketConditions] = None,
                             industry_trends: Optional[IndustryTrends] = None,
                             macro_factors: Optional[MacroSnapshot] = None) -> FinancialRiskAssessment:
        """Subtract metric, market, industry and macro deductions from 100"""
        config = self.config
        score = 100.0
        deductions: List[Deduction] = []

        if financial_data is not None:
            metric_deductions = self.assess_financial_metrics(financial_data)
            score -= sum(d.points_deducted for d in metric_deductions)
            deductions.extend(metric_deductions)

        if market_conditions is not None:
            market_risk = self.assess_market_risk(market_conditions)
            score -= market_risk
            if market_risk > config.market_report_floor:
                deductions.append(Deduction(
                    category="Market Conditions",
                    points_deducted=market_risk,
                    reason="Adverse market conditions detected"
                ))

        if industry_trends is not None:
            adjustment = round((industry_trends.risk_multiplier - 1) * config.industry_scale, 2)
            if adjustment > 0:
                score -= adjustment
                deductions.append(Deduction(
                    category="Industry Risk",
                    points_deducted=adjustment,
                    reason=f"Higher risk industry: {industry}"
                ))

        if macro_factors is not None:
            macro_risk = self.assess_macro_risk(macro_factors)
            score -= macro_risk
            if macro_risk > config.macro_report_floor:
                deductions.append(Deduction(
                    category="Macroeconomic Risk",
                    points_deducted=macro_risk,
                    reason="Unfavorable economic conditions"
                ))

        score = min(max(score, 0.0), 100.0)

        return FinancialRiskAssessment(
            counterparty=counterparty,
            industry=industry,
            overall_score=score,
            risk_level=self.bands.get_risk_level(score),
            deductions=tuple(deductions),
            breakdown={
                "financial": "analyzed" if financial_data is not None else "unavailable",
                "market": "analyzed" if market_conditions is not None else "unavailable",
                "industry": "analyzed" if industry_trends is not None else "unavailable",
                "macro": "analyzed" if macro_factors is not None else "unavailable"
            },
            recommendations=tuple(self.generate_recommendations(score, deductions)),
            financial_data=financial_data,
            market_conditions=market_conditions,
            industry_trends=industry_trends,
            macro_factors=macro_factors
        )

    def assess_financial_metrics(self, metrics: FinancialMetrics) -> List[Deduction]:
        """Leverage, liquidity, profitability and earnings-quality deductions"""
        config = self.config
        deductions = []

        if metrics.debt_to_equity is not None and metrics.debt_to_equity > config.debt_to_equity_high:
            deductions.append(Deduction(
                category="Leverage Risk",
                points_deducted=config.leverage_points,
                reason=f"High debt-to-equity ratio: {metrics.debt_to_equity}"
            ))

        if metrics.current_ratio is not None and metrics.current_ratio < config.current_ratio_poor:
            deductions.append(Deduction(
                category="Liquidity Risk",
                points_deducted=config.liquidity_points,
                reason=f"Low current ratio: {metrics.current_ratio}"
            ))

        if metrics.profit_margin is not None and metrics.profit_margin < config.profit_margin_floor:
            deductions.append(Deduction(
                category="Profitability Risk",
                points_deducted=config.profitability_points,
                reason="Negative profit margins"
            ))

        if len(metrics.earnings) >= config.earnings_window:
            missed = sum(1 for quarter in metrics.earnings if quarter.missed_estimate)
            if missed >= config.missed_estimates_limit:
                deductions.append(Deduction(
                    category="Earnings Quality",
                    points_deducted=config.earnings_points,
                    reason="Frequently missing earnings estimates"
                ))

        return deductions

    def assess_market_risk(self, market: MarketConditions) -> float:
        config = self.config
        risk = 0.0
        if market.volatility_index > config.volatility_limit:
            risk += config.volatility_points
        if market.high_yield_spread > config.high_yield_spread_limit:
            risk += config.high_yield_points
        if market.risk_environment == "high":
            risk += config.risk_environment_points
        return risk

    def assess_macro_risk(self, macro: MacroSnapshot) -> float:
        config = self.config
        risk = 0.0
        if macro.gdp_growth < config.gdp_growth_floor:
            risk += config.gdp_points
        if macro.inflation_rate > config.inflation_limit:
            risk += config.inflation_points
        if macro.geopolitical_risk == "high":
            risk += config.geopolitical_points
        return risk

    def generate_recommendations(self, score: float, deductions: List[Deduction]) -> List[str]:
        categories = {d.category for d in deductions}
        recommendations = []

        if score < self.bands.medium:
            recommendations.append("Consider requiring additional collateral or guarantees")
            recommendations.append("Implement enhanced monitoring and reporting requirements")

        if "Leverage Risk" in categories:
            recommendations.append("Review debt capacity and refinancing plans")
        if "Liquidity Risk" in categories:
            recommendations.append("Assess working capital management and cash flow projections")
        if "Profitability Risk" in categories:
            recommendations.append("Analyze business model sustainability and turnaround plans")

        if not recommendations:
            recommendations.append("Financial risk appears manageable under current conditions")

        return recommendations
