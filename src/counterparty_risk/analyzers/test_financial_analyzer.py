"""
Test Suite for the Financial Risk Analyzer

Covers metric deductions, market/industry/macro adjustments, caller
overrides, provider fallbacks and the degraded default assessment.
"""

import unittest
from unittest.mock import AsyncMock, Mock, patch

import httpx

from counterparty_risk.analyzers.financial_analyzer import (
    FinancialRiskAnalyzer, FinancialRiskAssessment, IndustryTrends
)
from counterparty_risk.models.risk_config import RiskLevel
from counterparty_risk.providers.base import ProviderError
from counterparty_risk.providers.financial_data import AlphaVantageClient, EarningsQuarter, FinancialMetrics
from counterparty_risk.providers.market_data import MacroSnapshot, MarketConditions, StaticMarketDataProvider

STRESSED_MARKET = MarketConditions(volatility_index=35, high_yield_spread=9, risk_environment="high")
STRESSED_MACRO = MacroSnapshot(gdp_growth=0.5, inflation_rate=5.0, geopolitical_risk="high")


def quarter(surprise):
    return EarningsQuarter(date="2024-03-31", reported_eps=1.0, estimated_eps=1.1,
                           surprise=surprise, surprise_percentage=None)


class TestFinancialMetrics(unittest.TestCase):

    def setUp(self):
        self.analyzer = FinancialRiskAnalyzer()

    def test_healthy_metrics_have_no_deductions(self):
        metrics = FinancialMetrics(debt_to_equity=0.4, current_ratio=1.8, profit_margin=0.12)
        self.assertEqual(self.analyzer.assess_financial_metrics(metrics), [])

    def test_weak_metrics(self):
        metrics = FinancialMetrics(debt_to_equity=2.5, current_ratio=0.5, profit_margin=-0.1)
        deductions = self.analyzer.assess_financial_metrics(metrics)

        self.assertEqual(
            [(d.category, d.points_deducted) for d in deductions],
            [("Leverage Risk", 15), ("Liquidity Risk", 12), ("Profitability Risk", 20)]
        )
        self.assertEqual(deductions[0].reason, "High debt-to-equity ratio: 2.5")

    def test_missing_metrics_are_skipped(self):
        self.assertEqual(self.analyzer.assess_financial_metrics(FinancialMetrics()), [])

    def test_earnings_quality(self):
        missed = FinancialMetrics(earnings=(quarter(-0.1), quarter(-0.2), quarter(-0.05), quarter(0.1)))
        deductions = self.analyzer.assess_financial_metrics(missed)
        self.assertEqual([d.category for d in deductions], ["Earnings Quality"])

        too_few = FinancialMetrics(earnings=(quarter(-0.1), quarter(-0.2), quarter(-0.05)))
        self.assertEqual(self.analyzer.assess_financial_metrics(too_few), [])


class TestRiskScore(unittest.TestCase):

    def setUp(self):
        self.analyzer = FinancialRiskAnalyzer()

    def test_market_and_macro_sums(self):
        self.assertEqual(self.analyzer.assess_market_risk(STRESSED_MARKET), 23)
        self.assertEqual(self.analyzer.assess_macro_risk(STRESSED_MACRO), 16)
        self.assertEqual(self.analyzer.assess_market_risk(MarketConditions(volatility_index=18.5)), 0)

    def test_unreported_market_risk_is_still_subtracted(self):
        assessment = self.analyzer.calculate_risk_score(
            "ACME", "default",
            market_conditions=MarketConditions(volatility_index=27, high_yield_spread=4.0, risk_environment="medium")
        )

        self.assertEqual(assessment.overall_score, 92)
        self.assertEqual(assessment.deductions, ())
        self.assertEqual(assessment.breakdown["market"], "analyzed")
        self.assertEqual(assessment.breakdown["financial"], "unavailable")

    def test_score_clamped_at_zero(self):
        metrics = FinancialMetrics(
            debt_to_equity=3.0, current_ratio=0.2, profit_margin=-0.5,
            earnings=(quarter(-1), quarter(-1), quarter(-1), quarter(-1))
        )
        assessment = self.analyzer.calculate_risk_score(
            "ACME", "startups",
            financial_data=metrics,
            industry_trends=IndustryTrends("startups", **self.analyzer.config.get_industry_profile("startups").to_dict()),
            market_conditions=STRESSED_MARKET,
            macro_factors=STRESSED_MACRO
        )
        self.assertEqual(assessment.overall_score, 0)
        self.assertEqual(assessment.risk_level, RiskLevel.HIGH)

    def test_recommendations(self):
        self.assertEqual(
            self.analyzer.generate_recommendations(90, []),
            ["Financial risk appears manageable under current conditions"]
        )
        weak = self.analyzer.assess_financial_metrics(
            FinancialMetrics(debt_to_equity=2.5, current_ratio=0.5, profit_margin=-0.1)
        )
        self.assertEqual(self.analyzer.generate_recommendations(53, weak), [
            "Consider requiring additional collateral or guarantees",
            "Implement enhanced monitoring and reporting requirements",
            "Review debt capacity and refinancing plans",
            "Assess working capital management and cash flow projections",
            "Analyze business model sustainability and turnaround plans",
        ])


class TestAssessFinancialRisk(unittest.IsolatedAsyncioTestCase):

    async def test_mock_data_in_calm_market(self):
        assessment = await FinancialRiskAnalyzer().assess_financial_risk("ACME")

        self.assertEqual(assessment.overall_score, 100)
        self.assertEqual(assessment.risk_level, RiskLevel.LOW)
        self.assertTrue(assessment.financial_data.is_mock)
        self.assertEqual(set(assessment.breakdown.values()), {"analyzed"})
        self.assertEqual(assessment.recommendations, ("Financial risk appears manageable under current conditions",))
        self.assertFalse(assessment.degraded)

    async def test_industry_adjustment(self):
        technology = await FinancialRiskAnalyzer().assess_financial_risk("ACME", "technology")
        self.assertEqual(technology.overall_score, 97)
        self.assertEqual(technology.deductions[0].category, "Industry Risk")
        self.assertEqual(technology.deductions[0].points_deducted, 3)

        startups = await FinancialRiskAnalyzer().assess_financial_risk("ACME", "startups")
        self.assertEqual(startups.overall_score, 85)

        unknown = await FinancialRiskAnalyzer().assess_financial_risk("ACME", "aerospace")
        self.assertEqual(unknown.overall_score, 100)
        self.assertEqual(unknown.industry_trends.risk_multiplier, 1.0)

    async def test_caller_overrides(self):
        assessment = await FinancialRiskAnalyzer().assess_financial_risk(
            "ACME", additional_data={"debt_to_equity": "2.5", "current_ratio": 0.5, "profit_margin": -0.1}
        )

        self.assertEqual(assessment.overall_score, 53)
        self.assertEqual(assessment.risk_level, RiskLevel.HIGH)
        self.assertEqual(assessment.financial_data.debt_to_equity, 2.5)

    async def test_stressed_market_is_reported(self):
        analyzer = FinancialRiskAnalyzer(
            market_provider=StaticMarketDataProvider(market=STRESSED_MARKET, macro=STRESSED_MACRO)
        )
        assessment = await analyzer.assess_financial_risk("ACME")

        self.assertEqual(assessment.overall_score, 61)
        self.assertEqual(
            [d.category for d in assessment.deductions],
            ["Market Conditions", "Macroeconomic Risk"]
        )

    async def test_provider_error_falls_back_to_mock_data(self):
        provider = Mock()
        provider.fetch_financials = AsyncMock(side_effect=ProviderError("rate limited"))
        assessment = await FinancialRiskAnalyzer(metrics_provider=provider).assess_financial_risk("ACME")

        provider.fetch_financials.assert_awaited_once_with("ACME")
        self.assertTrue(assessment.financial_data.is_mock)
        self.assertEqual(assessment.breakdown["financial"], "analyzed")

    async def test_provider_metrics_used(self):
        provider = Mock()
        provider.fetch_financials = AsyncMock(return_value=FinancialMetrics(debt_to_equity=1.5))
        assessment = await FinancialRiskAnalyzer(metrics_provider=provider).assess_financial_risk("ACME")

        self.assertEqual(assessment.overall_score, 85)
        self.assertFalse(assessment.financial_data.is_mock)

    async def test_unexpected_provider_error_falls_back_to_mock_data(self):
        provider = Mock()
        provider.fetch_financials = AsyncMock(side_effect=RuntimeError("socket closed"))
        assessment = await FinancialRiskAnalyzer(metrics_provider=provider).assess_financial_risk("ACME")

        self.assertTrue(assessment.financial_data.is_mock)
        self.assertEqual(assessment.breakdown["financial"], "analyzed")
        self.assertEqual(assessment.overall_score, 100)

    async def test_malformed_earnings_payload_falls_back_to_mock_data(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.params["function"] == "OVERVIEW":
                return httpx.Response(200, json={"Symbol": "ACME", "DebtToEquityRatio": "2.5"})
            return httpx.Response(200, json={"quarterlyEarnings": ["bad"]})

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            provider = AlphaVantageClient(client=client)
            assessment = await FinancialRiskAnalyzer(metrics_provider=provider).assess_financial_risk("ACME")

        self.assertTrue(assessment.financial_data.is_mock)
        self.assertEqual(assessment.breakdown["financial"], "analyzed")

    async def test_all_inputs_failing_returns_default(self):
        market = Mock()
        market.get_market_conditions = AsyncMock(side_effect=RuntimeError("feed down"))
        market.get_macro_snapshot = AsyncMock(side_effect=RuntimeError("feed down"))
        analyzer = FinancialRiskAnalyzer(market_provider=market)

        with patch.object(analyzer, "get_company_financials", side_effect=RuntimeError("no metrics")), \
                patch.object(analyzer, "analyze_industry_trends", side_effect=RuntimeError("no table")):
            assessment = await analyzer.assess_financial_risk("ACME", "technology")

        self.assertEqual(assessment, FinancialRiskAssessment(
            counterparty="ACME",
            industry="technology",
            overall_score=70,
            risk_level=RiskLevel.MEDIUM,
            deductions=assessment.deductions,
            breakdown={"financial": "unavailable", "market": "limited", "industry": "general", "macro": "general"},
            recommendations=assessment.recommendations,
            timestamp=assessment.timestamp,
            degraded=True
        ))
        self.assertEqual(assessment.deductions[0].category, "Data Availability")
        self.assertEqual(assessment.deductions[0].points_deducted, 30)
        self.assertEqual(len(assessment.recommendations), 2)

    async def test_partial_failure_scores_remaining_inputs(self):
        market = Mock()
        market.get_market_conditions = AsyncMock(side_effect=RuntimeError("feed down"))
        market.get_macro_snapshot = AsyncMock(return_value=STRESSED_MACRO)
        assessment = await FinancialRiskAnalyzer(market_provider=market).assess_financial_risk("ACME")

        self.assertEqual(assessment.breakdown["market"], "unavailable")
        self.assertEqual(assessment.overall_score, 84)
        self.assertFalse(assessment.degraded)


if __name__ == "__main__":
    unittest.main()
