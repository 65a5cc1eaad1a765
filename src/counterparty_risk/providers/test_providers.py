"""
Test Suite for External Data Providers

All HTTP traffic is served by httpx.MockTransport; nothing touches the network.
"""

import json
import unittest

import httpx

from counterparty_risk.providers.base import ProviderError
from counterparty_risk.providers.case_law import MOCK_SEARCH_RESULTS, CourtListenerClient
from counterparty_risk.providers.financial_data import (
    AlphaVantageClient, FinancialMetrics, mock_financials, parse_number
)
from counterparty_risk.providers.market_data import StaticMarketDataProvider, classify_market_environment
from counterparty_risk.providers.translation import DEFAULT_LANGUAGES, TranslationClient

OVERVIEW = {
    "Symbol": "IBM",
    "MarketCapitalization": "150000000000",
    "PERatio": "22.1",
    "DebtToEquityRatio": "2.0",
    "CurrentRatio": "None",
    "ProfitMargin": "0.09",
    "Beta": "-",
}

EARNINGS = {
    "quarterlyEarnings": [
        {"fiscalDateEnding": "2024-03-31", "reportedEPS": "1.68", "estimatedEPS": "1.6",
         "surprise": "0.08", "surprisePercentage": "5"},
        {"fiscalDateEnding": "2023-12-31", "reportedEPS": "3.87", "estimatedEPS": "3.78",
         "surprise": "-0.09", "surprisePercentage": "-2.4"},
    ]
}


def mock_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestParsing(unittest.TestCase):

    def test_parse_number(self):
        self.assertEqual(parse_number("1.5"), 1.5)
        self.assertEqual(parse_number(2), 2.0)
        self.assertIsNone(parse_number("None"))
        self.assertIsNone(parse_number("-"))
        self.assertIsNone(parse_number(""))
        self.assertIsNone(parse_number("n/a"))
        self.assertIsNone(parse_number(None))

    def test_metrics_from_payloads(self):
        metrics = FinancialMetrics.from_alpha_vantage(OVERVIEW, EARNINGS["quarterlyEarnings"])

        self.assertEqual(metrics.debt_to_equity, 2.0)
        self.assertIsNone(metrics.current_ratio)
        self.assertIsNone(metrics.beta)
        self.assertEqual(len(metrics.earnings), 2)
        self.assertTrue(metrics.earnings[1].missed_estimate)
        self.assertAlmostEqual(metrics.data_quality, 4 / len(FinancialMetrics.metric_names()))

    def test_overrides(self):
        metrics = mock_financials("ACME").with_overrides({"current_ratio": "0.8", "unknown": 1})
        self.assertEqual(metrics.current_ratio, 0.8)
        self.assertTrue(metrics.is_mock)
        self.assertIs(mock_financials("ACME").with_overrides({}).is_mock, True)

    def test_market_environment(self):
        self.assertEqual(classify_market_environment(35, 4), "high")
        self.assertEqual(classify_market_environment(15, 9), "high")
        self.assertEqual(classify_market_environment(22, 4), "medium")
        self.assertEqual(classify_market_environment(15, 5.5), "medium")
        self.assertEqual(classify_market_environment(18.5, 4.8), "low")


class TestAlphaVantageClient(unittest.IsolatedAsyncioTestCase):

    async def test_fetch_financials(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(dict(request.url.params))
            function = request.url.params["function"]
            return httpx.Response(200, json=OVERVIEW if function == "OVERVIEW" else EARNINGS)

        async with mock_client(handler) as client:
            provider = AlphaVantageClient(api_key="secret", client=client)
            metrics = await provider.fetch_financials("IBM")

        self.assertEqual([params["function"] for params in seen], ["OVERVIEW", "EARNINGS"])
        self.assertEqual(seen[0]["apikey"], "secret")
        self.assertEqual(seen[0]["symbol"], "IBM")
        self.assertEqual(metrics.pe_ratio, 22.1)
        self.assertFalse(metrics.is_mock)

    async def test_rate_limit_note_raises(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"Note": "API call frequency exceeded"})

        async with mock_client(handler) as client:
            provider = AlphaVantageClient(client=client)
            with self.assertRaises(ProviderError):
                await provider.get_company_overview("IBM")

    async def test_http_error_raises_provider_error(self):
        async with mock_client(lambda request: httpx.Response(503)) as client:
            with self.assertRaises(ProviderError):
                await AlphaVantageClient(client=client).fetch_financials("IBM")

    async def test_malformed_earnings_raise_provider_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.params["function"] == "OVERVIEW":
                return httpx.Response(200, json=OVERVIEW)
            return httpx.Response(200, json={"quarterlyEarnings": ["bad"]})

        async with mock_client(handler) as client:
            with self.assertRaises(ProviderError):
                await AlphaVantageClient(client=client).fetch_financials("IBM")

    async def test_invalid_json_raises_provider_error(self):
        async with mock_client(lambda request: httpx.Response(200, content=b"<html>")) as client:
            with self.assertRaises(ProviderError):
                await AlphaVantageClient(client=client).get_quarterly_earnings("IBM")


class TestCourtListenerClient(unittest.IsolatedAsyncioTestCase):

    async def test_without_key_returns_mock_results(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        async with mock_client(handler) as client:
            provider = CourtListenerClient(client=client)
            self.assertFalse(provider.configured)
            self.assertEqual(await provider.search(["contract"]), list(MOCK_SEARCH_RESULTS))

    async def test_search_formats_top_results(self):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["q"] = request.url.params["q"]
            captured["auth"] = request.headers["Authorization"]
            results = [
                {"caseName": f"Case {i}", "court": "ca9", "dateFiled": "2020-01-01",
                 "score": 0.9, "citation": [f"{i} F.3d {i}"], "snippet": "breach",
                 "absolute_url": f"/opinion/{i}/"}
                for i in range(7)
            ]
            return httpx.Response(200, json={"results": results})

        async with mock_client(handler) as client:
            provider = CourtListenerClient(api_key="token", client=client)
            cases = await provider.search(["contract", "breach", "damages", "warranty"])

        self.assertEqual(captured["q"], "contract AND breach AND damages")
        self.assertEqual(captured["auth"], "Token token")
        self.assertEqual(len(cases), 5)
        self.assertEqual(cases[0].citation, "0 F.3d 0")
        self.assertEqual(cases[0].url, "https://www.courtlistener.com/opinion/0/")

    async def test_service_error_returns_mock_results(self):
        async with mock_client(lambda request: httpx.Response(500)) as client:
            provider = CourtListenerClient(api_key="token", client=client)
            self.assertEqual(await provider.search(["contract"]), list(MOCK_SEARCH_RESULTS))


class TestTranslationClient(unittest.IsolatedAsyncioTestCase):

    async def test_first_working_endpoint_wins(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.host == "down.example":
                return httpx.Response(502)
            body = json.loads(request.content)
            self.assertEqual(body["target"], "es")
            return httpx.Response(200, json={"translatedText": "hola"})

        async with mock_client(handler) as client:
            translator = TranslationClient(["https://down.example/", "https://up.example"], client=client)
            result = await translator.translate_text("hello", "es")

        self.assertEqual(result.translated_text, "hola")
        self.assertEqual(result.service, "https://up.example")
        self.assertEqual(result.confidence, 0.8)
        self.assertFalse(result.is_fallback)

    async def test_all_endpoints_failing_passes_text_through(self):
        async with mock_client(lambda request: httpx.Response(500)) as client:
            translator = TranslationClient(["https://a.example", "https://b.example"], client=client)
            result = await translator.translate_text("original text", "hi")

        self.assertEqual(result.translated_text, "original text")
        self.assertEqual(result.confidence, 0)
        self.assertTrue(result.is_fallback)
        self.assertEqual(result.error, "All translation services unavailable")

    async def test_supported_languages_fallback(self):
        async with mock_client(lambda request: httpx.Response(500)) as client:
            translator = TranslationClient(["https://a.example"], client=client)
            self.assertEqual(await translator.get_supported_languages(), DEFAULT_LANGUAGES)

        self.assertEqual(await TranslationClient([]).get_supported_languages(), DEFAULT_LANGUAGES)

    async def test_borrowed_client_left_open(self):
        client = mock_client(lambda request: httpx.Response(200, json=[]))
        translator = TranslationClient(["https://a.example"], client=client)
        await translator.aclose()
        self.assertFalse(client.is_closed)
        await client.aclose()

    async def test_owned_client_closed(self):
        translator = TranslationClient(["https://a.example"])
        client = translator.client
        await translator.aclose()
        self.assertTrue(client.is_closed)


class TestStaticMarketData(unittest.IsolatedAsyncioTestCase):

    async def test_fixed_snapshot(self):
        provider = StaticMarketDataProvider()
        market = await provider.get_market_conditions()
        macro = await provider.get_macro_snapshot()

        self.assertEqual(market.risk_environment, "low")
        self.assertEqual(market.volatility_index, 18.5)
        self.assertEqual(macro.geopolitical_risk, "moderate")


if __name__ == "__main__":
    unittest.main()
