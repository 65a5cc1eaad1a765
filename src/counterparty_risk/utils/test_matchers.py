"""
Test Suite for Matching and Extraction Utilities

Covers keyword scanning, clause-pattern search, context windows,
entity extraction and the settled fan-out helper.
"""

import asyncio
import unittest

from counterparty_risk.utils.concurrency import Timer, gather_settled
from counterparty_risk.utils.feature_extractor import EntityExtractor, ExtractedEntities
from counterparty_risk.utils.matchers import (
    compile_pattern_groups, compile_patterns, context_window, count_pattern_hits,
    flag_patterns, matching_terms, scan, search_patterns
)


class TestContextWindow(unittest.TestCase):

    def test_window_clipped_to_text(self):
        self.assertEqual(context_window("abc penalty xyz", "penalty", radius=3), "bc penalty xy")
        self.assertEqual(context_window("penalty", "PENALTY", radius=50), "penalty")

    def test_missing_term_or_text(self):
        self.assertEqual(context_window("no match here", "breach"), "")
        self.assertEqual(context_window("", "breach"), "")
        self.assertEqual(context_window(None, "breach"), "")


class TestKeywordScan(unittest.TestCase):

    def test_matching_terms_is_case_insensitive_and_ordered(self):
        text = "Termination for BREACH carries a Penalty."
        self.assertEqual(
            matching_terms(text, ["penalty", "termination", "breach", "default"]),
            ["penalty", "termination", "breach"]
        )

    def test_scan_returns_every_category(self):
        results = scan("Liability is capped.", {"high": ["breach"], "medium": ["liability"]})

        self.assertEqual(results["high"], [])
        self.assertEqual(len(results["medium"]), 1)
        self.assertEqual(results["medium"][0].keyword, "liability")
        self.assertIn("Liability", results["medium"][0].context)

    def test_scan_empty_text(self):
        self.assertEqual(scan("", {"high": ["breach"]}), {"high": []})


class TestPatternSearch(unittest.TestCase):

    def setUp(self):
        self.patterns = compile_patterns({
            "Termination": r"termination|terminate",
            "Governing Law": r"governing law",
            "Severability": r"severability",
        })

    def test_search_keeps_declaration_order_and_match_context(self):
        text = "The governing law is New York. Either party may terminate on notice."
        hits = search_patterns(text, self.patterns, radius=5)

        self.assertEqual(list(hits), ["Termination", "Governing Law"])
        self.assertIn("terminate", hits["Termination"])
        self.assertIn("governing law", hits["Governing Law"])

    def test_flags_and_counts(self):
        flags = flag_patterns("SEVERABILITY applies", self.patterns)
        self.assertEqual(flags, {"Termination": False, "Governing Law": False, "Severability": True})
        self.assertEqual(flag_patterns(None, self.patterns)["Severability"], False)

        groups = compile_pattern_groups({"mutual": [r"mutual", r"shared liability"]})
        self.assertEqual(count_pattern_hits("Mutual and shared liability", groups["mutual"]), 2)
        self.assertEqual(count_pattern_hits("", groups["mutual"]), 0)


class TestEntityExtractor(unittest.TestCase):

    def setUp(self):
        self.extractor = EntityExtractor()

    def test_extracts_each_category(self):
        text = (
            "This Agreement is made on January 15, 2024 between Acme Holdings Inc. and "
            "Dr. Jane Smith of Delaware. The fee is $250,000.00 plus 5% interest. "
            "Contact legal@acme.com or 555-123-4567."
        )
        entities = self.extractor.extract(text)

        self.assertIn("Acme Holdings Inc.", entities.organizations)
        self.assertIn("Dr. Jane Smith", entities.people)
        self.assertIn("Delaware", entities.places)
        self.assertIn("January 15, 2024", entities.dates)
        self.assertIn("$250,000.00", entities.money)
        self.assertIn("5%", entities.percentages)
        self.assertIn("legal@acme.com", entities.emails)
        self.assertIn("555-123-4567", entities.phone_numbers)

    def test_empty_text_yields_empty_categories(self):
        entities = self.extractor.extract("")
        self.assertEqual(entities, ExtractedEntities())
        self.assertEqual(entities.total, 0)

    def test_duplicates_removed(self):
        entities = self.extractor.extract("Texas law applies. Venue is Texas.")
        self.assertEqual(entities.places, ["Texas"])


class TestGatherSettled(unittest.IsolatedAsyncioTestCase):

    async def test_failures_do_not_cancel_siblings(self):
        finished = []

        async def slow():
            await asyncio.sleep(0.01)
            finished.append("slow")
            return "done"

        async def broken():
            raise RuntimeError("provider down")

        results = await gather_settled({"broken": broken(), "slow": slow()})

        self.assertEqual(list(results), ["broken", "slow"])
        self.assertFalse(results["broken"].ok)
        self.assertEqual(results["broken"].error, "RuntimeError: provider down")
        self.assertTrue(results["slow"].ok)
        self.assertEqual(results["slow"].value, "done")
        self.assertEqual(finished, ["slow"])


class TestTimer(unittest.TestCase):

    def test_elapsed(self):
        self.assertEqual(Timer().elapsed(), 0.0)
        with Timer() as timer:
            pass
        self.assertGreaterEqual(timer.elapsed(), 0.0)


if __name__ == "__main__":
    unittest.main()
