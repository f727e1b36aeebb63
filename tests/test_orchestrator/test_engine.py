"""Unit tests for the cleaning orchestrator.

Tests cover provider iteration order, result merging, early termination
on redirect and cancel, method filtering, and end-to-end cleaning with
the bundled catalog.
"""

import unittest
from pathlib import Path

from linkscrub.core.config import build_registry, load_catalog
from linkscrub.core.exceptions import InvalidURL
from linkscrub.core.models import CleanerOptions, RequestContext
from linkscrub.orchestrator.engine import Orchestrator, clean

CATALOG_PATH = Path(__file__).parent.parent.parent / "configs" / "catalog.yaml"


class RecordingLogger:
    """Rule logger keeping every call in memory."""

    def __init__(self):
        self.calls = []

    def log(self, before, after, rule):
        self.calls.append((before, after, rule))


class TestOrchestrator(unittest.TestCase):
    """Test suite for Orchestrator with a hand-built catalog."""

    def setUp(self):
        """Set up test fixtures."""
        self.registry = build_registry({
            "p1": {
                "urlPattern": r".*example\.com.*",
                "rules": ["utm_.*", "fbclid"],
            },
            "p2": {
                "urlPattern": r"^https?://p2\.test",
                "redirections": [r"(?:\?|&)url=([^&]+)"],
            },
            "tracker": {
                "urlPattern": r"^https?://tracker\.test",
                "completeProvider": True,
            },
            "global": {
                "urlPattern": ".*",
                "rules": ["ref"],
            },
        })
        self.engine = Orchestrator(self.registry)

    def test_end_to_end_field_removal(self):
        result = self.engine.clean("https://example.com/?utm_source=x&fbclid=y&id=1#frag=2")

        self.assertTrue(result.changes)
        self.assertEqual(result.url, "https://example.com/?id=1#frag=2")
        self.assertEqual(result.providers, ["p1", "global"])
        self.assertFalse(result.redirect)
        self.assertFalse(result.cancel)

    def test_end_to_end_redirect(self):
        result = self.engine.clean("https://p2.test/out?url=http%3A%2F%2Fdest.test%2Fa")

        self.assertTrue(result.redirect)
        self.assertEqual(result.url, "http://dest.test/a")
        # global is never consulted after the redirect
        self.assertEqual(result.providers, ["p2"])

    def test_cancel_stops_processing(self):
        url = "https://tracker.test/pixel?ref=1"

        result = self.engine.clean(url)

        self.assertTrue(result.cancel)
        self.assertEqual(result.url, url)
        self.assertEqual(result.providers, ["tracker"])

    def test_no_match_returns_original(self):
        engine = Orchestrator(build_registry({"p": {"urlPattern": r"nomatch\.test"}}))

        result = engine.clean("https://other.test/?utm_source=x")

        self.assertFalse(result.changes)
        self.assertEqual(result.url, "https://other.test/?utm_source=x")
        self.assertEqual(result.providers, [])

    def test_changes_flag_is_sticky(self):
        """Test that a later provider without changes keeps the flag set."""
        result = self.engine.clean("https://example.com/?utm_source=x&id=1")

        self.assertTrue(result.changes)
        self.assertEqual(result.url, "https://example.com/?id=1")

    def test_later_providers_see_cleaned_url(self):
        registry = build_registry({
            "strip": {"urlPattern": ".*", "rules": ["mode"]},
            "only-clean": {"urlPattern": r"^[^?]*\?id=\d+$", "rules": ["id"]},
        })

        result = Orchestrator(registry).clean("https://example.com/?mode=x&id=7")

        self.assertEqual(result.providers, ["strip", "only-clean"])
        self.assertEqual(result.url, "https://example.com/")

    def test_first_redirect_in_catalog_order_wins(self):
        registry = build_registry({
            "a": {"urlPattern": ".*", "redirections": [r"a=([^&]+)"]},
            "b": {"urlPattern": ".*", "redirections": [r"b=([^&]+)"]},
        })

        result = Orchestrator(registry).clean("https://w.test/?b=https%3A%2F%2Fb.test&a=https%3A%2F%2Fa.test")

        self.assertEqual(result.url, "https://a.test")
        self.assertEqual(result.providers, ["a"])

    def test_exception_skips_provider(self):
        registry = build_registry({
            "p": {
                "urlPattern": r"example\.com",
                "rules": ["utm_.*"],
                "exceptions": [r"example\.com/keep"],
            },
        })

        result = Orchestrator(registry).clean("https://example.com/keep?utm_source=x")

        self.assertFalse(result.changes)
        self.assertEqual(result.providers, [])

    def test_method_filter(self):
        registry = build_registry({
            "post-only": {"urlPattern": ".*", "rules": ["x"], "methods": ["POST"]},
        })
        engine = Orchestrator(registry)
        url = "https://example.com/?x=1"

        self.assertEqual(engine.clean(url, RequestContext(method="GET")).url, url)
        self.assertEqual(engine.clean(url, RequestContext(method="POST")).url, "https://example.com/")
        # Without a method context every provider is eligible
        self.assertEqual(engine.clean(url).url, "https://example.com/")

    def test_local_address_guard(self):
        for url in ("http://127.0.0.1/?x=1", "http://localhost/?x=1"):
            with self.subTest(url=url):
                engine = Orchestrator(build_registry({"all": {"urlPattern": ".*", "rules": ["x"]}}))
                result = engine.clean(url)
                self.assertFalse(result.changes)
                self.assertEqual(result.url, url)

    def test_options_are_forwarded(self):
        engine = Orchestrator(self.registry, CleanerOptions(domain_blocking=False))

        result = engine.clean("https://tracker.test/pixel?ref=1")

        self.assertFalse(result.cancel)
        self.assertEqual(result.url, "https://tracker.test/pixel")

    def test_logger_receives_events(self):
        logger = RecordingLogger()

        self.engine.clean("https://example.com/?fbclid=y&ref=z", logger=logger)

        self.assertEqual([call[2] for call in logger.calls], ["fbclid", "ref"])

    def test_invalid_url_raises(self):
        with self.assertRaises(InvalidURL):
            self.engine.clean("example.com/?utm_source=x")

    def test_idempotent(self):
        url = "https://example.com/a?ref=1&fbclid=2&q=x+y#utm_content=z&top"

        first = self.engine.clean(url)
        second = self.engine.clean(first.url)

        self.assertEqual(second.url, first.url)
        self.assertFalse(second.changes)

    def test_idempotent_with_encoded_keys(self):
        url = "https://example.com/?a%3Db=1&c%26d=2&e%2Bf=3&utm_source=x"

        first = self.engine.clean(url)
        second = self.engine.clean(first.url)

        self.assertTrue(first.changes)
        self.assertEqual(first.url, "https://example.com/?a%3Db=1&c%26d=2&e%2Bf=3")
        self.assertEqual(second.url, first.url)
        self.assertFalse(second.changes)

    def test_matching_providers(self):
        self.assertEqual(
            self.engine.matching_providers("https://example.com/"),
            ["p1", "global"],
        )

    def test_clean_many_keeps_order(self):
        results = self.engine.clean_many([
            "https://example.com/?fbclid=1",
            "https://tracker.test/",
        ])

        self.assertEqual(results[0].url, "https://example.com/")
        self.assertTrue(results[1].cancel)

    def test_module_level_clean(self):
        result = clean("https://example.com/?utm_medium=x&id=1", self.registry)

        self.assertEqual(result.url, "https://example.com/?id=1")

    def test_to_dict(self):
        result = self.engine.clean("https://example.com/?fbclid=1")

        self.assertEqual(
            result.to_dict(),
            {
                "url": "https://example.com/",
                "changes": True,
                "redirect": False,
                "cancel": False,
                "providers": ["p1", "global"],
            },
        )


class TestBundledCatalog(unittest.TestCase):
    """End-to-end tests against configs/catalog.yaml."""

    @classmethod
    def setUpClass(cls):
        """Load the bundled catalog once."""
        cls.engine = Orchestrator(load_catalog(CATALOG_PATH))

    def test_google_redirect(self):
        result = self.engine.clean(
            "https://www.google.com/url?sa=t&url=https%3A%2F%2Fexample.org%2Fpage&ved=abc"
        )

        self.assertTrue(result.redirect)
        self.assertEqual(result.url, "https://example.org/page")
        self.assertEqual(result.providers, ["google"])

    def test_google_search_cleanup(self):
        result = self.engine.clean("https://www.google.com/search?q=python&ei=abc&ved=xyz")

        self.assertTrue(result.changes)
        self.assertEqual(result.url, "https://www.google.com/search?q=python")

    def test_google_exception(self):
        url = "https://mail.google.com/mail/u/0/?ved=1"

        result = self.engine.clean(url)

        self.assertNotIn("google", result.providers)
        self.assertEqual(result.url, url)

    def test_doubleclick_blocked(self):
        result = self.engine.clean("https://ad.doubleclick.net/ddm/trackclk/N123")

        self.assertTrue(result.cancel)
        self.assertEqual(result.providers, ["doubleclick"])

    def test_doubleclick_redirect(self):
        result = self.engine.clean(
            "https://ad.doubleclick.net/ddm/clk/1;adurl=https%3A%2F%2Fshop.example%2F"
        )

        self.assertTrue(result.redirect)
        self.assertEqual(result.url, "https://shop.example/")

    def test_amazon_raw_rule_and_affiliate_tag(self):
        result = self.engine.clean(
            "https://www.amazon.com/dp/B000123/ref=sr_1_3?crid=ABC&keywords=lamp&qid=1&tag=aff-20"
        )

        self.assertTrue(result.changes)
        self.assertEqual(result.url, "https://www.amazon.com/dp/B000123")

    def test_global_rules(self):
        result = self.engine.clean("https://blog.example.net/post?id=5&utm_campaign=x&fbclid=y")

        self.assertEqual(result.url, "https://blog.example.net/post?id=5")
        self.assertEqual(result.providers, ["globalRules"])


if __name__ == "__main__":
    unittest.main()
