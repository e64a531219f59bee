"""
Tests for core.resolver — caching, throttling, timeouts and decisions.
"""

import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import dataclasses
import threading
import time
import unittest
from unittest import mock
from core.config import ResolverSettings
from core.errors import ContractViolation, ParseError
from core.models import ApplicationDescriptor
from core.resolver import (
    NOTE_INVALID_DESCRIPTOR,
    NOTE_INVALID_VERSION,
    NOTE_SKIPPED,
    NOTE_TIMEOUT,
    NOTE_UNAVAILABLE,
    UpdateResolver,
)
from scrapers.base import ScrapeStrategy, ScrapeResult
from scrapers.registry import ScraperRegistry


class StubStrategy(ScrapeStrategy):
    """Returns a fixed version and counts calls."""

    url = "https://example.com/releases"

    def __init__(self, key, version="1.0.0", download_url=None):
        self._key = key
        self.version = version
        self.result_url = download_url
        self.calls = 0
        self._lock = threading.Lock()

    @property
    def key(self):
        return self._key

    def _scrape(self):
        with self._lock:
            self.calls += 1
        if self.version is None:
            raise ParseError("nothing on the page")
        return ScrapeResult(version=self.version, download_url=self.result_url)


class BlockingStrategy(StubStrategy):
    """Never finishes until released."""

    def __init__(self, key):
        super().__init__(key)
        self.release = threading.Event()

    def _scrape(self):
        self.release.wait(10)
        return ScrapeResult(version="9.9.9")


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def app(name="Firefox", publisher="Mozilla", version="100.0.0", path=None):
    return ApplicationDescriptor(name, publisher, version, path or f"/apps/{name.lower()}")


class ResolverTestCase(unittest.TestCase):

    def make_resolver(self, *strategies, generic=False, **overrides):
        settings = ResolverSettings(
            generic_enabled=generic,
            browser_enabled=False,
            timeout_seconds=overrides.pop("timeout_seconds", 2.0),
            max_checks=overrides.pop("max_checks", 100),
            strict=overrides.pop("strict", True),
            **overrides,
        )
        registry = ScraperRegistry(fetcher=mock.Mock(), settings=settings)
        for strategy in strategies:
            registry.register(strategy)
        self.clock = FakeClock()
        resolver = UpdateResolver(registry, settings, clock=self.clock)
        self.addCleanup(resolver.close)
        return resolver


class TestResolveUpdate(ResolverTestCase):
    """End-to-end decisions."""

    def test_update_available(self):
        resolver = self.make_resolver(StubStrategy("Mozilla", "115.0"))
        decision = resolver.resolve_update(app())
        self.assertTrue(decision.has_update)
        self.assertEqual(decision.latest_version, "115.0.0")
        self.assertEqual(decision.current_version, "100.0.0")
        self.assertIsNone(decision.note)

    def test_up_to_date(self):
        resolver = self.make_resolver(StubStrategy("Mozilla", "v100.0"))
        decision = resolver.resolve_update(app(version="100.0.0"))
        self.assertFalse(decision.has_update)
        self.assertEqual(decision.latest_version, "100.0.0")
        self.assertIsNone(decision.note)

    def test_installed_version_normalized(self):
        resolver = self.make_resolver(StubStrategy("Google", "124.0.6367.60"))
        decision = resolver.resolve_update(app("Chrome", "Google LLC", "Version 123.0.6312.122"))
        self.assertTrue(decision.has_update)
        self.assertEqual(decision.current_version, "123.0.6312")
        self.assertEqual(decision.latest_version, "124.0.6367")

    def test_download_url_carried(self):
        resolver = self.make_resolver(StubStrategy("Mozilla", "115.0", "https://example.com/get"))
        self.assertEqual(resolver.resolve_update(app()).download_url, "https://example.com/get")

    def test_with_real_mozilla_strategy(self):
        from scrapers.mozilla import MozillaStrategy
        fetcher = mock.Mock()
        fetcher.get_text.return_value = '<p class="c-release-version">115.0</p>'
        resolver = self.make_resolver(MozillaStrategy(fetcher))
        decision = resolver.resolve_update(app(publisher="Mozilla Corporation"))
        self.assertTrue(decision.has_update)
        self.assertEqual(decision.latest_version, "115.0.0")
        self.assertEqual(decision.download_url, MozillaStrategy.download_url)


class TestDegradedDecisions(ResolverTestCase):
    """Every scraping failure becomes a note, never an exception."""

    def test_no_strategy(self):
        resolver = self.make_resolver(StubStrategy("Mozilla"))
        decision = resolver.resolve_update(app("Widget", "Unknown Corp", "1.0"))
        self.assertFalse(decision.has_update)
        self.assertEqual(decision.note, NOTE_UNAVAILABLE)
        self.assertEqual(decision.current_version, "1.0.0")

    def test_fetch_failure(self):
        resolver = self.make_resolver(StubStrategy("Mozilla", version=None))
        decision = resolver.resolve_update(app())
        self.assertFalse(decision.has_update)
        self.assertEqual(decision.note, NOTE_UNAVAILABLE)
        self.assertIsNone(decision.latest_version)

    def test_invalid_version(self):
        resolver = self.make_resolver(StubStrategy("Mozilla", "coming soon"))
        decision = resolver.resolve_update(app())
        self.assertFalse(decision.has_update)
        self.assertEqual(decision.note, NOTE_INVALID_VERSION)

    def test_timeout(self):
        strategy = BlockingStrategy("Mozilla")
        self.addCleanup(strategy.release.set)
        resolver = self.make_resolver(strategy, timeout_seconds=0.2)

        started = time.monotonic()
        decision = resolver.resolve_update(app())
        elapsed = time.monotonic() - started

        self.assertFalse(decision.has_update)
        self.assertEqual(decision.note, NOTE_TIMEOUT)
        self.assertLess(elapsed, 2.0)

    def test_timeout_does_not_delay_next_fetch(self):
        slow = BlockingStrategy("Slow")
        self.addCleanup(slow.release.set)
        fast = StubStrategy("Fast", "2.0")
        resolver = self.make_resolver(slow, fast, timeout_seconds=0.2, max_workers=1)

        timed_out = resolver.resolve_update(app("Hung", "Slow Inc", "1.0"))
        decision = resolver.resolve_update(app("Quick", "Fast Inc", "1.0"))

        self.assertEqual(timed_out.note, NOTE_TIMEOUT)
        self.assertIsNone(decision.note)
        self.assertTrue(decision.has_update)
        self.assertEqual(decision.latest_version, "2.0.0")
        self.assertEqual(fast.calls, 1)

    def test_fetch_runs_on_daemon_thread(self):
        seen = []

        class ThreadRecorder(StubStrategy):
            def _scrape(self):
                seen.append(threading.current_thread().daemon)
                return super()._scrape()

        resolver = self.make_resolver(ThreadRecorder("Mozilla", "115.0"))
        resolver.resolve_update(app())
        self.assertEqual(seen, [True])

    def test_generic_fallback_used(self):
        resolver = self.make_resolver(generic=True)
        with mock.patch("scrapers.generic.GenericStrategy.fetch",
                        return_value=ScrapeResult(version="2.5")) as fetch:
            decision = resolver.resolve_update(app("Widget", "Unknown Corp", "2.0"))
        fetch.assert_called_once()
        self.assertTrue(decision.has_update)
        self.assertEqual(decision.latest_version, "2.5.0")


class TestCacheAndThrottle(ResolverTestCase):
    """Cache hits, expiry and the per-session limit."""

    def test_cache_hit_skips_fetch(self):
        strategy = StubStrategy("Mozilla", "115.0")
        resolver = self.make_resolver(strategy)
        first = resolver.resolve_update(app())
        second = resolver.resolve_update(app())
        self.assertIs(first, second)
        self.assertEqual(strategy.calls, 1)
        self.assertEqual(resolver.checks_performed, 1)

    def test_cached_decision_cannot_be_altered(self):
        resolver = self.make_resolver(StubStrategy("Mozilla", "115.0"))
        first = resolver.resolve_update(app())
        with self.assertRaises(dataclasses.FrozenInstanceError):
            first.has_update = False
        with self.assertRaises(dataclasses.FrozenInstanceError):
            first.latest_version = "0.0.0"

        again = resolver.resolve_update(app())
        self.assertTrue(again.has_update)
        self.assertEqual(again.latest_version, "115.0.0")

    def test_degraded_decision_is_cached(self):
        strategy = StubStrategy("Mozilla", version=None)
        resolver = self.make_resolver(strategy)
        resolver.resolve_update(app())
        resolver.resolve_update(app())
        self.assertEqual(strategy.calls, 1)

    def test_refetch_after_ttl(self):
        strategy = StubStrategy("Mozilla", "115.0")
        resolver = self.make_resolver(strategy, cache_ttl_seconds=60)
        resolver.resolve_update(app())
        self.clock.now += 61
        resolver.resolve_update(app())
        self.assertEqual(strategy.calls, 2)

    def test_throttled_new_path_is_skipped(self):
        strategy = StubStrategy("Mozilla", "115.0")
        resolver = self.make_resolver(strategy, max_checks=1)
        resolver.resolve_update(app(path="/apps/one"))
        decision = resolver.resolve_update(app(path="/apps/two"))
        self.assertFalse(decision.has_update)
        self.assertEqual(decision.note, NOTE_SKIPPED)
        self.assertEqual(strategy.calls, 1)

    def test_skipped_decision_normalizes_installed_version(self):
        resolver = self.make_resolver(StubStrategy("Google", "124.0"), max_checks=0)
        decision = resolver.resolve_update(app("Chrome", "Google LLC", "Version 123.0.6312.122"))
        self.assertEqual(decision.note, NOTE_SKIPPED)
        self.assertEqual(decision.current_version, "123.0.6312")

    def test_throttled_returns_last_decision_after_expiry(self):
        strategy = StubStrategy("Mozilla", "115.0")
        resolver = self.make_resolver(strategy, max_checks=1, cache_ttl_seconds=60)
        first = resolver.resolve_update(app())
        self.clock.now += 120
        self.assertIs(resolver.resolve_update(app()), first)
        self.assertEqual(strategy.calls, 1)

    def test_reset_starts_new_session(self):
        strategy = StubStrategy("Mozilla", "115.0")
        resolver = self.make_resolver(strategy, max_checks=1)
        resolver.resolve_update(app(path="/apps/one"))
        resolver.reset()
        self.assertEqual(resolver.checks_performed, 0)
        self.assertEqual(resolver.cache.size(), 0)
        decision = resolver.resolve_update(app(path="/apps/two"))
        self.assertIsNone(decision.note)
        self.assertEqual(strategy.calls, 2)

    def test_concurrent_requests_respect_limit(self):
        strategy = StubStrategy("Mozilla", "115.0")
        resolver = self.make_resolver(strategy, max_checks=3, max_workers=8)
        apps = [app(path=f"/apps/{i}") for i in range(10)]
        decisions = resolver.resolve_all(apps)

        self.assertEqual(len(decisions), 10)
        self.assertEqual(strategy.calls, 3)
        self.assertEqual(resolver.checks_performed, 3)
        self.assertEqual(sum(1 for d in decisions if d.note == NOTE_SKIPPED), 7)


class TestContract(ResolverTestCase):
    """Caller errors."""

    def test_strict_raises_on_missing_version(self):
        resolver = self.make_resolver(StubStrategy("Mozilla"))
        with self.assertRaises(ContractViolation):
            resolver.resolve_update(app(version=""))

    def test_strict_raises_on_none(self):
        resolver = self.make_resolver(StubStrategy("Mozilla"))
        with self.assertRaises(ContractViolation):
            resolver.resolve_update(None)

    def test_lenient_degrades(self):
        strategy = StubStrategy("Mozilla")
        resolver = self.make_resolver(strategy, strict=False)
        with self.assertLogs("core.resolver", level="ERROR"):
            decision = resolver.resolve_update(app(version=""))
        self.assertFalse(decision.has_update)
        self.assertEqual(decision.note, NOTE_INVALID_DESCRIPTOR)
        self.assertEqual(strategy.calls, 0)
        self.assertEqual(resolver.checks_performed, 0)


class TestLifecycle(unittest.TestCase):

    def test_close_releases_browser(self):
        browser = mock.Mock()
        registry = ScraperRegistry(fetcher=mock.Mock(), browser=browser)
        with UpdateResolver(registry, ResolverSettings()):
            pass
        browser.close.assert_called_once()

    def test_create_resolver_defaults(self):
        from core.resolver import create_resolver
        resolver = create_resolver(settings=ResolverSettings(browser_enabled=False))
        self.addCleanup(resolver.close)
        self.assertEqual(
            resolver.registry.keys(),
            ["Mozilla", "Google", "Visual Studio Code", "Microsoft", "JetBrains"],
        )
        self.assertIsNone(resolver.registry.browser)
        self.assertEqual(resolver.cache.ttl, 3600)

    def test_resolve_after_close_degrades(self):
        registry = ScraperRegistry(fetcher=mock.Mock())
        strategy = StubStrategy("Mozilla", "115.0")
        registry.register(strategy)
        resolver = UpdateResolver(registry, ResolverSettings(generic_enabled=False))
        resolver.close()
        decision = resolver.resolve_update(app())
        self.assertEqual(decision.note, NOTE_UNAVAILABLE)
        self.assertEqual(decision.current_version, "100.0.0")
        self.assertEqual(strategy.calls, 0)


if __name__ == "__main__":
    unittest.main()
