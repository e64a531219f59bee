"""
Update Resolver - Core Resolution Engine
Decides whether a tracked application has a newer version upstream:
cache lookup, session throttling, strategy dispatch under a deadline,
version comparison and cache write.
"""

import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Iterable, Optional

from core.cache import BoundedCache
from core.config import ResolverSettings, load_settings
from core.errors import ContractViolation, InvalidVersionError, NoStrategyError, ScrapeError
from core.models import ApplicationDescriptor, UpdateDecision
from core.version import format_version, is_newer, is_valid, normalize

if TYPE_CHECKING:
    from scrapers.base import ScrapeResult
    from scrapers.registry import ScraperRegistry

logger = logging.getLogger(__name__)

NOTE_TIMEOUT = "Unable to determine latest version online (timeout)"
NOTE_UNAVAILABLE = "Unable to determine latest version online"
NOTE_INVALID_VERSION = "Latest version found online is not a valid version"
NOTE_SKIPPED = "Version check skipped - maximum checks reached"
NOTE_INVALID_DESCRIPTOR = "Application has no version to compare"


class UpdateResolver:
    """
    Resolves update decisions for application descriptors.

    Owns all session state: the decision cache, the last decision seen per
    path and the resolution counter used for throttling. All of it is
    guarded so resolutions for different paths may run concurrently.
    """

    def __init__(
        self,
        registry: "ScraperRegistry",
        settings: Optional[ResolverSettings] = None,
        cache: Optional[BoundedCache[UpdateDecision]] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the resolver.

        Args:
            registry: Strategy table used to pick a scraper per publisher.
            settings: Timeout, TTL and throttle policies.
            cache: Decision cache; one is created from settings if omitted.
            clock: Monotonic time source for the cache, injectable for tests.
        """
        self.registry = registry
        self.settings = settings or ResolverSettings()
        if cache is None:
            cache = BoundedCache(self.settings.cache_ttl_seconds, clock=clock)
        self.cache = cache
        self._last_decisions: dict[str, UpdateDecision] = {}
        self._check_count = 0
        self._lock = threading.Lock()
        self._closed = False

    def __enter__(self) -> "UpdateResolver":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    @property
    def checks_performed(self) -> int:
        with self._lock:
            return self._check_count

    def resolve_update(self, descriptor: ApplicationDescriptor) -> UpdateDecision:
        """
        Decide whether a newer version of the application exists.

        Never raises for scraping problems: timeouts, missing strategies,
        fetch or parse failures all come back as a decision with
        has_update=False and an explanatory note.

        Args:
            descriptor: The application to check.

        Returns:
            UpdateDecision for the application.

        Raises:
            ContractViolation: Only in strict mode, when the descriptor is
                missing or has no version.
        """
        invalid = self._check_contract(descriptor)
        if invalid is not None:
            return invalid

        cached = self.cache.get(descriptor.path)
        if cached is not None:
            logger.debug(f"Cache hit for {descriptor.path}")
            return cached

        if not self._reserve_check():
            with self._lock:
                last = self._last_decisions.get(descriptor.path)
            if last is not None:
                return last
            logger.info(f"Skipping version check for {descriptor.name}: session limit reached")
            return UpdateDecision(
                has_update=False,
                current_version=_clean_version(descriptor.version),
                note=NOTE_SKIPPED,
            )

        decision = self._resolve(descriptor)

        self.cache.set(descriptor.path, decision)
        with self._lock:
            self._last_decisions[descriptor.path] = decision
        return decision

    def resolve_all(self, descriptors: Iterable[ApplicationDescriptor]) -> list[UpdateDecision]:
        """Resolve several applications concurrently, keeping input order."""
        descriptors = list(descriptors)
        with ThreadPoolExecutor(max_workers=self.settings.max_workers) as executor:
            return list(executor.map(self.resolve_update, descriptors))

    def _check_contract(self, descriptor: Optional[ApplicationDescriptor]) -> Optional[UpdateDecision]:
        """Return a degraded decision for a bad descriptor, or None if it is fine."""
        if descriptor is not None and descriptor.version and descriptor.path:
            return None

        message = f"Invalid application descriptor passed to resolver: {descriptor!r}"
        if self.settings.strict:
            raise ContractViolation(message)

        logger.error(message)
        return UpdateDecision(
            has_update=False,
            note=NOTE_INVALID_DESCRIPTOR,
        )

    def _reserve_check(self) -> bool:
        """Claim one of the session's resolution slots."""
        with self._lock:
            if self._check_count >= self.settings.max_checks:
                return False
            self._check_count += 1
            return True

    def _fetch_latest(self, descriptor: ApplicationDescriptor) -> "ScrapeResult":
        """
        Run the descriptor's strategy under the deadline.

        Raises:
            NoStrategyError: Nothing can serve the publisher.
            FutureTimeoutError: The strategy missed the deadline.
            ScrapeError: The strategy found nothing.
            InvalidVersionError: The token it found is not a version.
        """
        strategy = self.registry.strategy_for(descriptor)
        if strategy is None:
            raise NoStrategyError(f"no strategy for publisher {descriptor.publisher!r}")

        if self._closed:
            raise ScrapeError("resolver is closed")

        # A timed-out fetch keeps running on its daemon thread; its result is discarded
        future = _start_fetch(strategy)
        result = future.result(timeout=self.settings.timeout_seconds)

        if result is None:
            raise ScrapeError(f"{strategy.name} found no version")
        if not is_valid(result.version):
            raise InvalidVersionError(f"{strategy.name} returned {result.version!r}")
        return result

    def _resolve(self, descriptor: ApplicationDescriptor) -> UpdateDecision:
        current = _clean_version(descriptor.version)
        try:
            result = self._fetch_latest(descriptor)
        except FutureTimeoutError:
            logger.warning(
                f"Version check for {descriptor.name} timed out after "
                f"{self.settings.timeout_seconds}s"
            )
            return UpdateDecision(has_update=False, current_version=current, note=NOTE_TIMEOUT)
        except InvalidVersionError as e:
            logger.warning(f"Unusable version for {descriptor.name}: {e}")
            return UpdateDecision(has_update=False, current_version=current, note=NOTE_INVALID_VERSION)
        except (NoStrategyError, ScrapeError) as e:
            logger.warning(f"Version check for {descriptor.name} failed: {e}")
            return UpdateDecision(has_update=False, current_version=current, note=NOTE_UNAVAILABLE)

        latest_clean = _clean_version(result.version)
        decision = UpdateDecision(
            has_update=is_newer(latest_clean, current),
            current_version=current,
            latest_version=latest_clean,
            download_url=result.download_url,
        )
        logger.info(
            f"{descriptor.name}: installed {current}, latest {latest_clean}"
            f"{' (update available)' if decision.has_update else ''}"
        )
        return decision

    def reset(self) -> None:
        """Forget every decision and start a new session."""
        self.cache.clear()
        with self._lock:
            self._last_decisions.clear()
            self._check_count = 0

    def close(self) -> None:
        """Stop accepting work and release the registry's browser, if any."""
        with self._lock:
            if self._closed:
                return
            self._closed = True

        browser = getattr(self.registry, "browser", None)
        if browser is not None:
            browser.close()
        logger.debug("Update resolver closed")


def _clean_version(raw: Optional[str]) -> str:
    return format_version(normalize(raw))


def _start_fetch(strategy) -> Future:
    """
    Run strategy.fetch() on its own daemon thread.

    Each fetch gets a fresh thread so a hung site can neither delay other
    resolutions nor hold up interpreter exit.
    """
    future: Future = Future()
    future.set_running_or_notify_cancel()

    def run():
        try:
            future.set_result(strategy.fetch())
        except BaseException as e:
            future.set_exception(e)

    thread = threading.Thread(target=run, name=f"fetch-{strategy.key}", daemon=True)
    thread.start()
    return future


def create_resolver(config_path: Optional[Path] = None,
                    settings: Optional[ResolverSettings] = None) -> UpdateResolver:
    """
    Build a resolver with the default transport, browser and strategies.

    Args:
        config_path: JSON config file; ignored when settings is given.
        settings: Pre-built settings.
    """
    from core.fetcher import HttpFetcher
    from scrapers.registry import build_registry

    settings = settings or load_settings(config_path)
    fetcher = HttpFetcher(settings.user_agent, settings.request_timeout_seconds)

    browser = None
    if settings.browser_enabled:
        from core.browser import BrowserContext
        browser = BrowserContext(settings.user_agent, settings.headless, settings.timeout_seconds)

    registry = build_registry(settings, fetcher, browser)
    return UpdateResolver(registry, settings)
