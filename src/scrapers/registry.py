"""
Update Resolver - Scraper Registry
Maps publisher names to scrape strategies, with a generic search fallback.
"""

import logging
from typing import Optional

from core.browser import BrowserContext
from core.config import ResolverSettings
from core.fetcher import HttpFetcher
from core.models import ApplicationDescriptor
from scrapers.base import ScrapeStrategy
from scrapers.generic import GenericStrategy
from scrapers.google import GoogleStrategy
from scrapers.jetbrains import JetBrainsStrategy
from scrapers.microsoft import MicrosoftStrategy
from scrapers.mozilla import MozillaStrategy
from scrapers.vscode import VSCodeStrategy

logger = logging.getLogger(__name__)


class ScraperRegistry:
    """
    Ordered table of publisher strategies.

    A publisher matches a strategy when it contains the strategy's key,
    ignoring case. Registration order decides ties: the first match wins.
    """

    def __init__(
        self,
        fetcher: HttpFetcher,
        browser: Optional[BrowserContext] = None,
        settings: Optional[ResolverSettings] = None,
    ):
        self.fetcher = fetcher
        self.browser = browser
        self.settings = settings or ResolverSettings()
        self._strategies: list[ScrapeStrategy] = []

    def register(self, strategy: ScrapeStrategy) -> None:
        """Append a strategy. Keys must be unique."""
        if any(s.key.lower() == strategy.key.lower() for s in self._strategies):
            raise ValueError(f"Strategy already registered for {strategy.key!r}")
        self._strategies.append(strategy)
        logger.debug(f"Registered strategy {strategy!r}")

    def keys(self) -> list[str]:
        return [s.key for s in self._strategies]

    def find_strategy(self, publisher: Optional[str]) -> Optional[ScrapeStrategy]:
        """Get the first strategy whose key occurs in the publisher name."""
        if not publisher:
            return None

        publisher_lower = publisher.lower()
        for strategy in self._strategies:
            if strategy.key.lower() in publisher_lower:
                return strategy
        return None

    def generic_strategy(self, descriptor: ApplicationDescriptor) -> Optional[GenericStrategy]:
        """Fallback strategy bound to this application, or None if disabled."""
        if not self.settings.generic_enabled:
            return None
        return GenericStrategy(
            product_name=descriptor.name,
            publisher=descriptor.publisher,
            fetcher=self.fetcher,
            browser=self.browser,
            search_url=self.settings.search_url,
            result_selector=self.settings.search_result_selector,
        )

    def strategy_for(self, descriptor: ApplicationDescriptor) -> Optional[ScrapeStrategy]:
        """Publisher strategy if one matches, otherwise the generic fallback."""
        strategy = self.find_strategy(descriptor.publisher)
        if strategy is not None:
            return strategy
        logger.debug(f"No strategy for publisher {descriptor.publisher!r}, using generic search")
        return self.generic_strategy(descriptor)


def build_registry(
    settings: ResolverSettings,
    fetcher: HttpFetcher,
    browser: Optional[BrowserContext] = None,
) -> ScraperRegistry:
    """Create the default registry with every enabled publisher strategy."""
    registry = ScraperRegistry(fetcher, browser, settings)
    defaults = [
        MozillaStrategy(fetcher),
        GoogleStrategy(fetcher),
        # Must precede Microsoft: "Microsoft Visual Studio Code" contains both keys
        VSCodeStrategy(fetcher),
        MicrosoftStrategy(fetcher, browser),
        JetBrainsStrategy(fetcher),
    ]
    for strategy in defaults:
        if settings.is_strategy_enabled(strategy.key):
            registry.register(strategy)
        else:
            logger.info(f"Strategy {strategy.key} disabled by configuration")
    return registry
