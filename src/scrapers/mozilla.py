"""
Update Resolver - Mozilla Strategy
Reads the newest Firefox release from the public release-notes index.
"""

import logging

from core.fetcher import HttpFetcher
from scrapers.base import ScrapeStrategy, ScrapeResult, select_text

logger = logging.getLogger(__name__)


class MozillaStrategy(ScrapeStrategy):
    """Firefox releases page; the first `.c-release-version` is the newest."""

    RELEASES_URL = "https://www.mozilla.org/en-US/firefox/releases/"
    VERSION_SELECTOR = ".c-release-version"
    download_url = "https://www.mozilla.org/firefox/download/thanks/"

    def __init__(self, fetcher: HttpFetcher):
        self.fetcher = fetcher

    @property
    def key(self) -> str:
        return "Mozilla"

    @property
    def url(self) -> str:
        return self.RELEASES_URL

    def _scrape(self) -> ScrapeResult:
        html = self.fetcher.get_text(self.RELEASES_URL)
        return ScrapeResult(version=select_text(html, self.VERSION_SELECTOR))
