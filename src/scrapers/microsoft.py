"""
Update Resolver - Microsoft Strategy
Visual Studio release notes. The version banner is rendered client-side, so
this strategy goes through the headless browser when one is available.
"""

import logging
from typing import Optional

from core.browser import BrowserContext
from core.fetcher import HttpFetcher
from scrapers.base import ScrapeStrategy, ScrapeResult, search_token, select_text

logger = logging.getLogger(__name__)


class MicrosoftStrategy(ScrapeStrategy):
    """Visual Studio 2022 release notes."""

    RELEASE_NOTES_URL = "https://learn.microsoft.com/en-us/visualstudio/releases/2022/release-notes"
    VERSION_SELECTOR = ".release-version"
    VERSION_PATTERN = r"\d+\.\d+\.\d+"
    download_url = "https://visualstudio.microsoft.com/downloads/"

    def __init__(self, fetcher: HttpFetcher, browser: Optional[BrowserContext] = None):
        self.fetcher = fetcher
        self.browser = browser

    @property
    def key(self) -> str:
        return "Microsoft"

    @property
    def url(self) -> str:
        return self.RELEASE_NOTES_URL

    def _scrape(self) -> ScrapeResult:
        if self.browser is not None:
            html = self.browser.render(self.RELEASE_NOTES_URL, wait_for=self.VERSION_SELECTOR)
        else:
            logger.debug("No browser available, reading static release notes")
            html = self.fetcher.get_text(self.RELEASE_NOTES_URL)

        banner = select_text(html, self.VERSION_SELECTOR)
        return ScrapeResult(version=search_token(banner, self.VERSION_PATTERN))
