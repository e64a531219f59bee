"""
Update Resolver - Google Strategy
Picks the Chrome build number out of the latest Chrome Releases blog post.
"""

import logging

from core.fetcher import HttpFetcher
from scrapers.base import ScrapeStrategy, ScrapeResult, search_token, select_text

logger = logging.getLogger(__name__)


class GoogleStrategy(ScrapeStrategy):
    """Chrome Releases blog; versions are four-part build numbers."""

    BLOG_URL = "https://chromereleases.googleblog.com/"
    TITLE_SELECTOR = ".post-title"
    VERSION_PATTERN = r"\d+\.\d+\.\d+\.\d+"
    download_url = "https://www.google.com/chrome/"

    def __init__(self, fetcher: HttpFetcher):
        self.fetcher = fetcher

    @property
    def key(self) -> str:
        return "Google"

    @property
    def url(self) -> str:
        return self.BLOG_URL

    def _scrape(self) -> ScrapeResult:
        html = self.fetcher.get_text(self.BLOG_URL)
        title = select_text(html, self.TITLE_SELECTOR)
        return ScrapeResult(version=search_token(title, self.VERSION_PATTERN))
