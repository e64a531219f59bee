"""
Update Resolver - Generic Search Strategy
Best-effort fallback for publishers without a dedicated strategy: searches
the web for the product and takes the highest version mentioned.
"""

import logging
from typing import Optional
from urllib.parse import quote_plus, urljoin, urlparse

from bs4 import BeautifulSoup

from core.browser import BrowserContext
from core.errors import ParseError
from core.fetcher import HttpFetcher
from core.version import find_versions, is_valid, max_version
from scrapers.base import ScrapeStrategy, ScrapeResult

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_URL = "https://www.google.com/search?q={query}"

# Text inside these tags is never shown to a reader
_SKIP_TAGS = ("script", "style", "noscript")


class GenericStrategy(ScrapeStrategy):
    """Search-results scraper bound to one application's name and publisher."""

    def __init__(
        self,
        product_name: str,
        publisher: str,
        fetcher: HttpFetcher,
        browser: Optional[BrowserContext] = None,
        search_url: str = DEFAULT_SEARCH_URL,
        result_selector: Optional[str] = "div.g",
    ):
        """
        Initialize the generic strategy.

        Args:
            product_name: Application name used in the query.
            publisher: Publisher name used in the query.
            fetcher: Plain HTTP transport, used when there is no browser.
            browser: Headless browser for search pages that render client-side.
            search_url: Search endpoint with a '{query}' placeholder.
            result_selector: Selector to wait for before reading a rendered page.
        """
        self.product_name = product_name
        self.publisher = publisher
        self.fetcher = fetcher
        self.browser = browser
        self.search_url = search_url
        self.result_selector = result_selector

    @property
    def key(self) -> str:
        return "generic"

    @property
    def name(self) -> str:
        return f"Generic search ({self.product_name})"

    @property
    def query(self) -> str:
        return f"{self.product_name} {self.publisher} latest version download"

    @property
    def url(self) -> str:
        return self.search_url.format(query=quote_plus(self.query))

    def _get_page(self) -> str:
        if self.browser is not None:
            return self.browser.render(self.url, wait_for=self.result_selector)
        return self.fetcher.get_text(self.url)

    def _scrape(self) -> ScrapeResult:
        html = self._get_page()
        soup = BeautifulSoup(html, "html.parser")

        latest = self._extract_latest_version(soup)
        if latest is None:
            raise ParseError(f"no version numbers found searching for {self.query!r}")

        return ScrapeResult(version=latest, download_url=self._extract_download_link(soup))

    def _extract_latest_version(self, soup: BeautifulSoup) -> Optional[str]:
        """Highest valid version number in the visible page text."""
        for tag in soup(_SKIP_TAGS):
            tag.decompose()
        text = soup.get_text(" ")

        candidates = [v for v in find_versions(text) if is_valid(v)]
        logger.debug(f"{self.name}: {len(candidates)} version candidates")
        return max_version(candidates)

    def _extract_download_link(self, soup: BeautifulSoup) -> Optional[str]:
        """First on-site link that looks like a download page. Absence is fine."""
        page_url = self.url
        host = urlparse(page_url).hostname
        for anchor in soup.find_all("a", href=True):
            href = urljoin(page_url, anchor["href"])
            parsed = urlparse(href)
            if parsed.hostname == host and "download" in parsed.path.lower():
                return href
        return None
