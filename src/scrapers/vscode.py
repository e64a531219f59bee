"""
Update Resolver - Visual Studio Code Strategy
Reads the newest VS Code release from the monthly updates page.
"""

import logging
import re

from core.errors import ParseError
from core.fetcher import HttpFetcher
from scrapers.base import ScrapeStrategy, ScrapeResult, select_text

logger = logging.getLogger(__name__)

# Release headings read like "Version 1.89"
_VERSION_LABEL = re.compile(r"version", re.IGNORECASE)


class VSCodeStrategy(ScrapeStrategy):
    """VS Code updates page; the first `.updates-version` is the newest."""

    UPDATES_URL = "https://code.visualstudio.com/updates"
    VERSION_SELECTOR = ".updates-version"
    download_url = "https://code.visualstudio.com/download"

    def __init__(self, fetcher: HttpFetcher):
        self.fetcher = fetcher

    @property
    def key(self) -> str:
        return "Visual Studio Code"

    @property
    def url(self) -> str:
        return self.UPDATES_URL

    def _scrape(self) -> ScrapeResult:
        html = self.fetcher.get_text(self.UPDATES_URL)
        label = select_text(html, self.VERSION_SELECTOR)
        version = _VERSION_LABEL.sub("", label).strip()
        if not version:
            raise ParseError(f"no version in heading {label!r}")
        return ScrapeResult(version=version)
