"""
Update Resolver - JetBrains Strategy
Reads the latest IDE release from the JetBrains product releases API.
"""

import logging

from core.errors import ParseError
from core.fetcher import HttpFetcher
from scrapers.base import ScrapeStrategy, ScrapeResult

logger = logging.getLogger(__name__)


class JetBrainsStrategy(ScrapeStrategy):
    """JetBrains releases API (JSON, no scraping needed)."""

    # JetBrains product codes
    PRODUCTS = {
        "PCP": "PyCharm Professional",
        "PCC": "PyCharm Community",
        "IIU": "IntelliJ IDEA Ultimate",
        "IIC": "IntelliJ IDEA Community",
        "WS": "WebStorm",
        "AI": "Android Studio",
    }

    API_URL = "https://data.services.jetbrains.com/products/releases"
    download_url = "https://www.jetbrains.com/toolbox-app/"

    def __init__(self, fetcher: HttpFetcher, product_code: str = "PCP"):
        """
        Initialize the JetBrains strategy.

        Args:
            fetcher: Shared HTTP transport.
            product_code: Product whose releases are read; one of PRODUCTS.
        """
        if product_code not in self.PRODUCTS:
            raise ValueError(f"Unknown JetBrains product code: {product_code}")
        self.fetcher = fetcher
        self.product_code = product_code

    @property
    def key(self) -> str:
        return "JetBrains"

    @property
    def url(self) -> str:
        return f"{self.API_URL}?code={self.product_code}&latest=true&type=release"

    def _scrape(self) -> ScrapeResult:
        data = self.fetcher.get_json(self.url)
        if not isinstance(data, dict):
            raise ParseError(f"unexpected payload type {type(data).__name__}")

        releases = data.get(self.product_code) or []
        if not releases:
            raise ParseError(f"no releases listed for {self.product_code}")

        latest = releases[0]
        version = latest.get("version") if isinstance(latest, dict) else None
        if not version:
            raise ParseError("latest release has no version field")

        link = None
        downloads = latest.get("downloads")
        if isinstance(downloads, dict) and isinstance(downloads.get("windows"), dict):
            link = downloads["windows"].get("link")

        return ScrapeResult(version=str(version), download_url=link)
