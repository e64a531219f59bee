"""
Update Resolver - Scrape Strategy Base
Abstract base class for all publisher scrape strategies.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional
import logging
import re

from bs4 import BeautifulSoup

from core.errors import ParseError, ScrapeError

logger = logging.getLogger(__name__)


@dataclass
class ScrapeResult:
    """Raw outcome of a successful scrape."""
    version: str                         # Version token exactly as found upstream
    download_url: Optional[str] = None   # Where the user can get it, if known


class ScrapeStrategy(ABC):
    """
    Abstract base class for scrape strategies.

    Each strategy fetches one page and pulls a version token out of a
    page-specific region. A strategy never raises to its caller: every
    failure is logged and reported as "no version found".
    """

    download_url: Optional[str] = None

    @property
    @abstractmethod
    def key(self) -> str:
        """Publisher substring this strategy is registered under (e.g., 'Mozilla')."""
        pass

    @property
    @abstractmethod
    def url(self) -> str:
        """Page or API the version is scraped from."""
        pass

    @property
    def name(self) -> str:
        """Human-readable name of the strategy."""
        return self.key

    @abstractmethod
    def _scrape(self) -> ScrapeResult:
        """
        Fetch the source and extract a version token.

        Returns:
            ScrapeResult with the raw token.

        Raises:
            ScrapeError: On fetch or parse failure.
        """
        pass

    def fetch(self) -> Optional[ScrapeResult]:
        """
        Run the scrape, absorbing every failure.

        Returns:
            ScrapeResult, or None if no version could be found.
        """
        try:
            result = self._scrape()
        except ScrapeError as e:
            logger.warning(f"{self.name} version check failed: {e}")
            return None
        except Exception as e:
            logger.exception(f"{self.name} version check crashed: {e}")
            return None

        if result.download_url is None:
            result.download_url = self.download_url
        logger.debug(f"{self.name} reports version {result.version!r}")
        return result

    def __repr__(self) -> str:
        return f"<{type(self).__name__} key={self.key!r} url={self.url!r}>"


def select_text(html: str, selector: str) -> str:
    """
    Text of the first element matching a CSS selector.

    Raises:
        ParseError: If nothing matches or the element is empty.
    """
    soup = BeautifulSoup(html, "html.parser")
    element = soup.select_one(selector)
    if element is None:
        raise ParseError(f"no element matches {selector!r}")
    text = element.get_text(" ", strip=True)
    if not text:
        raise ParseError(f"element {selector!r} is empty")
    return text


def search_token(text: str, pattern: str) -> str:
    """
    First match of pattern in text.

    Raises:
        ParseError: If the pattern does not occur.
    """
    match = re.search(pattern, text)
    if not match:
        raise ParseError(f"no version matching {pattern!r} in {text[:80]!r}")
    return match.group(0)
