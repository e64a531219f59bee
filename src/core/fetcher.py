"""
Update Resolver - HTTP Transport
Shared urllib-based client used by every strategy that does not need a
rendered page.
"""

import json
import logging
import urllib.error
import urllib.request
from typing import Any

from core.config import DEFAULT_USER_AGENT
from core.errors import FetchError

logger = logging.getLogger(__name__)


class HttpFetcher:
    """Fetches page text or JSON documents."""

    def __init__(self, user_agent: str = DEFAULT_USER_AGENT, timeout: float = 5.0):
        """
        Initialize the fetcher.

        Args:
            user_agent: User-Agent header sent with every request.
            timeout: Socket timeout in seconds for each request.
        """
        self.user_agent = user_agent
        self.timeout = timeout

    def _open(self, url: str, accept: str) -> bytes:
        req = urllib.request.Request(
            url,
            headers={
                'User-Agent': self.user_agent,
                'Accept': accept,
            }
        )
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as response:
                status = getattr(response, "status", 200)
                if not 200 <= status < 300:
                    raise FetchError(url, f"HTTP {status}")
                return response.read()
        except urllib.error.HTTPError as e:
            raise FetchError(url, f"HTTP {e.code}") from e
        except (urllib.error.URLError, TimeoutError, OSError) as e:
            reason = getattr(e, "reason", e)
            raise FetchError(url, str(reason)) from e

    def get_text(self, url: str) -> str:
        """Fetch URL content as text."""
        logger.debug(f"GET {url}")
        return self._open(url, "text/html,*/*;q=0.8").decode('utf-8', errors='ignore')

    def get_json(self, url: str) -> Any:
        """Fetch and decode a JSON document."""
        logger.debug(f"GET {url} (json)")
        raw = self._open(url, "application/json")
        try:
            return json.loads(raw.decode('utf-8'))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise FetchError(url, f"invalid JSON: {e}") from e

