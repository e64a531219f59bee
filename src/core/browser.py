"""
Update Resolver - Headless Browsing Context
One Chromium instance per process for pages that only show their version
after client-side rendering.
"""

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Optional

from playwright.sync_api import Browser, Error as PlaywrightError, Playwright, sync_playwright

from core.config import DEFAULT_USER_AGENT
from core.errors import FetchError

logger = logging.getLogger(__name__)


class BrowserContext:
    """
    Lazily started headless browser.

    Playwright's sync objects belong to the thread that created them, so every
    browser call runs on a single dedicated worker thread. Callers on any
    thread just block on `render()`.
    """

    def __init__(self, user_agent: str = DEFAULT_USER_AGENT,
                 headless: bool = True, timeout: float = 15.0,
                 clock: Callable[[], float] = time.monotonic):
        """
        Initialize the browsing context.

        Args:
            user_agent: User-Agent for every page.
            headless: Run Chromium without a window.
            timeout: Total limit in seconds for navigation plus selector wait.
            clock: Monotonic time source, injectable for tests.
        """
        self.user_agent = user_agent
        self.headless = headless
        self.timeout = timeout
        self.clock = clock
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="browser")
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._closed = False
        self._lock = threading.Lock()

    def _start(self) -> Browser:
        # Runs on the browser thread
        if self._browser is None:
            logger.info("Starting headless browser")
            self._playwright = sync_playwright().start()
            try:
                self._browser = self._playwright.chromium.launch(
                    headless=self.headless,
                    args=["--no-sandbox", "--disable-setuid-sandbox"],
                )
            except PlaywrightError:
                self._playwright.stop()
                self._playwright = None
                raise
        return self._browser

    def _render(self, url: str, wait_for: Optional[str]) -> str:
        # Runs on the browser thread
        browser = self._start()
        page = browser.new_page(user_agent=self.user_agent)
        try:
            deadline = self.clock() + self.timeout
            page.goto(url, timeout=self.timeout * 1000)
            if wait_for:
                # Playwright reads 0 as "no limit"
                remaining_ms = max((deadline - self.clock()) * 1000, 1)
                page.wait_for_selector(wait_for, timeout=remaining_ms)
            return page.content()
        finally:
            page.close()

    def render(self, url: str, wait_for: Optional[str] = None) -> str:
        """
        Navigate to url, optionally wait for a selector, and return the HTML.

        Raises:
            FetchError: If the browser is closed, cannot start, or the page
                fails to load or never shows the selector.
        """
        with self._lock:
            if self._closed:
                raise FetchError(url, "browser context is closed")
            future = self._executor.submit(self._render, url, wait_for)

        logger.debug(f"Rendering {url} (wait_for={wait_for})")
        try:
            return future.result()
        except PlaywrightError as e:
            raise FetchError(url, str(e)) from e

    def _stop(self) -> None:
        if self._browser is not None:
            self._browser.close()
            self._browser = None
        if self._playwright is not None:
            self._playwright.stop()
            self._playwright = None

    def close(self) -> None:
        """Shut the browser down. Safe to call more than once."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            future = self._executor.submit(self._stop)

        try:
            future.result()
        except PlaywrightError as e:
            logger.warning(f"Error while closing browser: {e}")
        finally:
            self._executor.shutdown(wait=False)
            logger.debug("Browser context closed")
