"""
Playwright page rendering for listing search pages.
"""
import asyncio
import logging
import os
from typing import Optional

from playwright.async_api import async_playwright, Error as PlaywrightError

from .errors import PageLoadError

logger = logging.getLogger(__name__)

USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)
DEFAULT_TIMEOUT_MS = 60_000
DEFAULT_SETTLE_MS = 10_000


def headless_from_env(default: bool = True) -> bool:
    value = os.getenv("HEADLESS", "").strip().lower()
    if not value:
        return default
    return value in ("1", "true", "yes")


class PageRenderer:
    """
    Caller-owned browser resource that renders a URL to an HTML snapshot.

    Use as an async context manager, or call ``start()``/``close()``
    explicitly. Each ``render()`` opens a fresh page and closes it afterwards.
    """

    def __init__(
        self,
        headless: bool = True,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        settle_ms: int = DEFAULT_SETTLE_MS,
        max_attempts: int = 2,
        retry_delay_s: float = 2.0,
    ):
        self.headless = headless
        self.timeout_ms = timeout_ms
        self.settle_ms = settle_ms
        self.max_attempts = max(1, max_attempts)
        self.retry_delay_s = retry_delay_s
        self._playwright = None
        self._browser = None
        self._context = None

    async def __aenter__(self) -> "PageRenderer":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def start(self):
        if self._context is not None:
            return
        launch_args = [
            "--no-sandbox",
            "--disable-setuid-sandbox",
            "--disable-dev-shm-usage",
            "--disable-gpu",
        ]
        self._playwright = await async_playwright().start()
        self._browser = await self._playwright.chromium.launch(
            headless=self.headless,
            args=launch_args,
        )
        self._context = await self._browser.new_context(
            user_agent=USER_AGENT,
            viewport={"width": 1280, "height": 720},
            locale="en-US",
            ignore_https_errors=True,
        )
        self._context.set_default_timeout(self.timeout_ms)
        self._context.set_default_navigation_timeout(self.timeout_ms)
        logger.info(f">>> Browser initialized (headless={self.headless})")

    async def close(self):
        """Shutdown hook: release context, browser and driver."""
        if self._context is not None:
            try:
                await self._context.close()
            except PlaywrightError as e:
                logger.warning(f"Error closing context: {e}")
            self._context = None
        if self._browser is not None:
            try:
                await self._browser.close()
            except PlaywrightError as e:
                logger.warning(f"Error closing browser: {e}")
            self._browser = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None

    async def _render_once(self, url: str) -> str:
        page = await self._context.new_page()
        try:
            await page.goto(url, timeout=self.timeout_ms, wait_until="domcontentloaded")
            logger.info(">>> Page loaded, waiting for content...")
            await page.wait_for_timeout(self.settle_ms)
            return await page.content()
        finally:
            if not page.is_closed():
                await page.close()

    async def render(self, url: str) -> str:
        """Return the rendered HTML of ``url``; raises PageLoadError when exhausted."""
        last_error: Optional[Exception] = None
        for attempt in range(1, self.max_attempts + 1):
            try:
                await self.start()
                logger.info(f">>> Attempt {attempt}/{self.max_attempts}: opening {url}")
                return await self._render_once(url)
            except PlaywrightError as e:
                last_error = e
                logger.warning(f">>> Attempt {attempt} failed: {e}")
                if attempt < self.max_attempts:
                    # Browser may be wedged; start over with a fresh one
                    await self.close()
                    await asyncio.sleep(self.retry_delay_s)
        raise PageLoadError(url, self.max_attempts, str(last_error or ""))
