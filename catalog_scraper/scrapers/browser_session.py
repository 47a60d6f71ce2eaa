"""Playwright browser lifecycle shared by discovery and extraction.

One browser per run; every page handed out lives in its own context so
cookies and storage never leak between products.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from loguru import logger
from playwright.async_api import (
    Browser,
    Page,
    Playwright,
    Route,
    TimeoutError as PlaywrightTimeout,
    async_playwright,
)

from catalog_scraper.errors import NavigationTimeout
from catalog_scraper.models import CrawlerConfig
from catalog_scraper.types import ResourceType


class BrowserSession:
    """Owns the Playwright runtime and browser for one run."""

    def __init__(self, config: CrawlerConfig):
        """Initialize session with configuration.

        Args:
            config: Crawler configuration (headless flag, timeouts)
        """
        self.config = config
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None

    async def start(self) -> Browser:
        """Launch Playwright and Chromium if not already running."""
        if self._browser is not None:
            return self._browser

        self._playwright = await async_playwright().start()
        self._browser = await self._playwright.chromium.launch(
            headless=self.config.headless
        )

        logger.info(f"Browser launched (headless={self.config.headless})")
        return self._browser

    async def close(self) -> None:
        """Close browser and stop Playwright."""
        if self._browser:
            await self._browser.close()
        if self._playwright:
            await self._playwright.stop()

        self._browser = None
        self._playwright = None

        logger.info("Browser closed")

    @asynccontextmanager
    async def isolated_page(
        self, blocked_resources: tuple[ResourceType, ...] = ()
    ) -> AsyncIterator[Page]:
        """Yield a page in a fresh browser context, closing both afterwards.

        Args:
            blocked_resources: Request resource types to abort for speed
        """
        browser = await self.start()
        context = await browser.new_context()
        try:
            page = await context.new_page()
            page.set_default_timeout(self.config.selector_timeout_ms)

            if blocked_resources:
                await page.route("**/*", _blocking_handler(blocked_resources))

            yield page
        finally:
            # closing the context closes its pages too
            await context.close()

    async def __aenter__(self) -> "BrowserSession":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()


async def navigate(page: Page, url: str, config: CrawlerConfig) -> None:
    """Go to a URL, translating Playwright timeouts into NavigationTimeout.

    Raises:
        NavigationTimeout: If the page does not reach ``config.wait_until`` in time
    """
    try:
        await page.goto(
            url,
            wait_until=config.wait_until,
            timeout=config.navigation_timeout_ms,
        )
    except PlaywrightTimeout as e:
        raise NavigationTimeout(url, config.navigation_timeout_ms) from e


def _blocking_handler(blocked_resources: tuple[ResourceType, ...]):
    """Build a route handler aborting the given resource types."""

    async def handle(route: Route) -> None:
        if route.request.resource_type in blocked_resources:
            await route.abort()
        else:
            await route.continue_()

    return handle
