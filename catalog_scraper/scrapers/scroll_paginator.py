"""Infinite-scroll pagination for listing pages.

Listings load items lazily as the viewport nears the bottom, and some only
react to a change of scroll direction. Without a reliable total there is no
exact stopping point, so pagination runs until the item count stops growing
and no "load more" control is left to click. Best effort: a listing that
stalls for longer than the settle delays will be cut short.
"""

from loguru import logger
from playwright.async_api import Page

from catalog_scraper.models import CrawlerConfig, SiteProfile
from catalog_scraper.scrapers.attribute_parser import canonicalize_url, parse_count_hint
from catalog_scraper.types import ProductUrl

SCROLL_TO_BOTTOM = "window.scrollTo(0, document.body.scrollHeight)"
COLLECT_HREFS = "els => els.map(e => e.href)"


class ScrollPaginator:
    """Drives one listing page until lazy loading is exhausted."""

    def __init__(self, profile: SiteProfile, config: CrawlerConfig, log=None):
        """Initialize paginator.

        Args:
            profile: Site selectors (item links, total hint, load-more control)
            config: Settle delays, stall limit and iteration cap
            log: Bound loguru logger (defaults to a component-bound logger)
        """
        self.profile = profile
        self.config = config
        self.log = log or logger.bind(component="paginator")

    async def paginate(self, page: Page) -> list[ProductUrl]:
        """Scroll the listing until no more items appear.

        Args:
            page: Page already positioned on a listing

        Returns:
            Canonical item URLs in first-seen order
        """
        target = await self.read_target_count(page)
        self.log.info(f"Target item count: {target or 'unknown'}")

        seen: dict[ProductUrl, None] = {}
        self._merge(seen, await self.collect_item_urls(page))

        stalls = 0
        iterations = 0
        while stalls < self.config.stall_limit:
            if target and len(seen) >= target:
                self.log.info("Reached target item count")
                break
            if iterations >= self.config.max_scroll_iterations:
                self.log.warning(
                    f"Stopping after {iterations} scroll iterations "
                    f"with {len(seen)} items"
                )
                break
            iterations += 1

            previous = len(seen)
            await self._scroll_cycle(page)
            self._merge(seen, await self.collect_item_urls(page))
            self.log.info(f"Scrolled... items found: {len(seen)}")

            if len(seen) > previous:
                stalls = 0
            elif await self._click_load_more(page):
                stalls = 0
            else:
                stalls += 1

        return list(seen)

    async def read_target_count(self, page: Page) -> int:
        """Read the displayed item total; 0 when absent."""
        hint = page.locator(self.profile.total_count_selector)
        if await hint.count() == 0:
            return 0
        return parse_count_hint(await hint.first.inner_text())

    async def collect_item_urls(self, page: Page) -> list[ProductUrl]:
        """Return distinct canonical item URLs currently in the DOM."""
        hrefs = await page.eval_on_selector_all(
            self.profile.product_link_selector, COLLECT_HREFS
        )
        urls = [canonicalize_url(href) for href in hrefs if href]
        return list(dict.fromkeys(urls))

    async def _scroll_cycle(self, page: Page) -> None:
        """Scroll down, nudge up, scroll down again, settling in between."""
        await page.evaluate(SCROLL_TO_BOTTOM)
        await page.wait_for_timeout(self.config.scroll_settle_ms)

        await page.evaluate(f"window.scrollBy(0, -{self.config.scroll_up_px})")
        await page.wait_for_timeout(self.config.scroll_up_settle_ms)

        await page.evaluate(SCROLL_TO_BOTTOM)
        await page.wait_for_timeout(self.config.rescroll_settle_ms)

    async def _click_load_more(self, page: Page) -> bool:
        """Click a visible load-more control; False if there is none."""
        button = page.locator(self.profile.load_more_selector).first
        if not await button.is_visible():
            return False

        self.log.info("Clicking 'Load More' button...")
        await button.click(force=True)
        await page.wait_for_timeout(self.config.load_more_settle_ms)
        return True

    @staticmethod
    def _merge(seen: dict[ProductUrl, None], urls: list[ProductUrl]) -> None:
        for url in urls:
            seen.setdefault(url, None)
