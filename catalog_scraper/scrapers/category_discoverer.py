"""Discover product URLs by walking the catalog's subcategories."""

from loguru import logger
from playwright.async_api import Page, TimeoutError as PlaywrightTimeout

from catalog_scraper.errors import NotFound
from catalog_scraper.models import CrawlerConfig, SiteProfile
from catalog_scraper.scrapers.browser_session import BrowserSession, navigate
from catalog_scraper.scrapers.scroll_paginator import ScrollPaginator
from catalog_scraper.scrapers.attribute_parser import add_query_param
from catalog_scraper.types import CategoryUrl, ProductUrl

COLLECT_HREFS = "els => els.map(e => e.href)"


class CategoryDiscoverer:
    """Enumerates subcategories, then every product listed in each.

    Subcategories are visited one at a time on a single page to keep the
    load on the site and the browser bounded.
    """

    def __init__(
        self,
        session: BrowserSession,
        profile: SiteProfile,
        config: CrawlerConfig,
        paginator: ScrollPaginator | None = None,
        log=None,
    ):
        self.session = session
        self.profile = profile
        self.config = config
        self.log = log or logger.bind(component="discoverer")
        self.paginator = paginator or ScrollPaginator(profile, config, log=self.log)

    async def discover(self) -> list[ProductUrl]:
        """Collect product URLs across all subcategories.

        Returns:
            Deduplicated product URLs in discovery order

        Raises:
            NavigationTimeout: If the catalog root cannot be loaded
            NotFound: If the root page has no category navigation
        """
        async with self.session.isolated_page(
            self.config.discovery_blocked_resources
        ) as page:
            return await self.discover_on_page(page)

    async def discover_on_page(self, page: Page) -> list[ProductUrl]:
        """Run discovery on an already-open page."""
        self.log.info(f"Navigating to {self.profile.catalog_url} to find categories...")
        categories = await self.find_categories(page)
        self.log.info(f"Found {len(categories)} subcategories")

        products: dict[ProductUrl, None] = {}
        for category_url in categories:
            self.log.info(f"Navigating to category: {category_url}")
            try:
                for url in await self.scrape_category(page, category_url):
                    products.setdefault(url, None)
                self.log.info(f"Total unique products so far: {len(products)}")
            except Exception as e:
                self.log.error(f"Failed to scrape category {category_url}: {e}")

        self.log.info(f"Found total {len(products)} unique products")
        return list(products)

    async def find_categories(self, page: Page) -> list[CategoryUrl]:
        """Read subcategory links from the catalog root's navigation."""
        await navigate(page, self.profile.catalog_url, self.config)

        try:
            await page.wait_for_selector(
                self.profile.category_link_selector,
                timeout=self.config.selector_timeout_ms,
            )
        except PlaywrightTimeout as e:
            raise NotFound(
                f"No category navigation on {self.profile.catalog_url}"
            ) from e

        hrefs = await page.eval_on_selector_all(
            self.profile.category_link_selector, COLLECT_HREFS
        )
        root = self.profile.catalog_url.rstrip("/")
        categories = [
            CategoryUrl(href)
            for href in hrefs
            if href
            and self.profile.catalog_path in href
            and href.rstrip("/") != root
        ]
        return list(dict.fromkeys(categories))

    async def scrape_category(
        self, page: Page, category_url: CategoryUrl
    ) -> list[ProductUrl]:
        """Load one subcategory with a large page size and paginate it."""
        url = add_query_param(
            category_url, self.profile.page_size_param, self.profile.page_size_value
        )
        await navigate(page, url, self.config)
        self.log.info("Initial load complete. Scrolling...")
        return await self.paginator.paginate(page)
