"""Per-product color variant extraction.

Selecting a swatch mutates the page (URL, labels, prices), so swatches are
visited strictly in DOM order and everything a step needs is read into an
immutable ``SwatchReading`` before the next click.
"""

from dataclasses import dataclass

from loguru import logger
from playwright.async_api import (
    Error as PlaywrightError,
    Locator,
    Page,
    TimeoutError as PlaywrightTimeout,
)

from catalog_scraper.errors import NotFound
from catalog_scraper.models import CrawlerConfig, ProductRecord, SiteProfile, VariantRecord
from catalog_scraper.scrapers.attribute_parser import (
    compute_discount,
    parse_price,
    pick_color_name,
    variant_code_from_url,
)
from catalog_scraper.scrapers.browser_session import BrowserSession, navigate
from catalog_scraper.types import PRICE_UNAVAILABLE, ProductUrl, VariantCode


@dataclass(frozen=True)
class SwatchReading:
    """Raw page state captured after selecting one swatch."""

    index: int
    has_indicator: bool
    variant_code: VariantCode | None
    label_texts: tuple[str, ...]
    list_price_text: str
    sale_price_text: str


def build_variant_record(reading: SwatchReading, separator: str = "—") -> VariantRecord | None:
    """Turn a swatch reading into a variant record.

    Args:
        reading: Captured page state for one swatch
        separator: Glyph used by multi-row color labels

    Returns:
        VariantRecord, or None when the swatch yielded no variant code
    """
    if reading.variant_code is None:
        return None

    list_price = parse_price(reading.list_price_text)
    sale_price = parse_price(reading.sale_price_text)

    return VariantRecord(
        variant_code=reading.variant_code,
        display_name=pick_color_name(list(reading.label_texts), separator),
        list_price_text=reading.list_price_text,
        list_price=list_price,
        sale_price_text=reading.sale_price_text,
        sale_price=sale_price,
        discount_fraction=compute_discount(list_price, sale_price),
    )


class VariantExtractor:
    """Extracts every color variant of a product page."""

    def __init__(
        self,
        session: BrowserSession,
        profile: SiteProfile,
        config: CrawlerConfig,
        log=None,
    ):
        self.session = session
        self.profile = profile
        self.config = config
        self.log = log or logger.bind(component="extractor")

    async def extract(self, url: ProductUrl) -> ProductRecord:
        """Extract a product in its own browser context.

        Raises:
            NavigationTimeout: If the product page does not load in time
            NotFound: If the page never shows a swatch group
        """
        async with self.session.isolated_page(
            self.config.extraction_blocked_resources
        ) as page:
            return await self.extract_from_page(page, url)

    async def extract_from_page(self, page: Page, url: ProductUrl) -> ProductRecord:
        """Walk the swatches of a product on an already-open page."""
        self.log.info(f"Scraping: {url}")
        await navigate(page, url, self.config)

        try:
            await page.wait_for_selector(
                self.profile.swatch_selector, timeout=self.config.swatch_timeout_ms
            )
        except PlaywrightTimeout as e:
            raise NotFound(f"No color swatches on {url}") from e

        swatches = page.locator(self.profile.swatch_selector)
        swatch_count = await swatches.count()
        record = ProductRecord(product_url=url)

        for index in range(swatch_count):
            reading = await self.read_swatch(page, swatches.nth(index), index)
            variant = build_variant_record(reading, self.profile.color_separator)

            if variant is None:
                self.log.warning(f"No variant code for swatch {index} on {url}")
                continue

            if record.add_variant(variant):
                self.log.info(
                    f"  - Found color: {variant.display_name} ({variant.variant_code}) "
                    f"| Price: {variant.list_price_text} | Sale: {variant.sale_price_text}"
                )
            else:
                self.log.debug(
                    f"Duplicate variant {variant.variant_code} at swatch {index}, keeping first"
                )

        return record

    async def read_swatch(self, page: Page, swatch: Locator, index: int) -> SwatchReading:
        """Select one swatch and capture the resulting page state."""
        # Clicking can hide or move the badge, so read it first
        has_indicator = (
            await swatch.locator(self.profile.promo_indicator_selector).count() > 0
        )

        if await swatch.get_attribute("aria-pressed") != "true":
            previous_code = variant_code_from_url(page.url, self.profile.color_query_param)
            await swatch.click(force=True)
            await self._wait_for_selection(page, previous_code)

        variant_code = variant_code_from_url(page.url, self.profile.color_query_param)
        label_texts = await page.locator(self.profile.color_text_selector).all_inner_texts()
        list_price_text = await self._read_text(page.locator(self.profile.list_price_selector))

        sale_price_text = PRICE_UNAVAILABLE
        if has_indicator:
            sale = page.locator(self.profile.sale_price_selector)
            if await sale.count() > 0 and await sale.first.is_visible():
                sale_price_text = await self._read_text(sale)

        return SwatchReading(
            index=index,
            has_indicator=has_indicator,
            variant_code=variant_code,
            label_texts=tuple(label_texts),
            list_price_text=list_price_text,
            sale_price_text=sale_price_text,
        )

    async def _wait_for_selection(self, page: Page, previous_code: VariantCode | None) -> None:
        """Wait for the URL to reflect the new color, then let text settle.

        The page emits no completion event, so the URL change is the only
        observable signal; a fixed short delay covers the price/label update.
        """
        param = self.profile.color_query_param
        try:
            await page.wait_for_url(
                lambda current: variant_code_from_url(current, param) != previous_code,
                wait_until="commit",
                timeout=self.config.swatch_settle_ms,
            )
        except PlaywrightTimeout:
            self.log.debug(f"URL kept color {previous_code} after swatch click")

        await page.wait_for_timeout(self.config.text_settle_ms)

    async def _read_text(self, locator: Locator) -> str:
        try:
            text = await locator.first.inner_text(timeout=self.config.swatch_timeout_ms)
        except PlaywrightError:
            return PRICE_UNAVAILABLE
        return text.strip() or PRICE_UNAVAILABLE
