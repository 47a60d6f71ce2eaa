"""Data models for discovered products and extracted variants."""

from dataclasses import dataclass, field
from typing import Any

from catalog_scraper.types import (
    PRICE_UNAVAILABLE,
    ProductUrl,
    ResourceType,
    SiteName,
    VariantCode,
    WaitUntil,
)


@dataclass(frozen=True)
class VariantRecord:
    """Pricing and color metadata for one selectable color of a product."""

    variant_code: VariantCode
    display_name: str
    list_price_text: str = PRICE_UNAVAILABLE
    list_price: float | None = None
    sale_price_text: str = PRICE_UNAVAILABLE
    sale_price: float | None = None
    discount_fraction: float | None = None  # (list - sale) / list

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the per-color payload stored in the JSONL sink."""
        return {
            "color_text": self.display_name,
            "original_price": self.list_price_text,
            "sale_price": self.sale_price_text,
            "sale_percent": self.discount_fraction,
        }


@dataclass
class ProductRecord:
    """All variants extracted from one product page.

    ``variants`` keeps insertion order, which is swatch DOM order.
    """

    product_url: ProductUrl
    variants: dict[VariantCode, VariantRecord] = field(default_factory=dict)

    def add_variant(self, variant: VariantRecord) -> bool:
        """Add a variant unless its code was already recorded.

        Returns:
            True if added, False if the code was a duplicate (first wins)
        """
        if variant.variant_code in self.variants:
            return False
        self.variants[variant.variant_code] = variant
        return True

    def to_dict(self) -> dict[str, Any]:
        """Serialize to one JSONL line payload.

        Colors are an array of single-key objects so that order survives
        tooling that does not preserve mapping order.
        """
        return {
            "product_url": self.product_url,
            "colors": [
                {code: variant.to_dict()} for code, variant in self.variants.items()
            ],
        }


@dataclass
class CrawlStats:
    """Outcome counters for one extraction run."""

    total: int = 0
    succeeded: int = 0
    failed: int = 0
    failed_urls: list[ProductUrl] = field(default_factory=list)


@dataclass(frozen=True)
class SiteProfile:
    """Selectors and URL conventions for one catalog site."""

    name: SiteName
    catalog_url: str
    catalog_path: str  # subcategory links must contain this path
    category_link_selector: str
    product_link_selector: str
    total_count_selector: str
    load_more_selector: str
    swatch_selector: str
    promo_indicator_selector: str  # relative to a swatch
    color_text_selector: str
    list_price_selector: str
    sale_price_selector: str
    color_query_param: str = "color"
    page_size_param: str = "lastViewed"
    page_size_value: str = "300"
    color_separator: str = "—"


@dataclass
class CrawlerConfig:
    """Runtime knobs for discovery and extraction.

    Millisecond delays are Playwright-style; tests set them to 0.
    """

    concurrency: int = 5
    headless: bool = True
    navigation_timeout_ms: int = 60_000
    wait_until: WaitUntil = "domcontentloaded"
    selector_timeout_ms: int = 30_000
    swatch_timeout_ms: int = 10_000
    swatch_settle_ms: int = 2_000  # upper bound while polling for URL change
    text_settle_ms: int = 300
    scroll_settle_ms: int = 6_000
    scroll_up_px: int = 1_000
    scroll_up_settle_ms: int = 1_000
    rescroll_settle_ms: int = 3_000
    load_more_settle_ms: int = 3_000
    stall_limit: int = 2
    max_scroll_iterations: int = 200
    max_retries: int = 0  # 0 = log and drop failed products
    retry_base_delay: float = 2.0
    discovery_blocked_resources: tuple[ResourceType, ...] = ("image", "font", "media")
    extraction_blocked_resources: tuple[ResourceType, ...] = ("media",)
