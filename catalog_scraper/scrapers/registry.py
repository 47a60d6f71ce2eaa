"""Catalog site registry.

Maps site names to their selector profiles. Adding a site that follows the
same swatch/listing conventions only requires a new entry in SITE_REGISTRY.
"""

from catalog_scraper.models import SiteProfile
from catalog_scraper.types import SiteName

ARITZIA = SiteProfile(
    name=SiteName("aritzia"),
    catalog_url="https://www.aritzia.com/en/clothing",
    catalog_path="/en/clothing",
    category_link_selector='a[data-testid="swiper-item"]',
    product_link_selector='a[href*="/en/product"]',
    total_count_selector='h1[data-testid="page-heading"] ~ sup',
    load_more_selector='button:has-text("Load More"), button:has-text("Show More")',
    swatch_selector='[data-testid="color-swatches"] button',
    promo_indicator_selector='div[data-design-system="indicator"]',
    color_text_selector='[data-testid="product-color-text"]',
    list_price_selector='[data-testid="product-list-price-text"]',
    sale_price_selector='p[data-testid="product-list-sale-text"]',
)

SITE_REGISTRY: dict[str, SiteProfile] = {
    "aritzia": ARITZIA,
}


def get_site_profile(site: str) -> SiteProfile:
    """Get the selector profile for a site.

    Args:
        site: Site name (e.g., 'aritzia')

    Returns:
        Site profile

    Raises:
        ValueError: If site is not supported
    """
    if site not in SITE_REGISTRY:
        available = ", ".join(SITE_REGISTRY.keys())
        raise ValueError(f"Unknown site: {site}. Available: {available}")

    return SITE_REGISTRY[site]


def get_available_sites() -> list[str]:
    """Get list of supported site names."""
    return list(SITE_REGISTRY.keys())
