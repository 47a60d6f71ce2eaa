"""Pure functions for parsing URLs, prices and color labels.

No browser access here; everything takes plain strings so it can be unit
tested without Playwright.
"""

import re
from urllib.parse import parse_qs, urlencode, urlsplit, urlunsplit

from catalog_scraper.types import PRICE_UNAVAILABLE, ProductUrl, VariantCode

PRICE_PATTERN = re.compile(r"[\d,.]+")


def canonicalize_url(url: str) -> ProductUrl:
    """Strip query string and fragment to get a stable product identity.

    Args:
        url: Absolute product URL (e.g., "https://x.com/en/product/a/123?color=1")

    Returns:
        URL without query and fragment
    """
    parts = urlsplit(url.strip())
    return ProductUrl(urlunsplit((parts.scheme, parts.netloc, parts.path, "", "")))


def add_query_param(url: str, name: str, value: str) -> str:
    """Append a query parameter, keeping any existing ones."""
    parts = urlsplit(url)
    extra = urlencode({name: value})
    query = f"{parts.query}&{extra}" if parts.query else extra
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def variant_code_from_url(url: str, param: str = "color") -> VariantCode | None:
    """Read the selected variant code from the page URL.

    Args:
        url: Current page URL after selecting a swatch
        param: Query parameter carrying the code

    Returns:
        Variant code or None if missing/empty
    """
    try:
        values = parse_qs(urlsplit(url).query).get(param)
    except ValueError:
        return None

    if not values or not values[0].strip():
        return None
    return VariantCode(values[0].strip())


def parse_price(text: str | None) -> float | None:
    """Extract a numeric price from display text.

    Takes the first run of digits, commas and dots, drops grouping commas
    and parses the rest. Never raises.

    Examples:
        >>> parse_price("$1,234.50 CAD")
        1234.5
        >>> parse_price("N/A") is None
        True
    """
    if not text or text == PRICE_UNAVAILABLE:
        return None

    match = PRICE_PATTERN.search(text)
    if not match:
        return None

    try:
        return float(match.group(0).replace(",", ""))
    except ValueError:
        return None


def compute_discount(list_price: float | None, sale_price: float | None) -> float | None:
    """Fraction off the list price, or None unless both prices are known."""
    if list_price is None or sale_price is None or list_price == 0:
        return None
    return (list_price - sale_price) / list_price


def pick_color_name(label_texts: list[str], separator: str = "—") -> str:
    """Resolve the color display name from the color label element(s).

    Single-row layouts render one label whose whole text is the color.
    Multi-row layouts render several labels; the selected color is the part
    after the separator in the label that contains it.

    Args:
        label_texts: Inner texts of all color label elements
        separator: Glyph separating the row title from the color name

    Returns:
        Color name, or "" if it cannot be determined
    """
    if not label_texts:
        return ""

    if len(label_texts) == 1:
        return label_texts[0].strip()

    for text in label_texts:
        if separator in text:
            return text.split(separator, 1)[1].strip()

    return ""


def parse_count_hint(text: str | None) -> int:
    """Parse a displayed item total like "(1,204)" into an int; 0 if unknown."""
    if not text:
        return 0
    digits = re.sub(r"\D", "", text)
    return int(digits) if digits else 0
