"""Type definitions for the catalog scraper.

Branded types (NewType) keep product URLs, variant codes and category URLs
from being mixed up as plain strings.
"""

from typing import Literal, NewType

ProductUrl = NewType("ProductUrl", str)
CategoryUrl = NewType("CategoryUrl", str)
VariantCode = NewType("VariantCode", str)
SiteName = NewType("SiteName", str)

# Playwright request.resource_type values we may abort
ResourceType = Literal[
    "document",
    "stylesheet",
    "image",
    "media",
    "font",
    "script",
    "texttrack",
    "xhr",
    "fetch",
    "eventsource",
    "websocket",
    "manifest",
    "other",
]

WaitUntil = Literal["load", "domcontentloaded", "networkidle", "commit"]

# Sentinel text stored when a price element is missing or unreadable
PRICE_UNAVAILABLE = "N/A"
