"""Exceptions raised by the crawl and extraction pipeline."""


class ScraperError(Exception):
    """Base class for catalog scraper errors."""


class ParseError(ScraperError):
    """Malformed manifest line or persisted record line."""


class NotFound(ScraperError):
    """An expected DOM element did not appear within its timeout."""


class NavigationTimeout(ScraperError):
    """Page navigation did not complete within its timeout."""

    def __init__(self, url: str, timeout_ms: int):
        self.url = url
        self.timeout_ms = timeout_ms
        super().__init__(f"Navigation to {url} timed out after {timeout_ms}ms")
