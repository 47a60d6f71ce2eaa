"""Unit tests for ScrollPaginator stall detection."""

import asyncio

import pytest

from catalog_scraper.models import CrawlerConfig
from catalog_scraper.scrapers.registry import ARITZIA
from catalog_scraper.scrapers.scroll_paginator import ScrollPaginator
from tests.fakes import FakeElement, FakePage, product_link

BASE = "https://www.aritzia.com/en/product"


def fast_config(**overrides) -> CrawlerConfig:
    return CrawlerConfig(
        scroll_settle_ms=0,
        scroll_up_settle_ms=0,
        rescroll_settle_ms=0,
        load_more_settle_ms=0,
        **overrides,
    )


def listing_page(initial: int, total_hint: str | None = None) -> FakePage:
    links = [product_link(f"{BASE}/item-{i}/{i}?color=1") for i in range(initial)]
    dom = {ARITZIA.product_link_selector: links}
    if total_hint is not None:
        dom[ARITZIA.total_count_selector] = [FakeElement(text=total_hint)]
    return FakePage(url="https://www.aritzia.com/en/clothing/tops", dom=dom)


def grow_on_scroll(page: FakePage, per_bottom_scroll: int, limit: int) -> None:
    """Append items on every scroll-to-bottom until ``limit`` items exist."""
    links = page.dom[ARITZIA.product_link_selector]

    def grow(p: FakePage) -> None:
        for _ in range(per_bottom_scroll):
            if len(links) < limit:
                n = len(links)
                links.append(product_link(f"{BASE}/item-{n}/{n}"))

    page.on_scroll_to_bottom = grow


def run(page: FakePage, config: CrawlerConfig | None = None) -> list[str]:
    paginator = ScrollPaginator(ARITZIA, config or fast_config())
    return asyncio.run(paginator.paginate(page))


@pytest.mark.unit
class TestPaginate:
    """Termination and collection behavior."""

    def test_stops_after_two_stalls_when_nothing_grows(self):
        """Should stop after 2 no-growth iterations with unknown target."""
        page = listing_page(initial=3)

        urls = run(page)

        assert len(urls) == 3
        # two scroll cycles, each with two scroll-to-bottom calls
        assert sum("scrollTo" in s for s in page.scripts) == 4

    def test_returns_canonical_deduplicated_urls(self):
        """Should strip query strings and collapse duplicates."""
        page = listing_page(initial=0)
        page.dom[ARITZIA.product_link_selector] = [
            product_link(f"{BASE}/a/1?color=1"),
            product_link(f"{BASE}/a/1?color=2"),
            product_link(f"{BASE}/b/2"),
        ]

        urls = run(page)

        assert urls == [f"{BASE}/a/1", f"{BASE}/b/2"]

    def test_keeps_scrolling_while_items_grow(self):
        """Should continue until growth stops."""
        page = listing_page(initial=2)
        grow_on_scroll(page, per_bottom_scroll=1, limit=10)

        urls = run(page)

        assert len(urls) == 10

    def test_stops_immediately_when_target_reached(self):
        """Should not scroll at all when the hinted total is already loaded."""
        page = listing_page(initial=5, total_hint="(5)")

        urls = run(page)

        assert len(urls) == 5
        assert page.scripts == []

    def test_stops_when_growth_reaches_target(self):
        """Should stop as soon as the hinted total is reached."""
        page = listing_page(initial=2, total_hint="6 items")
        grow_on_scroll(page, per_bottom_scroll=2, limit=100)

        urls = run(page)

        assert len(urls) == 6

    def test_load_more_click_resets_stall_counter(self):
        """Should click a visible load-more button and keep going."""
        page = listing_page(initial=2)
        links = page.dom[ARITZIA.product_link_selector]
        clicks = []

        def load_more(p: FakePage) -> None:
            clicks.append(1)
            n = len(links)
            links.extend(product_link(f"{BASE}/more-{n + i}/{n + i}") for i in range(3))

        page.dom[ARITZIA.load_more_selector] = lambda p: (
            [FakeElement(text="Load More", on_click=load_more)] if len(clicks) < 2 else []
        )

        urls = run(page)

        assert len(clicks) == 2
        assert len(urls) == 8

    def test_hidden_load_more_counts_as_stall(self):
        """Should not click an invisible load-more button."""
        page = listing_page(initial=1)
        page.dom[ARITZIA.load_more_selector] = [FakeElement(text="Load More", visible=False)]

        run(page)

        assert page.clicks == []

    def test_iteration_cap_bounds_endless_growth(self):
        """Should stop after max_scroll_iterations even if items keep coming."""
        page = listing_page(initial=1)
        grow_on_scroll(page, per_bottom_scroll=1, limit=10_000)

        urls = run(page, fast_config(max_scroll_iterations=5))

        assert sum("scrollTo" in s for s in page.scripts) == 10
        assert len(urls) == 11


@pytest.mark.unit
class TestReadTargetCount:
    def test_unknown_when_hint_missing(self):
        page = listing_page(initial=0)

        assert asyncio.run(ScrollPaginator(ARITZIA, fast_config()).read_target_count(page)) == 0

    def test_parses_digits_from_hint(self):
        page = listing_page(initial=0, total_hint="(1,204)")

        assert asyncio.run(ScrollPaginator(ARITZIA, fast_config()).read_target_count(page)) == 1204
