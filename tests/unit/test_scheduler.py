"""Unit tests for CrawlScheduler."""

import asyncio
import json
from collections import Counter

import pytest

from catalog_scraper.errors import NavigationTimeout
from catalog_scraper.models import CrawlerConfig, ProductRecord, VariantRecord
from catalog_scraper.scheduler import CrawlScheduler
from catalog_scraper.types import ProductUrl, VariantCode

URLS = [ProductUrl(f"https://www.aritzia.com/en/product/item-{i}/{i}") for i in range(12)]


class FakeExtractor:
    def __init__(self, failing: set[str] | None = None, flaky: dict[str, int] | None = None):
        self.failing = failing or set()
        self.flaky = dict(flaky or {})
        self.in_flight = 0
        self.max_in_flight = 0
        self.calls: list[str] = []

    async def extract(self, url: ProductUrl) -> ProductRecord:
        self.calls.append(url)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(0)
            if url in self.failing:
                raise NavigationTimeout(url, 60_000)
            if self.flaky.get(url, 0) > 0:
                self.flaky[url] -= 1
                raise RuntimeError("flaky")
            record = ProductRecord(product_url=url)
            code = VariantCode(url.rsplit("/", 1)[-1])
            record.add_variant(VariantRecord(variant_code=code, display_name=f"Color {code}"))
            return record
        finally:
            self.in_flight -= 1


class MemorySink:
    def __init__(self):
        self.lines: list[str] = []

    async def append(self, record: ProductRecord) -> None:
        self.lines.append(json.dumps(record.to_dict()))


def run(extractor, urls, concurrency, /, **config):
    sink = MemorySink()
    scheduler = CrawlScheduler(extractor, sink, CrawlerConfig(retry_base_delay=0, **config))
    stats = asyncio.run(scheduler.run(urls, concurrency))
    return stats, sink


@pytest.mark.unit
class TestCrawlScheduler:
    def test_single_worker_processes_every_url(self):
        """Should persist one record per URL with concurrency=1."""
        extractor = FakeExtractor()

        stats, sink = run(extractor, URLS, 1)

        assert stats.total == stats.succeeded == len(URLS)
        assert len(sink.lines) == len(URLS)
        assert extractor.calls == URLS

    def test_concurrent_run_yields_same_records(self):
        """Should produce the same multiset of records for any concurrency."""
        _, serial = run(FakeExtractor(), URLS, 1)
        _, parallel = run(FakeExtractor(), URLS, 5)

        assert Counter(serial.lines) == Counter(parallel.lines)

    def test_in_flight_bounded_by_concurrency(self):
        """Should never exceed the worker count."""
        extractor = FakeExtractor()

        run(extractor, URLS, 4)

        assert extractor.max_in_flight == 4

    def test_workers_not_more_than_urls(self):
        extractor = FakeExtractor()

        stats, _ = run(extractor, URLS[:2], 10)

        assert stats.succeeded == 2
        assert extractor.max_in_flight <= 2

    @pytest.mark.parametrize("concurrency", [0, -3])
    def test_non_positive_concurrency_rejected(self, concurrency):
        extractor = FakeExtractor()

        with pytest.raises(ValueError, match="at least 1"):
            run(extractor, URLS, concurrency)

        assert extractor.calls == []

    def test_config_concurrency_used_when_not_given(self):
        extractor = FakeExtractor()

        run(extractor, URLS, None, concurrency=3)

        assert extractor.max_in_flight == 3

    def test_duplicate_urls_scheduled_once(self):
        """Should drop repeated URLs before scheduling."""
        extractor = FakeExtractor()

        stats, sink = run(extractor, URLS[:3] + URLS[:3], 2)

        assert stats.total == 3
        assert sorted(extractor.calls) == sorted(URLS[:3])

    def test_failure_logged_once_and_others_persisted(self, error_logs):
        """Should drop a failing product without affecting the rest."""
        extractor = FakeExtractor(failing={URLS[1]})

        stats, sink = run(extractor, URLS[:3], 2)

        assert stats.succeeded == 2
        assert stats.failed == 1
        assert stats.failed_urls == [URLS[1]]
        assert len(sink.lines) == 2
        assert len(error_logs) == 1
        assert URLS[1] in error_logs[0]

    def test_no_retry_by_default(self):
        """Should attempt a failing product exactly once."""
        extractor = FakeExtractor(flaky={URLS[0]: 1})

        stats, _ = run(extractor, URLS[:1], 1)

        assert stats.failed == 1
        assert extractor.calls == [URLS[0]]

    def test_bounded_retry_recovers_flaky_product(self):
        """Should retry up to max_retries when configured."""
        extractor = FakeExtractor(flaky={URLS[0]: 2})

        stats, sink = run(extractor, URLS[:1], 1, max_retries=2)

        assert stats.succeeded == 1
        assert len(extractor.calls) == 3
        assert len(sink.lines) == 1

    def test_empty_input(self):
        stats, sink = run(FakeExtractor(), [], 5)

        assert stats.total == 0
        assert sink.lines == []
