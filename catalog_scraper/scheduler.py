"""Bounded-concurrency extraction over a list of product URLs."""

import asyncio
from typing import Protocol

from loguru import logger

from catalog_scraper.models import CrawlerConfig, CrawlStats, ProductRecord
from catalog_scraper.types import ProductUrl
from catalog_scraper.utils.retry_handler import retry_with_backoff


class Extractor(Protocol):
    async def extract(self, url: ProductUrl) -> ProductRecord: ...


class RecordSink(Protocol):
    async def append(self, record: ProductRecord) -> None: ...


class CrawlScheduler:
    """Fixed pool of workers draining one shared FIFO queue.

    Each finished product is appended to the sink immediately. A failing
    product is logged and dropped without affecting the other workers.
    Records land in completion order.
    """

    def __init__(
        self,
        extractor: Extractor,
        sink: RecordSink,
        config: CrawlerConfig,
        log=None,
    ):
        self.extractor = extractor
        self.sink = sink
        self.config = config
        self.log = log or logger.bind(component="scheduler")

    async def run(
        self, urls: list[ProductUrl], concurrency: int | None = None
    ) -> CrawlStats:
        """Extract every URL with at most ``concurrency`` products in flight.

        Args:
            urls: Product URLs in discovery order (duplicates are dropped)
            concurrency: Worker count; defaults to ``config.concurrency``

        Returns:
            Counts of succeeded and failed products

        Raises:
            ValueError: If the worker count is below 1
        """
        if concurrency is None:
            concurrency = self.config.concurrency
        if concurrency < 1:
            raise ValueError(f"concurrency must be at least 1, got {concurrency}")

        queue: asyncio.Queue[ProductUrl] = asyncio.Queue()
        for url in dict.fromkeys(urls):
            queue.put_nowait(url)

        stats = CrawlStats(total=queue.qsize())
        workers = max(1, min(concurrency, stats.total))
        self.log.info(f"Scraping {stats.total} products with {workers} workers")

        await asyncio.gather(
            *(self._worker(worker_id, queue, stats) for worker_id in range(workers))
        )

        self.log.info(
            f"Scraping complete: {stats.succeeded}/{stats.total} products successful"
        )
        return stats

    async def _worker(
        self, worker_id: int, queue: "asyncio.Queue[ProductUrl]", stats: CrawlStats
    ) -> None:
        while True:
            try:
                url = queue.get_nowait()
            except asyncio.QueueEmpty:
                self.log.debug(f"Worker {worker_id} idle, queue drained")
                return

            try:
                record = await self._extract(url)
                await self.sink.append(record)
                stats.succeeded += 1
            except Exception as e:
                stats.failed += 1
                stats.failed_urls.append(url)
                self.log.error(f"Failed to scrape {url}: {e}")
            finally:
                queue.task_done()

    async def _extract(self, url: ProductUrl) -> ProductRecord:
        return await retry_with_backoff(
            lambda: self.extractor.extract(url),
            max_retries=self.config.max_retries,
            base_delay=self.config.retry_base_delay,
        )
