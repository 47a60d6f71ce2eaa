"""Orchestrator for the discover → extract → report workflow.

Discovery and extraction are decoupled through the link manifest so either
phase can be re-run on its own.
"""

import asyncio
from pathlib import Path
from typing import Callable

from loguru import logger

from catalog_scraper.exporters.excel_exporter import export_to_excel
from catalog_scraper.exporters.html_report import flatten_records, load_records, render_html
from catalog_scraper.exporters.jsonl_sink import JsonlRecordSink
from catalog_scraper.exporters.link_manifest import read_manifest, write_manifest
from catalog_scraper.models import CrawlerConfig, CrawlStats, SiteProfile
from catalog_scraper.scheduler import CrawlScheduler
from catalog_scraper.scrapers.browser_session import BrowserSession
from catalog_scraper.scrapers.category_discoverer import CategoryDiscoverer
from catalog_scraper.scrapers.variant_extractor import VariantExtractor
from catalog_scraper.types import ProductUrl

SessionFactory = Callable[[CrawlerConfig], BrowserSession]


class CrawlOrchestrator:
    """Coordinates browser lifetime, discovery, extraction and reporting."""

    def __init__(
        self,
        profile: SiteProfile,
        config: CrawlerConfig,
        session_factory: SessionFactory = BrowserSession,
    ):
        self.profile = profile
        self.config = config
        self.session_factory = session_factory

    async def discover(self, manifest_path: str | Path) -> list[ProductUrl]:
        """Discover all product URLs and save them to the link manifest.

        Raises:
            NavigationTimeout: If the catalog root cannot be loaded
            NotFound: If the catalog root has no category navigation
        """
        async with self.session_factory(self.config) as session:
            discoverer = CategoryDiscoverer(session, self.profile, self.config)
            urls = await discoverer.discover()

        write_manifest(urls, manifest_path)
        return urls

    async def extract(
        self, manifest_path: str | Path, output_path: str | Path
    ) -> CrawlStats:
        """Extract variants for every manifest URL, appending to the sink.

        Raises:
            FileNotFoundError: If the manifest cannot be read
            OSError: If the output sink cannot be opened
        """
        urls = read_manifest(manifest_path)
        logger.info(f"Found {len(urls)} unique product links to scrape for details")

        with JsonlRecordSink(output_path) as sink:
            async with self.session_factory(self.config) as session:
                extractor = VariantExtractor(session, self.profile, self.config)
                scheduler = CrawlScheduler(extractor, sink, self.config)
                stats = await scheduler.run(urls, self.config.concurrency)

        logger.info(f"All data saved to {output_path}")
        return stats

    async def run_full_pipeline(
        self, manifest_path: str | Path, output_path: str | Path
    ) -> CrawlStats:
        """Discover, save the manifest, then extract from it."""
        logger.info("=" * 60)
        logger.info(f"Starting full pipeline for {self.profile.name}")
        logger.info(f"Concurrency: {self.config.concurrency}")
        logger.info("=" * 60)

        await self.discover(manifest_path)
        stats = await self.extract(manifest_path, output_path)

        logger.info("=" * 60)
        logger.info("Pipeline complete!")
        logger.info(f"Products scraped: {stats.succeeded}/{stats.total}")
        logger.info(f"Output: {output_path}")
        logger.info("=" * 60)
        return stats


def build_report(
    input_path: str | Path,
    html_path: str | Path = "view.html",
    excel_path: str | Path | None = None,
    title: str = "Product Data",
) -> tuple[Path, Path | None]:
    """Render the JSONL sink as an HTML table and optionally an XLSX file.

    Returns:
        Tuple of (html_path, excel_path or None)

    Raises:
        FileNotFoundError: If the input file does not exist
    """
    records = load_records(input_path)
    df = flatten_records(records)
    logger.info(f"Loaded {len(records)} products ({len(df)} variants)")

    html_file = render_html(df, html_path, title=title)
    excel_file = None
    if excel_path and df.empty:
        logger.warning("No variants to export, skipping Excel file")
    elif excel_path:
        excel_file = export_to_excel(df, str(excel_path))
    return html_file, excel_file


def discover_and_extract(
    profile: SiteProfile,
    config: CrawlerConfig,
    manifest_path: str | Path = "product_links.csv",
    output_path: str | Path = "product_details.jsonl",
) -> CrawlStats:
    """Convenience function for running the full crawl synchronously."""
    orchestrator = CrawlOrchestrator(profile, config)
    return asyncio.run(orchestrator.run_full_pipeline(manifest_path, output_path))
