"""Command-line interface for the catalog scraper.

Usage:
    python -m catalog_scraper.cli discover --links product_links.csv
    python -m catalog_scraper.cli extract --links product_links.csv --output product_details.jsonl
    python -m catalog_scraper.cli run --concurrency 5
    python -m catalog_scraper.cli report --input product_details.jsonl --html view.html
"""

import argparse
import asyncio
import sys

from loguru import logger

from catalog_scraper.models import CrawlerConfig
from catalog_scraper.orchestrator import CrawlOrchestrator, build_report
from catalog_scraper.scrapers.registry import get_available_sites, get_site_profile

DEFAULT_LOG_FILE = "logs/scraper_{time:YYYY-MM-DD}.log"


def setup_logging(verbose: bool = False, log_file: str = DEFAULT_LOG_FILE) -> None:
    """Configure loguru logging once for the whole run.

    Args:
        verbose: Whether to enable debug logging on the console
        log_file: Persistent log path (loguru time placeholders allowed)
    """
    logger.remove()

    log_level = "DEBUG" if verbose else "INFO"
    log_format = (
        "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan> - "
        "<level>{message}</level>"
    )

    logger.add(sys.stderr, format=log_format, level=log_level, colorize=True)
    logger.add(
        log_file,
        format=log_format,
        level="DEBUG",
        rotation="1 day",
        retention="30 days",
    )


def positive_int(value: str) -> int:
    """argparse type accepting integers of 1 or more."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: {value!r}")
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def build_config(args: argparse.Namespace) -> CrawlerConfig:
    """Build crawler configuration from parsed arguments."""
    config = CrawlerConfig(headless=not args.headed)
    if getattr(args, "concurrency", None) is not None:
        config.concurrency = args.concurrency
    if getattr(args, "retries", None) is not None:
        config.max_retries = args.retries
    if getattr(args, "timeout", None):
        config.navigation_timeout_ms = args.timeout * 1000
    return config


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Discover catalog products and extract per-color pricing",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Crawl categories and save product links
  python -m catalog_scraper.cli discover --links product_links.csv

  # Extract color variants with 8 concurrent browser contexts
  python -m catalog_scraper.cli extract --concurrency 8

  # Discover then extract in one go
  python -m catalog_scraper.cli run

  # Render results as a sortable HTML table plus Excel workbook
  python -m catalog_scraper.cli report --excel variants.xlsx
        """,
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable verbose debug logging"
    )
    parser.add_argument(
        "--log-file",
        default=DEFAULT_LOG_FILE,
        help=f"Persistent log file (default: {DEFAULT_LOG_FILE})",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    browser = argparse.ArgumentParser(add_help=False)
    browser.add_argument(
        "--site",
        default="aritzia",
        choices=get_available_sites(),
        help="Catalog site profile (default: aritzia)",
    )
    browser.add_argument(
        "--headed", action="store_true", help="Show the browser window"
    )
    browser.add_argument(
        "--timeout", type=int, help="Navigation timeout in seconds (default: 60)"
    )
    browser.add_argument(
        "--links",
        default="product_links.csv",
        help="Product link manifest (default: product_links.csv)",
    )

    extraction = argparse.ArgumentParser(add_help=False)
    extraction.add_argument(
        "--output",
        "-o",
        default="product_details.jsonl",
        help="JSONL output file, appended to (default: product_details.jsonl)",
    )
    extraction.add_argument(
        "--concurrency",
        "-c",
        type=positive_int,
        help="Concurrent product pages (default: 5)",
    )
    extraction.add_argument(
        "--retries",
        type=int,
        help="Retries per failed product (default: 0)",
    )

    subparsers.add_parser(
        "discover", parents=[browser], help="Find product links across all categories"
    )
    subparsers.add_parser(
        "extract",
        parents=[browser, extraction],
        help="Extract color variants for every link in the manifest",
    )
    subparsers.add_parser(
        "run", parents=[browser, extraction], help="Discover, then extract"
    )

    report = subparsers.add_parser("report", help="Render extracted data as HTML")
    report.add_argument(
        "--input",
        "-i",
        default="product_details.jsonl",
        help="JSONL file produced by extract (default: product_details.jsonl)",
    )
    report.add_argument(
        "--html", default="view.html", help="HTML output file (default: view.html)"
    )
    report.add_argument("--excel", help="Also write an XLSX file")
    report.add_argument(
        "--title", default="Product Data", help="Page title (default: Product Data)"
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose, args.log_file)

    if args.command == "report":
        try:
            html_path, excel_path = build_report(
                args.input, args.html, args.excel, title=args.title
            )
        except FileNotFoundError as e:
            logger.error(str(e))
            return 1
        logger.success(f"Report written to {html_path}")
        if excel_path:
            logger.info(f"Excel: {excel_path}")
        return 0

    orchestrator = CrawlOrchestrator(get_site_profile(args.site), build_config(args))

    try:
        if args.command == "discover":
            urls = asyncio.run(orchestrator.discover(args.links))
            logger.success(f"Discovered {len(urls)} products")
            return 0

        if args.command == "extract":
            stats = asyncio.run(orchestrator.extract(args.links, args.output))
        else:
            stats = asyncio.run(orchestrator.run_full_pipeline(args.links, args.output))

        logger.success(f"Successfully scraped {stats.succeeded}/{stats.total} products!")
        if stats.failed:
            logger.warning(f"{stats.failed} products failed, see log for details")
        return 0

    except FileNotFoundError as e:
        logger.error(str(e))
        return 1
    except Exception as e:
        logger.exception(f"Scraping failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
