"""Product link manifest: the hand-off file between discovery and extraction.

One URL per line under a ``URL`` header, so extraction can be re-run
without crawling categories again.
"""

from pathlib import Path

from loguru import logger

from catalog_scraper.errors import ParseError
from catalog_scraper.types import ProductUrl

MANIFEST_HEADER = "URL"


def parse_manifest_line(line: str) -> ProductUrl:
    """Validate one manifest line.

    Raises:
        ParseError: If the line is not an absolute http(s) URL
    """
    candidate = line.strip()
    if not candidate.startswith("http"):
        raise ParseError(f"Not a URL: {candidate!r}")
    return ProductUrl(candidate)


def read_manifest(file_path: str | Path) -> list[ProductUrl]:
    """Read product URLs, skipping blanks, the header and non-URL lines.

    Args:
        file_path: Path to manifest file

    Returns:
        Deduplicated URLs in file order

    Raises:
        FileNotFoundError: If the manifest does not exist
    """
    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"Link manifest not found: {file_path}")

    urls: dict[ProductUrl, None] = {}
    with open(path, "r", encoding="utf-8") as f:
        for line_number, line in enumerate(f, start=1):
            stripped = line.strip()
            if not stripped or stripped == MANIFEST_HEADER:
                continue
            try:
                urls.setdefault(parse_manifest_line(stripped), None)
            except ParseError as e:
                logger.warning(f"Skipping manifest line {line_number}: {e}")

    return list(urls)


def write_manifest(urls: list[ProductUrl], file_path: str | Path) -> Path:
    """Write product URLs under the manifest header, replacing the file.

    Returns:
        Path to the written manifest
    """
    output_file = Path(file_path)
    output_file.parent.mkdir(parents=True, exist_ok=True)

    with open(output_file, "w", encoding="utf-8") as f:
        f.write(MANIFEST_HEADER + "\n")
        for url in urls:
            f.write(url + "\n")

    logger.info(f"Saved {len(urls)} links to {output_file}")
    return output_file
