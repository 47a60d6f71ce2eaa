"""Flatten persisted product records and render them as an HTML table.

The page uses Tabulator for client-side sorting and per-column filtering.
"""

import json
from html import escape as html_escape
from pathlib import Path
from string import Template
from typing import Any

import pandas as pd
from loguru import logger

from catalog_scraper.errors import ParseError

REPORT_COLUMNS = [
    "link",
    "color_code",
    "color_name",
    "original_price",
    "sale_price",
    "sale_percent",
]

HTML_TEMPLATE = Template(
    """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>$title</title>
    <link href="https://unpkg.com/tabulator-tables@5.5.4/dist/css/tabulator.min.css" rel="stylesheet">
    <script type="text/javascript" src="https://unpkg.com/tabulator-tables@5.5.4/dist/js/tabulator.min.js"></script>
    <style>
        body { font-family: sans-serif; padding: 20px; }
        #product-table { margin-top: 20px; }
        .tabulator-cell { font-size: 14px; }
    </style>
</head>
<body>
    <h1>$title</h1>
    <p>$row_count variants</p>
    <div id="product-table"></div>
    <script>
        const tableData = $data;
        new Tabulator("#product-table", {
            data: tableData,
            layout: "fitColumns",
            pagination: "local",
            paginationSize: 50,
            initialSort: [{column: "sale_percent", dir: "desc"}],
            columns: [
                {title: "Link", field: "link", formatter: "link", formatterParams: {target: "_blank"}, headerFilter: "input"},
                {title: "Color Code", field: "color_code", headerFilter: "input"},
                {title: "Color Name", field: "color_name", headerFilter: "input"},
                {title: "Original Price", field: "original_price", headerFilter: "input"},
                {title: "Sale Price", field: "sale_price", headerFilter: "input"},
                {title: "Sale %", field: "sale_percent", sorter: "number", headerFilter: "input",
                 formatter: cell => cell.getValue() == null ? "" : (cell.getValue() * 100).toFixed(1) + "%"},
            ],
        });
    </script>
</body>
</html>
"""
)


def parse_record_line(line: str) -> dict[str, Any]:
    """Decode one JSONL record line.

    Accepts the older ``product_link`` key as an alias of ``product_url``.

    Raises:
        ParseError: If the line is not a JSON object with a product URL
    """
    try:
        record = json.loads(line)
    except json.JSONDecodeError as e:
        raise ParseError(f"Invalid JSON: {e}") from e

    if not isinstance(record, dict):
        raise ParseError("Record is not an object")

    url = record.get("product_url") or record.get("product_link")
    if not url:
        raise ParseError("Record has no product URL")

    colors = record.get("colors") or []
    if not isinstance(colors, list):
        raise ParseError("Record colors is not a list")
    for color in colors:
        if not isinstance(color, dict):
            raise ParseError("Color entry is not an object")
        if any(d is not None and not isinstance(d, dict) for d in color.values()):
            raise ParseError("Color details are not an object")

    return {"product_url": url, "colors": colors}


def load_records(file_path: str | Path) -> list[dict[str, Any]]:
    """Read the JSONL sink, keeping the last line seen per product URL.

    Raises:
        FileNotFoundError: If the sink file does not exist
    """
    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {file_path}")

    records: dict[str, dict[str, Any]] = {}
    with open(path, "r", encoding="utf-8") as f:
        for line_number, line in enumerate(f, start=1):
            if not line.strip():
                continue
            try:
                record = parse_record_line(line)
            except ParseError as e:
                logger.error(f"Error parsing line {line_number} of {path}: {e}")
                continue
            records.pop(record["product_url"], None)
            records[record["product_url"]] = record

    return list(records.values())


def flatten_records(records: list[dict[str, Any]]) -> pd.DataFrame:
    """Flatten records into one row per (product, color), best deals first.

    Returns:
        DataFrame with REPORT_COLUMNS, sorted by sale_percent descending
        with missing percentages last
    """
    rows = []
    for record in records:
        for color in record["colors"]:
            for color_code, details in color.items():
                details = details or {}
                rows.append(
                    {
                        "link": record["product_url"],
                        "color_code": color_code,
                        "color_name": details.get("color_text", ""),
                        "original_price": details.get("original_price"),
                        "sale_price": details.get("sale_price"),
                        "sale_percent": details.get("sale_percent"),
                    }
                )

    df = pd.DataFrame(rows, columns=REPORT_COLUMNS)
    df["sale_percent"] = pd.to_numeric(df["sale_percent"], errors="coerce")
    return df.sort_values(
        "sale_percent", ascending=False, na_position="last", kind="stable"
    ).reset_index(drop=True)


def render_html(
    df: pd.DataFrame, output_path: str | Path = "view.html", title: str = "Product Data"
) -> Path:
    """Write the flattened rows as a sortable, filterable HTML page.

    Returns:
        Path to created HTML file
    """
    output_file = Path(output_path)
    output_file.parent.mkdir(parents=True, exist_ok=True)

    # to_json turns NaN into null, which Tabulator sorts as empty
    data = df.to_json(orient="records", force_ascii=False)
    html = HTML_TEMPLATE.substitute(
        title=html_escape(title), row_count=len(df), data=data.replace("</", "<\\/")
    )
    output_file.write_text(html, encoding="utf-8")

    logger.info(f"Rendered {len(df)} rows to {output_file}")
    return output_file
