"""Excel XLSX exporter for flattened variant rows."""

from pathlib import Path

import pandas as pd
from loguru import logger

COLUMN_TITLES = {
    "link": "Link",
    "color_code": "Color Code",
    "color_name": "Color Name",
    "original_price": "Original Price",
    "sale_price": "Sale Price",
    "sale_percent": "Sale %",
}


def export_to_excel(df: pd.DataFrame, output_path: str = "output/variants.xlsx") -> Path:
    """Export flattened variant rows to Excel XLSX format.

    Args:
        df: Rows produced by ``flatten_records``
        output_path: Path to output XLSX file

    Returns:
        Path to created XLSX file

    Raises:
        ValueError: If there are no rows
    """
    if df.empty:
        raise ValueError("Cannot export empty variant list")

    output_file = Path(output_path)
    output_file.parent.mkdir(parents=True, exist_ok=True)

    with pd.ExcelWriter(output_file, engine="openpyxl") as writer:
        df.rename(columns=COLUMN_TITLES).to_excel(
            writer, sheet_name="Variants", index=False
        )

        worksheet = writer.sheets["Variants"]
        for column in worksheet.columns:
            max_length = max(
                (len(str(cell.value)) for cell in column if cell.value is not None),
                default=0,
            )
            column_letter = column[0].column_letter
            worksheet.column_dimensions[column_letter].width = min(max_length + 2, 60)

        # Sale % is a fraction; show it as a percentage
        for cell in worksheet["F"][1:]:
            cell.number_format = "0.0%"

    logger.info(f"Exported {len(df)} variants to {output_file}")
    return output_file
