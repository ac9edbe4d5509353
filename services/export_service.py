"""
Export service — flatten the product inventory graph into spreadsheet rows.

One row per (variant, location) inventory level. Without a location filter,
variants with no inventory levels still get a placeholder row so every
variant shows up at least once.
"""

from io import BytesIO
from typing import Any, Optional

import structlog

from integrations.directory import CommerceDirectoryClient
from models.inventory import ProductNode, VariantNode
from models.location import ALL_LOCATIONS, SELECT_LOCATION
from parsers.excel_parser import encode_spreadsheet

logger = structlog.get_logger(__name__)

EXPORT_FILENAME = "products_export.xlsx"
EXPORT_SHEET_TITLE = "Products"

PRODUCT_TITLE_COLUMN = "Product Title"
SKU_COLUMN = "SKU"
OPTION_COLUMNS = ("Option1 Value", "Option2 Value", "Option3 Value")
LOCATION_COLUMN = "Inventory Location"
QUANTITY_COLUMN = "Quantity Available"

EXPORT_COLUMNS = (
    PRODUCT_TITLE_COLUMN,
    SKU_COLUMN,
    *OPTION_COLUMNS,
    LOCATION_COLUMN,
    QUANTITY_COLUMN,
)

PLACEHOLDER_LOCATION = "N/A"
NO_DATA_TITLE = "No data found"

ExportRow = dict[str, Any]


def normalize_location_filter(location_filter: Optional[str]) -> Optional[str]:
    """
    Map the picker value to a location id, or None for every location.

    "", ALL_LOCATIONS and the SELECT_LOCATION placeholder all mean unfiltered.
    """
    if location_filter is None:
        return None
    value = location_filter.strip()
    if value in ("", ALL_LOCATIONS, SELECT_LOCATION):
        return None
    return value


def option_values(variant: VariantNode) -> list[str]:
    """First three option values, padded with empty strings."""
    values = [opt.value for opt in variant.selected_options[:len(OPTION_COLUMNS)]]
    return values + [""] * (len(OPTION_COLUMNS) - len(values))


def flatten_products(
    products: list[ProductNode],
    location_filter: Optional[str] = None,
) -> list[ExportRow]:
    """
    Flatten products into export rows.

    Args:
        products: Product graph from the store
        location_filter: Location id, or None / ALL_LOCATIONS for every location

    Returns:
        Rows with EXPORT_COLUMNS keys; never empty (a "No data found" row
        stands in when nothing matched)
    """
    location_id = normalize_location_filter(location_filter)
    rows: list[ExportRow] = []

    for product in products:
        for variant in product.variants:
            base = _base_row(product, variant)

            if location_id is None:
                levels = variant.inventory_levels
            else:
                levels = [lvl for lvl in variant.inventory_levels if lvl.location_id == location_id]

            if not levels:
                if location_id is None:
                    rows.append({**base, LOCATION_COLUMN: PLACEHOLDER_LOCATION, QUANTITY_COLUMN: 0})
                continue

            for level in levels:
                rows.append({
                    **base,
                    LOCATION_COLUMN: level.location_name,
                    QUANTITY_COLUMN: level.available,
                })

    if not rows:
        rows.append(_no_data_row())

    return rows


def _base_row(product: ProductNode, variant: VariantNode) -> ExportRow:
    row: ExportRow = {
        PRODUCT_TITLE_COLUMN: product.title,
        SKU_COLUMN: variant.sku or "",
    }
    for column, value in zip(OPTION_COLUMNS, option_values(variant)):
        row[column] = value
    return row


def _no_data_row() -> ExportRow:
    row = {column: "" for column in EXPORT_COLUMNS}
    row[PRODUCT_TITLE_COLUMN] = NO_DATA_TITLE
    return row


class ExportService:
    """Service for generating inventory export files."""

    def __init__(self, directory: CommerceDirectoryClient):
        self.directory = directory

    def export_rows(self, location_filter: Optional[str] = None) -> list[ExportRow]:
        """
        Fetch the product graph and flatten it.

        Raises:
            ShopifyError: If the product fetch fails
        """
        logger.info("export_started", location_filter=location_filter or ALL_LOCATIONS)

        products = self.directory.fetch_products()
        rows = flatten_products(products, location_filter)

        logger.info(
            "export_flattened",
            product_count=len(products),
            row_count=len(rows),
        )
        return rows

    def export_inventory(self, location_filter: Optional[str] = None) -> BytesIO:
        """
        Generate the inventory export workbook.

        Returns:
            BytesIO containing the Excel file
        """
        rows = self.export_rows(location_filter)
        return encode_spreadsheet(rows, sheet_title=EXPORT_SHEET_TITLE)
