"""
Commerce directory capability.

The import and export services only talk to the store through this
interface. Routes build a concrete client per request and pass it in.
"""

from typing import Optional, Protocol

from models.inventory import (
    ProductNode,
    ProductSummary,
    SetQuantityResult,
    VariantInventorySnapshot,
)
from models.location import Location


class CommerceDirectoryClient(Protocol):
    """Read locations and variants, write absolute available quantities."""

    def list_locations(self) -> list[Location]:
        """All locations, including inactive and legacy ones."""
        ...

    def find_variant_by_sku(self, sku: str) -> Optional[VariantInventorySnapshot]:
        """First variant whose SKU matches, or None."""
        ...

    def set_inventory_quantity(
        self,
        inventory_item_id: str,
        location_id: str,
        quantity: int,
    ) -> SetQuantityResult:
        """Set the available quantity at one location (last writer wins)."""
        ...

    def fetch_products(self) -> list[ProductNode]:
        """Every product with variants, options and inventory levels."""
        ...

    def list_product_summaries(self, limit: int = 20) -> list[ProductSummary]:
        """Product overview lines (title, status, total inventory)."""
        ...
