"""
Inventory schemas: the product graph read for export, the per-SKU snapshot
read during import, mutation results and API payloads.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from models.base import BaseSchema

AVAILABLE = "available"


# ===================
# PRODUCT GRAPH (EXPORT)
# ===================

class NamedQuantity(BaseSchema):
    """One named quantity of an inventory level ("available", "on_hand", ...)."""
    name: str
    quantity: int = 0


class InventoryLevelNode(BaseSchema):
    """Stock of one inventory item at one location."""

    location_id: str
    location_name: str
    quantities: list[NamedQuantity] = Field(default_factory=list)

    @property
    def available(self) -> int:
        """The "available" quantity, 0 when the level doesn't report it."""
        for q in self.quantities:
            if q.name == AVAILABLE:
                return q.quantity
        return 0


class SelectedOption(BaseSchema):
    name: str
    value: str


class VariantNode(BaseSchema):
    """A purchasable configuration of a product."""

    sku: Optional[str] = None
    title: Optional[str] = None
    selected_options: list[SelectedOption] = Field(default_factory=list)
    inventory_levels: list[InventoryLevelNode] = Field(default_factory=list)


class ProductNode(BaseSchema):
    """A product with its variants and their inventory levels."""

    title: str
    variants: list[VariantNode] = Field(default_factory=list)


# ===================
# IMPORT
# ===================

class VariantInventorySnapshot(BaseSchema):
    """
    Variant found by SKU, with its available quantity per location.

    A location missing from available_by_location means the SKU was never
    stocked there, which is different from a quantity of 0.
    """

    variant_id: str
    sku: str
    inventory_item_id: str
    available_by_location: dict[str, int] = Field(default_factory=dict)


class UserError(BaseSchema):
    """Application-level error reported by a mutation."""
    field: Optional[list[str]] = None
    message: str


class SetQuantityResult(BaseSchema):
    """Outcome of inventorySetQuantities."""

    user_errors: list[UserError] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return len(self.user_errors) == 0

    @property
    def first_error(self) -> Optional[str]:
        return self.user_errors[0].message if self.user_errors else None


# ===================
# API PAYLOADS
# ===================

class ImportRowsRequest(BaseModel):
    """Rows already parsed by the UI, plus the picker value."""

    location_id: str = Field(..., description="Location GID or ALL_LOCATIONS")
    rows: list[dict] = Field(default_factory=list)


class ReportRequest(BaseModel):
    """Failed or skipped rows to download as a spreadsheet."""

    rows: list[dict] = Field(..., min_length=1)
    filename: str = Field(default="import_report.xlsx", pattern=r"^[\w\-. ]+\.xlsx$")


class ReconciliationSummary(BaseModel):
    """Serialized ReconciliationResult (camelCase keys on the wire)."""

    model_config = ConfigDict(populate_by_name=True)

    total: int
    updated: int
    errors: list[str]
    failed_rows: list[dict[str, Any]] = Field(alias="failedRows")
    skipped_rows: list[dict[str, Any]] = Field(alias="skippedRows")


class ImportResponse(BaseModel):
    success: bool = True
    results: ReconciliationSummary


# ===================
# PRODUCT SUMMARIES
# ===================

class ProductSummary(BaseSchema):
    """One line of the store's product overview."""

    id: str
    title: str
    handle: Optional[str] = None
    status: Optional[str] = None
    total_inventory: int = 0
    image_url: Optional[str] = None
    image_alt: Optional[str] = None
    price: Optional[str] = None


class ProductSummaryListResponse(BaseModel):
    data: list[ProductSummary]
    total: int
