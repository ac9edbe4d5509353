"""
Pydantic models for validation and serialization.
"""

from models.base import BaseSchema
from models.location import (
    ALL_LOCATIONS,
    Location,
    LocationListResponse,
    LocationMode,
)
from models.inventory import (
    NamedQuantity,
    InventoryLevelNode,
    SelectedOption,
    VariantNode,
    ProductNode,
    VariantInventorySnapshot,
    UserError,
    SetQuantityResult,
    ImportRowsRequest,
    ReportRequest,
    ReconciliationSummary,
    ImportResponse,
    ProductSummary,
    ProductSummaryListResponse,
)

__all__ = [
    # Base
    "BaseSchema",

    # Locations
    "ALL_LOCATIONS",
    "Location",
    "LocationListResponse",
    "LocationMode",

    # Inventory
    "NamedQuantity",
    "InventoryLevelNode",
    "SelectedOption",
    "VariantNode",
    "ProductNode",
    "VariantInventorySnapshot",
    "UserError",
    "SetQuantityResult",
    "ImportRowsRequest",
    "ReportRequest",
    "ReconciliationSummary",
    "ImportResponse",
    "ProductSummary",
    "ProductSummaryListResponse",
]
