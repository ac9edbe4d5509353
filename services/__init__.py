"""
Business logic services.

Each service handles one domain area.
"""

from services.import_service import (
    ImportService,
    InventoryReconciler,
    ReconciliationResult,
    ReconciliationTally,
    RowOutcome,
    OutcomeStatus,
    reconcile,
)
from services.export_service import (
    ExportService,
    flatten_products,
    EXPORT_COLUMNS,
)

__all__ = [
    "ImportService",
    "InventoryReconciler",
    "ReconciliationResult",
    "ReconciliationTally",
    "RowOutcome",
    "OutcomeStatus",
    "reconcile",
    "ExportService",
    "flatten_products",
    "EXPORT_COLUMNS",
]
