"""
Bulk inventory import — reconcile spreadsheet rows against the store.

Each row runs through a fixed pipeline (filter, quantity, location,
duplicate, variant lookup, current quantity, no-op check, mutation) and
ends as exactly one RowOutcome. The reconciler folds the outcomes into a
ReconciliationTally and returns it frozen as a ReconciliationResult. Rows are
processed one at a time, in sheet order; a row can issue at most one
mutation and never aborts the batch.
"""

from dataclasses import dataclass, field
from enum import Enum
from io import BytesIO
from typing import Any, Optional, Union
import math
import structlog

from exceptions import LocationNotFoundError
from integrations.directory import CommerceDirectoryClient
from models.location import Location, LocationMode
from parsers.excel_parser import decode_spreadsheet

logger = structlog.get_logger(__name__)

# Column contract with the export sheet
SKU_COLUMN = "SKU"
QUANTITY_COLUMN = "Quantity Available"
LOCATION_COLUMN = "Inventory Location"

# Reason fields appended to reported rows
ERROR_REASON_FIELD = "errorReason"
SKIP_REASON_FIELD = "reason"

# Row reasons shown to the merchant
INVALID_QUANTITY = "Invalid or missing quantity value"
MISSING_LOCATION = "please add proper location"
DUPLICATE_ROW = "You have identical row having same SKU and location"
VARIANT_NOT_FOUND = "Variant not found"
LOCATION_NOT_STOCKED = "SKU don't have this location"
QUANTITY_MATCHES = "Quantity already matches"

Row = dict[str, Any]


class OutcomeStatus(str, Enum):
    """How a single row ended."""
    UPDATED = "updated"
    SKIPPED = "skipped"
    FAILED = "failed"
    IGNORED = "ignored"  # blank or repeated header row


@dataclass(frozen=True)
class RowOutcome:
    """Tagged result of one row's pipeline."""

    status: OutcomeStatus
    reason: Optional[str] = None
    message: Optional[str] = None

    @classmethod
    def updated(cls) -> "RowOutcome":
        return cls(OutcomeStatus.UPDATED)

    @classmethod
    def skipped(cls, reason: str) -> "RowOutcome":
        return cls(OutcomeStatus.SKIPPED, reason)

    @classmethod
    def failed(cls, reason: str, message: Optional[str] = None) -> "RowOutcome":
        return cls(OutcomeStatus.FAILED, reason, message)

    @classmethod
    def ignored(cls) -> "RowOutcome":
        return cls(OutcomeStatus.IGNORED)


@dataclass(frozen=True)
class ReconciliationResult:
    """
    Aggregated outcome of one import.

    Frozen once returned: counts are fixed and the report rows are tuples,
    so nothing downstream can append to or rebind them.
    """

    total: int = 0
    updated: int = 0
    errors: tuple[str, ...] = ()
    failed_rows: tuple[Row, ...] = ()
    skipped_rows: tuple[Row, ...] = ()

    @property
    def failed(self) -> int:
        return len(self.failed_rows)

    @property
    def skipped(self) -> int:
        return len(self.skipped_rows)

    def to_dict(self) -> dict:
        """Convert to dictionary for API response."""
        return {
            "total": self.total,
            "updated": self.updated,
            "errors": list(self.errors),
            "failedRows": [dict(r) for r in self.failed_rows],
            "skippedRows": [dict(r) for r in self.skipped_rows],
        }


@dataclass
class ReconciliationTally:
    """Running totals while rows are processed; freeze() gives the result."""

    total: int = 0
    updated: int = 0
    errors: list[str] = field(default_factory=list)
    failed_rows: list[Row] = field(default_factory=list)
    skipped_rows: list[Row] = field(default_factory=list)

    def record(self, row: Row, outcome: RowOutcome) -> None:
        """Fold one row outcome into the totals and reports."""
        if outcome.status == OutcomeStatus.UPDATED:
            self.updated += 1
        elif outcome.status == OutcomeStatus.SKIPPED:
            self.skipped_rows.append({**row, SKIP_REASON_FIELD: outcome.reason})
        elif outcome.status == OutcomeStatus.FAILED:
            sku = row.get(SKU_COLUMN)
            self.errors.append(outcome.message or f"Skipped SKU {sku}: {outcome.reason}")
            self.failed_rows.append({**row, ERROR_REASON_FIELD: outcome.reason})

    def freeze(self) -> ReconciliationResult:
        return ReconciliationResult(
            total=self.total,
            updated=self.updated,
            errors=tuple(self.errors),
            failed_rows=tuple(self.failed_rows),
            skipped_rows=tuple(self.skipped_rows),
        )


class _RowRejected(Exception):
    """Stops a row's pipeline with a merchant-facing reason."""

    def __init__(self, reason: str, message: Optional[str] = None):
        self.reason = reason
        self.message = message
        super().__init__(reason)


class InventoryReconciler:
    """
    Runs the row pipeline for one import call.

    Holds the location listing and the duplicate keys seen so far; create a
    new instance per import.
    """

    def __init__(self, directory: CommerceDirectoryClient, mode: LocationMode):
        self.directory = directory
        self.mode = mode
        self.locations: list[Location] = []
        self.selected: Optional[Location] = None
        self._seen_keys: set[str] = set()

    def reconcile(self, rows: list[Row]) -> ReconciliationResult:
        """
        Reconcile every row and return the aggregated result.

        Raises:
            LocationNotFoundError: Selected location isn't in the store
            ShopifyError: Location listing failed
        """
        logger.info("import_started", row_count=len(rows), mode=str(self.mode))

        self._load_locations()
        tally = ReconciliationTally(total=len(rows))

        for index, row in enumerate(rows):
            try:
                outcome = self.process_row(row)
            except Exception as e:
                logger.warning(
                    "import_row_error",
                    row=index,
                    sku=row.get(SKU_COLUMN),
                    error=str(e),
                    error_type=type(e).__name__,
                )
                outcome = RowOutcome.failed(
                    str(e),
                    message=f"Error processing SKU {row.get(SKU_COLUMN)}: {e}",
                )

            if outcome.status == OutcomeStatus.FAILED:
                logger.debug("import_row_failed", row=index, reason=outcome.reason)
            tally.record(row, outcome)

        result = tally.freeze()
        logger.info(
            "import_completed",
            total=result.total,
            updated=result.updated,
            failed=result.failed,
            skipped=result.skipped,
        )
        return result

    def process_row(self, row: Row) -> RowOutcome:
        """Run the pipeline for one row; first failing step wins."""
        sku = _text(row.get(SKU_COLUMN))
        if not sku or sku == SKU_COLUMN:
            return RowOutcome.ignored()

        try:
            quantity = parse_quantity(row.get(QUANTITY_COLUMN))
            if quantity is None:
                raise _RowRejected(INVALID_QUANTITY)

            sheet_location = _text(row.get(LOCATION_COLUMN))
            if not sheet_location:
                raise _RowRejected(MISSING_LOCATION)

            target = self._resolve_location(sheet_location)
            self._check_duplicate(sku, target)
            return self._apply_quantity(sku, target, quantity)

        except _RowRejected as rejected:
            return RowOutcome.failed(rejected.reason, rejected.message)

    # ===================
    # PIPELINE STEPS
    # ===================

    def _load_locations(self) -> None:
        self.locations = self.directory.list_locations()

        if self.mode.is_all_locations:
            return

        self.selected = next(
            (loc for loc in self.locations if loc.id == self.mode.location_id),
            None,
        )
        if self.selected is None:
            logger.error("import_location_not_found", location_id=self.mode.location_id)
            raise LocationNotFoundError(self.mode.location_id)

    def _resolve_location(self, sheet_location: str) -> Location:
        if self.mode.is_all_locations:
            found = next(
                (loc for loc in self.locations if loc.matches_name(sheet_location)),
                None,
            )
            if found is None:
                raise _RowRejected(f"Location '{sheet_location}' not found in store")
            return found

        if not self.selected.matches_name(sheet_location):
            raise _RowRejected(
                f"Location mismatch: '{sheet_location}' ≠ '{self.selected.name}'"
            )
        return self.selected

    def _check_duplicate(self, sku: str, target: Location) -> None:
        key = f"{sku}|{target.name}"
        if key in self._seen_keys:
            raise _RowRejected(DUPLICATE_ROW)
        self._seen_keys.add(key)

    def _apply_quantity(self, sku: str, target: Location, quantity: int) -> RowOutcome:
        variant = self.directory.find_variant_by_sku(sku)
        if variant is None:
            raise _RowRejected(VARIANT_NOT_FOUND, f"Variant not found for SKU: {sku}")

        current = variant.available_by_location.get(target.id)
        if current is None:
            raise _RowRejected(LOCATION_NOT_STOCKED)

        if current == quantity:
            return RowOutcome.skipped(QUANTITY_MATCHES)

        result = self.directory.set_inventory_quantity(
            variant.inventory_item_id, target.id, quantity
        )
        if not result.ok:
            raise _RowRejected(
                result.first_error,
                f"Error updating SKU {sku}: {result.first_error}",
            )

        logger.debug(
            "import_row_updated",
            sku=sku,
            location=target.name,
            previous=current,
            quantity=quantity,
        )
        return RowOutcome.updated()


def reconcile(
    rows: list[Row],
    mode: LocationMode,
    directory: CommerceDirectoryClient,
) -> ReconciliationResult:
    """Reconcile parsed rows against the store."""
    return InventoryReconciler(directory, mode).reconcile(rows)


class ImportService:
    """Entry points the routes call for an import."""

    def __init__(self, directory: CommerceDirectoryClient):
        self.directory = directory

    def reconcile_import(
        self,
        file: Union[bytes, BytesIO],
        mode: LocationMode,
    ) -> ReconciliationResult:
        """
        Decode an uploaded spreadsheet and reconcile its rows.

        Raises:
            ExcelParseError: If the file can't be read
        """
        rows = decode_spreadsheet(file)
        return reconcile(rows, mode, self.directory)

    def reconcile_rows(self, rows: list[Row], mode: LocationMode) -> ReconciliationResult:
        """Reconcile rows the caller already parsed."""
        return reconcile(rows, mode, self.directory)


# ===================
# HELPER FUNCTIONS
# ===================

def parse_quantity(value: Any) -> Optional[int]:
    """
    Parse a sheet quantity to int.

    Accepts ints, integral floats and numeric strings ("12", " 12 ", "12.0").
    Anything else (blank, text, 12.5, booleans) returns None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return int(value)
        return None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return int(text)
        except ValueError:
            pass
        try:
            number = float(text)
        except ValueError:
            return None
        if math.isfinite(number) and number.is_integer():
            return int(number)
    return None


def _text(value: Any) -> str:
    """Cell value as trimmed text ("" for missing)."""
    if value is None:
        return ""
    return str(value).strip()
