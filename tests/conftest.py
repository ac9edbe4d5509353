"""
Shared test fixtures.

Provides an in-memory directory client that stands in for the Shopify
Admin API, plus a FastAPI test client wired to it.
"""

import sys
from pathlib import Path

# Add project root to Python path
project_dir = Path(__file__).parent.parent
sys.path.insert(0, str(project_dir))

import pytest
from typing import Generator, Optional

from models.inventory import (
    ProductNode,
    ProductSummary,
    SetQuantityResult,
    UserError,
    VariantInventorySnapshot,
)
from models.location import Location
from tests.factories import InventoryFactory

# ===================
# FAKE DIRECTORY CLIENT
# ===================

class FakeDirectoryClient:
    """
    In-memory commerce directory.

    Successful writes are applied to the stored snapshots, so a second
    import of the same sheet sees the new quantities.
    """

    def __init__(
        self,
        locations: Optional[list[Location]] = None,
        variants: Optional[list[VariantInventorySnapshot]] = None,
        products: Optional[list[ProductNode]] = None,
        summaries: Optional[list[ProductSummary]] = None,
    ):
        self.locations = locations or []
        self.variants = {v.sku: v for v in (variants or [])}
        self.products = products or []
        self.summaries = summaries or []
        self.user_errors: dict[str, list[str]] = {}  # inventory_item_id -> messages
        self.lookup_errors: dict[str, Exception] = {}  # sku -> raised on lookup
        self.listing_error: Optional[Exception] = None
        self.lookups: list[str] = []
        self.mutations: list[tuple[str, str, int]] = []

    def list_locations(self) -> list[Location]:
        if self.listing_error:
            raise self.listing_error
        return list(self.locations)

    def find_variant_by_sku(self, sku: str) -> Optional[VariantInventorySnapshot]:
        self.lookups.append(sku)
        if sku in self.lookup_errors:
            raise self.lookup_errors[sku]
        return self.variants.get(sku)

    def set_inventory_quantity(
        self,
        inventory_item_id: str,
        location_id: str,
        quantity: int,
    ) -> SetQuantityResult:
        self.mutations.append((inventory_item_id, location_id, quantity))

        messages = self.user_errors.get(inventory_item_id)
        if messages:
            return SetQuantityResult(
                user_errors=[UserError(field=["input", "quantities"], message=m) for m in messages]
            )

        for snapshot in self.variants.values():
            if snapshot.inventory_item_id == inventory_item_id:
                snapshot.available_by_location[location_id] = quantity
        return SetQuantityResult()

    def fetch_products(self) -> list[ProductNode]:
        return list(self.products)

    def list_product_summaries(self, limit: int = 20) -> list[ProductSummary]:
        return self.summaries[:limit]


# ===================
# FIXTURES
# ===================

@pytest.fixture
def warehouse() -> Location:
    """The default single location."""
    return InventoryFactory.location(id="gid://shopify/Location/1", name="Warehouse")


@pytest.fixture
def back_room() -> Location:
    """A second location."""
    return InventoryFactory.location(id="gid://shopify/Location/2", name="Back Room")


@pytest.fixture
def fake_directory(warehouse, back_room) -> FakeDirectoryClient:
    """
    Directory with two locations and two variants.

    A1 is stocked at both locations (5 at Warehouse, 2 at Back Room).
    B2 is stocked only at Warehouse (0 units).
    """
    return FakeDirectoryClient(
        locations=[warehouse, back_room],
        variants=[
            InventoryFactory.snapshot(
                sku="A1",
                inventory_item_id="gid://shopify/InventoryItem/100",
                available_by_location={warehouse.id: 5, back_room.id: 2},
            ),
            InventoryFactory.snapshot(
                sku="B2",
                inventory_item_id="gid://shopify/InventoryItem/200",
                available_by_location={warehouse.id: 0},
            ),
        ],
    )


# ===================
# API TEST CLIENT
# ===================

@pytest.fixture
def test_client(fake_directory) -> Generator:
    """
    Create FastAPI test client backed by the fake directory.

    Usage:
        def test_endpoint(test_client, fake_directory):
            response = test_client.get("/api/locations")
    """
    from fastapi.testclient import TestClient
    from main import app
    from routes.dependencies import get_directory_client

    app.dependency_overrides[get_directory_client] = lambda: fake_directory
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
