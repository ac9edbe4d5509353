"""
Shopify Admin GraphQL client.

Implements the commerce directory capability used by the import and export
services: location listing, variant lookup by SKU, absolute quantity writes
and the paginated product/inventory graph for exports.
"""

import time
from typing import Any, Optional
import requests
import structlog

from config.settings import Settings
from exceptions import ShopifyError, ShopifyNotConfiguredError
from models.inventory import (
    AVAILABLE,
    InventoryLevelNode,
    NamedQuantity,
    ProductNode,
    ProductSummary,
    SelectedOption,
    SetQuantityResult,
    UserError,
    VariantInventorySnapshot,
    VariantNode,
)
from models.location import Location

logger = structlog.get_logger(__name__)

MAX_BACKOFF_SECONDS = 10.0


# ===================
# GRAPHQL DOCUMENTS
# ===================

LOCATIONS_QUERY = """
query getLocations($after: String) {
  locations(first: 250, after: $after, includeLegacy: true, includeInactive: true) {
    pageInfo { hasNextPage endCursor }
    edges {
      node { id name isActive }
    }
  }
}
"""

VARIANT_BY_SKU_QUERY = """
query findVariantBySKU($query: String!, $levels: Int!) {
  productVariants(first: 1, query: $query) {
    edges {
      node {
        id
        sku
        inventoryItem {
          id
          inventoryLevels(first: $levels) {
            pageInfo { hasNextPage endCursor }
            edges {
              node {
                location { id }
                quantities(names: ["available"]) { name quantity }
              }
            }
          }
        }
      }
    }
  }
}
"""

INVENTORY_LEVELS_QUERY = """
query getInventoryLevels($id: ID!, $levels: Int!, $after: String) {
  inventoryItem(id: $id) {
    inventoryLevels(first: $levels, after: $after) {
      pageInfo { hasNextPage endCursor }
      edges {
        node {
          location { id }
          quantities(names: ["available"]) { name quantity }
        }
      }
    }
  }
}
"""

SET_QUANTITIES_MUTATION = """
mutation inventorySetQuantities($input: InventorySetQuantitiesInput!) {
  inventorySetQuantities(input: $input) {
    inventoryAdjustmentGroup { id }
    userErrors { field message }
  }
}
"""

PRODUCTS_QUERY = """
query getProducts($first: Int!, $after: String, $variants: Int!, $levels: Int!) {
  products(first: $first, after: $after) {
    pageInfo { hasNextPage endCursor }
    edges {
      node {
        title
        variants(first: $variants) {
          pageInfo { hasNextPage }
          edges {
            node {
              title
              sku
              selectedOptions { name value }
              inventoryItem {
                inventoryLevels(first: $levels) {
                  edges {
                    node {
                      location { id name }
                      quantities(names: ["available"]) { name quantity }
                    }
                  }
                }
              }
            }
          }
        }
      }
    }
  }
}
"""

PRODUCT_SUMMARIES_QUERY = """
query getProductSummaries($first: Int!) {
  products(first: $first) {
    edges {
      node {
        id
        title
        handle
        status
        totalInventory
        featuredImage { url altText }
        variants(first: 1) {
          edges {
            node { price }
          }
        }
      }
    }
  }
}
"""


class ShopifyClient:
    """
    Synchronous GraphQL client bound to one store and access token.

    One instance serves one request; it keeps no cache between calls.
    """

    def __init__(
        self,
        endpoint: str,
        access_token: str,
        timeout: float = 30,
        max_retries: int = 3,
        products_page_size: int = 50,
        variants_per_product: int = 100,
        levels_per_item: int = 50,
        session: Optional[requests.Session] = None,
    ):
        self.endpoint = endpoint
        self.timeout = timeout
        self.max_retries = max_retries
        self.products_page_size = products_page_size
        self.variants_per_product = variants_per_product
        self.levels_per_item = levels_per_item
        self.session = session or requests.Session()
        self.headers = {
            "Content-Type": "application/json",
            "X-Shopify-Access-Token": access_token,
        }

    @classmethod
    def from_settings(cls, settings: Settings) -> "ShopifyClient":
        """
        Build a client from application settings.

        Raises:
            ShopifyNotConfiguredError: If domain or token is missing
        """
        if not settings.shopify_configured:
            logger.warning(
                "shopify_not_configured",
                has_domain=bool(settings.shopify_store_domain),
                has_token=bool(settings.shopify_admin_token),
            )
            raise ShopifyNotConfiguredError()

        return cls(
            endpoint=settings.shopify_graphql_url,
            access_token=settings.shopify_admin_token,
            timeout=settings.shopify_timeout_seconds,
            max_retries=settings.shopify_max_retries,
            products_page_size=settings.export_products_page_size,
            variants_per_product=settings.export_variants_per_product,
            levels_per_item=settings.inventory_levels_per_item,
        )

    # ===================
    # TRANSPORT
    # ===================

    def execute(self, query: str, variables: Optional[dict] = None) -> dict:
        """
        Run one GraphQL document and return its "data" object.

        THROTTLED responses (top-level error or HTTP 429) are retried with
        exponential backoff up to max_retries.

        Raises:
            ShopifyError: On transport failure, non-JSON body or GraphQL errors
        """
        attempt = 0
        backoff = 1.0

        while True:
            try:
                response = self.session.post(
                    self.endpoint,
                    json={"query": query, "variables": variables or {}},
                    headers=self.headers,
                    timeout=self.timeout,
                )
                if response.status_code == 429 and attempt < self.max_retries:
                    attempt, backoff = self._wait_for_retry(attempt, backoff, reason="http_429")
                    continue
                response.raise_for_status()
                payload = response.json()

            except requests.exceptions.RequestException as e:
                logger.error("shopify_request_failed", error=str(e), error_type=type(e).__name__)
                raise ShopifyError(f"Shopify request failed: {e}")
            except ValueError as e:
                logger.error("shopify_invalid_response", error=str(e))
                raise ShopifyError("Shopify returned a non-JSON response")

            errors = payload.get("errors")
            if errors:
                if _is_throttled(errors) and attempt < self.max_retries:
                    attempt, backoff = self._wait_for_retry(attempt, backoff, reason="throttled")
                    continue
                logger.error("shopify_graphql_error", errors=errors)
                raise ShopifyError("GraphQL errors occurred", details={"errors": errors})

            return payload.get("data") or {}

    def _wait_for_retry(self, attempt: int, backoff: float, reason: str) -> tuple[int, float]:
        logger.warning(
            "shopify_retrying",
            reason=reason,
            attempt=attempt + 1,
            max_retries=self.max_retries,
            wait_seconds=backoff,
        )
        time.sleep(backoff)
        return attempt + 1, min(backoff * 2, MAX_BACKOFF_SECONDS)

    # ===================
    # DIRECTORY OPERATIONS
    # ===================

    def list_locations(self) -> list[Location]:
        """All locations, including inactive and legacy ones."""
        locations: list[Location] = []
        after: Optional[str] = None

        while True:
            data = self.execute(LOCATIONS_QUERY, {"after": after})
            connection = data.get("locations") or {}
            for edge in connection.get("edges") or []:
                locations.append(_parse_location(edge["node"]))

            page_info = connection.get("pageInfo") or {}
            if not page_info.get("hasNextPage"):
                break
            after = page_info.get("endCursor")

        logger.info("shopify_locations_loaded", count=len(locations))
        return locations

    def find_variant_by_sku(self, sku: str) -> Optional[VariantInventorySnapshot]:
        """
        Look up the first variant matching a SKU.

        Returns:
            Snapshot with available quantity per stocked location (every
            page of inventory levels), or None
        """
        data = self.execute(
            VARIANT_BY_SKU_QUERY,
            {"query": f"sku:{_quote_search_value(sku)}", "levels": self.levels_per_item},
        )
        edges = (data.get("productVariants") or {}).get("edges") or []
        if not edges:
            logger.debug("shopify_variant_not_found", sku=sku)
            return None

        node = edges[0]["node"]
        snapshot = _parse_snapshot(node)

        connection = (node.get("inventoryItem") or {}).get("inventoryLevels") or {}
        page_info = connection.get("pageInfo") or {}
        while page_info.get("hasNextPage"):
            data = self.execute(
                INVENTORY_LEVELS_QUERY,
                {
                    "id": snapshot.inventory_item_id,
                    "levels": self.levels_per_item,
                    "after": page_info.get("endCursor"),
                },
            )
            connection = (data.get("inventoryItem") or {}).get("inventoryLevels") or {}
            snapshot.available_by_location.update(_available_by_location(connection.get("edges")))
            page_info = connection.get("pageInfo") or {}

        return snapshot

    def set_inventory_quantity(
        self,
        inventory_item_id: str,
        location_id: str,
        quantity: int,
    ) -> SetQuantityResult:
        """
        Set the absolute available quantity for one item at one location.

        Uses reason "correction" and skips the compare-quantity check.
        """
        variables = {
            "input": {
                "reason": "correction",
                "name": AVAILABLE,
                "ignoreCompareQuantity": True,
                "quantities": [
                    {
                        "inventoryItemId": inventory_item_id,
                        "locationId": location_id,
                        "quantity": quantity,
                    }
                ],
            }
        }
        data = self.execute(SET_QUANTITIES_MUTATION, variables)

        payload = data.get("inventorySetQuantities")
        if payload is None:
            raise ShopifyError("inventorySetQuantities returned no payload")

        result = SetQuantityResult(
            user_errors=[UserError(**e) for e in payload.get("userErrors") or []]
        )

        if result.ok:
            logger.debug(
                "shopify_quantity_set",
                inventory_item_id=inventory_item_id,
                location_id=location_id,
                quantity=quantity,
            )
        else:
            logger.warning(
                "shopify_quantity_rejected",
                inventory_item_id=inventory_item_id,
                location_id=location_id,
                error=result.first_error,
            )
        return result

    def fetch_products(self) -> list[ProductNode]:
        """Walk every product page and return the nested inventory graph."""
        products: list[ProductNode] = []
        after: Optional[str] = None
        page = 0

        while True:
            data = self.execute(
                PRODUCTS_QUERY,
                {
                    "first": self.products_page_size,
                    "after": after,
                    "variants": self.variants_per_product,
                    "levels": self.levels_per_item,
                },
            )
            page += 1
            connection = data.get("products") or {}
            for edge in connection.get("edges") or []:
                node = edge["node"]
                if ((node.get("variants") or {}).get("pageInfo") or {}).get("hasNextPage"):
                    logger.warning(
                        "shopify_variants_truncated",
                        product=node.get("title"),
                        limit=self.variants_per_product,
                    )
                products.append(_parse_product(node))

            page_info = connection.get("pageInfo") or {}
            if not page_info.get("hasNextPage"):
                break
            after = page_info.get("endCursor")

        logger.info("shopify_products_loaded", count=len(products), pages=page)
        return products

    def list_product_summaries(self, limit: int = 20) -> list[ProductSummary]:
        """First `limit` products with status, total inventory, image and price."""
        data = self.execute(PRODUCT_SUMMARIES_QUERY, {"first": limit})
        edges = (data.get("products") or {}).get("edges") or []
        return [_parse_product_summary(edge["node"]) for edge in edges]


# ===================
# HELPER FUNCTIONS
# ===================

def _is_throttled(errors: list[dict]) -> bool:
    return any(
        ((e.get("extensions") or {}).get("code") == "THROTTLED")
        for e in errors
        if isinstance(e, dict)
    )


def _quote_search_value(value: str) -> str:
    """Quote a value for Shopify search syntax (sku:"A 1")."""
    escaped = str(value).replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _parse_quantities(raw: list[dict[str, Any]]) -> list[NamedQuantity]:
    return [
        NamedQuantity(name=q.get("name") or AVAILABLE, quantity=q.get("quantity") or 0)
        for q in raw or []
    ]


def _parse_location(node: dict) -> Location:
    return Location(
        id=node["id"],
        name=node.get("name") or "",
        is_active=node.get("isActive", True),
    )


def _parse_snapshot(node: dict) -> VariantInventorySnapshot:
    inventory_item = node.get("inventoryItem") or {}
    levels = (inventory_item.get("inventoryLevels") or {}).get("edges") or []

    return VariantInventorySnapshot(
        variant_id=node["id"],
        sku=node.get("sku") or "",
        inventory_item_id=inventory_item.get("id") or "",
        available_by_location=_available_by_location(levels),
    )


def _available_by_location(edges: Optional[list[dict]]) -> dict[str, int]:
    available: dict[str, int] = {}
    for edge in edges or []:
        level = edge["node"]
        quantities = _parse_quantities(level.get("quantities"))
        available[level["location"]["id"]] = next(
            (q.quantity for q in quantities if q.name == AVAILABLE), 0
        )
    return available


def _parse_product(node: dict) -> ProductNode:
    variants: list[VariantNode] = []
    for variant_edge in (node.get("variants") or {}).get("edges") or []:
        variant = variant_edge["node"]
        inventory_item = variant.get("inventoryItem") or {}
        levels = (inventory_item.get("inventoryLevels") or {}).get("edges") or []

        variants.append(VariantNode(
            sku=variant.get("sku"),
            title=variant.get("title"),
            selected_options=[
                SelectedOption(name=o.get("name") or "", value=o.get("value") or "")
                for o in variant.get("selectedOptions") or []
            ],
            inventory_levels=[
                InventoryLevelNode(
                    location_id=level["node"]["location"]["id"],
                    location_name=level["node"]["location"].get("name") or "",
                    quantities=_parse_quantities(level["node"].get("quantities")),
                )
                for level in levels
            ],
        ))

    return ProductNode(title=node.get("title") or "", variants=variants)


def _parse_product_summary(node: dict) -> ProductSummary:
    image = node.get("featuredImage") or {}
    variants = (node.get("variants") or {}).get("edges") or []
    price = variants[0]["node"].get("price") if variants else None

    return ProductSummary(
        id=node["id"],
        title=node.get("title") or "",
        handle=node.get("handle"),
        status=node.get("status"),
        total_inventory=node.get("totalInventory") or 0,
        image_url=image.get("url"),
        image_alt=image.get("altText"),
        price=str(price) if price is not None else None,
    )
