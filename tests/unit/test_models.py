"""
Tests for the location selector, schema helpers and settings properties.
"""

import pytest

from config.settings import Settings
from exceptions import InvalidLocationModeError
from models.inventory import ReconciliationSummary, SetQuantityResult, UserError
from models.location import ALL_LOCATIONS, LocationMode
from tests.factories import InventoryFactory


class TestLocationMode:

    def test_parse_all_locations(self):
        mode = LocationMode.parse("ALL_LOCATIONS")

        assert mode.is_all_locations
        assert mode.location_id is None
        assert str(mode) == ALL_LOCATIONS

    def test_parse_single_location(self):
        mode = LocationMode.parse(" gid://shopify/Location/1 ")

        assert not mode.is_all_locations
        assert mode == LocationMode.single("gid://shopify/Location/1")
        assert str(mode) == "gid://shopify/Location/1"

    @pytest.mark.parametrize("raw", [None, "", "   ", "SELECT_LOCATION"])
    def test_parse_rejects_missing_selection(self, raw):
        with pytest.raises(InvalidLocationModeError) as exc_info:
            LocationMode.parse(raw)

        assert exc_info.value.status_code == 422


class TestLocation:

    def test_matches_name_ignores_case_and_whitespace(self):
        location = InventoryFactory.location(name="Back Room")

        assert location.matches_name("  back ROOM ")
        assert not location.matches_name("Back")
        assert not location.matches_name(None)


class TestInventoryLevel:

    def test_available_quantity(self):
        assert InventoryFactory.level("loc", "Main", 7).available == 7

    def test_missing_available_is_zero(self):
        assert InventoryFactory.level("loc", "Main", None).available == 0


class TestSetQuantityResult:

    def test_ok_without_errors(self):
        result = SetQuantityResult()

        assert result.ok
        assert result.first_error is None

    def test_first_error(self):
        result = SetQuantityResult(user_errors=[
            UserError(field=["input"], message="first"),
            UserError(message="second"),
        ])

        assert not result.ok
        assert result.first_error == "first"


class TestReconciliationSummary:

    def test_serializes_camel_case(self):
        summary = ReconciliationSummary(
            total=1, updated=0, errors=[], failedRows=[], skippedRows=[{"SKU": "A1"}]
        )

        dumped = summary.model_dump(by_alias=True)

        assert dumped["skippedRows"] == [{"SKU": "A1"}]
        assert "skipped_rows" not in dumped


class TestSettings:

    def test_graphql_url_from_store_handle(self):
        settings = Settings(shopify_store_domain="demo", shopify_api_version="2024-10")

        assert settings.shopify_graphql_url == "https://demo.myshopify.com/admin/api/2024-10/graphql.json"

    def test_graphql_url_strips_scheme(self):
        settings = Settings(shopify_store_domain="https://demo.myshopify.com/")

        assert settings.shopify_graphql_url.startswith("https://demo.myshopify.com/admin/api/")

    def test_configured_needs_domain_and_token(self):
        assert not Settings(shopify_store_domain="demo", shopify_admin_token=None).shopify_configured
        assert Settings(shopify_store_domain="demo", shopify_admin_token="shpat").shopify_configured
