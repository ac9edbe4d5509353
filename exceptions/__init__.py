"""
Custom exceptions module.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    NotFoundError,
    ValidationError,
    ExternalServiceError,

    # Spreadsheet
    ExcelParseError,

    # Locations
    LocationNotFoundError,
    InvalidLocationModeError,

    # Shopify
    ShopifyError,
    ShopifyNotConfiguredError,
)

__all__ = [
    # Base
    "AppError",
    "NotFoundError",
    "ValidationError",
    "ExternalServiceError",

    # Spreadsheet
    "ExcelParseError",

    # Locations
    "LocationNotFoundError",
    "InvalidLocationModeError",

    # Shopify
    "ShopifyError",
    "ShopifyNotConfiguredError",
]
