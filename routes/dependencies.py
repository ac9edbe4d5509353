"""
Shared route helpers: directory injection and error conversion.
"""

from fastapi import Depends
from fastapi.responses import JSONResponse
import structlog

from config.settings import Settings, get_settings
from exceptions import AppError
from integrations.directory import CommerceDirectoryClient
from integrations.shopify import ShopifyClient

logger = structlog.get_logger(__name__)


def get_directory_client(
    settings: Settings = Depends(get_settings),
) -> CommerceDirectoryClient:
    """
    Build a Shopify client for the current request.

    Raises:
        ShopifyNotConfiguredError: If credentials are missing
    """
    return ShopifyClient.from_settings(settings)


def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
    # Unexpected error
    logger.error("unexpected_error", error=str(e), type=type(e).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred"
            }
        }
    )
