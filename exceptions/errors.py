"""
Custom exception classes for the application.

Every error that should reach the caller as a whole-operation failure is an
AppError. Per-row problems during an import never raise; they are recorded
on the ReconciliationResult instead.
"""

from typing import Optional, Any
from datetime import datetime


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "LOCATION_NOT_FOUND")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.utcnow().isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class NotFoundError(AppError):
    """Resource not found (404)."""

    def __init__(
        self,
        resource: str,
        identifier: str,
        code: Optional[str] = None
    ):
        super().__init__(
            code=code or f"{resource.upper()}_NOT_FOUND",
            message=f"{resource} not found",
            status_code=404,
            details={"id": identifier}
        )


class ValidationError(AppError):
    """Validation failed (422)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=422,
            details=details
        )


class ExternalServiceError(AppError):
    """External service failure (503)."""

    def __init__(
        self,
        service: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code=f"{service.upper()}_ERROR",
            message=message,
            status_code=503,
            details={"service": service, **(details or {})}
        )


# ===================
# SPREADSHEET ERRORS
# ===================

class ExcelParseError(ValidationError):
    """Spreadsheet file could not be read."""

    def __init__(
        self,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="EXCEL_PARSE_ERROR",
            message=message,
            details=details
        )


# ===================
# LOCATION ERRORS
# ===================

class LocationNotFoundError(NotFoundError):
    """Selected location does not exist in the store."""

    def __init__(self, location_id: str):
        super().__init__(
            resource="Location",
            identifier=location_id,
            code="LOCATION_NOT_FOUND"
        )


class InvalidLocationModeError(ValidationError):
    """Location selector is missing or still the placeholder value."""

    def __init__(self, provided: Optional[str]):
        super().__init__(
            code="INVALID_LOCATION_MODE",
            message="Select a location or ALL_LOCATIONS",
            details={"provided": provided}
        )


# ===================
# SHOPIFY ERRORS
# ===================

class ShopifyError(ExternalServiceError):
    """Shopify Admin API call failed (transport or top-level GraphQL errors)."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(
            service="shopify",
            message=message,
            details=details
        )


class ShopifyNotConfiguredError(ExternalServiceError):
    """Store domain or access token missing from settings."""

    def __init__(self):
        super().__init__(
            service="shopify",
            message="Shopify credentials are not configured",
            details={"required": ["SHOPIFY_STORE_DOMAIN", "SHOPIFY_ADMIN_TOKEN"]}
        )
