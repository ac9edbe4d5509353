"""
Application settings loaded from environment variables.

Uses pydantic-settings for validation and type safety.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    """
    Application settings.

    All values loaded from .env file or environment variables.
    Validation happens automatically on startup.
    """

    model_config = SettingsConfigDict(
        env_file=(".env", "../.env"),  # Check current dir, then parent
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"  # Ignore extra env vars
    )

    # ===================
    # SHOPIFY
    # ===================
    shopify_store_domain: Optional[str] = Field(
        None,
        description="Store domain, e.g. my-store.myshopify.com"
    )
    shopify_admin_token: Optional[str] = Field(
        None,
        description="Admin API access token for the installed app"
    )
    shopify_api_version: str = Field(
        default="2025-01",
        pattern=r"^\d{4}-\d{2}$",
        description="Admin GraphQL API version"
    )
    shopify_timeout_seconds: float = Field(
        default=30,
        gt=0,
        le=120,
        description="HTTP timeout for a single GraphQL call"
    )
    shopify_max_retries: int = Field(
        default=3,
        ge=0,
        le=10,
        description="Retries for THROTTLED GraphQL responses"
    )

    # ===================
    # EXPORT / IMPORT PAGING
    # ===================
    export_products_page_size: int = Field(
        default=50,
        ge=1,
        le=250,
        description="Products fetched per page during export"
    )
    export_variants_per_product: int = Field(
        default=100,
        ge=1,
        le=250,
        description="Variants fetched per product during export"
    )
    inventory_levels_per_item: int = Field(
        default=50,
        ge=1,
        le=250,
        description="Inventory levels fetched per inventory item"
    )

    # ===================
    # APP SETTINGS
    # ===================
    environment: str = Field(
        default="development",
        pattern="^(development|staging|production)$",
        description="Application environment"
    )
    debug: bool = Field(
        default=True,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Logging level"
    )
    api_host: str = Field(
        default="0.0.0.0",
        description="API host"
    )
    api_port: int = Field(
        default=8000,
        ge=1000,
        le=65535,
        description="API port"
    )

    # ===================
    # COMPUTED PROPERTIES
    # ===================
    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"

    @property
    def shopify_configured(self) -> bool:
        """Check if the Shopify Admin API credentials are present."""
        return bool(self.shopify_store_domain and self.shopify_admin_token)

    @property
    def shopify_graphql_url(self) -> Optional[str]:
        """Admin GraphQL endpoint for the configured store."""
        if not self.shopify_store_domain:
            return None
        domain = self.shopify_store_domain.replace("https://", "").replace("http://", "").rstrip("/")
        if not domain.endswith(".myshopify.com"):
            domain = f"{domain}.myshopify.com"
        return f"https://{domain}/admin/api/{self.shopify_api_version}/graphql.json"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload.

    Returns:
        Settings: Application settings

    Raises:
        ValidationError: If env vars are invalid
    """
    return Settings()


# For convenient imports: from config.settings import settings
settings = get_settings()
