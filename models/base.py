"""
Base schema for Shopify payloads and API models.
"""

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """
    Base for store-facing schemas.

    Names and ids coming back from Shopify are trimmed on load, and
    snapshots stay validated when the import updates them in place.
    """
    model_config = ConfigDict(
        from_attributes=True,
        str_strip_whitespace=True,
        validate_assignment=True
    )
