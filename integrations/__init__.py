"""
External service integrations.
"""

from integrations.directory import CommerceDirectoryClient
from integrations.shopify import ShopifyClient

__all__ = [
    "CommerceDirectoryClient",
    "ShopifyClient",
]
