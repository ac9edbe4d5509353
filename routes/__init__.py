"""
API route modules.

Each module defines routes for one domain area.
"""

from routes.locations import router as locations_router
from routes.inventory import router as inventory_router
from routes.products import router as products_router

__all__ = [
    "locations_router",
    "inventory_router",
    "products_router",
]
