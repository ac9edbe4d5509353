"""
Product overview API routes.
"""

from fastapi import APIRouter, Depends, Query
import structlog

from integrations.directory import CommerceDirectoryClient
from models.inventory import ProductSummaryListResponse
from routes.dependencies import get_directory_client, handle_error

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("", response_model=ProductSummaryListResponse)
def list_products(
    limit: int = Query(20, ge=1, le=250, description="Number of products to show"),
    directory: CommerceDirectoryClient = Depends(get_directory_client),
):
    """
    List the first products of the store with status and total inventory.
    """
    try:
        products = directory.list_product_summaries(limit)
        return ProductSummaryListResponse(data=products, total=len(products))

    except Exception as e:
        logger.error("product_list_failed", error=str(e))
        return handle_error(e)
