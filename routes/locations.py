"""
Location API routes.

Feeds the location pickers of the import and export pages.
"""

from fastapi import APIRouter, Depends
import structlog

from integrations.directory import CommerceDirectoryClient
from models.location import LocationListResponse
from routes.dependencies import get_directory_client, handle_error

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("", response_model=LocationListResponse)
def list_locations(directory: CommerceDirectoryClient = Depends(get_directory_client)):
    """
    List every store location, including inactive and legacy ones.
    """
    try:
        locations = directory.list_locations()
        return LocationListResponse(data=locations, total=len(locations))

    except Exception as e:
        return handle_error(e)
