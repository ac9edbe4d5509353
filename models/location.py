"""
Location schemas and the import/export location selector.
"""

from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel, Field

from exceptions import InvalidLocationModeError
from models.base import BaseSchema

# Wire value the admin UI sends for "every location"
ALL_LOCATIONS = "ALL_LOCATIONS"

# Placeholder option of the location picker
SELECT_LOCATION = "SELECT_LOCATION"


class Location(BaseSchema):
    """A stock-keeping site of the store."""

    id: str = Field(..., description="Location GID")
    name: str = Field(..., description="Display name, matched case-insensitively on import")
    is_active: bool = Field(default=True)

    def matches_name(self, name: Optional[str]) -> bool:
        """Case-insensitive, whitespace-trimmed name comparison."""
        if name is None:
            return False
        return self.name.strip().casefold() == str(name).strip().casefold()


class LocationListResponse(BaseModel):
    """Response for the location picker."""
    data: list[Location]
    total: int


@dataclass(frozen=True)
class LocationMode:
    """
    Selected once per import/export call.

    location_id is None in all-locations mode; otherwise it is the GID of
    the single target location.
    """

    location_id: Optional[str] = None

    @classmethod
    def single(cls, location_id: str) -> "LocationMode":
        return cls(location_id=location_id)

    @classmethod
    def all_locations(cls) -> "LocationMode":
        return cls(location_id=None)

    @classmethod
    def parse(cls, raw: Optional[str]) -> "LocationMode":
        """
        Parse the picker value sent by the UI.

        Raises:
            InvalidLocationModeError: If nothing (or the placeholder) was selected
        """
        value = (raw or "").strip()
        if not value or value == SELECT_LOCATION:
            raise InvalidLocationModeError(raw)
        if value == ALL_LOCATIONS:
            return cls.all_locations()
        return cls.single(value)

    @property
    def is_all_locations(self) -> bool:
        return self.location_id is None

    def __str__(self) -> str:
        return ALL_LOCATIONS if self.is_all_locations else self.location_id
