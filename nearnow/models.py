"""Data models for the event search client."""
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class PriceBand(BaseModel):
    """Price range requested by the user."""
    min: Optional[float] = None
    max: Optional[float] = None


class EventFilters(BaseModel):
    """Search filters as they come from the UI layer."""
    model_config = ConfigDict(populate_by_name=True)

    query: Optional[str] = None  # Free-text keywords
    city: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    radius: Optional[float] = None  # Miles
    start_date: Optional[datetime] = Field(default=None, alias="startDate")
    end_date: Optional[datetime] = Field(default=None, alias="endDate")
    category: Optional[str] = None
    price: Optional[PriceBand] = None

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None


class GeocodeResult(BaseModel):
    """Coordinates resolved for a place name."""
    latitude: float
    longitude: float
    is_country: bool = False  # Country-scale region, only a radius hint


class Venue(BaseModel):
    name: str
    address: str
    city: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class Price(BaseModel):
    min: Optional[float] = None
    max: Optional[float] = None
    currency: str = "USD"
    display: str = ""


class Event(BaseModel):
    """Normalized event shared by every consumer of the search client."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    description: str = ""
    start_date: str = Field(alias="startDate")  # ISO 8601
    end_date: str = Field(alias="endDate")
    timezone: str = "UTC"
    url: str  # Ticketing or info link, never empty
    image_url: Optional[str] = Field(default=None, alias="imageUrl")
    venue: Optional[Venue] = None
    price: Optional[Price] = None
    category: Optional[str] = None
    is_online: bool = Field(default=False, alias="isOnline")

    def to_outbound(self) -> dict[str, Any]:
        """Serialize to the camelCase shape consumed by the UI layer."""
        return self.model_dump(by_alias=True, exclude_none=True)
