"""Food sharing schemas."""

from dataclasses import dataclass
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from src.models.enums import ListingStatus
from src.schemas.food_item import FoodItemSummary


class ListingCreate(BaseModel):
    """Offer an inventory item for sharing.

    The unit always comes from the item; quantity defaults to what is left.
    """

    inventory_item_id: int
    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(None, max_length=2000)
    quantity: float | None = None
    pickup_location: str | None = Field(None, max_length=255)
    available_until: datetime | None = None


class ListingUpdate(BaseModel):
    """Patch a listing (lister only)."""

    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, max_length=2000)
    quantity: float | None = None
    pickup_location: str | None = Field(None, max_length=255)
    available_until: datetime | None = None
    status: ListingStatus | None = None


class ListingClaim(BaseModel):
    """Claim a listing."""

    claimer_name: str | None = Field(None, max_length=255)
    notes: str | None = Field(None, max_length=2000)
    quantity_claimed: float | None = None


class ListingComplete(BaseModel):
    """Mark a listing as handed over."""

    notes: str | None = Field(None, max_length=2000)


class ListingItemSummary(BaseModel):
    """The inventory item behind a listing."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    inventory_id: int
    custom_name: str | None
    display_name: str
    food_item: FoodItemSummary | None = None


class SharingLogResponse(BaseModel):
    """Claim (sharing log) response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    listing_id: int
    claimer_id: int | None
    claimer_name: str | None
    claimed_at: datetime | None
    completed_at: datetime | None
    notes: str | None
    quantity_claimed: float | None
    status: ListingStatus
    created_at: datetime


class ListingResponse(BaseModel):
    """Food listing response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    inventory_item_id: int
    lister_id: int
    title: str
    description: str | None
    quantity: float
    unit: str | None
    pickup_location: str | None
    available_until: datetime | None
    status: ListingStatus
    is_deleted: bool
    created_at: datetime
    updated_at: datetime
    inventory_item: ListingItemSummary | None = None
    sharing_logs: list[SharingLogResponse] = []


class CompleteListingResponse(BaseModel):
    """Result of completing a listing."""

    listing: ListingResponse
    updated_logs_count: int


@dataclass
class ListingFilters:
    """Filters for browsing listings.

    All supplied fields must match; ``search`` matches any of title,
    description, the item's custom name or its catalog name.
    """

    status: ListingStatus | None = None
    location: str | None = None
    category: str | None = None
    search: str | None = None
    exclude_own_listings: bool = False


@dataclass
class SharingLogFilters:
    """Filters for claim history."""

    status: ListingStatus | None = None
    listing_id: int | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
