"""Food sharing API endpoints."""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from src.api.dependencies import (
    get_analytics_service,
    get_current_user,
    get_optional_user,
    get_sharing_service,
)
from src.models.enums import ListingStatus
from src.models.user import User
from src.schemas.analytics import SharingStats
from src.schemas.sharing import (
    CompleteListingResponse,
    ListingClaim,
    ListingComplete,
    ListingCreate,
    ListingFilters,
    ListingResponse,
    ListingUpdate,
    SharingLogFilters,
    SharingLogResponse,
)
from src.services.analytics_service import AnalyticsService
from src.services.sharing_service import SharingService

router = APIRouter(prefix="/api/v1/sharing", tags=["sharing"])


@router.get("", response_model=list[ListingResponse])
def get_listings(
    service: Annotated[SharingService, Depends(get_sharing_service)],
    current_user: Annotated[User | None, Depends(get_optional_user)],
    status_filter: Annotated[ListingStatus | None, Query(alias="status")] = None,
    location: str | None = None,
    category: str | None = None,
    search: str | None = None,
    exclude_own_listings: bool = False,
):
    """Browse listings (AVAILABLE unless another status is requested)."""
    filters = ListingFilters(
        status=status_filter,
        location=location,
        category=category,
        search=search,
        exclude_own_listings=exclude_own_listings,
    )
    return service.list_listings(filters, current_user.id if current_user else None)


@router.post("", response_model=ListingResponse, status_code=status.HTTP_201_CREATED)
def create_listing(
    listing_data: ListingCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[SharingService, Depends(get_sharing_service)],
):
    """List one of your inventory items for sharing."""
    return service.create_listing(current_user.id, listing_data)


@router.get("/my-listings", response_model=list[ListingResponse])
def get_my_listings(
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[SharingService, Depends(get_sharing_service)],
    status_filter: Annotated[ListingStatus | None, Query(alias="status")] = None,
):
    """Get the current user's listings."""
    return service.get_user_listings(current_user.id, status_filter)


@router.get("/logs", response_model=list[SharingLogResponse])
def get_sharing_logs(
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[SharingService, Depends(get_sharing_service)],
    status_filter: Annotated[ListingStatus | None, Query(alias="status")] = None,
    listing_id: int | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
):
    """Get claim history."""
    filters = SharingLogFilters(
        status=status_filter,
        listing_id=listing_id,
        start_date=start_date,
        end_date=end_date,
    )
    return service.get_sharing_logs(filters)


@router.get("/stats", response_model=SharingStats)
def get_sharing_stats(
    current_user: Annotated[User, Depends(get_current_user)],
    analytics: Annotated[AnalyticsService, Depends(get_analytics_service)],
):
    """Get neighbourhood sharing statistics."""
    return analytics.get_sharing_stats()


@router.get("/{listing_id}", response_model=ListingResponse)
def get_listing(
    listing_id: int,
    service: Annotated[SharingService, Depends(get_sharing_service)],
):
    """Get a listing with its claims."""
    return service.get_listing(listing_id)


@router.put("/{listing_id}", response_model=ListingResponse)
def update_listing(
    listing_id: int,
    listing_data: ListingUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[SharingService, Depends(get_sharing_service)],
):
    """Update a listing (lister only)."""
    return service.update_listing(listing_id, current_user.id, listing_data)


@router.delete("/{listing_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_listing(
    listing_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[SharingService, Depends(get_sharing_service)],
):
    """Cancel a listing that has no active claims (lister only)."""
    service.delete_listing(listing_id, current_user.id)


@router.post(
    "/{listing_id}/claim",
    response_model=SharingLogResponse,
    status_code=status.HTTP_201_CREATED,
)
def claim_listing(
    listing_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[SharingService, Depends(get_sharing_service)],
    claim_data: ListingClaim | None = None,
):
    """Claim an available listing."""
    return service.claim_listing(listing_id, current_user.id, claim_data or ListingClaim())


@router.post("/{listing_id}/complete", response_model=CompleteListingResponse)
def complete_listing(
    listing_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[SharingService, Depends(get_sharing_service)],
    complete_data: ListingComplete | None = None,
):
    """Mark a claimed listing as handed over (lister or claimer)."""
    listing, updated_logs_count = service.complete_listing(
        listing_id, current_user.id, complete_data or ListingComplete()
    )
    return CompleteListingResponse(
        listing=ListingResponse.model_validate(listing),
        updated_logs_count=updated_logs_count,
    )
