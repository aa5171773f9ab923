"""Inventory, item, and consumption API endpoints."""

from datetime import UTC, datetime, timedelta
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from src.api.dependencies import (
    get_analytics_service,
    get_current_user,
    get_inventory_service,
)
from src.models.user import User
from src.schemas.analytics import ConsumptionPatterns, InventoryTrendPoint
from src.schemas.consumption import (
    ConsumptionLogCreate,
    ConsumptionLogFilters,
    ConsumptionLogResponse,
)
from src.schemas.inventory import (
    InventoryCreate,
    InventoryDetailResponse,
    InventoryItemCreate,
    InventoryItemFilters,
    InventoryItemResponse,
    InventoryItemUpdate,
    InventoryResponse,
    InventoryUpdate,
)
from src.services.analytics_service import AnalyticsService
from src.services.inventory_service import InventoryService

router = APIRouter(prefix="/api/v1/inventories", tags=["inventories"])

DEFAULT_ANALYTICS_DAYS = 30


def analytics_window(
    start_date: datetime | None, end_date: datetime | None
) -> tuple[datetime, datetime]:
    """Default to the last 30 days ending now."""
    end = end_date or datetime.now(UTC)
    start = start_date or end - timedelta(days=DEFAULT_ANALYTICS_DAYS)
    return start, end


# --- Consumption (registered before the parameterized routes) ---


@router.post(
    "/consumption", response_model=ConsumptionLogResponse, status_code=status.HTTP_201_CREATED
)
def log_consumption(
    log_data: ConsumptionLogCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[InventoryService, Depends(get_inventory_service)],
):
    """Log a consumption event and draw down the consumed item."""
    return service.consume(current_user.id, log_data)


@router.get("/consumption", response_model=list[ConsumptionLogResponse])
def get_consumption_logs(
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[InventoryService, Depends(get_inventory_service)],
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    inventory_id: int | None = None,
):
    """Get consumption history across the user's inventories."""
    filters = ConsumptionLogFilters(
        start_date=start_date, end_date=end_date, inventory_id=inventory_id
    )
    return service.get_consumption_logs(current_user.id, filters)


# --- Analytics ---


@router.get("/analytics/inventory-trends", response_model=list[InventoryTrendPoint])
def get_inventory_trends(
    current_user: Annotated[User, Depends(get_current_user)],
    analytics: Annotated[AnalyticsService, Depends(get_analytics_service)],
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    inventory_id: int | None = None,
):
    """Get per-day inventory figures."""
    start, end = analytics_window(start_date, end_date)
    return analytics.get_inventory_trends(current_user.id, start, end, inventory_id)


@router.get("/analytics/consumption-patterns", response_model=ConsumptionPatterns)
def get_consumption_patterns(
    current_user: Annotated[User, Depends(get_current_user)],
    analytics: Annotated[AnalyticsService, Depends(get_analytics_service)],
    start_date: datetime | None = None,
    end_date: datetime | None = None,
):
    """Get consumption grouped by category and by day."""
    start, end = analytics_window(start_date, end_date)
    return analytics.get_consumption_patterns(current_user.id, start, end)


# --- Inventories ---


@router.get("", response_model=list[InventoryResponse])
def get_inventories(
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[InventoryService, Depends(get_inventory_service)],
):
    """Get all inventories owned by the current user."""
    return service.list_inventories(current_user.id)


@router.post("", response_model=InventoryResponse, status_code=status.HTTP_201_CREATED)
def create_inventory(
    inventory_data: InventoryCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[InventoryService, Depends(get_inventory_service)],
):
    """Create a new inventory."""
    return service.create_inventory(current_user.id, inventory_data)


@router.get("/{inventory_id}", response_model=InventoryDetailResponse)
def get_inventory(
    inventory_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[InventoryService, Depends(get_inventory_service)],
):
    """Get an inventory with its active items."""
    inventory = service.get_owned_inventory(current_user.id, inventory_id)
    return InventoryDetailResponse(
        **InventoryResponse.model_validate(inventory).model_dump(),
        items=[
            InventoryItemResponse.model_validate(item)
            for item in service.list_items(inventory.id)
        ],
    )


@router.put("/{inventory_id}", response_model=InventoryResponse)
def update_inventory(
    inventory_id: int,
    inventory_data: InventoryUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[InventoryService, Depends(get_inventory_service)],
):
    """Update an inventory."""
    return service.update_inventory(current_user.id, inventory_id, inventory_data)


@router.delete("/{inventory_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_inventory(
    inventory_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[InventoryService, Depends(get_inventory_service)],
):
    """Soft delete an inventory."""
    service.delete_inventory(current_user.id, inventory_id)


# --- Items ---


@router.get("/{inventory_id}/items", response_model=list[InventoryItemResponse])
def get_inventory_items(
    inventory_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[InventoryService, Depends(get_inventory_service)],
    category: str | None = None,
    expiring_soon: bool = Query(default=False, description="Only items expiring within 7 days"),
):
    """Get active items of an inventory."""
    inventory = service.get_owned_inventory(current_user.id, inventory_id)
    filters = InventoryItemFilters(category=category, expiring_soon=expiring_soon)
    return service.list_items(inventory.id, filters)


@router.post(
    "/{inventory_id}/items",
    response_model=InventoryItemResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_inventory_item(
    inventory_id: int,
    item_data: InventoryItemCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[InventoryService, Depends(get_inventory_service)],
):
    """Add an item to an inventory."""
    return service.add_item(current_user.id, inventory_id, item_data)


@router.put("/{inventory_id}/items/{item_id}", response_model=InventoryItemResponse)
def update_inventory_item(
    inventory_id: int,
    item_id: int,
    item_data: InventoryItemUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[InventoryService, Depends(get_inventory_service)],
):
    """Update an inventory item."""
    return service.update_item(current_user.id, inventory_id, item_id, item_data)


@router.delete("/{inventory_id}/items/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_inventory_item(
    inventory_id: int,
    item_id: int,
    current_user: Annotated[User, Depends(get_current_user)],
    service: Annotated[InventoryService, Depends(get_inventory_service)],
):
    """Soft delete an inventory item."""
    service.remove_item(current_user.id, inventory_id, item_id)
