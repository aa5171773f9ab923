"""Inventory and inventory item schemas."""

from dataclasses import dataclass
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from src.schemas.food_item import FoodItemSummary


class InventoryCreate(BaseModel):
    """Create a new inventory."""

    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(None, max_length=2000)
    is_private: bool = True


class InventoryUpdate(BaseModel):
    """Update an inventory."""

    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, max_length=2000)
    is_private: bool | None = None


class InventoryResponse(BaseModel):
    """Inventory response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str | None
    is_private: bool
    owner_id: int
    created_at: datetime
    updated_at: datetime


class InventoryItemCreate(BaseModel):
    """Add an item to an inventory.

    Exactly one of ``food_item_id`` or ``custom_name`` identifies the food.
    Quantity and identity rules are enforced by the inventory service.
    """

    food_item_id: int | None = None
    custom_name: str | None = Field(None, max_length=255)
    quantity: float
    unit: str | None = Field(None, max_length=50)
    expiry_date: datetime | None = None
    notes: str | None = Field(None, max_length=2000)


class InventoryItemUpdate(BaseModel):
    """Update an inventory item."""

    quantity: float | None = None
    unit: str | None = Field(None, max_length=50)
    expiry_date: datetime | None = None
    notes: str | None = Field(None, max_length=2000)


class InventoryItemResponse(BaseModel):
    """Inventory item response with catalog details."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    inventory_id: int
    food_item_id: int | None
    custom_name: str | None
    display_name: str
    quantity: float
    unit: str | None
    expiry_date: datetime | None
    notes: str | None
    removed: bool
    is_deleted: bool
    added_at: datetime
    updated_at: datetime
    food_item: FoodItemSummary | None = None


class InventoryDetailResponse(InventoryResponse):
    """Inventory with its active items."""

    items: list[InventoryItemResponse] = []


@dataclass
class InventoryItemFilters:
    """Filters for listing active inventory items."""

    category: str | None = None
    expiring_soon: bool = False
