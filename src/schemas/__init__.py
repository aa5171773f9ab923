"""Pydantic schemas for API requests and responses."""

from src.schemas.auth import AuthResponse, ProfileUpdate, UserLogin, UserRegister, UserResponse
from src.schemas.consumption import ConsumptionLogCreate, ConsumptionLogResponse
from src.schemas.food_item import FoodItemResponse, FoodItemSummary
from src.schemas.inventory import (
    InventoryCreate,
    InventoryDetailResponse,
    InventoryItemCreate,
    InventoryItemResponse,
    InventoryItemUpdate,
    InventoryResponse,
    InventoryUpdate,
)
from src.schemas.sharing import (
    ListingClaim,
    ListingComplete,
    ListingCreate,
    ListingResponse,
    ListingUpdate,
    SharingLogResponse,
)

__all__ = [
    "UserRegister",
    "UserLogin",
    "AuthResponse",
    "ProfileUpdate",
    "UserResponse",
    "FoodItemSummary",
    "FoodItemResponse",
    "InventoryCreate",
    "InventoryUpdate",
    "InventoryResponse",
    "InventoryDetailResponse",
    "InventoryItemCreate",
    "InventoryItemUpdate",
    "InventoryItemResponse",
    "ConsumptionLogCreate",
    "ConsumptionLogResponse",
    "ListingCreate",
    "ListingUpdate",
    "ListingClaim",
    "ListingComplete",
    "ListingResponse",
    "SharingLogResponse",
]
