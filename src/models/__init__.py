"""SQLAlchemy models."""

from src.models.consumption_log import ConsumptionLog
from src.models.enums import ListingStatus
from src.models.food_item import FoodItem
from src.models.inventory import Inventory, InventoryItem
from src.models.sharing import FoodListing, SharingLog
from src.models.user import User

__all__ = [
    "User",
    "FoodItem",
    "Inventory",
    "InventoryItem",
    "ConsumptionLog",
    "FoodListing",
    "SharingLog",
    "ListingStatus",
]
