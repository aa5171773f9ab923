"""Analytics schemas."""

from datetime import date

from pydantic import BaseModel


class InventoryTrendPoint(BaseModel):
    """Inventory size on a day something was added."""

    date: date
    total_items: int
    expiring_items: int
    newly_added: int
    consumed_items: int


class CategoryConsumption(BaseModel):
    """Consumption aggregated by catalog category."""

    category: str
    consumption_count: int
    quantity_consumed: float


class DailyConsumption(BaseModel):
    """Consumption events per day."""

    time_period: date
    consumption_count: int


class ConsumptionPatterns(BaseModel):
    """Consumption broken down by category and by day."""

    by_category: list[CategoryConsumption]
    by_time: list[DailyConsumption]


class CategoryShare(BaseModel):
    """Completed sharing aggregated by catalog category."""

    category: str
    count: int
    quantity_shared: float


class ActivityCount(BaseModel):
    """Recent sharing activity of one kind."""

    type: str  # "LISTED" | "CLAIMED" | "COMPLETED"
    count: int


class SharingStats(BaseModel):
    """Neighbourhood-wide sharing statistics."""

    total_listings: int
    active_listings: int
    completed_shares: int
    total_quantity_shared: float
    top_categories: list[CategoryShare]
    recent_activity: list[ActivityCount]
