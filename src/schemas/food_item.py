"""Catalog food item schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class FoodItemSummary(BaseModel):
    """Catalog details joined onto inventory items and listings."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    category: str | None
    unit: str | None
    typical_expiration_days: int | None
    description: str | None = None


class FoodItemResponse(FoodItemSummary):
    """Catalog food item response."""

    sample_cost_per_unit: float | None
    created_at: datetime
    updated_at: datetime
