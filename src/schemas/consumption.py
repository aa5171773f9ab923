"""Consumption log schemas."""

from dataclasses import dataclass
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ConsumptionLogCreate(BaseModel):
    """Record that some quantity of food was consumed.

    ``inventory_item_id`` may be a client placeholder string (``temp-...``)
    for an item that was never persisted.
    """

    inventory_id: int
    inventory_item_id: int | str | None = None
    food_item_id: int | None = None
    item_name: str = Field(..., max_length=255)
    quantity: float
    unit: str | None = Field(None, max_length=50)
    consumed_at: datetime | None = None
    notes: str | None = Field(None, max_length=2000)


class ConsumptionLogResponse(BaseModel):
    """Consumption log response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    inventory_id: int
    inventory_item_id: int | None
    food_item_id: int | None
    item_name: str
    quantity: float
    unit: str | None
    consumed_at: datetime
    notes: str | None
    created_at: datetime


@dataclass
class ConsumptionLogFilters:
    """Filters for consumption history."""

    start_date: datetime | None = None
    end_date: datetime | None = None
    inventory_id: int | None = None
