"""Consumption log model."""

from datetime import UTC, datetime

from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from src.database import Base
from src.models.mixins import SoftDeleteMixin, TimestampMixin


class ConsumptionLog(Base, TimestampMixin, SoftDeleteMixin):
    """Append-only record of a consumption event.

    ``item_name`` is a snapshot since the source item may later be deleted.
    ``inventory_item_id`` is null when the client consumed a placeholder
    item that was never persisted.
    """

    __tablename__ = "consumption_logs"

    id = Column(Integer, primary_key=True, index=True)
    inventory_id = Column(Integer, ForeignKey("inventories.id"), nullable=False, index=True)
    inventory_item_id = Column(
        Integer, ForeignKey("inventory_items.id"), nullable=True, index=True
    )
    food_item_id = Column(Integer, ForeignKey("food_items.id"), nullable=True, index=True)
    item_name = Column(String(255), nullable=False)
    quantity = Column(Float, nullable=False)
    unit = Column(String(50), nullable=True)
    consumed_at = Column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False, index=True
    )
    notes = Column(Text, nullable=True)

    # Relationships
    inventory = relationship("Inventory", back_populates="consumption_logs")
    inventory_item = relationship("InventoryItem")
    food_item = relationship("FoodItem")
