"""Inventory and InventoryItem models."""

from datetime import UTC, datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from src.database import Base
from src.models.mixins import SoftDeleteMixin, TimestampMixin


class Inventory(Base, TimestampMixin, SoftDeleteMixin):
    """A named collection of food owned by exactly one user."""

    __tablename__ = "inventories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    is_private = Column(Boolean, nullable=False, default=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # Relationships
    owner = relationship("User", backref="inventories")
    items = relationship("InventoryItem", back_populates="inventory")
    consumption_logs = relationship("ConsumptionLog", back_populates="inventory")


class InventoryItem(Base, TimestampMixin, SoftDeleteMixin):
    """A quantity of a catalog food or a free-text custom item.

    ``removed`` means the quantity was consumed down to zero; the row stays
    for history but is hidden from active views. ``deleted_at`` means the
    user explicitly deleted it.
    """

    __tablename__ = "inventory_items"
    __table_args__ = (CheckConstraint("quantity >= 0", name="ck_inventory_items_quantity"),)

    id = Column(Integer, primary_key=True, index=True)
    inventory_id = Column(Integer, ForeignKey("inventories.id"), nullable=False, index=True)
    food_item_id = Column(Integer, ForeignKey("food_items.id"), nullable=True, index=True)
    custom_name = Column(String(255), nullable=True)
    quantity = Column(Float, nullable=False, default=0.0)
    unit = Column(String(50), nullable=True)
    expiry_date = Column(DateTime(timezone=True), nullable=True, index=True)
    notes = Column(Text, nullable=True)
    removed = Column(Boolean, nullable=False, default=False, index=True)
    added_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    added_at = Column(DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    inventory = relationship("Inventory", back_populates="items")
    food_item = relationship("FoodItem", lazy="joined")
    added_by = relationship("User", foreign_keys=[added_by_id])

    @classmethod
    def active(cls):
        """SQL predicates selecting items that are neither deleted nor exhausted."""
        return (cls.deleted_at.is_(None), cls.removed.is_(False))

    @property
    def display_name(self) -> str:
        """Name shown to users: the custom name, falling back to the catalog name."""
        if self.custom_name:
            return self.custom_name
        if self.food_item is not None:
            return self.food_item.name
        return ""
