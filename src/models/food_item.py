"""Catalog food item model."""

from sqlalchemy import Column, Float, Integer, String, Text, func

from src.database import Base
from src.models.mixins import SoftDeleteMixin, TimestampMixin


class FoodItem(Base, TimestampMixin, SoftDeleteMixin):
    """Reusable catalog definition of a food (category, unit, shelf life).

    Maintained centrally; inventories only reference it.
    """

    __tablename__ = "food_items"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    category = Column(String(100), nullable=True, index=True)  # "fruit", "dairy", ...
    unit = Column(String(50), nullable=True)  # "pcs", "litre", "kg"
    typical_expiration_days = Column(Integer, nullable=True)
    sample_cost_per_unit = Column(Float, nullable=True)
    description = Column(Text, nullable=True)

    @classmethod
    def name_matches(cls, name: str):
        """Case-insensitive exact match on the catalog name."""
        return func.lower(cls.name) == name.strip().lower()
