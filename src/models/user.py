"""User model."""

from sqlalchemy import Column, Float, Integer, String

from src.database import Base
from src.models.mixins import TimestampMixin


class User(Base, TimestampMixin):
    """A neighbour: owns inventories, lists food and claims other listings."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(255), nullable=True)
    location = Column(String(255), nullable=True)  # Neighbourhood shown on listings
    dietary_preference = Column(String(100), nullable=True)
    budget_range = Column(Float, nullable=True)
