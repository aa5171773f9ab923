"""Food listing and sharing log models."""

from datetime import UTC, datetime

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    text,
)
from sqlalchemy.orm import relationship

from src.database import Base
from src.models.enums import CLAIM_STATUSES, ListingStatus
from src.models.mixins import SoftDeleteMixin, TimestampMixin

# Both tables share one status type
listing_status_enum = Enum(
    ListingStatus,
    name="listingstatus",
    values_callable=lambda x: [e.value for e in x],
)

_AVAILABLE_LISTING = "status = 'AVAILABLE' AND deleted_at IS NULL"
_ACTIVE_CLAIM = "status = 'CLAIMED' AND deleted_at IS NULL"
_CLAIM_STATUS_VALUES = ", ".join(f"'{status.value}'" for status in CLAIM_STATUSES)
_CLAIM_STATUS_CHECK = f"status IN ({_CLAIM_STATUS_VALUES})"


class FoodListing(Base, TimestampMixin, SoftDeleteMixin):
    """An offer to share (part of) one inventory item with neighbours."""

    __tablename__ = "food_listings"
    __table_args__ = (
        # At most one AVAILABLE listing per inventory item
        Index(
            "uq_food_listings_available_item",
            "inventory_item_id",
            unique=True,
            postgresql_where=text(_AVAILABLE_LISTING),
            sqlite_where=text(_AVAILABLE_LISTING),
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    inventory_item_id = Column(
        Integer, ForeignKey("inventory_items.id"), nullable=False, index=True
    )
    lister_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    quantity = Column(Float, nullable=False)
    unit = Column(String(50), nullable=True)  # Copied from the item at creation
    pickup_location = Column(String(255), nullable=True)
    available_until = Column(DateTime(timezone=True), nullable=True)
    status = Column(
        listing_status_enum,
        default=ListingStatus.AVAILABLE,
        nullable=False,
        index=True,
    )

    # Relationships
    inventory_item = relationship("InventoryItem", backref="listings")
    lister = relationship("User", backref="listings")
    sharing_logs = relationship(
        "SharingLog",
        order_by="SharingLog.created_at.desc()",
        primaryjoin="and_(FoodListing.id == SharingLog.listing_id, "
        "SharingLog.deleted_at.is_(None))",
        viewonly=True,
    )


class SharingLog(Base, TimestampMixin, SoftDeleteMixin):
    """One claim against a listing.

    The claimer may be anonymous, identified only by ``claimer_name``.
    """

    __tablename__ = "sharing_logs"
    __table_args__ = (
        CheckConstraint(_CLAIM_STATUS_CHECK, name="ck_sharing_logs_status"),
        # One active claim per user and listing
        Index(
            "uq_sharing_logs_active_claim",
            "listing_id",
            "claimer_id",
            unique=True,
            postgresql_where=text(_ACTIVE_CLAIM),
            sqlite_where=text(_ACTIVE_CLAIM),
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    listing_id = Column(Integer, ForeignKey("food_listings.id"), nullable=False, index=True)
    claimer_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    claimer_name = Column(String(255), nullable=True)
    claimed_at = Column(DateTime(timezone=True), default=lambda: datetime.now(UTC))
    completed_at = Column(DateTime(timezone=True), nullable=True)
    notes = Column(Text, nullable=True)
    quantity_claimed = Column(Float, nullable=True)
    status = Column(listing_status_enum, default=ListingStatus.CLAIMED, nullable=False)

    # Relationships
    listing = relationship("FoodListing")
    claimer = relationship("User", backref="claims")
