"""Sharing service: food listings and the claims made on them.

Listing status lifecycle::

    AVAILABLE --claim--> CLAIMED --complete--> COMPLETED
    AVAILABLE --delete--> CANCELLED

COMPLETED and CANCELLED are terminal. A claim is never withdrawn, so no
listing goes back from CLAIMED to AVAILABLE.
"""

import logging
from datetime import UTC, datetime

from sqlalchemy import or_, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from src.models.enums import ListingStatus
from src.models.food_item import FoodItem
from src.models.inventory import Inventory, InventoryItem
from src.models.sharing import FoodListing, SharingLog
from src.models.user import User
from src.schemas.sharing import (
    ListingClaim,
    ListingComplete,
    ListingCreate,
    ListingFilters,
    ListingUpdate,
    SharingLogFilters,
)
from src.services.errors import (
    ConflictError,
    FoodShareError,
    ForbiddenError,
    InternalError,
    NotFoundError,
)
from src.services.inventory_service import require_positive

logger = logging.getLogger(__name__)

# Listing lifecycle; anything else is rejected
LISTING_TRANSITIONS: dict[ListingStatus, frozenset[ListingStatus]] = {
    ListingStatus.AVAILABLE: frozenset({ListingStatus.CLAIMED, ListingStatus.CANCELLED}),
    ListingStatus.CLAIMED: frozenset({ListingStatus.COMPLETED}),
    ListingStatus.COMPLETED: frozenset(),
    ListingStatus.CANCELLED: frozenset(),
}


def can_transition(current: ListingStatus, target: ListingStatus) -> bool:
    """Check if a listing may move from ``current`` to ``target``."""
    return target in LISTING_TRANSITIONS[current]


# Statuses a lister may set directly; CLAIMED and COMPLETED move the claims
# too and only happen through claim_listing / complete_listing
LISTER_SETTABLE_STATUSES = frozenset({ListingStatus.CANCELLED})


class SharingService:
    """Service for neighbourhood food sharing."""

    def __init__(self, db: Session):
        self.db = db

    def _get_user(self, user_id: int) -> User:
        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFoundError("User", user_id)
        return user

    def _get_lister_listing(self, listing_id: int, user_id: int) -> FoodListing:
        listing = (
            self.db.query(FoodListing)
            .filter(
                FoodListing.id == listing_id,
                FoodListing.lister_id == user_id,
                FoodListing.not_deleted(),
            )
            .first()
        )
        if not listing:
            raise NotFoundError(
                "Listing", listing_id, message="Listing not found or does not belong to user"
            )
        return listing

    def _active_claims(self, listing_id: int) -> list[SharingLog]:
        return (
            self.db.query(SharingLog)
            .filter(
                SharingLog.listing_id == listing_id,
                SharingLog.status == ListingStatus.CLAIMED,
                SharingLog.not_deleted(),
            )
            .all()
        )

    def _commit(self, action: str, conflict_message: str) -> None:
        """Commit, turning unique-index violations into ConflictError."""
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"Integrity violation during {action}: {e.orig}")
            raise ConflictError(conflict_message) from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception(f"Failed to {action}")
            raise InternalError() from e

    # --- Listings ---

    def create_listing(self, user_id: int, data: ListingCreate) -> FoodListing:
        """Offer one of the user's active inventory items for sharing."""
        self._get_user(user_id)

        item = (
            self.db.query(InventoryItem)
            .join(Inventory, InventoryItem.inventory_id == Inventory.id)
            .filter(
                InventoryItem.id == data.inventory_item_id,
                Inventory.owner_id == user_id,
                *InventoryItem.active(),
            )
            .first()
        )
        if not item:
            raise NotFoundError(
                "Inventory item",
                data.inventory_item_id,
                message="Inventory item not found or does not belong to user",
            )

        existing = (
            self.db.query(FoodListing)
            .filter(
                FoodListing.inventory_item_id == item.id,
                FoodListing.status == ListingStatus.AVAILABLE,
                FoodListing.not_deleted(),
            )
            .first()
        )
        if existing:
            raise ConflictError("This item is already listed for sharing")

        quantity = item.quantity if data.quantity is None else require_positive(data.quantity)

        listing = FoodListing(
            inventory_item_id=item.id,
            lister_id=user_id,
            title=data.title,
            description=data.description,
            quantity=quantity,
            unit=item.unit,
            pickup_location=data.pickup_location,
            available_until=data.available_until,
            status=ListingStatus.AVAILABLE,
        )
        self.db.add(listing)
        self._commit("create listing", "This item is already listed for sharing")
        self.db.refresh(listing)
        logger.info(f"User {user_id} listed inventory item {item.id} as listing {listing.id}")
        return listing

    def get_listing(self, listing_id: int) -> FoodListing:
        """Get a non-deleted listing."""
        listing = (
            self.db.query(FoodListing)
            .filter(FoodListing.id == listing_id, FoodListing.not_deleted())
            .first()
        )
        if not listing:
            raise NotFoundError("Listing", listing_id)
        return listing

    def list_listings(
        self, filters: ListingFilters | None = None, requesting_user_id: int | None = None
    ) -> list[FoodListing]:
        """Browse listings, newest first.

        Filters combine with AND; ``search`` matches title, description, the
        item's custom name or its catalog name. Status defaults to AVAILABLE.
        """
        filters = filters or ListingFilters()
        query = self.db.query(FoodListing).filter(
            FoodListing.not_deleted(),
            FoodListing.status == (filters.status or ListingStatus.AVAILABLE),
        )

        if filters.exclude_own_listings and requesting_user_id is not None:
            query = query.filter(FoodListing.lister_id != requesting_user_id)

        if filters.location:
            query = query.filter(
                FoodListing.pickup_location.icontains(filters.location, autoescape=True)
            )

        if filters.category or filters.search:
            query = query.join(
                InventoryItem, FoodListing.inventory_item_id == InventoryItem.id
            ).outerjoin(FoodItem, InventoryItem.food_item_id == FoodItem.id)

        if filters.category:
            query = query.filter(FoodItem.category == filters.category)

        if filters.search:
            term = filters.search
            query = query.filter(
                or_(
                    FoodListing.title.icontains(term, autoescape=True),
                    FoodListing.description.icontains(term, autoescape=True),
                    InventoryItem.custom_name.icontains(term, autoescape=True),
                    FoodItem.name.icontains(term, autoescape=True),
                )
            )

        return query.order_by(FoodListing.created_at.desc(), FoodListing.id.desc()).all()

    def get_user_listings(
        self, user_id: int, status: ListingStatus | None = None
    ) -> list[FoodListing]:
        """List the user's own listings in any (or the given) status."""
        self._get_user(user_id)
        query = self.db.query(FoodListing).filter(
            FoodListing.lister_id == user_id, FoodListing.not_deleted()
        )
        if status:
            query = query.filter(FoodListing.status == status)
        return query.order_by(FoodListing.created_at.desc(), FoodListing.id.desc()).all()

    def update_listing(self, listing_id: int, user_id: int, data: ListingUpdate) -> FoodListing:
        """Patch a listing (lister only).

        The only status a lister may set here is CANCELLED, from AVAILABLE;
        terminal listings keep their status.
        """
        listing = self._get_lister_listing(listing_id, user_id)

        if listing.status.is_terminal:
            raise ConflictError(f"Listing is {listing.status.value.lower()} and cannot be changed")

        if data.status is not None and data.status != listing.status:
            if data.status not in LISTER_SETTABLE_STATUSES:
                raise ConflictError(
                    f"Listing status cannot be set to {data.status.value} directly; "
                    "use claim or complete"
                )
            if not can_transition(listing.status, data.status):
                raise ConflictError(
                    f"Cannot change listing status from {listing.status.value} "
                    f"to {data.status.value}"
                )
            logger.info(
                f"Lister {user_id} moved listing {listing_id} "
                f"{listing.status.value} -> {data.status.value}"
            )
            listing.status = data.status

        if data.title is not None:
            listing.title = data.title
        if data.description is not None:
            listing.description = data.description
        if data.quantity is not None:
            listing.quantity = require_positive(data.quantity)
        if data.pickup_location is not None:
            listing.pickup_location = data.pickup_location
        if data.available_until is not None:
            listing.available_until = data.available_until

        self._commit("update listing", "This item is already listed for sharing")
        self.db.refresh(listing)
        return listing

    def delete_listing(self, listing_id: int, user_id: int) -> FoodListing:
        """Cancel and soft delete an AVAILABLE listing (lister only)."""
        listing = self._get_lister_listing(listing_id, user_id)

        if self._active_claims(listing_id):
            raise ConflictError("Cannot delete listing with active claims")
        if listing.status != ListingStatus.AVAILABLE:
            raise ConflictError(
                f"Cannot delete a listing that is {listing.status.value.lower()}"
            )

        listing.status = ListingStatus.CANCELLED
        listing.soft_delete()
        self._commit("delete listing", "Listing changed while deleting")
        logger.info(f"Listing {listing_id} cancelled by lister {user_id}")
        return listing

    # --- Claims ---

    def claim_listing(self, listing_id: int, user_id: int, data: ListingClaim) -> SharingLog:
        """Claim an AVAILABLE listing.

        The listing flips to CLAIMED through a conditional update in the same
        transaction as the claim insert, so only one of two racing claimers
        can win.
        """
        self._get_user(user_id)

        listing = (
            self.db.query(FoodListing)
            .filter(
                FoodListing.id == listing_id,
                FoodListing.status == ListingStatus.AVAILABLE,
                FoodListing.not_deleted(),
            )
            .first()
        )
        if not listing:
            raise NotFoundError(
                "Listing", listing_id, message="Listing not found or not available"
            )

        if listing.lister_id == user_id:
            raise ForbiddenError("Cannot claim your own listing")

        existing_claim = (
            self.db.query(SharingLog)
            .filter(
                SharingLog.listing_id == listing_id,
                SharingLog.claimer_id == user_id,
                SharingLog.status == ListingStatus.CLAIMED,
                SharingLog.not_deleted(),
            )
            .first()
        )
        if existing_claim:
            raise ConflictError("You have already claimed this listing")

        if data.quantity_claimed is None:
            quantity_claimed = listing.quantity
        else:
            quantity_claimed = require_positive(data.quantity_claimed, "quantity_claimed")

        try:
            result = self.db.execute(
                update(FoodListing)
                .where(
                    FoodListing.id == listing_id,
                    FoodListing.status == ListingStatus.AVAILABLE,
                    FoodListing.not_deleted(),
                )
                .values(status=ListingStatus.CLAIMED, updated_at=datetime.now(UTC))
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                raise NotFoundError(
                    "Listing", listing_id, message="Listing not found or not available"
                )

            sharing_log = SharingLog(
                listing_id=listing_id,
                claimer_id=user_id,
                claimer_name=data.claimer_name,
                claimed_at=datetime.now(UTC),
                notes=data.notes,
                quantity_claimed=quantity_claimed,
                status=ListingStatus.CLAIMED,
            )
            self.db.add(sharing_log)
            self.db.flush()
        except FoodShareError:
            self.db.rollback()
            raise
        except IntegrityError as e:
            self.db.rollback()
            raise ConflictError("You have already claimed this listing") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception(f"Failed to claim listing {listing_id}")
            raise InternalError() from e

        self._commit("claim listing", "You have already claimed this listing")
        self.db.refresh(sharing_log)
        logger.info(f"User {user_id} claimed listing {listing_id}")
        return sharing_log

    def complete_listing(
        self, listing_id: int, user_id: int, data: ListingComplete
    ) -> tuple[FoodListing, int]:
        """Mark a CLAIMED listing and all its active claims as COMPLETED.

        Either the lister or a user holding an active claim may complete.

        Returns:
            (listing, number of claims completed)
        """
        self._get_user(user_id)

        listing = (
            self.db.query(FoodListing)
            .filter(FoodListing.id == listing_id, FoodListing.not_deleted())
            .first()
        )
        if not listing:
            raise NotFoundError("Listing", listing_id)

        active_claims = self._active_claims(listing_id)
        is_lister = listing.lister_id == user_id
        is_claimer = any(claim.claimer_id == user_id for claim in active_claims)
        if not is_lister and not is_claimer:
            raise ForbiddenError("You are not authorized to complete this listing")

        if not can_transition(listing.status, ListingStatus.COMPLETED):
            raise ConflictError(
                f"Cannot complete a listing that is {listing.status.value.lower()}"
            )

        now = datetime.now(UTC)
        listing.status = ListingStatus.COMPLETED
        for claim in active_claims:
            claim.status = ListingStatus.COMPLETED
            claim.completed_at = now
            if data.notes is not None:
                claim.notes = data.notes

        self._commit("complete listing", "Listing changed while completing")
        self.db.refresh(listing)
        logger.info(
            f"Listing {listing_id} completed by user {user_id} "
            f"({len(active_claims)} claim(s) closed)"
        )
        return listing, len(active_claims)

    def get_sharing_logs(self, filters: SharingLogFilters | None = None) -> list[SharingLog]:
        """Get claim history, newest first."""
        filters = filters or SharingLogFilters()
        query = self.db.query(SharingLog).filter(SharingLog.not_deleted())

        if filters.status:
            query = query.filter(SharingLog.status == filters.status)
        if filters.listing_id is not None:
            query = query.filter(SharingLog.listing_id == filters.listing_id)
        if filters.start_date and filters.end_date:
            query = query.filter(
                SharingLog.created_at >= filters.start_date,
                SharingLog.created_at <= filters.end_date,
            )

        return query.order_by(SharingLog.created_at.desc(), SharingLog.id.desc()).all()
