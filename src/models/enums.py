"""Enums for model fields."""

from enum import Enum


class ListingStatus(str, Enum):
    """Lifecycle status shared by food listings and the claims made on them.

    Listings use every value. Claims (sharing logs) only ever hold
    CLAIMED or COMPLETED; ``complete()`` moves both in lockstep.
    """

    AVAILABLE = "AVAILABLE"
    CLAIMED = "CLAIMED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self) -> bool:
        """Check if no further transition is allowed from this status."""
        return self in (ListingStatus.COMPLETED, ListingStatus.CANCELLED)


CLAIM_STATUSES = (ListingStatus.CLAIMED, ListingStatus.COMPLETED)
