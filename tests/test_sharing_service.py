"""Sharing service tests."""

import pytest
from sqlalchemy.exc import IntegrityError

from src.models.enums import ListingStatus
from src.models.sharing import FoodListing, SharingLog
from src.models.user import User
from src.schemas.inventory import InventoryCreate, InventoryItemCreate
from src.schemas.sharing import (
    ListingClaim,
    ListingComplete,
    ListingCreate,
    ListingFilters,
    ListingUpdate,
)
from src.services.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from src.services.inventory_service import InventoryService
from src.services.sharing_service import SharingService, can_transition


@pytest.fixture
def sharing(db):
    return SharingService(db)


@pytest.fixture
def item(db, users):
    lister, _ = users
    inventories = InventoryService(db)
    inventory = inventories.create_inventory(lister.id, InventoryCreate(name="Kitchen"))
    return inventories.add_item(
        lister.id, inventory.id, InventoryItemCreate(custom_name="Plums", quantity=3, unit="kg")
    )


@pytest.fixture
def listing(sharing, users, item):
    lister, _ = users
    return sharing.create_listing(
        lister.id, ListingCreate(inventory_item_id=item.id, title="Garden plums")
    )


def test_listing_copies_quantity_and_unit(listing):
    assert listing.status == ListingStatus.AVAILABLE
    assert listing.quantity == 3
    assert listing.unit == "kg"


def test_listing_quantity_must_be_positive(sharing, users, item):
    lister, _ = users
    with pytest.raises(ValidationError):
        sharing.create_listing(
            lister.id, ListingCreate(inventory_item_id=item.id, title="Plums", quantity=0)
        )


def test_single_available_listing_per_item(sharing, users, item, listing):
    lister, _ = users
    with pytest.raises(ConflictError):
        sharing.create_listing(lister.id, ListingCreate(inventory_item_id=item.id, title="Again"))


def test_relist_after_cancel(sharing, users, item, listing):
    """Test a cancelled listing frees the item for a new one."""
    lister, _ = users
    sharing.delete_listing(listing.id, lister.id)

    relisted = sharing.create_listing(
        lister.id, ListingCreate(inventory_item_id=item.id, title="Plums, take two")
    )
    assert relisted.status == ListingStatus.AVAILABLE


def test_claim_defaults_to_full_quantity(sharing, users, listing):
    _, claimer = users
    log = sharing.claim_listing(listing.id, claimer.id, ListingClaim())

    assert log.status == ListingStatus.CLAIMED
    assert log.quantity_claimed == 3
    assert log.claimed_at is not None
    assert sharing.get_listing(listing.id).status == ListingStatus.CLAIMED


def test_claim_explicit_quantity(sharing, users, listing):
    _, claimer = users
    log = sharing.claim_listing(listing.id, claimer.id, ListingClaim(quantity_claimed=1.5))
    assert log.quantity_claimed == 1.5


def test_lister_cannot_claim(sharing, users, listing):
    lister, _ = users
    with pytest.raises(ForbiddenError):
        sharing.claim_listing(listing.id, lister.id, ListingClaim())


def test_claim_unavailable_listing(sharing, users, listing, db):
    """Test only AVAILABLE listings can be claimed."""
    _, claimer = users
    latecomer = User(email="late@example.com", password_hash="x", name="Late")
    db.add(latecomer)
    db.commit()

    sharing.claim_listing(listing.id, claimer.id, ListingClaim())
    with pytest.raises(NotFoundError):
        sharing.claim_listing(listing.id, latecomer.id, ListingClaim())
    with pytest.raises(NotFoundError):
        sharing.claim_listing(999999, claimer.id, ListingClaim())


def test_racing_claim_loses(sharing, users, listing, other_session):
    """Test a claim whose listing was taken concurrently fails cleanly."""
    _, claimer = users
    latecomer = User(email="late@example.com", password_hash="x", name="Late")
    other_session.add(latecomer)
    other_session.commit()

    SharingService(other_session).claim_listing(listing.id, claimer.id, ListingClaim())

    with pytest.raises(NotFoundError):
        sharing.claim_listing(listing.id, latecomer.id, ListingClaim())

    claims = sharing.get_listing(listing.id).sharing_logs
    assert [c.claimer_id for c in claims] == [claimer.id]


def test_complete_closes_active_claims(sharing, users, listing):
    lister, claimer = users
    sharing.claim_listing(listing.id, claimer.id, ListingClaim())

    completed, count = sharing.complete_listing(
        listing.id, lister.id, ListingComplete(notes="Handed over")
    )

    assert count == 1
    assert completed.status == ListingStatus.COMPLETED
    [log] = completed.sharing_logs
    assert log.status == ListingStatus.COMPLETED
    assert log.completed_at is not None
    assert log.notes == "Handed over"


def test_complete_requires_claim(sharing, users, listing):
    """Test an unclaimed listing cannot jump straight to COMPLETED."""
    lister, _ = users
    with pytest.raises(ConflictError):
        sharing.complete_listing(listing.id, lister.id, ListingComplete())


def test_complete_by_stranger_forbidden(sharing, users, listing, db):
    _, claimer = users
    stranger = User(email="stranger@example.com", password_hash="x", name="Stranger")
    db.add(stranger)
    db.commit()
    sharing.claim_listing(listing.id, claimer.id, ListingClaim())

    with pytest.raises(ForbiddenError):
        sharing.complete_listing(listing.id, stranger.id, ListingComplete())


def test_completed_listing_is_not_deletable(sharing, users, listing):
    lister, claimer = users
    sharing.claim_listing(listing.id, claimer.id, ListingClaim())
    sharing.complete_listing(listing.id, claimer.id, ListingComplete())

    with pytest.raises(ConflictError):
        sharing.delete_listing(listing.id, lister.id)


def test_delete_with_active_claim(sharing, users, listing, db):
    """Test delete refuses while a claim is active and leaves the listing alone."""
    lister, claimer = users
    sharing.claim_listing(listing.id, claimer.id, ListingClaim())

    with pytest.raises(ConflictError):
        sharing.delete_listing(listing.id, lister.id)

    db.expire_all()
    fresh = db.query(FoodListing).filter(FoodListing.id == listing.id).one()
    assert fresh.status == ListingStatus.CLAIMED
    assert fresh.deleted_at is None


def test_delete_cancels_and_soft_deletes(sharing, users, listing):
    lister, _ = users
    deleted = sharing.delete_listing(listing.id, lister.id)

    assert deleted.status == ListingStatus.CANCELLED
    assert deleted.is_deleted
    with pytest.raises(NotFoundError):
        sharing.get_listing(listing.id)


@pytest.mark.parametrize(
    ("current", "target", "allowed"),
    [
        (ListingStatus.AVAILABLE, ListingStatus.CLAIMED, True),
        (ListingStatus.AVAILABLE, ListingStatus.CANCELLED, True),
        (ListingStatus.CLAIMED, ListingStatus.COMPLETED, True),
        (ListingStatus.CLAIMED, ListingStatus.AVAILABLE, False),
        (ListingStatus.AVAILABLE, ListingStatus.COMPLETED, False),
        (ListingStatus.COMPLETED, ListingStatus.AVAILABLE, False),
        (ListingStatus.CANCELLED, ListingStatus.AVAILABLE, False),
        (ListingStatus.COMPLETED, ListingStatus.CANCELLED, False),
    ],
)
def test_listing_transitions(current, target, allowed):
    assert can_transition(current, target) is allowed


def test_update_rejects_illegal_status(sharing, users, listing):
    lister, _ = users
    with pytest.raises(ConflictError):
        sharing.update_listing(listing.id, lister.id, ListingUpdate(status=ListingStatus.COMPLETED))


def test_update_by_non_lister_not_found(sharing, users, listing):
    _, claimer = users
    with pytest.raises(NotFoundError):
        sharing.update_listing(listing.id, claimer.id, ListingUpdate(title="Mine now"))


def active_claims(db, listing_id, claimer_id):
    return (
        db.query(SharingLog)
        .filter(
            SharingLog.listing_id == listing_id,
            SharingLog.claimer_id == claimer_id,
            SharingLog.status == ListingStatus.CLAIMED,
        )
        .count()
    )


def test_update_cannot_complete_claimed_listing(sharing, users, listing, db):
    """Test completing goes through complete_listing so the claim closes too."""
    lister, claimer = users
    sharing.claim_listing(listing.id, claimer.id, ListingClaim())

    with pytest.raises(ConflictError):
        sharing.update_listing(listing.id, lister.id, ListingUpdate(status=ListingStatus.COMPLETED))

    db.expire_all()
    fresh = sharing.get_listing(listing.id)
    assert fresh.status == ListingStatus.CLAIMED
    [log] = fresh.sharing_logs
    assert log.status == ListingStatus.CLAIMED
    assert log.completed_at is None


def test_update_cannot_mark_claimed(sharing, users, listing):
    """Test a listing only becomes CLAIMED through an actual claim."""
    lister, claimer = users
    with pytest.raises(ConflictError):
        sharing.update_listing(listing.id, lister.id, ListingUpdate(status=ListingStatus.CLAIMED))

    assert sharing.get_listing(listing.id).status == ListingStatus.AVAILABLE
    log = sharing.claim_listing(listing.id, claimer.id, ListingClaim())
    assert log.status == ListingStatus.CLAIMED


def test_update_can_cancel_available_listing(sharing, users, listing):
    lister, _ = users
    updated = sharing.update_listing(
        listing.id, lister.id, ListingUpdate(status=ListingStatus.CANCELLED)
    )
    assert updated.status == ListingStatus.CANCELLED


def test_same_user_cannot_claim_twice(sharing, users, listing, db):
    """Test a user holds at most one active claim on a listing."""
    _, claimer = users
    sharing.claim_listing(listing.id, claimer.id, ListingClaim())

    with pytest.raises(NotFoundError):
        sharing.claim_listing(listing.id, claimer.id, ListingClaim())

    # Listing reopened underneath the existing claim
    db.query(FoodListing).filter(FoodListing.id == listing.id).update(
        {FoodListing.status: ListingStatus.AVAILABLE}
    )
    db.commit()

    with pytest.raises(ConflictError):
        sharing.claim_listing(listing.id, claimer.id, ListingClaim())
    assert active_claims(db, listing.id, claimer.id) == 1


def test_active_claim_index_rejects_duplicates(sharing, users, listing, db):
    _, claimer = users
    sharing.claim_listing(listing.id, claimer.id, ListingClaim())

    db.add(
        SharingLog(
            listing_id=listing.id,
            claimer_id=claimer.id,
            quantity_claimed=1,
            status=ListingStatus.CLAIMED,
        )
    )
    with pytest.raises(IntegrityError):
        db.flush()
    db.rollback()

    assert active_claims(db, listing.id, claimer.id) == 1


def test_list_defaults_to_available(sharing, users, listing):
    """Test browsing shows AVAILABLE listings unless told otherwise."""
    lister, claimer = users
    assert [found.id for found in sharing.list_listings()] == [listing.id]

    sharing.claim_listing(listing.id, claimer.id, ListingClaim())
    assert sharing.list_listings() == []
    assert [
        found.id for found in sharing.list_listings(ListingFilters(status=ListingStatus.CLAIMED))
    ] == [listing.id]


def test_list_excludes_own_listings(sharing, users, listing):
    lister, claimer = users
    filters = ListingFilters(exclude_own_listings=True)
    assert sharing.list_listings(filters, lister.id) == []
    assert len(sharing.list_listings(filters, claimer.id)) == 1


def test_search_escapes_wildcards(sharing, users, listing):
    assert sharing.list_listings(ListingFilters(search="%")) == []
    assert len(sharing.list_listings(ListingFilters(search="plum"))) == 1
