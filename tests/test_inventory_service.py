"""Inventory service tests."""

import pytest

from src.models.consumption_log import ConsumptionLog
from src.models.inventory import InventoryItem
from src.schemas.consumption import ConsumptionLogCreate, ConsumptionLogFilters
from src.schemas.inventory import InventoryCreate, InventoryItemCreate, InventoryItemUpdate
from src.services.errors import (
    InsufficientQuantityError,
    NotFoundError,
    ValidationError,
)
from src.services.inventory_service import InventoryService


@pytest.fixture
def service(db):
    return InventoryService(db)


@pytest.fixture
def owner(users):
    return users[0]


@pytest.fixture
def inventory(service, owner):
    return service.create_inventory(owner.id, InventoryCreate(name="Kitchen"))


def add(service, owner, inventory, **fields):
    return service.add_item(owner.id, inventory.id, InventoryItemCreate(**fields))


def eat(service, owner, inventory, item, quantity):
    return service.consume(
        owner.id,
        ConsumptionLogCreate(
            inventory_id=inventory.id,
            inventory_item_id=item.id,
            item_name=item.display_name,
            quantity=quantity,
        ),
    )


def test_create_inventory_unknown_owner(service):
    """Test creating an inventory for an unknown user fails."""
    with pytest.raises(NotFoundError):
        service.create_inventory(999999, InventoryCreate(name="Ghost"))


def test_catalog_binding_is_idempotent(service, owner, inventory, catalog):
    """Test N additions of a catalog name yield N rows bound to one catalog item."""
    items = [
        add(service, owner, inventory, custom_name=name, quantity=1)
        for name in ("apple", "APPLE", "Apple", "aPPle")
    ]

    assert len({item.id for item in items}) == 4
    assert {item.food_item_id for item in items} == {catalog["apple"].id}
    assert all(item.custom_name == "Apple" for item in items)


def test_caller_unit_wins_over_catalog(service, owner, inventory, catalog):
    item = add(service, owner, inventory, custom_name="milk", quantity=1, unit="ml")
    assert item.unit == "ml"


def test_quantity_never_negative(service, owner, inventory):
    """Test a sequence of consumptions never drives the quantity below zero."""
    item = add(service, owner, inventory, custom_name="Rice", quantity=2.5)

    eat(service, owner, inventory, item, 1)
    with pytest.raises(InsufficientQuantityError) as exc_info:
        eat(service, owner, inventory, item, 2)
    assert exc_info.value.available == pytest.approx(1.5)

    service.db.refresh(item)
    assert item.quantity == pytest.approx(1.5)
    assert item.removed is False

    eat(service, owner, inventory, item, 1.5)
    service.db.refresh(item)
    assert item.quantity == 0
    assert item.removed is True


def test_float_residue_counts_as_exhausted(service, owner, inventory):
    """Test consuming the remainder in fractions still exhausts the item."""
    item = add(service, owner, inventory, custom_name="Flour", quantity=0.3)

    eat(service, owner, inventory, item, 0.1)
    eat(service, owner, inventory, item, 0.1)
    eat(service, owner, inventory, item, 0.1)

    service.db.refresh(item)
    assert item.quantity == 0
    assert item.removed is True


def test_round_trip_leaves_no_active_item(service, owner, inventory):
    """Test consuming the full quantity removes the item from listings."""
    item = add(service, owner, inventory, custom_name="Eggs", quantity=6)
    eat(service, owner, inventory, item, 6)

    assert item.id not in [i.id for i in service.list_items(inventory.id)]


def test_exhausted_item_rejects_tiny_consumption(service, owner, inventory):
    """Test an exhausted item refuses even a vanishingly small consumption."""
    item = add(service, owner, inventory, custom_name="Yoghurt", quantity=1)
    eat(service, owner, inventory, item, 1)

    with pytest.raises(InsufficientQuantityError):
        eat(service, owner, inventory, item, 1e-10)

    service.db.refresh(item)
    assert item.quantity == 0
    assert item.removed is True
    logs = service.db.query(ConsumptionLog).filter(ConsumptionLog.inventory_item_id == item.id)
    assert logs.count() == 1


def test_consume_slightly_more_than_left(service, owner, inventory):
    """Test a request just above the remaining quantity is rejected."""
    item = add(service, owner, inventory, custom_name="Butter", quantity=1)

    with pytest.raises(InsufficientQuantityError):
        eat(service, owner, inventory, item, 1 + 5e-10)

    service.db.refresh(item)
    assert item.quantity == 1
    assert item.removed is False


def test_stale_read_cannot_overdraw(service, owner, inventory, other_session):
    """Test a decrement based on a stale quantity is rejected."""
    item = add(service, owner, inventory, custom_name="Cheese", quantity=5)
    stale = service.db.query(InventoryItem).filter(InventoryItem.id == item.id).one()
    assert stale.quantity == 5

    concurrent = InventoryService(other_session)
    concurrent.consume(
        owner.id,
        ConsumptionLogCreate(
            inventory_id=inventory.id,
            inventory_item_id=item.id,
            item_name="Cheese",
            quantity=4,
        ),
    )

    with pytest.raises(InsufficientQuantityError):
        service._draw_down(stale, 3)
    service.db.rollback()

    service.db.refresh(item)
    assert item.quantity == pytest.approx(1)


def test_consume_item_of_other_inventory(service, owner, inventory):
    item = add(service, owner, inventory, custom_name="Oats", quantity=1)
    other = service.create_inventory(owner.id, InventoryCreate(name="Cellar"))

    with pytest.raises(NotFoundError):
        eat(service, owner, other, item, 1)


def test_consume_removed_item_not_found(service, owner, inventory):
    """Test consuming a soft-deleted item fails."""
    item = add(service, owner, inventory, custom_name="Oats", quantity=1)
    service.remove_item(owner.id, inventory.id, item.id)

    with pytest.raises(NotFoundError):
        eat(service, owner, inventory, item, 1)


def test_resolve_item_id(service):
    assert service._resolve_item_id(None) is None
    assert service._resolve_item_id("temp-abc") is None
    assert service._resolve_item_id("42") == 42
    assert service._resolve_item_id(7) == 7
    with pytest.raises(ValidationError):
        service._resolve_item_id("abc")


def test_update_exhausted_item_not_found(service, owner, inventory):
    """Test exhausted items cannot be edited back to life."""
    item = add(service, owner, inventory, custom_name="Tea", quantity=1)
    eat(service, owner, inventory, item, 1)

    with pytest.raises(NotFoundError):
        service.update_item(owner.id, inventory.id, item.id, InventoryItemUpdate(quantity=3))


def test_consumption_logs_fail_soft(service, users, inventory):
    """Test a foreign inventory filter returns nothing instead of raising."""
    owner, stranger = users
    service.consume(
        owner.id,
        ConsumptionLogCreate(inventory_id=inventory.id, item_name="Tea", quantity=1),
    )

    logs = service.get_consumption_logs(
        stranger.id, ConsumptionLogFilters(inventory_id=inventory.id)
    )
    assert logs == []
    assert len(service.get_consumption_logs(owner.id)) == 1
