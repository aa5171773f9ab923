"""Inventory service: inventories, items, and consumption.

Item quantity lifecycle::

    ACTIVE (quantity > 0) --consume all--> EXHAUSTED (quantity 0, removed)
    ACTIVE --consume part / update--> ACTIVE
    ACTIVE | EXHAUSTED --remove--> DELETED

EXHAUSTED items reject any further consumption.
"""

import logging
import math
from datetime import UTC, datetime, timedelta

from sqlalchemy import Numeric, case, cast, func, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.config import Settings, get_settings
from src.models.consumption_log import ConsumptionLog
from src.models.food_item import FoodItem
from src.models.inventory import Inventory, InventoryItem
from src.models.user import User
from src.schemas.consumption import ConsumptionLogCreate, ConsumptionLogFilters
from src.schemas.inventory import (
    InventoryCreate,
    InventoryItemCreate,
    InventoryItemFilters,
    InventoryItemUpdate,
    InventoryUpdate,
)
from src.services.errors import (
    FoodShareError,
    InsufficientQuantityError,
    InternalError,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Decimal places kept after a decrement, so float residue never lingers
QUANTITY_PRECISION = 6


def require_positive(value: float | None, field: str = "quantity") -> float:
    """Return the value if it is a finite number greater than zero."""
    if value is None or not math.isfinite(value) or value <= 0:
        raise ValidationError(f"{field} must be greater than 0")
    return value


class InventoryService:
    """Service for inventory, item, and consumption operations."""

    def __init__(self, db: Session, settings: Settings | None = None):
        self.db = db
        self.settings = settings or get_settings()

    # --- Lookups ---

    def get_user(self, user_id: int) -> User:
        """Resolve an internal user id, raising NotFoundError if unknown."""
        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFoundError("User", user_id)
        return user

    def get_owned_inventory(self, owner_id: int, inventory_id: int) -> Inventory:
        """Get a non-deleted inventory owned by the user."""
        inventory = (
            self.db.query(Inventory)
            .filter(
                Inventory.id == inventory_id,
                Inventory.owner_id == owner_id,
                Inventory.not_deleted(),
            )
            .first()
        )
        if not inventory:
            raise NotFoundError("Inventory", inventory_id)
        return inventory

    def get_food_item(self, food_item_id: int) -> FoodItem:
        """Get a non-deleted catalog item."""
        food_item = (
            self.db.query(FoodItem)
            .filter(FoodItem.id == food_item_id, FoodItem.not_deleted())
            .first()
        )
        if not food_item:
            raise NotFoundError("Food item", food_item_id)
        return food_item

    def find_catalog_match(self, name: str) -> FoodItem | None:
        """Find a catalog item whose name equals ``name`` ignoring case."""
        return (
            self.db.query(FoodItem)
            .filter(FoodItem.name_matches(name), FoodItem.not_deleted())
            .order_by(FoodItem.id)
            .first()
        )

    def _get_owned_item(self, owner_id: int, inventory_id: int, item_id: int) -> InventoryItem:
        inventory = self.get_owned_inventory(owner_id, inventory_id)
        item = (
            self.db.query(InventoryItem)
            .filter(
                InventoryItem.id == item_id,
                InventoryItem.inventory_id == inventory.id,
                InventoryItem.not_deleted(),
            )
            .first()
        )
        if not item:
            raise NotFoundError("Inventory item", item_id)
        return item

    def _commit(self, action: str) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception(f"Failed to {action}")
            raise InternalError() from e

    # --- Inventories ---

    def list_inventories(self, owner_id: int) -> list[Inventory]:
        """List the user's inventories, newest first."""
        self.get_user(owner_id)
        return (
            self.db.query(Inventory)
            .filter(Inventory.owner_id == owner_id, Inventory.not_deleted())
            .order_by(Inventory.created_at.desc(), Inventory.id.desc())
            .all()
        )

    def create_inventory(self, owner_id: int, data: InventoryCreate) -> Inventory:
        """Create a new inventory owned by the user."""
        self.get_user(owner_id)
        inventory = Inventory(
            name=data.name,
            description=data.description,
            is_private=data.is_private,
            owner_id=owner_id,
        )
        self.db.add(inventory)
        self._commit("create inventory")
        self.db.refresh(inventory)
        logger.info(f"Created inventory {inventory.id} for user {owner_id}")
        return inventory

    def update_inventory(
        self, owner_id: int, inventory_id: int, data: InventoryUpdate
    ) -> Inventory:
        """Update an inventory (owner only)."""
        inventory = self.get_owned_inventory(owner_id, inventory_id)

        if data.name is not None:
            inventory.name = data.name
        if data.description is not None:
            inventory.description = data.description
        if data.is_private is not None:
            inventory.is_private = data.is_private

        self._commit("update inventory")
        self.db.refresh(inventory)
        return inventory

    def delete_inventory(self, owner_id: int, inventory_id: int) -> Inventory:
        """Soft delete an inventory (owner only)."""
        inventory = self.get_owned_inventory(owner_id, inventory_id)
        inventory.soft_delete()
        self._commit("delete inventory")
        logger.info(f"Soft-deleted inventory {inventory_id}")
        return inventory

    # --- Items ---

    def add_item(
        self, owner_id: int, inventory_id: int, data: InventoryItemCreate
    ) -> InventoryItem:
        """Add an item to an inventory.

        A custom name that matches a catalog name (ignoring case) is bound to
        that catalog item instead of creating a duplicate custom entry. The
        catalog's spelling replaces the custom name, and the catalog unit is
        used only when the caller gave none.
        """
        custom_name = data.custom_name.strip() if data.custom_name else None
        if (data.food_item_id is None) == (not custom_name):
            raise ValidationError("Provide exactly one of food_item_id or custom_name")
        require_positive(data.quantity)

        self.get_user(owner_id)
        inventory = self.get_owned_inventory(owner_id, inventory_id)

        food_item_id = data.food_item_id
        unit = data.unit
        if food_item_id is not None:
            self.get_food_item(food_item_id)
        else:
            match = self.find_catalog_match(custom_name)
            if match:
                logger.info(f"Bound custom item '{custom_name}' to catalog item {match.id}")
                food_item_id = match.id
                custom_name = match.name
                unit = data.unit or match.unit

        item = InventoryItem(
            inventory_id=inventory.id,
            food_item_id=food_item_id,
            custom_name=custom_name,
            quantity=data.quantity,
            unit=unit,
            expiry_date=data.expiry_date,
            notes=data.notes,
            added_by_id=owner_id,
        )
        self.db.add(item)
        self._commit("add inventory item")
        self.db.refresh(item)
        return item

    def update_item(
        self, owner_id: int, inventory_id: int, item_id: int, data: InventoryItemUpdate
    ) -> InventoryItem:
        """Update an active inventory item."""
        item = self._get_owned_item(owner_id, inventory_id, item_id)
        if item.removed:
            raise NotFoundError("Inventory item", item_id)

        if data.quantity is not None:
            item.quantity = require_positive(data.quantity)
        if data.unit is not None:
            item.unit = data.unit
        if data.expiry_date is not None:
            item.expiry_date = data.expiry_date
        if data.notes is not None:
            item.notes = data.notes

        self._commit("update inventory item")
        self.db.refresh(item)
        return item

    def remove_item(self, owner_id: int, inventory_id: int, item_id: int) -> InventoryItem:
        """Soft delete an inventory item."""
        item = self._get_owned_item(owner_id, inventory_id, item_id)
        item.soft_delete()
        self._commit("remove inventory item")
        return item

    def list_items(
        self, inventory_id: int, filters: InventoryItemFilters | None = None
    ) -> list[InventoryItem]:
        """List active items of an inventory, newest first.

        ``expiring_soon`` keeps items expiring between now and the configured
        window (7 days by default), both ends inclusive.
        """
        filters = filters or InventoryItemFilters()
        query = self.db.query(InventoryItem).filter(
            InventoryItem.inventory_id == inventory_id,
            *InventoryItem.active(),
        )

        if filters.category:
            query = query.join(FoodItem, InventoryItem.food_item_id == FoodItem.id).filter(
                FoodItem.category == filters.category
            )

        if filters.expiring_soon:
            now = datetime.now(UTC)
            horizon = now + timedelta(days=self.settings.expiring_soon_days)
            query = query.filter(
                InventoryItem.expiry_date >= now,
                InventoryItem.expiry_date <= horizon,
            )

        return query.order_by(InventoryItem.added_at.desc(), InventoryItem.id.desc()).all()

    # --- Consumption ---

    def _resolve_item_id(self, raw_id: int | str | None) -> int | None:
        """Turn a client-supplied item id into a persisted id or None.

        Placeholder ids (``temp-...``) refer to items that were never saved.
        """
        if raw_id is None:
            return None
        if isinstance(raw_id, str):
            if raw_id.startswith(self.settings.temp_item_prefix):
                return None
            try:
                return int(raw_id)
            except ValueError:
                raise ValidationError(f"Invalid inventory item id: {raw_id}") from None
        return raw_id

    def consume(self, owner_id: int, data: ConsumptionLogCreate) -> ConsumptionLog:
        """Log a consumption event and draw the quantity down from the item.

        The log insert and the decrement share one transaction. The decrement
        is a conditional update that only matches while enough quantity is
        left, so concurrent consumers cannot overdraw an item.
        """
        item_name = data.item_name.strip() if data.item_name else ""
        if not item_name:
            raise ValidationError("item_name is required")
        require_positive(data.quantity)

        self.get_user(owner_id)
        inventory = self.get_owned_inventory(owner_id, data.inventory_id)

        item = None
        item_id = self._resolve_item_id(data.inventory_item_id)
        if item_id is not None:
            item = (
                self.db.query(InventoryItem)
                .filter(
                    InventoryItem.id == item_id,
                    InventoryItem.inventory_id == inventory.id,
                    InventoryItem.not_deleted(),
                )
                .first()
            )
            if not item:
                raise NotFoundError(
                    "Inventory item",
                    item_id,
                    message="Inventory item not found in the specified inventory",
                )

        if data.food_item_id is not None:
            self.get_food_item(data.food_item_id)

        log = ConsumptionLog(
            inventory_id=inventory.id,
            inventory_item_id=item.id if item else None,
            food_item_id=data.food_item_id,
            item_name=item_name,
            quantity=data.quantity,
            unit=data.unit,
            consumed_at=data.consumed_at or datetime.now(UTC),
            notes=data.notes,
        )

        try:
            self.db.add(log)
            self.db.flush()
            if item is not None:
                self._draw_down(item, data.quantity)
            self.db.commit()
        except FoodShareError:
            self.db.rollback()
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception(f"Failed to log consumption for inventory {inventory.id}")
            raise InternalError() from e

        self.db.refresh(log)
        if item is not None:
            self.db.refresh(item)
            if item.removed:
                logger.info(f"Inventory item {item.id} exhausted and removed")
        return log

    def _draw_down(self, item: InventoryItem, quantity: float) -> None:
        """Atomically subtract ``quantity`` from the item.

        Raises InsufficientQuantityError when less than ``quantity`` is left.
        The remainder is rounded to QUANTITY_PRECISION places; a result at or
        below zero is pinned to 0 and marks the item removed. Removed items
        never match, so an exhausted item rejects any further consumption.
        """
        remaining = func.round(
            cast(InventoryItem.quantity - quantity, Numeric), QUANTITY_PRECISION
        )
        exhausted = remaining <= 0
        result = self.db.execute(
            update(InventoryItem)
            .where(
                InventoryItem.id == item.id,
                InventoryItem.not_deleted(),
                InventoryItem.removed.is_(False),
                InventoryItem.quantity >= quantity,
            )
            .values(
                quantity=case((exhausted, 0.0), else_=remaining),
                removed=case((exhausted, True), else_=InventoryItem.removed),
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            self.db.refresh(item)
            logger.warning(
                f"Rejected consumption of {quantity:g} from item {item.id} "
                f"(available {item.quantity:g})"
            )
            raise InsufficientQuantityError(item.id, quantity, item.quantity)

    def get_consumption_logs(
        self, owner_id: int, filters: ConsumptionLogFilters | None = None
    ) -> list[ConsumptionLog]:
        """Get consumption history across the user's inventories, newest first.

        Asking for an inventory the user does not own yields an empty list
        rather than an error so other users' inventory ids are not revealed.
        """
        filters = filters or ConsumptionLogFilters()
        self.get_user(owner_id)

        query = (
            self.db.query(ConsumptionLog)
            .join(Inventory, ConsumptionLog.inventory_id == Inventory.id)
            .filter(
                Inventory.owner_id == owner_id,
                Inventory.not_deleted(),
                ConsumptionLog.not_deleted(),
            )
        )

        if filters.inventory_id is not None:
            owned = (
                self.db.query(Inventory.id)
                .filter(
                    Inventory.id == filters.inventory_id,
                    Inventory.owner_id == owner_id,
                    Inventory.not_deleted(),
                )
                .first()
            )
            if not owned:
                logger.warning(
                    f"User {owner_id} requested consumption logs of inventory "
                    f"{filters.inventory_id} they do not own; returning none"
                )
                return []
            query = query.filter(ConsumptionLog.inventory_id == filters.inventory_id)

        if filters.start_date:
            query = query.filter(ConsumptionLog.consumed_at >= filters.start_date)
        if filters.end_date:
            query = query.filter(ConsumptionLog.consumed_at <= filters.end_date)

        return query.order_by(ConsumptionLog.consumed_at.desc(), ConsumptionLog.id.desc()).all()
