"""Analytics over inventories, consumption, and sharing."""

import logging
from collections import defaultdict
from datetime import UTC, date, datetime, time, timedelta

from sqlalchemy import func
from sqlalchemy.orm import Session

from src.config import Settings, get_settings
from src.models.consumption_log import ConsumptionLog
from src.models.enums import ListingStatus
from src.models.inventory import Inventory, InventoryItem
from src.models.sharing import FoodListing, SharingLog
from src.schemas.analytics import (
    ActivityCount,
    CategoryConsumption,
    CategoryShare,
    ConsumptionPatterns,
    DailyConsumption,
    InventoryTrendPoint,
    SharingStats,
)

logger = logging.getLogger(__name__)

UNCATEGORIZED = "Uncategorized"


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes (SQLite drops the offset)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def end_of_day(day: date) -> datetime:
    return datetime.combine(day, time.max, tzinfo=UTC)


class AnalyticsService:
    """Aggregations for dashboards."""

    def __init__(self, db: Session, settings: Settings | None = None):
        self.db = db
        self.settings = settings or get_settings()

    def get_inventory_trends(
        self,
        owner_id: int,
        start_date: datetime,
        end_date: datetime,
        inventory_id: int | None = None,
    ) -> list[InventoryTrendPoint]:
        """Per-day inventory figures for every day an item was added.

        ``total_items`` counts items still active that had been added by the
        end of that day; ``expiring_items`` is the part of those already past
        their expiry date.
        """
        owned = [
            Inventory.owner_id == owner_id,
            InventoryItem.not_deleted(),
        ]
        if inventory_id is not None:
            owned.append(InventoryItem.inventory_id == inventory_id)

        added = (
            self.db.query(InventoryItem.added_at)
            .join(Inventory, InventoryItem.inventory_id == Inventory.id)
            .filter(
                *owned,
                InventoryItem.added_at >= start_date,
                InventoryItem.added_at <= end_date,
            )
            .all()
        )
        added_per_day: dict[date, int] = defaultdict(int)
        for (added_at,) in added:
            added_per_day[as_utc(added_at).date()] += 1

        if not added_per_day:
            logger.debug(f"No items added for user {owner_id} between {start_date} and {end_date}")
            return []

        active_items = (
            self.db.query(InventoryItem.added_at, InventoryItem.expiry_date)
            .join(Inventory, InventoryItem.inventory_id == Inventory.id)
            .filter(*owned, InventoryItem.removed.is_(False), InventoryItem.added_at <= end_date)
            .all()
        )

        consumption_query = (
            self.db.query(ConsumptionLog.consumed_at)
            .join(Inventory, ConsumptionLog.inventory_id == Inventory.id)
            .filter(
                Inventory.owner_id == owner_id,
                ConsumptionLog.not_deleted(),
                ConsumptionLog.consumed_at >= start_date,
                ConsumptionLog.consumed_at <= end_date,
            )
        )
        if inventory_id is not None:
            consumption_query = consumption_query.filter(
                ConsumptionLog.inventory_id == inventory_id
            )
        consumed_per_day: dict[date, int] = defaultdict(int)
        for (consumed_at,) in consumption_query.all():
            consumed_per_day[as_utc(consumed_at).date()] += 1

        now = datetime.now(UTC)
        trends = []
        for day in sorted(added_per_day):
            cutoff = end_of_day(day)
            in_stock = [row for row in active_items if as_utc(row.added_at) <= cutoff]
            expiring = [
                row for row in in_stock if row.expiry_date and as_utc(row.expiry_date) <= now
            ]
            trends.append(
                InventoryTrendPoint(
                    date=day,
                    total_items=len(in_stock),
                    expiring_items=len(expiring),
                    newly_added=added_per_day[day],
                    consumed_items=consumed_per_day.get(day, 0),
                )
            )
        return trends

    def get_consumption_patterns(
        self, owner_id: int, start_date: datetime, end_date: datetime
    ) -> ConsumptionPatterns:
        """Consumption in the period grouped by catalog category and by day."""
        logs = (
            self.db.query(ConsumptionLog)
            .join(Inventory, ConsumptionLog.inventory_id == Inventory.id)
            .filter(
                Inventory.owner_id == owner_id,
                ConsumptionLog.not_deleted(),
                ConsumptionLog.consumed_at >= start_date,
                ConsumptionLog.consumed_at <= end_date,
            )
            .all()
        )

        by_category: dict[str, CategoryConsumption] = {}
        by_day: dict[date, int] = defaultdict(int)
        for log in logs:
            category = (log.food_item.category if log.food_item else None) or UNCATEGORIZED
            entry = by_category.setdefault(
                category,
                CategoryConsumption(category=category, consumption_count=0, quantity_consumed=0.0),
            )
            entry.consumption_count += 1
            entry.quantity_consumed += log.quantity
            by_day[as_utc(log.consumed_at).date()] += 1

        return ConsumptionPatterns(
            by_category=sorted(by_category.values(), key=lambda c: c.category),
            by_time=[
                DailyConsumption(time_period=day, consumption_count=count)
                for day, count in sorted(by_day.items())
            ],
        )

    def get_sharing_stats(self) -> SharingStats:
        """Neighbourhood-wide sharing figures."""
        total_listings = (
            self.db.query(func.count(FoodListing.id)).filter(FoodListing.not_deleted()).scalar()
        )
        active_listings = (
            self.db.query(func.count(FoodListing.id))
            .filter(FoodListing.status == ListingStatus.AVAILABLE, FoodListing.not_deleted())
            .scalar()
        )
        completed = self.db.query(SharingLog).filter(
            SharingLog.status == ListingStatus.COMPLETED, SharingLog.not_deleted()
        )
        completed_shares = completed.count()
        total_quantity_shared = (
            self.db.query(func.coalesce(func.sum(SharingLog.quantity_claimed), 0.0))
            .filter(SharingLog.status == ListingStatus.COMPLETED, SharingLog.not_deleted())
            .scalar()
        )

        completed_listings = (
            self.db.query(FoodListing)
            .join(InventoryItem, FoodListing.inventory_item_id == InventoryItem.id)
            .filter(
                FoodListing.status == ListingStatus.COMPLETED,
                FoodListing.not_deleted(),
                InventoryItem.food_item_id.isnot(None),
            )
            .all()
        )
        categories: dict[str, CategoryShare] = {}
        for listing in completed_listings:
            food_item = listing.inventory_item.food_item
            category = (food_item.category if food_item else None) or UNCATEGORIZED
            shared = sum(
                log.quantity_claimed or 0.0
                for log in listing.sharing_logs
                if log.status == ListingStatus.COMPLETED
            )
            entry = categories.setdefault(
                category, CategoryShare(category=category, count=0, quantity_shared=0.0)
            )
            entry.count += 1
            entry.quantity_shared += shared
        top_categories = sorted(categories.values(), key=lambda c: (-c.count, c.category))[
            : self.settings.stats_top_categories
        ]

        since = datetime.now(UTC) - timedelta(days=self.settings.stats_recent_days)
        recent_listings = (
            self.db.query(func.count(FoodListing.id))
            .filter(FoodListing.created_at >= since, FoodListing.not_deleted())
            .scalar()
        )
        recent_claims = (
            self.db.query(func.count(SharingLog.id))
            .filter(SharingLog.claimed_at >= since, SharingLog.not_deleted())
            .scalar()
        )
        recent_completions = completed.filter(SharingLog.completed_at >= since).count()

        return SharingStats(
            total_listings=total_listings or 0,
            active_listings=active_listings or 0,
            completed_shares=completed_shares,
            total_quantity_shared=float(total_quantity_shared or 0.0),
            top_categories=top_categories,
            recent_activity=[
                ActivityCount(type="LISTED", count=recent_listings or 0),
                ActivityCount(type="CLAIMED", count=recent_claims or 0),
                ActivityCount(type="COMPLETED", count=recent_completions),
            ],
        )
