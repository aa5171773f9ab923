"""create food sharing schema

Revision ID: 5c2e9a7f1b3d
Revises:
Create Date: 2026-02-14 10:12:08.514220

"""

from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "5c2e9a7f1b3d"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

AVAILABLE_LISTING = "status = 'AVAILABLE' AND deleted_at IS NULL"
ACTIVE_CLAIM = "status = 'CLAIMED' AND deleted_at IS NULL"


def timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
    ]


def upgrade() -> None:
    # Values match Python enum string values; created once, shared by two tables
    listing_status_enum = postgresql.ENUM(
        "AVAILABLE",
        "CLAIMED",
        "COMPLETED",
        "CANCELLED",
        name="listingstatus",
        create_type=False,
    )
    listing_status_enum.create(op.get_bind(), checkfirst=True)

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=True),
        sa.Column("location", sa.String(length=255), nullable=True),
        sa.Column("dietary_preference", sa.String(length=100), nullable=True),
        sa.Column("budget_range", sa.Float(), nullable=True),
        *timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_users_id"), "users", ["id"], unique=False)
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)

    op.create_table(
        "food_items",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("category", sa.String(length=100), nullable=True),
        sa.Column("unit", sa.String(length=50), nullable=True),
        sa.Column("typical_expiration_days", sa.Integer(), nullable=True),
        sa.Column("sample_cost_per_unit", sa.Float(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        *timestamps(),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_food_items_id"), "food_items", ["id"], unique=False)
    op.create_index(op.f("ix_food_items_name"), "food_items", ["name"], unique=False)
    op.create_index(op.f("ix_food_items_category"), "food_items", ["category"], unique=False)

    op.create_table(
        "inventories",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_private", sa.Boolean(), nullable=False),
        sa.Column("owner_id", sa.Integer(), nullable=False),
        *timestamps(),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["owner_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_inventories_id"), "inventories", ["id"], unique=False)
    op.create_index(op.f("ix_inventories_owner_id"), "inventories", ["owner_id"], unique=False)

    op.create_table(
        "inventory_items",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("inventory_id", sa.Integer(), nullable=False),
        sa.Column("food_item_id", sa.Integer(), nullable=True),
        sa.Column("custom_name", sa.String(length=255), nullable=True),
        sa.Column("quantity", sa.Float(), nullable=False),
        sa.Column("unit", sa.String(length=50), nullable=True),
        sa.Column("expiry_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("removed", sa.Boolean(), nullable=False),
        sa.Column("added_by_id", sa.Integer(), nullable=True),
        sa.Column("added_at", sa.DateTime(timezone=True), nullable=False),
        *timestamps(),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("quantity >= 0", name="ck_inventory_items_quantity"),
        sa.ForeignKeyConstraint(["inventory_id"], ["inventories.id"]),
        sa.ForeignKeyConstraint(["food_item_id"], ["food_items.id"]),
        sa.ForeignKeyConstraint(["added_by_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_inventory_items_id"), "inventory_items", ["id"], unique=False)
    op.create_index(
        op.f("ix_inventory_items_inventory_id"), "inventory_items", ["inventory_id"], unique=False
    )
    op.create_index(
        op.f("ix_inventory_items_food_item_id"), "inventory_items", ["food_item_id"], unique=False
    )
    op.create_index(
        op.f("ix_inventory_items_expiry_date"), "inventory_items", ["expiry_date"], unique=False
    )
    op.create_index(op.f("ix_inventory_items_removed"), "inventory_items", ["removed"], unique=False)

    op.create_table(
        "consumption_logs",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("inventory_id", sa.Integer(), nullable=False),
        sa.Column("inventory_item_id", sa.Integer(), nullable=True),
        sa.Column("food_item_id", sa.Integer(), nullable=True),
        sa.Column("item_name", sa.String(length=255), nullable=False),
        sa.Column("quantity", sa.Float(), nullable=False),
        sa.Column("unit", sa.String(length=50), nullable=True),
        sa.Column("consumed_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        *timestamps(),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["inventory_id"], ["inventories.id"]),
        sa.ForeignKeyConstraint(["inventory_item_id"], ["inventory_items.id"]),
        sa.ForeignKeyConstraint(["food_item_id"], ["food_items.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_consumption_logs_id"), "consumption_logs", ["id"], unique=False)
    op.create_index(
        op.f("ix_consumption_logs_inventory_id"), "consumption_logs", ["inventory_id"], unique=False
    )
    op.create_index(
        op.f("ix_consumption_logs_inventory_item_id"),
        "consumption_logs",
        ["inventory_item_id"],
        unique=False,
    )
    op.create_index(
        op.f("ix_consumption_logs_food_item_id"), "consumption_logs", ["food_item_id"], unique=False
    )
    op.create_index(
        op.f("ix_consumption_logs_consumed_at"), "consumption_logs", ["consumed_at"], unique=False
    )

    op.create_table(
        "food_listings",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("inventory_item_id", sa.Integer(), nullable=False),
        sa.Column("lister_id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("quantity", sa.Float(), nullable=False),
        sa.Column("unit", sa.String(length=50), nullable=True),
        sa.Column("pickup_location", sa.String(length=255), nullable=True),
        sa.Column("available_until", sa.DateTime(timezone=True), nullable=True),
        sa.Column("status", listing_status_enum, nullable=False),
        *timestamps(),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["inventory_item_id"], ["inventory_items.id"]),
        sa.ForeignKeyConstraint(["lister_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_food_listings_id"), "food_listings", ["id"], unique=False)
    op.create_index(
        op.f("ix_food_listings_inventory_item_id"),
        "food_listings",
        ["inventory_item_id"],
        unique=False,
    )
    op.create_index(op.f("ix_food_listings_lister_id"), "food_listings", ["lister_id"], unique=False)
    op.create_index(op.f("ix_food_listings_status"), "food_listings", ["status"], unique=False)
    op.create_index(
        "uq_food_listings_available_item",
        "food_listings",
        ["inventory_item_id"],
        unique=True,
        postgresql_where=sa.text(AVAILABLE_LISTING),
    )

    op.create_table(
        "sharing_logs",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("listing_id", sa.Integer(), nullable=False),
        sa.Column("claimer_id", sa.Integer(), nullable=True),
        sa.Column("claimer_name", sa.String(length=255), nullable=True),
        sa.Column("claimed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("quantity_claimed", sa.Float(), nullable=True),
        sa.Column("status", listing_status_enum, nullable=False),
        *timestamps(),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("status IN ('CLAIMED', 'COMPLETED')", name="ck_sharing_logs_status"),
        sa.ForeignKeyConstraint(["listing_id"], ["food_listings.id"]),
        sa.ForeignKeyConstraint(["claimer_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_sharing_logs_id"), "sharing_logs", ["id"], unique=False)
    op.create_index(op.f("ix_sharing_logs_listing_id"), "sharing_logs", ["listing_id"], unique=False)
    op.create_index(op.f("ix_sharing_logs_claimer_id"), "sharing_logs", ["claimer_id"], unique=False)
    op.create_index(
        "uq_sharing_logs_active_claim",
        "sharing_logs",
        ["listing_id", "claimer_id"],
        unique=True,
        postgresql_where=sa.text(ACTIVE_CLAIM),
    )


def downgrade() -> None:
    op.drop_index("uq_sharing_logs_active_claim", table_name="sharing_logs")
    op.drop_table("sharing_logs")
    op.drop_index("uq_food_listings_available_item", table_name="food_listings")
    op.drop_table("food_listings")
    op.drop_table("consumption_logs")
    op.drop_table("inventory_items")
    op.drop_table("inventories")
    op.drop_table("food_items")
    op.drop_table("users")
    sa.Enum(name="listingstatus").drop(op.get_bind(), checkfirst=True)
