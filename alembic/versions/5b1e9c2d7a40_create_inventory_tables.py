"""create_inventory_tables

Revision ID: 5b1e9c2d7a40
Revises:
Create Date: 2026-10-17 18:30:00.000000
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '5b1e9c2d7a40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""

    # AMBULANCE POSTS
    op.create_table(
        "ambulance_posts",
        sa.Column("id", sa.String(length=50), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("location", sa.String(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )

    # CABINETS
    op.create_table(
        "cabinets",
        sa.Column("id", sa.String(length=10), nullable=False),
        sa.Column("name", sa.String(length=50), nullable=False),
        sa.Column("abbreviation", sa.String(length=3), nullable=False),
        sa.Column("color", sa.String(length=20), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("location", sa.String(), nullable=True),
        sa.CheckConstraint("length(abbreviation) <= 3", name="ck_cabinet_abbreviation_length"),
        sa.PrimaryKeyConstraint("id"),
    )

    # CATEGORIES
    op.create_table(
        "categories",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("icon", sa.String(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_categories_id", "categories", ["id"], unique=False)
    op.create_index("ix_categories_name", "categories", ["name"], unique=True)

    # MEDICAL ITEMS
    op.create_table(
        "medical_items",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category", sa.String(), nullable=False),
        sa.Column("expiry_date", sa.Date(), nullable=True),
        sa.Column("alert_email", sa.String(), nullable=True),
        sa.Column("photo_url", sa.String(), nullable=True),
        sa.Column("is_discontinued", sa.Boolean(), nullable=False),
        sa.Column("replacement_item_id", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["replacement_item_id"], ["medical_items.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_medical_items_id", "medical_items", ["id"], unique=False)
    op.create_index("ix_medical_items_category", "medical_items", ["category"], unique=False)

    # DRAWERS
    op.create_table(
        "drawers",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("cabinet_id", sa.String(length=10), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("position", sa.String(), nullable=True),
        sa.Column("drawer_number", sa.Integer(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(["cabinet_id"], ["cabinets.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_drawers_id", "drawers", ["id"], unique=False)
    op.create_index("ix_drawers_cabinet_id", "drawers", ["cabinet_id"], unique=False)

    # POST CONTACTS
    op.create_table(
        "post_contacts",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("ambulance_post_id", sa.String(length=50), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("phone", sa.String(), nullable=True),
        sa.Column("department", sa.String(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(["ambulance_post_id"], ["ambulance_posts.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_post_contacts_id", "post_contacts", ["id"], unique=False)
    op.create_index("ix_post_contacts_ambulance_post_id", "post_contacts", ["ambulance_post_id"], unique=False)

    # CABINET LOCATIONS
    op.create_table(
        "cabinet_locations",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("cabinet_id", sa.String(length=10), nullable=False),
        sa.Column("ambulance_post_id", sa.String(length=50), nullable=False),
        sa.Column("sub_location", sa.String(), nullable=True),
        sa.ForeignKeyConstraint(["ambulance_post_id"], ["ambulance_posts.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["cabinet_id"], ["cabinets.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("cabinet_id", "ambulance_post_id", name="uq_cabinet_location_post"),
    )
    op.create_index("ix_cabinet_locations_id", "cabinet_locations", ["id"], unique=False)
    op.create_index("ix_cabinet_locations_cabinet_id", "cabinet_locations", ["cabinet_id"], unique=False)
    op.create_index("ix_cabinet_locations_ambulance_post_id", "cabinet_locations", ["ambulance_post_id"], unique=False)

    # POST CABINET ORDERS
    op.create_table(
        "post_cabinet_orders",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("ambulance_post_id", sa.String(length=50), nullable=False),
        sa.Column("cabinet_id", sa.String(length=10), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["ambulance_post_id"], ["ambulance_posts.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["cabinet_id"], ["cabinets.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("ambulance_post_id", "cabinet_id", name="uq_post_cabinet_order"),
    )
    op.create_index("ix_post_cabinet_orders_id", "post_cabinet_orders", ["id"], unique=False)
    op.create_index("ix_post_cabinet_orders_ambulance_post_id", "post_cabinet_orders", ["ambulance_post_id"], unique=False)

    # ITEM LOCATIONS
    op.create_table(
        "item_locations",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("item_id", sa.Integer(), nullable=False),
        sa.Column("ambulance_post_id", sa.String(length=50), nullable=False),
        sa.Column("cabinet_id", sa.String(length=10), nullable=False),
        sa.Column("drawer_id", sa.Integer(), nullable=True),
        sa.Column("stock_status", sa.String(length=20), nullable=False),
        sa.Column("contact_person_id", sa.Integer(), nullable=True),
        sa.Column("status_changed_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("supply_episode_started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint(
            "stock_status IN ('in-stock', 'low-stock', 'out-of-stock')",
            name="ck_item_location_stock_status_valid",
        ),
        sa.ForeignKeyConstraint(["ambulance_post_id"], ["ambulance_posts.id"]),
        sa.ForeignKeyConstraint(["cabinet_id"], ["cabinets.id"]),
        sa.ForeignKeyConstraint(["contact_person_id"], ["post_contacts.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["drawer_id"], ["drawers.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["item_id"], ["medical_items.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_item_locations_id", "item_locations", ["id"], unique=False)
    op.create_index("ix_item_locations_item_id", "item_locations", ["item_id"], unique=False)
    op.create_index("ix_item_locations_ambulance_post_id", "item_locations", ["ambulance_post_id"], unique=False)
    op.create_index("ix_item_locations_cabinet_id", "item_locations", ["cabinet_id"], unique=False)
    op.create_index(
        "ix_item_locations_post_cabinet",
        "item_locations",
        ["ambulance_post_id", "cabinet_id"],
        unique=False,
    )

    # SUPPLY REQUESTS
    op.create_table(
        "supply_requests",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("item_id", sa.Integer(), nullable=False),
        sa.Column("item_location_id", sa.Integer(), nullable=True),
        sa.Column("ambulance_post_id", sa.String(length=50), nullable=True),
        sa.Column("recipient_email", sa.String(), nullable=False),
        sa.Column("stock_status", sa.String(length=20), nullable=False),
        sa.Column("sent_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["item_id"], ["medical_items.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["item_location_id"], ["item_locations.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_supply_requests_id", "supply_requests", ["id"], unique=False)
    op.create_index("ix_supply_requests_item_id", "supply_requests", ["item_id"], unique=False)
    op.create_index("ix_supply_requests_item_location_id", "supply_requests", ["item_location_id"], unique=False)
    op.create_index("ix_supply_requests_sent_at", "supply_requests", ["sent_at"], unique=False)
    op.create_index(
        "ix_supply_requests_item_post",
        "supply_requests",
        ["item_id", "ambulance_post_id"],
        unique=False,
    )


def downgrade() -> None:
    """Downgrade schema."""

    op.drop_table("supply_requests")
    op.drop_table("item_locations")
    op.drop_table("post_cabinet_orders")
    op.drop_table("cabinet_locations")
    op.drop_table("post_contacts")
    op.drop_table("drawers")
    op.drop_table("medical_items")
    op.drop_table("categories")
    op.drop_table("cabinets")
    op.drop_table("ambulance_posts")
