"""Create the catalog_record table.

Revision ID: 0001_catalog_record
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0001_catalog_record"
down_revision = None
branch_labels = None
depends_on = None

_TEXT_COLUMNS = (
    "status",
    "designer",
    "model",
    "year",
    "category",
    "style",
    "metal_type",
    "reference_number",
    "movement",
    "watch_case",
    "dial",
    "strap",
    "condition",
    "diameter",
    "box_papers",
    "serial_number",
    "dial_markers",
    "band_material",
    "bezel_type",
    "case_crown",
    "band_type",
    "general_dial",
    "price",
    "price_retail",
    "price_sale",
    "price_keystone",
    "price_chronos",
    "price_wholesale",
    "cost_invoiced",
    "flag_ebay_auction",
)


def upgrade() -> None:
    op.create_table(
        "catalog_record",
        sa.Column("tag_number", sa.String(length=64), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *(sa.Column(name, sa.String(length=255), nullable=True) for name in _TEXT_COLUMNS),
        sa.Column("image_paths", sa.Text(), nullable=False),
        sa.Column("remote_id", sa.String(length=255), nullable=True),
        sa.Column(
            "sync_status",
            sa.Enum("PUBLISHED", "UPDATED", name="sync_status", native_enum=False),
            nullable=True,
        ),
        sa.Column("published_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_synced_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("tag_number", name="pk_catalog_record"),
        sa.UniqueConstraint("remote_id", name="uq_catalog_record_remote_id"),
    )


def downgrade() -> None:
    op.drop_table("catalog_record")
