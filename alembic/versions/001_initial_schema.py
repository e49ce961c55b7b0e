"""Initial schema — users, products, carts, orders.

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""
from __future__ import annotations

from typing import Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, tuple[str, ...], None] = None
depends_on: Union[str, tuple[str, ...], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    # ── Standalone tables (no FKs) ─────────────────────────────────────

    op.create_table(
        "users",
        sa.Column("username", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("role", sa.String(20), nullable=False),
        sa.Column("street", sa.String(255)),
        sa.Column("city", sa.String(100)),
        sa.Column("state", sa.String(100)),
        sa.Column("zip_code", sa.String(20)),
        sa.Column("country", sa.String(100)),
        sa.Column("phone", sa.String(30)),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "products",
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column("category", sa.String(100), nullable=False),
        sa.Column("brand", sa.String(100), nullable=False),
        sa.Column("stock", sa.Integer(), nullable=False),
        sa.Column("images", sa.JSON()),
        sa.Column("specifications", sa.JSON()),
        sa.Column("rating_average", sa.Numeric(3, 2)),
        sa.Column("rating_count", sa.Integer()),
        sa.Column("is_featured", sa.Boolean()),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_products_name", "products", ["name"])

    # ── Tables referencing users ───────────────────────────────────────

    op.create_table(
        "carts",
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id")),
        sa.Column("session_id", sa.String(64)),
        sa.Column("items", sa.JSON()),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_carts_user_id", "carts", ["user_id"])
    op.create_index("ix_carts_session_id", "carts", ["session_id"])

    op.create_table(
        "orders",
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("items", sa.JSON()),
        sa.Column("shipping_street", sa.String(255), nullable=False),
        sa.Column("shipping_city", sa.String(100), nullable=False),
        sa.Column("shipping_state", sa.String(100), nullable=False),
        sa.Column("shipping_zip_code", sa.String(20), nullable=False),
        sa.Column("shipping_country", sa.String(100), nullable=False),
        sa.Column("payment_method", sa.String(50), nullable=False),
        sa.Column("payment_result_id", sa.String(100)),
        sa.Column("payment_result_status", sa.String(50)),
        sa.Column("payment_result_update_time", sa.String(50)),
        sa.Column("items_price", sa.Numeric(10, 2)),
        sa.Column("tax_price", sa.Numeric(10, 2)),
        sa.Column("shipping_price", sa.Numeric(10, 2)),
        sa.Column("total_price", sa.Numeric(10, 2)),
        sa.Column("is_paid", sa.Boolean()),
        sa.Column("paid_at", sa.DateTime(timezone=True)),
        sa.Column("is_delivered", sa.Boolean()),
        sa.Column("delivered_at", sa.DateTime(timezone=True)),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_orders_user_id", "orders", ["user_id"])


def downgrade() -> None:
    # Drop in reverse dependency order
    op.drop_table("orders")
    op.drop_table("carts")
    op.drop_table("products")
    op.drop_table("users")
