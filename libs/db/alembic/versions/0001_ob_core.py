# ruff: noqa: I001
"""Budget item core tables: items, transactions, item adjustments.

Revision ID: 0001_ob_core
Revises: None
Create Date: 2026-10-19
"""

from __future__ import annotations  # ruff: noqa: I001

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "0001_ob_core"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    ]


def upgrade() -> None:
    # ob_items
    op.create_table(
        "ob_items",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("inflation", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column(
            "recurrence_is_automatic",
            sa.Boolean(),
            nullable=False,
            server_default=sa.text("true"),
        ),
        sa.Column(
            "recurrence_manual_interval",
            sa.Integer(),
            nullable=False,
            server_default=sa.text("0"),
        ),
        *_timestamps(),
    )

    # ob_transactions; item_id is the single owner of a transaction
    op.create_table(
        "ob_transactions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("external_id", sa.String(), nullable=False),
        sa.Column("occurred_at", sa.DateTime(timezone=False), nullable=False),
        sa.Column("amount_minor", sa.BigInteger(), nullable=False),
        sa.Column("is_recurring", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("item_id", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["item_id"],
            ["ob_items.id"],
            name="fk_ob_tx_item",
            ondelete="SET NULL",
        ),
        sa.UniqueConstraint("external_id", name="uq_ob_tx_external_id"),
    )
    op.create_index("ix_ob_transactions_item_id", "ob_transactions", ["item_id"], unique=False)

    # ob_item_adjustments
    op.create_table(
        "ob_item_adjustments",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("item_id", sa.Integer(), nullable=False),
        sa.Column("external_id", sa.String(), nullable=False),
        sa.Column("details", sa.JSON(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.ForeignKeyConstraint(
            ["item_id"],
            ["ob_items.id"],
            name="fk_ob_adjustment_item",
            ondelete="CASCADE",
        ),
        sa.UniqueConstraint("item_id", "external_id", name="uq_ob_adjustment_item_external_id"),
    )


def downgrade() -> None:
    op.drop_table("ob_item_adjustments")
    op.drop_index("ix_ob_transactions_item_id", table_name="ob_transactions")
    op.drop_table("ob_transactions")
    op.drop_table("ob_items")
