from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
    text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


# ---------------------------
# Core: ob_items
# ---------------------------


class ObItem(Base):
    __tablename__ = "ob_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    # Informational only; not read by the forecast derivations.
    inflation: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=text("false"))
    recurrence_is_automatic: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=text("true")
    )
    recurrence_manual_interval: Mapped[int] = mapped_column(
        Integer, nullable=False, server_default=text("0")
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )


# ---------------------------
# Core: ob_transactions
# ---------------------------


class ObTransaction(Base):
    __tablename__ = "ob_transactions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    external_id: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    occurred_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)
    # Signed fixed-point amount in minor units (cents); single currency.
    amount_minor: Mapped[int] = mapped_column(BigInteger, nullable=False)
    is_recurring: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=text("false")
    )
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    # Membership. A single nullable FK column is what guarantees that a
    # transaction belongs to at most one item; moving it is an UPDATE.
    item_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("ob_items.id", ondelete="SET NULL"),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (Index("ix_ob_transactions_item_id", "item_id"),)


# ---------------------------
# Auxiliary: ob_item_adjustments
# ---------------------------


class ObItemAdjustment(Base):
    __tablename__ = "ob_item_adjustments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    item_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("ob_items.id", ondelete="CASCADE"),
        nullable=False,
    )
    external_id: Mapped[str] = mapped_column(String, nullable=False)
    # Opaque payload; stored and returned as-is.
    details: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (
        UniqueConstraint("item_id", "external_id", name="uq_ob_adjustment_item_external_id"),
    )


__all__ = [
    "Base",
    "ObItem",
    "ObTransaction",
    "ObItemAdjustment",
]
