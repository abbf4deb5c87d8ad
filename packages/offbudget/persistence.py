# ruff: noqa: I001
"""Persistence integration for offbudget.

Functions here read and write items, transactions and adjustments in the
shared database owned by ``libs/db``. They take an open SQLAlchemy session and
never commit; wrap calls in ``db.client.session_scope``.

Scope:
- Upsert transactions into ``ob_transactions`` keyed by ``external_id``.
- Create items and rebuild in-memory :class:`~offbudget.item.Item` snapshots.
- Move transactions between items. Membership is the ``item_id`` column, so a
  transfer is a single UPDATE and a transaction can never sit in two items.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from sqlalchemy import func, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from db.models.budget import ObItem, ObItemAdjustment, ObTransaction
from .errors import ItemNotFoundError, UnknownTransactionError
from .item import Item
from .logging_setup import get_logger
from .models import ItemAdjustment, TransactionRecord, Transactions

logger = get_logger("offbudget.persistence")


def _insert_for(session: Session) -> Any:
    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        return pg_insert
    if dialect == "sqlite":
        return sqlite_insert
    raise NotImplementedError(f"upsert is not supported on dialect {dialect!r}")


def _require_item(session: Session, item_id: int) -> ObItem:
    row = session.get(ObItem, item_id)
    if row is None:
        raise ItemNotFoundError(item_id)
    return row


def _to_record(row: ObTransaction) -> TransactionRecord:
    return TransactionRecord(
        id=row.external_id,
        timestamp=row.occurred_at,
        amount=int(row.amount_minor),
        is_recurring=bool(row.is_recurring),
        description=row.description,
    )


def upsert_transactions(session: Session, transactions: Transactions) -> int:
    """Insert or update transactions by ``external_id``.

    Canonical fields (timestamp, amount, recurring flag, description) are
    overwritten on conflict. Item membership is left alone; use
    :func:`assign_transactions` for that. Returns the number of input rows.
    """

    now = func.now()
    payloads: dict[str, dict[str, Any]] = {}
    for t in transactions:
        # Last snapshot wins when an id repeats within one batch.
        payloads[t.id] = {
            "external_id": t.id,
            "occurred_at": t.timestamp,  # naive UTC, see TransactionRecord
            "amount_minor": t.amount,
            "is_recurring": t.is_recurring,
            "description": t.description,
            "updated_at": now,
        }
    if not payloads:
        return 0

    insert = _insert_for(session)
    stmt = insert(ObTransaction).values(list(payloads.values()))
    stmt = stmt.on_conflict_do_update(
        index_elements=[ObTransaction.external_id],
        set_={
            "occurred_at": stmt.excluded.occurred_at,
            "amount_minor": stmt.excluded.amount_minor,
            "is_recurring": stmt.excluded.is_recurring,
            "description": stmt.excluded.description,
            "updated_at": now,
        },
    )
    session.execute(stmt)
    logger.debug("upserted %d transaction(s)", len(payloads))
    return len(payloads)


def create_item(session: Session, item: Item) -> int:
    """Persist ``item`` with its transactions and adjustments; return the new id.

    Transactions already owned by another item are moved to the new one.
    """

    row = ObItem(
        description=item.description,
        inflation=item.inflation,
        recurrence_is_automatic=item.recurrence_is_automatic,
        recurrence_manual_interval=item.recurrence_manual_interval,
    )
    session.add(row)
    session.flush()
    item_id = row.id

    if item.transactions:
        upsert_transactions(session, item.transactions)
        assign_transactions(session, item_id, [t.id for t in item.transactions])
    for adjustment in item.adjustments:
        add_adjustment(session, item_id, adjustment)

    logger.info("created item %d (%r)", item_id, item.description)
    return item_id


def load_item(session: Session, item_id: int) -> Item:
    """Rebuild an in-memory item from storage.

    Raises :class:`~offbudget.errors.ItemNotFoundError` when ``item_id`` is
    unknown.
    """

    row = _require_item(session, item_id)
    item = Item(
        row.description,
        inflation=bool(row.inflation),
        recurrence_is_automatic=bool(row.recurrence_is_automatic),
        recurrence_manual_interval=int(row.recurrence_manual_interval),
    )

    # populate_existing: bulk upserts/updates earlier in the session bypass the identity map.
    tx_rows = session.execute(
        select(ObTransaction)
        .where(ObTransaction.item_id == item_id)
        .execution_options(populate_existing=True)
    ).scalars()
    item.add_transactions(_to_record(r) for r in tx_rows)

    adj_rows = session.execute(
        select(ObItemAdjustment)
        .where(ObItemAdjustment.item_id == item_id)
        .execution_options(populate_existing=True)
    ).scalars()
    for r in adj_rows:
        item.add_adjustment(ItemAdjustment(id=r.external_id, details=dict(r.details or {})))
    return item


def assign_transactions(session: Session, item_id: int, external_ids: Iterable[str]) -> int:
    """Move transactions to ``item_id``, detaching them from any other item.

    Returns how many rows previously belonged to a different item. Raises
    :class:`~offbudget.errors.ItemNotFoundError` for a missing item and
    :class:`~offbudget.errors.UnknownTransactionError` when any id is not
    stored; nothing is changed in either case.
    """

    _require_item(session, item_id)
    ids = list(dict.fromkeys(external_ids))
    if not ids:
        return 0

    current = dict(
        session.execute(
            select(ObTransaction.external_id, ObTransaction.item_id).where(
                ObTransaction.external_id.in_(ids)
            )
        ).all()
    )
    missing = [i for i in ids if i not in current]
    if missing:
        raise UnknownTransactionError(missing)

    moved = sum(1 for owner in current.values() if owner is not None and owner != item_id)
    session.execute(
        update(ObTransaction)
        .where(ObTransaction.external_id.in_(ids))
        .values(item_id=item_id, updated_at=func.now())
    )
    if moved:
        logger.info("moved %d transaction(s) from other items to item %d", moved, item_id)
    return moved


def release_transactions(session: Session, external_ids: Iterable[str]) -> int:
    """Detach transactions from their item; unknown or unowned ids are ignored."""

    ids = list(dict.fromkeys(external_ids))
    if not ids:
        return 0
    result = session.execute(
        update(ObTransaction)
        .where(ObTransaction.external_id.in_(ids))
        .where(ObTransaction.item_id.is_not(None))
        .values(item_id=None, updated_at=func.now())
    )
    return int(result.rowcount or 0)


def add_adjustment(session: Session, item_id: int, adjustment: ItemAdjustment) -> None:
    _require_item(session, item_id)
    session.add(
        ObItemAdjustment(
            item_id=item_id,
            external_id=adjustment.id,
            details=dict(adjustment.details),
        )
    )
    session.flush()


def list_items(session: Session) -> list[tuple[int, str]]:
    rows = session.execute(select(ObItem.id, ObItem.description).order_by(ObItem.id)).all()
    return [(int(r[0]), str(r[1])) for r in rows]


__all__ = [
    "upsert_transactions",
    "create_item",
    "load_item",
    "assign_transactions",
    "release_transactions",
    "add_adjustment",
    "list_items",
]
