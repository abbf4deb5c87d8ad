"""Public API and orchestration for the ``offbudget`` package.

Pure helpers (:func:`forecast_item`, :func:`item_from_records`) work on
in-memory items. The file- and DB-backed entry points load an item first and
then forecast it; DB imports stay local so callers that never touch a
database do not pay for SQLAlchemy at import time.
"""

from __future__ import annotations

import json
from os import PathLike
from pathlib import Path

from .item import Item
from .logging_setup import get_logger
from .models import ItemFile, ItemForecast, Transactions

logger = get_logger("offbudget.api")


def forecast_item(item: Item) -> ItemForecast:
    """Return the recurrence interval and predicted next value of ``item``."""

    return item.forecast()


def item_from_records(
    description: str,
    transactions: Transactions,
    *,
    inflation: bool = False,
    recurrence_is_automatic: bool = True,
    recurrence_manual_interval: int = 0,
) -> Item:
    """Build an item holding ``transactions``."""

    item = Item(
        description,
        inflation=inflation,
        recurrence_is_automatic=recurrence_is_automatic,
        recurrence_manual_interval=recurrence_manual_interval,
    )
    item.add_transactions(transactions)
    return item


def load_item_file(path: str | PathLike[str]) -> Item:
    """Read a JSON item file (see :class:`~offbudget.models.ItemFile`).

    Raises ``pydantic.ValidationError`` on schema violations and
    ``json.JSONDecodeError`` on malformed JSON.
    """

    with Path(path).open(encoding="utf-8") as f:
        data = json.load(f)
    parsed = ItemFile.model_validate(data)
    item = item_from_records(
        parsed.description,
        (row.to_record() for row in parsed.transactions),
        inflation=parsed.inflation,
        recurrence_is_automatic=parsed.recurrence_is_automatic,
        recurrence_manual_interval=parsed.recurrence_manual_interval,
    )
    for adj in parsed.adjustments:
        item.add_adjustment(adj.to_adjustment())
    return item


def forecast_csv(
    csv_path: str | PathLike[str],
    *,
    description: str | None = None,
    manual_interval: int | None = None,
) -> ItemForecast:
    """Treat every row of a CSV export as one item and forecast it.

    ``manual_interval`` switches the item to manual recurrence with that many
    days.
    """

    from .ingest import load_transactions_from_csv

    records = load_transactions_from_csv(csv_path)
    item = item_from_records(
        description or Path(csv_path).stem,
        records,
        recurrence_is_automatic=manual_interval is None,
        recurrence_manual_interval=manual_interval or 0,
    )
    return forecast_item(item)


def forecast_item_from_db(item_id: int, *, database_url: str | None = None) -> ItemForecast:
    """Load item ``item_id`` from the database and forecast it."""

    from db.client import session_scope

    from .persistence import load_item

    with session_scope(database_url=database_url) as session:
        item = load_item(session, item_id)
    result = forecast_item(item)
    logger.info(
        "item %d: interval=%d days, next value=%d",
        item_id,
        result.recurrence_interval_days,
        result.predicted_next_value,
    )
    return result


__all__ = [
    "forecast_item",
    "item_from_records",
    "load_item_file",
    "forecast_csv",
    "forecast_item_from_db",
]
