"""Public interface for the ``offbudget`` package.

Symbol re-exports only. The aggregator lives in ``offbudget.item``; storage
helpers in ``offbudget.persistence`` are imported on demand because they pull
in SQLAlchemy and the ``db`` library.
"""

from .api import (
    forecast_csv,
    forecast_item,
    forecast_item_from_db,
    item_from_records,
    load_item_file,
)
from .errors import (
    ItemNotFoundError,
    OffbudgetError,
    OwnershipConflictError,
    UnknownTransactionError,
)
from .item import Item
from .models import ItemAdjustment, ItemForecast, TransactionRecord
from .money import MoneyValue, add_money_values
from .ownership import OwnershipIndex

__all__ = [
    # API
    "forecast_csv",
    "forecast_item",
    "forecast_item_from_db",
    "item_from_records",
    "load_item_file",
    # Core
    "Item",
    "OwnershipIndex",
    "MoneyValue",
    "add_money_values",
    # Models / types
    "TransactionRecord",
    "ItemAdjustment",
    "ItemForecast",
    # Errors
    "OffbudgetError",
    "ItemNotFoundError",
    "UnknownTransactionError",
    "OwnershipConflictError",
]
