"""Exception types raised by ``offbudget``.

Derivations never raise: an item without recurring history yields zeros. The
errors below come from ownership bookkeeping and the storage layer.
"""

from __future__ import annotations


class OffbudgetError(Exception):
    """Base class for all package errors."""


class ItemNotFoundError(OffbudgetError, LookupError):
    def __init__(self, item_id: int) -> None:
        super().__init__(f"item {item_id} does not exist")
        self.item_id = item_id


class UnknownTransactionError(OffbudgetError, LookupError):
    def __init__(self, external_ids: list[str]) -> None:
        super().__init__("unknown transaction id(s): " + ", ".join(external_ids))
        self.external_ids = external_ids


class OwnershipConflictError(OffbudgetError):
    """A transaction is already owned by a different item."""


__all__ = [
    "OffbudgetError",
    "ItemNotFoundError",
    "UnknownTransactionError",
    "OwnershipConflictError",
]
