"""Owning index that keeps every transaction in at most one item.

:class:`~offbudget.item.Item` stores whatever it is given. When several items
are edited together (an import assigning transactions to categories, a user
moving a charge from "groceries" to "dining"), route the changes through an
:class:`OwnershipIndex` so a move is always detach-then-attach.
"""

from __future__ import annotations

from collections.abc import Iterable

from .errors import OwnershipConflictError
from .item import Item
from .logging_setup import get_logger
from .models import TransactionRecord, Transactions

logger = get_logger("offbudget.ownership")


class OwnershipIndex:
    """Maps transaction ids to the item that owns them."""

    def __init__(self, items: Iterable[Item] = ()) -> None:
        self._owners: dict[str, Item] = {}
        for item in items:
            self.register(item)

    def register(self, item: Item) -> None:
        """Index the transactions ``item`` already holds.

        Raises :class:`OwnershipConflictError` when one of them is already
        owned by a different item; nothing is indexed in that case.
        """

        for t in item.transactions:
            owner = self._owners.get(t.id)
            if owner is not None and owner is not item:
                raise OwnershipConflictError(
                    f"transaction {t.id!r} already belongs to item {owner.description!r}"
                )
        for t in item.transactions:
            self._owners[t.id] = item

    def owner_of(self, transaction: TransactionRecord | str) -> Item | None:
        key = transaction if isinstance(transaction, str) else transaction.id
        return self._owners.get(key)

    def assign(self, item: Item, transactions: Transactions) -> int:
        """Attach ``transactions`` to ``item``, detaching each from any other owner.

        Returns how many transactions were moved away from a different item.
        """

        moved = 0
        for t in transactions:
            previous = self._owners.get(t.id)
            if previous is not None and previous is not item:
                previous.remove_transaction(t)
                moved += 1
            # Replace any stale snapshot with the same id.
            item.remove_transaction(t)
            item.add_transaction(t)
            self._owners[t.id] = item
        if moved:
            logger.info("moved %d transaction(s) to item %r", moved, item.description)
        return moved

    def release(self, transactions: Transactions) -> int:
        """Detach ``transactions`` from their owners; unknown ones are ignored."""

        released = 0
        for t in transactions:
            owner = self._owners.pop(t.id, None)
            if owner is None:
                continue
            owner.remove_transaction(t)
            released += 1
        return released

    def __len__(self) -> int:
        return len(self._owners)

    def __contains__(self, transaction: object) -> bool:
        if isinstance(transaction, TransactionRecord):
            return transaction.id in self._owners
        return transaction in self._owners


__all__ = ["OwnershipIndex"]
