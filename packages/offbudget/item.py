"""Budget items and the derivations computed from their history.

An :class:`Item` is a recurring budget category ("rent", "groceries") that
holds a set of transactions and a set of adjustments. Two values are derived
from the recurring transactions only:

- the *base recurrence interval*: whole days spanned by the recurring
  transactions (chronologically first to last) divided by how many there are;
- the *base value*: the mean amount of the recurring transactions, each
  counted exactly once.

Both divisions truncate toward zero. With no recurring history the result is
``0``; callers read that as "insufficient data", not as a prediction.

An item does not check whether a transaction already belongs to another item.
Use :class:`offbudget.ownership.OwnershipIndex` (or the ``item_id`` column in
storage) when that has to hold.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .logging_setup import get_logger
from .models import ItemAdjustment, ItemForecast, TransactionRecord, Transactions
from .money import MoneyValue, add_money_values, div_toward_zero

logger = get_logger("offbudget.item")


def _chronological_key(t: TransactionRecord) -> tuple:
    return (t.timestamp, t.id)


@dataclass(eq=False)
class Item:
    """A recurring budget category aggregating transactions and adjustments.

    Items compare and hash by identity, so they can key ownership indexes.
    """

    description: str
    inflation: bool = False
    recurrence_is_automatic: bool = True
    recurrence_manual_interval: int = 0
    transactions: set[TransactionRecord] = field(default_factory=set, init=False)
    adjustments: set[ItemAdjustment] = field(default_factory=set, init=False)

    add_money_values = staticmethod(add_money_values)

    # ---- membership ---------------------------------------------------------

    def add_transaction(self, transaction: TransactionRecord) -> None:
        """Add one transaction.

        The caller must already have detached ``transaction`` from any other
        item; a transaction should belong to at most one item.
        """

        self.transactions.add(transaction)

    def add_transactions(self, transactions: Transactions) -> None:
        self.transactions.update(transactions)

    def remove_transaction(self, transaction: TransactionRecord) -> None:
        """Remove ``transaction`` if present; absent ones are ignored."""

        self.transactions.discard(transaction)

    def remove_transactions(self, transactions: Transactions) -> None:
        self.transactions.difference_update(transactions)

    def add_adjustment(self, adjustment: ItemAdjustment) -> None:
        self.adjustments.add(adjustment)

    def remove_adjustment(self, adjustment: ItemAdjustment) -> None:
        self.adjustments.discard(adjustment)

    # ---- derivations --------------------------------------------------------

    def recurring_transactions(self) -> list[TransactionRecord]:
        """Recurring transactions oldest first (ties broken by ``id``)."""

        return sorted((t for t in self.transactions if t.is_recurring), key=_chronological_key)

    def base_recurrence_interval(self) -> int:
        """Average number of days between recurring transactions.

        Returns ``recurrence_manual_interval`` unchanged in manual mode. In
        automatic mode returns ``0`` when an interval cannot be computed: fewer
        than two transactions overall, or fewer than two recurring ones.
        """

        if not self.recurrence_is_automatic:
            return self.recurrence_manual_interval

        if len(self.transactions) <= 1:
            return 0

        recurring = self.recurring_transactions()
        if not recurring:
            logger.debug(
                "item %r: %d transactions but none recurring; interval undefined",
                self.description,
                len(self.transactions),
            )
            return 0

        first = recurring[0].timestamp
        last = recurring[-1].timestamp
        days = (last - first).days
        return div_toward_zero(days, len(recurring))

    def base_value(self) -> MoneyValue:
        """Predicted value of the next transaction.

        Mean amount of the recurring transactions, truncated toward zero.
        ``MoneyValue(0)`` when there are none.
        """

        total = MoneyValue()
        count = 0
        for transaction in self.transactions:
            if not transaction.is_recurring:
                continue
            add_money_values(total, transaction.value)
            count += 1

        if count == 0:
            logger.debug("item %r: no recurring transactions; base value undefined", self.description)
            return total

        total.set_amount(div_toward_zero(total.amount, count))
        return total

    def forecast(self) -> ItemForecast:
        """Both derivations plus the counts needed to judge them."""

        recurring_count = sum(1 for t in self.transactions if t.is_recurring)
        result = ItemForecast(
            recurrence_interval_days=self.base_recurrence_interval(),
            predicted_next_value=self.base_value().amount,
            recurring_count=recurring_count,
            transaction_count=len(self.transactions),
            manual_interval=not self.recurrence_is_automatic,
        )
        logger.debug(
            "item %r: interval=%d value=%d (recurring=%d/%d)",
            self.description,
            result.recurrence_interval_days,
            result.predicted_next_value,
            recurring_count,
            result.transaction_count,
        )
        return result


__all__ = ["Item"]
