from __future__ import annotations

from datetime import UTC, date, datetime, timedelta, timezone

import pytest

from offbudget.item import Item
from offbudget.models import TransactionRecord

_DAY0 = datetime(2024, 1, 1, 9, 30)


def _tx(tx_id: str, day: int, *, amount: int = 1000, recurring: bool = True) -> TransactionRecord:
    return TransactionRecord(
        id=tx_id,
        timestamp=_DAY0 + timedelta(days=day),
        amount=amount,
        is_recurring=recurring,
    )


def _auto_item(*txs: TransactionRecord) -> Item:
    item = Item("rent", False, True, 0)
    item.add_transactions(txs)
    return item


@pytest.mark.parametrize(
    "txs",
    [
        (),
        (_tx("a", 0),),
        (_tx("a", 0), _tx("b", 10)),
        (_tx("a", 0, recurring=False), _tx("b", 400, recurring=False)),
    ],
)
def test_manual_interval_wins_regardless_of_transactions(txs):
    item = Item("gym", inflation=False, recurrence_is_automatic=False, recurrence_manual_interval=30)
    item.add_transactions(txs)

    assert item.base_recurrence_interval() == 30


def test_manual_interval_is_returned_unchanged_even_when_negative():
    item = Item("odd", recurrence_is_automatic=False, recurrence_manual_interval=-7)
    assert item.base_recurrence_interval() == -7


def test_empty_item_has_zero_interval():
    assert _auto_item().base_recurrence_interval() == 0


def test_single_transaction_has_zero_interval():
    assert _auto_item(_tx("a", 0)).base_recurrence_interval() == 0


def test_two_recurring_ten_days_apart_gives_five():
    # 10 days spanned / 2 recurring transactions
    assert _auto_item(_tx("a", 0), _tx("b", 10)).base_recurrence_interval() == 5


def test_three_recurring_truncates():
    # (20 - 0) / 3 = 6.67 -> 6
    item = _auto_item(_tx("a", 0), _tx("b", 10), _tx("c", 20))
    assert item.base_recurrence_interval() == 6


def test_no_recurring_transactions_is_zero_not_an_error():
    item = _auto_item(_tx("a", 0, recurring=False), _tx("b", 30, recurring=False))
    assert item.base_recurrence_interval() == 0


def test_exactly_one_recurring_transaction_spans_zero_days():
    item = _auto_item(_tx("a", 0), _tx("b", 30, recurring=False), _tx("c", 90, recurring=False))
    assert item.base_recurrence_interval() == 0


def test_non_recurring_transactions_do_not_widen_the_span():
    item = _auto_item(
        _tx("early", -100, recurring=False),
        _tx("a", 0),
        _tx("b", 30),
        _tx("late", 500, recurring=False),
    )
    # span 30 days over 2 recurring
    assert item.base_recurrence_interval() == 15


def test_first_and_last_are_chronological_not_insertion_order():
    forward = _auto_item(_tx("a", 0), _tx("b", 31), _tx("c", 59), _tx("d", 90))
    backward = Item("rent")
    for tx in (_tx("d", 90), _tx("b", 31), _tx("a", 0), _tx("c", 59)):
        backward.add_transaction(tx)

    assert forward.base_recurrence_interval() == 90 // 4
    assert backward.base_recurrence_interval() == forward.base_recurrence_interval()


def test_partial_days_do_not_count():
    late = TransactionRecord("a", datetime(2024, 1, 1, 23, 0), 100, True)
    early_next = TransactionRecord("b", datetime(2024, 1, 11, 22, 0), 100, True)
    # 9 days 23 hours -> 9 whole days, / 2
    assert _auto_item(late, early_next).base_recurrence_interval() == 4


def test_plain_dates_are_accepted():
    a = TransactionRecord("a", date(2024, 1, 1), 100, True)
    b = TransactionRecord("b", date(2024, 3, 1), 100, True)
    # 60 days (leap year) / 2
    assert _auto_item(a, b).base_recurrence_interval() == 30


def test_naive_and_aware_timestamps_can_share_an_item():
    naive = TransactionRecord("a", datetime(2024, 1, 1), 100, True)
    aware = TransactionRecord("b", datetime(2024, 1, 11, tzinfo=UTC), 100, True)

    assert _auto_item(naive, aware).base_recurrence_interval() == 5


def test_aware_timestamps_are_held_as_naive_utc():
    est = timezone(timedelta(hours=-5))
    tx = TransactionRecord("a", datetime(2024, 1, 1, 22, 0, tzinfo=est), 1)

    assert tx.timestamp == datetime(2024, 1, 2, 3, 0)
    assert tx.timestamp.tzinfo is None
