"""Base value: mean of recurring amounts, each transaction counted once.

A scan that advances its cursor twice per step (testing one element, reading
the next) skips every other transaction. These tests pin the arithmetic where
each recurring transaction counts exactly once.
"""

from __future__ import annotations

from datetime import datetime, timedelta

from offbudget.item import Item
from offbudget.models import TransactionRecord
from offbudget.money import MoneyValue


def _item(amounts: list[int], *, recurring: bool = True) -> Item:
    item = Item("groceries")
    start = datetime(2024, 5, 1)
    item.add_transactions(
        TransactionRecord(f"t{i}", start + timedelta(days=7 * i), amt, recurring)
        for i, amt in enumerate(amounts)
    )
    return item


def test_mean_of_two_recurring_amounts():
    value = _item([100, 200]).base_value()

    assert isinstance(value, MoneyValue)
    assert value.amount == 150


def test_every_recurring_transaction_is_counted_once():
    assert _item([100, 200, 300]).base_value().amount == 200
    assert _item([100, 200, 300, 401]).base_value().amount == 250


def test_single_recurring_amount_is_its_own_mean():
    assert _item([1999]).base_value().amount == 1999


def test_no_transactions_gives_zero():
    assert _item([]).base_value() == MoneyValue(0)


def test_no_recurring_transactions_gives_zero():
    assert _item([500, 700], recurring=False).base_value().amount == 0


def test_non_recurring_amounts_are_ignored():
    item = _item([100, 300])
    item.add_transaction(TransactionRecord("one-off", datetime(2024, 6, 1), 100_000, False))

    assert item.base_value().amount == 200


def test_division_truncates_toward_zero_for_negative_totals():
    # -151 / 2 = -75.5 -> -75 (floor division would give -76)
    assert _item([-100, -51]).base_value().amount == -75


def test_positive_division_truncates():
    # 301 / 2 = 150.5 -> 150
    assert _item([100, 201]).base_value().amount == 150


def test_base_value_returns_a_fresh_value_each_call():
    item = _item([100, 200])
    first = item.base_value()
    first.set_amount(0)

    assert item.base_value().amount == 150
