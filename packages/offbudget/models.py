"""Records and schemas shared across ``offbudget``.

Two families live here:

- immutable snapshots handed to and returned from the aggregator
  (:class:`TransactionRecord`, :class:`ItemAdjustment`, :class:`ItemForecast`);
- pydantic models describing the on-disk inputs (CSV rows and the JSON item
  file) that are validated before being turned into snapshots.

Snapshots carry no persistence metadata; database identifiers stay in the
storage layer.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, time
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

from .money import MoneyValue, to_minor_units

# ---------------------------------------------------------------------------
# Snapshots
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class TransactionRecord:
    """A single transaction as seen by an item.

    Identity is the ``id`` alone: two records with the same ``id`` are the same
    transaction for set membership, whatever their other fields hold.

    Attributes
    ----------
    id:
        Stable external identifier of the transaction.
    timestamp:
        When the transaction happened. A bare ``date`` is promoted to midnight
        of that day and an aware ``datetime`` is converted to naive UTC, so
        chronological comparisons always see naive ``datetime`` values.
    amount:
        Signed amount in minor units.
    is_recurring:
        Whether the transaction is part of a repeating pattern. Only recurring
        transactions feed the derivations.
    description:
        Optional label; informational only.
    """

    id: str
    timestamp: datetime = field(compare=False)
    amount: int = field(compare=False)
    is_recurring: bool = field(default=False, compare=False)
    description: str | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        ts = self.timestamp
        if not isinstance(ts, datetime):
            if not isinstance(ts, date):
                raise TypeError(f"timestamp must be a date or datetime, got {type(ts).__name__}")
            object.__setattr__(self, "timestamp", datetime.combine(ts, time.min))
        elif ts.tzinfo is not None:
            object.__setattr__(self, "timestamp", ts.astimezone(UTC).replace(tzinfo=None))
        if isinstance(self.amount, bool) or not isinstance(self.amount, int):
            raise TypeError("amount must be an integer number of minor units")

    @property
    def value(self) -> MoneyValue:
        """A fresh :class:`MoneyValue`; mutating it does not touch the record."""

        return MoneyValue(self.amount)


@dataclass(frozen=True, slots=True)
class ItemAdjustment:
    """Opaque auxiliary record attached to an item, keyed by ``id``."""

    id: str
    details: Mapping[str, Any] = field(default_factory=dict, compare=False)


@dataclass(frozen=True, slots=True)
class ItemForecast:
    """Derived values for one item.

    A zero ``recurrence_interval_days`` or ``predicted_next_value`` means "not
    enough history" whenever ``insufficient_data`` is true; callers should not
    treat it as a prediction.
    """

    recurrence_interval_days: int
    predicted_next_value: int
    recurring_count: int
    transaction_count: int
    manual_interval: bool = False

    @property
    def insufficient_data(self) -> bool:
        if self.recurring_count == 0:
            return True
        if self.manual_interval:
            return False
        return self.transaction_count < 2 or self.recurring_count < 2

    def to_dict(self) -> dict[str, Any]:
        return {
            "recurrence_interval_days": self.recurrence_interval_days,
            "predicted_next_value": self.predicted_next_value,
            "predicted_next_value_display": str(MoneyValue(self.predicted_next_value)),
            "recurring_count": self.recurring_count,
            "transaction_count": self.transaction_count,
            "insufficient_data": self.insufficient_data,
        }


# ---------------------------------------------------------------------------
# Input schemas
# ---------------------------------------------------------------------------


class TransactionRow(BaseModel):
    """One transaction as written in a CSV export or a JSON item file.

    ``amount`` is given in major units (``"-12.34"``) and stored in minor units.
    ``recurring`` accepts the usual boolean spellings (``true``/``yes``/``1``).
    """

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    id: str
    date: datetime
    amount: int
    recurring: bool = False
    description: str | None = None

    @field_validator("id")
    @classmethod
    def _id_non_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("id must be non-empty")
        return v

    @field_validator("amount", mode="before")
    @classmethod
    def _amount_to_minor(cls, v: Any) -> int:
        return to_minor_units(v)

    @field_validator("description", mode="before")
    @classmethod
    def _blank_description(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    def to_record(self) -> TransactionRecord:
        return TransactionRecord(
            id=self.id,
            timestamp=self.date,
            amount=self.amount,
            is_recurring=self.recurring,
            description=self.description,
        )


class AdjustmentRow(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    id: str
    details: dict[str, Any] = {}

    def to_adjustment(self) -> ItemAdjustment:
        return ItemAdjustment(id=self.id, details=dict(self.details))


class ItemFile(BaseModel):
    """Top-level schema for a JSON item file."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    description: str
    inflation: bool = False
    recurrence_is_automatic: bool = True
    recurrence_manual_interval: int = 0
    transactions: list[TransactionRow] = []
    adjustments: list[AdjustmentRow] = []


type Transactions = Iterable[TransactionRecord]
"""Any iterable of transaction snapshots."""


__all__ = [
    "TransactionRecord",
    "ItemAdjustment",
    "ItemForecast",
    "TransactionRow",
    "AdjustmentRow",
    "ItemFile",
    "Transactions",
]
