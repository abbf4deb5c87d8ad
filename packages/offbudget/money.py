"""Fixed-point money values for ``offbudget``.

Amounts are signed integers in minor units (e.g. cents). There is exactly one
currency in play, so no conversion or currency-mismatch checking happens here.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

# Number of decimal places represented by one minor unit.
MINOR_UNIT_EXPONENT = 2
_QUANT = Decimal(1).scaleb(-MINOR_UNIT_EXPONENT)


@dataclass(slots=True)
class MoneyValue:
    """Mutable container for a fixed-point amount in minor units."""

    amount: int = 0

    def set_amount(self, amount: int) -> None:
        self.amount = int(amount)

    def to_decimal(self) -> Decimal:
        """Return the amount in major units (``150`` -> ``Decimal("1.50")``)."""

        return Decimal(self.amount).scaleb(-MINOR_UNIT_EXPONENT).quantize(_QUANT)

    def __str__(self) -> str:
        return f"{self.to_decimal():.{MINOR_UNIT_EXPONENT}f}"


def add_money_values(base: MoneyValue, add: MoneyValue) -> None:
    """Add ``add`` into ``base`` in place.

    After the call ``base.amount`` holds the sum of both amounts; ``add`` is
    left untouched.
    """

    base.set_amount(base.amount + add.amount)


def div_toward_zero(numerator: int, denominator: int) -> int:
    """Integer division that truncates toward zero (``-151 / 2 -> -75``).

    Python's ``//`` floors, which differs for negative quotients; amounts are
    signed so the derivations use this helper instead.
    """

    q = abs(numerator) // abs(denominator)
    return q if (numerator >= 0) == (denominator > 0) else -q


def to_minor_units(raw: Any) -> int:
    """Parse a decimal amount (``"-12.34"``, ``12``, ``Decimal``) into minor units.

    Values with more precision than one minor unit are rounded half-up.
    Raises ``ValueError`` when ``raw`` is not a finite number.
    """

    if isinstance(raw, bool):
        raise ValueError(f"not an amount: {raw!r}")
    try:
        d = Decimal(str(raw).strip().replace(",", ""))
    except (InvalidOperation, ValueError) as e:
        raise ValueError(f"not an amount: {raw!r}") from e
    if not d.is_finite():
        raise ValueError(f"not an amount: {raw!r}")
    return int(d.quantize(_QUANT, rounding=ROUND_HALF_UP).scaleb(MINOR_UNIT_EXPONENT))


__all__ = [
    "MINOR_UNIT_EXPONENT",
    "MoneyValue",
    "add_money_values",
    "div_toward_zero",
    "to_minor_units",
]
