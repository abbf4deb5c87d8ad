"""Read transaction records from a CSV export.

CSV header (required keys): ``id, date, amount, recurring``; ``description`` is
optional and any other column is ignored.

- ``date``: ``YYYY-MM-DD`` or an ISO-8601 datetime
- ``amount``: decimal string in major units (``-12.34``); stored in minor units
- ``recurring``: ``true/false``, ``yes/no``, ``y/n``, ``1/0`` (case-insensitive)
"""

from __future__ import annotations

import csv
from collections.abc import Iterable, Iterator, Mapping
from os import PathLike
from pathlib import Path

from pydantic import ValidationError

from ..logging_setup import get_logger
from ..models import TransactionRecord, TransactionRow

logger = get_logger("offbudget.ingest.csv_source")

REQUIRED_HEADERS: frozenset[str] = frozenset({"id", "date", "amount", "recurring"})


def _first_error(err: ValidationError) -> str:
    first = err.errors()[0]
    loc = ".".join(str(p) for p in first.get("loc", ()))
    return f"{loc}: {first.get('msg', 'invalid value')}" if loc else str(first.get("msg"))


def to_records(rows: Iterable[Mapping[str, str | None]]) -> Iterator[TransactionRecord]:
    """Validate CSV rows and yield transaction snapshots in input order.

    Raises ``csv.Error`` naming the 1-based data line of the first bad row.
    """

    for line_no, row in enumerate(rows, start=2):
        # csv.DictReader maps surplus cells to the ``None`` key.
        clean = {
            k.strip(): (v.strip() if isinstance(v, str) else v)
            for k, v in row.items()
            if isinstance(k, str)
        }
        try:
            parsed = TransactionRow.model_validate(clean)
        except ValidationError as e:
            raise csv.Error(f"line {line_no}: {_first_error(e)}") from e
        yield parsed.to_record()


def load_transactions_from_csv(csv_path: str | PathLike[str]) -> list[TransactionRecord]:
    """Read ``csv_path`` and return its transactions.

    Raises ``csv.Error`` when the header is missing or lacks required columns,
    or when a row fails validation. File-system errors propagate unchanged.
    """

    p = Path(csv_path)
    with p.open(encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        headers = {h.strip() for h in (reader.fieldnames or []) if h}
        if not headers:
            raise csv.Error(f"CSV appears to have no header row: {csv_path}")
        missing = sorted(REQUIRED_HEADERS - headers)
        if missing:
            raise csv.Error("CSV header mismatch. Missing columns: " + ", ".join(missing))
        records = list(to_records(reader))

    logger.debug("loaded %d transaction(s) from %s", len(records), p)
    return records


__all__ = ["REQUIRED_HEADERS", "load_transactions_from_csv", "to_records"]
