"""Transaction sources feeding budget items."""

from .csv_source import load_transactions_from_csv, to_records

__all__ = ["load_transactions_from_csv", "to_records"]
