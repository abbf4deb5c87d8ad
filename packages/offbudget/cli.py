# ruff: noqa: I001
"""CLI for the ``offbudget`` package.

Each command has a plain ``cmd_*`` handler that returns a process exit code,
plus a thin Typer wrapper. Environment variables (``DATABASE_URL``,
``OFFBUDGET_LOG_LEVEL``) are loaded from a local ``.env`` with
``python-dotenv`` before any command runs. Business logic lives in
``offbudget.api`` and ``offbudget.persistence``.
"""

from __future__ import annotations

import json
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from typer.models import OptionInfo

from .logging_setup import configure_logging
from .models import ItemForecast


# ---- Small module-level helpers ----------------------------------------------


def _err(msg: str) -> int:
    print(f"Error: {msg}", file=sys.stderr)
    return 1


def _print_forecast(result: ItemForecast, *, as_json: bool) -> None:
    if as_json:
        print(json.dumps(result.to_dict(), sort_keys=True))
        return
    data = result.to_dict()
    print(f"recurrence_interval_days\t{data['recurrence_interval_days']}")
    print(f"predicted_next_value\t{data['predicted_next_value_display']}")
    if result.insufficient_data:
        print("note\tinsufficient recurring history; zeros are not predictions")


def _exit(code: int) -> None:
    if code:
        raise typer.Exit(code)


# ---- Command handlers ---------------------------------------------------------


def cmd_forecast_csv(
    csv_path: str,
    *,
    manual_interval: int | None = None,
    as_json: bool = False,
) -> int:
    """Forecast an item made of every transaction in ``csv_path``.

    Prints ``recurrence_interval_days`` and ``predicted_next_value`` (major
    units) as tab-separated lines, or one JSON object with ``as_json``.
    """

    import csv

    from .api import forecast_csv

    try:
        result = forecast_csv(csv_path, manual_interval=manual_interval)
    except FileNotFoundError:
        return _err(f"File not found: {csv_path}")
    except PermissionError:
        return _err(f"Permission denied: {csv_path}")
    except csv.Error as e:
        return _err(f"Failed to parse CSV: {e}")

    _print_forecast(result, as_json=as_json)
    return 0


def cmd_forecast_file(item_file: str, *, as_json: bool = False) -> int:
    """Forecast the item described by a JSON item file."""

    from pydantic import ValidationError

    from .api import forecast_item, load_item_file

    try:
        item = load_item_file(item_file)
    except FileNotFoundError:
        return _err(f"File not found: {item_file}")
    except json.JSONDecodeError as e:
        return _err(f"Invalid JSON in {item_file}: {e}")
    except ValidationError as e:
        return _err(f"Invalid item file {item_file}: {e.error_count()} error(s)\n{e}")

    _print_forecast(forecast_item(item), as_json=as_json)
    return 0


def cmd_forecast_item(
    item_id: int,
    *,
    database_url: str | None = None,
    as_json: bool = False,
) -> int:
    """Forecast a stored item."""

    from .api import forecast_item_from_db
    from .errors import ItemNotFoundError

    try:
        result = forecast_item_from_db(item_id, database_url=database_url)
    except ItemNotFoundError as e:
        return _err(str(e))
    except Exception as e:
        return _err(f"failed to load item {item_id}: {e}")

    _print_forecast(result, as_json=as_json)
    return 0


def cmd_create_item(
    description: str,
    *,
    inflation: bool = False,
    manual_interval: int | None = None,
    database_url: str | None = None,
) -> int:
    """Create an empty item and print its id."""

    from db.client import session_scope

    from .item import Item
    from .persistence import create_item

    item = Item(
        description,
        inflation=inflation,
        recurrence_is_automatic=manual_interval is None,
        recurrence_manual_interval=manual_interval or 0,
    )
    try:
        with session_scope(database_url=database_url) as session:
            item_id = create_item(session, item)
    except Exception as e:
        return _err(f"failed to create item: {e}")

    print(item_id)
    return 0


def cmd_import_transactions(
    csv_path: str,
    *,
    item_id: int | None = None,
    database_url: str | None = None,
) -> int:
    """Upsert the transactions of ``csv_path`` and optionally assign them to an item."""

    import csv

    from db.client import session_scope

    from .errors import OffbudgetError
    from .ingest import load_transactions_from_csv
    from .persistence import assign_transactions, upsert_transactions

    try:
        records = load_transactions_from_csv(csv_path)
    except FileNotFoundError:
        return _err(f"File not found: {csv_path}")
    except csv.Error as e:
        return _err(f"Failed to parse CSV: {e}")

    moved = 0
    try:
        with session_scope(database_url=database_url) as session:
            count = upsert_transactions(session, records)
            if item_id is not None:
                moved = assign_transactions(session, item_id, [r.id for r in records])
    except OffbudgetError as e:
        return _err(str(e))
    except Exception as e:
        return _err(f"persistence failed: {e}")

    print(f"imported\t{count}")
    if item_id is not None:
        print(f"assigned\t{len(records)}\titem={item_id}\tmoved={moved}")
    return 0


def cmd_assign(
    item_id: int,
    transaction_ids: Sequence[str],
    *,
    database_url: str | None = None,
) -> int:
    """Move transactions to ``item_id``, detaching them from their previous item."""

    from db.client import session_scope

    from .errors import OffbudgetError
    from .persistence import assign_transactions

    try:
        with session_scope(database_url=database_url) as session:
            moved = assign_transactions(session, item_id, transaction_ids)
    except OffbudgetError as e:
        return _err(str(e))
    except Exception as e:
        return _err(f"assign failed: {e}")

    print(f"assigned\t{len(set(transaction_ids))}\tmoved={moved}")
    return 0


def cmd_release(transaction_ids: Sequence[str], *, database_url: str | None = None) -> int:
    from db.client import session_scope

    from .persistence import release_transactions

    try:
        with session_scope(database_url=database_url) as session:
            released = release_transactions(session, transaction_ids)
    except Exception as e:
        return _err(f"release failed: {e}")

    print(f"released\t{released}")
    return 0


def cmd_list_items(*, database_url: str | None = None) -> int:
    from db.client import session_scope

    from .persistence import list_items

    try:
        with session_scope(database_url=database_url) as session:
            rows = list_items(session)
    except Exception as e:
        return _err(f"failed to list items: {e}")

    for item_id, description in rows:
        print(f"{item_id}\t{description}")
    return 0


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Forecast budget items: recurrence interval and predicted next value "
        "from recurring transaction history."
    ),
)

# Module-level option objects to satisfy ruff B008 (no calls in parameter defaults).
CSV_PATH_OPTION: OptionInfo = typer.Option(
    ...,
    "--csv-path",
    help="Path to a transactions CSV (id,date,amount,recurring[,description])",
    dir_okay=False,
    file_okay=True,
    exists=False,  # the handler reports missing files
)
DATABASE_URL_OPTION: OptionInfo = typer.Option(
    None, "--database-url", help="Override DATABASE_URL (falls back to env var)."
)
JSON_OPTION: OptionInfo = typer.Option(False, "--json", help="Print the forecast as JSON.")
TRANSACTION_ID_OPTION: OptionInfo = typer.Option(
    ..., "--transaction-id", "-t", help="Transaction external id (repeatable)."
)


@app.command("forecast-csv")
def forecast_csv_cmd(
    csv_path: Annotated[Path, CSV_PATH_OPTION],
    manual_interval: int | None = typer.Option(
        None, help="Use manual recurrence with this many days instead of computing it."
    ),
    as_json: bool = JSON_OPTION,
) -> None:
    _exit(cmd_forecast_csv(str(csv_path), manual_interval=manual_interval, as_json=as_json))


@app.command("forecast-file")
def forecast_file_cmd(
    item_file: Path = typer.Option(..., "--item-file", help="Path to a JSON item file."),
    as_json: bool = JSON_OPTION,
) -> None:
    _exit(cmd_forecast_file(str(item_file), as_json=as_json))


@app.command("forecast")
def forecast_cmd(
    item_id: int = typer.Option(..., "--item-id", help="Stored item id."),
    database_url: str | None = DATABASE_URL_OPTION,
    as_json: bool = JSON_OPTION,
) -> None:
    _exit(cmd_forecast_item(item_id, database_url=database_url, as_json=as_json))


@app.command("create-item")
def create_item_cmd(
    description: str = typer.Option(..., "--description", help="Item label, e.g. 'rent'."),
    inflation: bool = typer.Option(False, "--inflation", help="Mark the item as inflating."),
    manual_interval: int | None = typer.Option(
        None, help="Fix the recurrence interval (days) instead of computing it."
    ),
    database_url: str | None = DATABASE_URL_OPTION,
) -> None:
    _exit(
        cmd_create_item(
            description,
            inflation=inflation,
            manual_interval=manual_interval,
            database_url=database_url,
        )
    )


@app.command("import-transactions")
def import_transactions_cmd(
    csv_path: Annotated[Path, CSV_PATH_OPTION],
    item_id: int | None = typer.Option(None, "--item-id", help="Assign imported rows to this item."),
    database_url: str | None = DATABASE_URL_OPTION,
) -> None:
    _exit(cmd_import_transactions(str(csv_path), item_id=item_id, database_url=database_url))


@app.command("assign")
def assign_cmd(
    item_id: int = typer.Option(..., "--item-id", help="Target item id."),
    transaction_ids: list[str] = TRANSACTION_ID_OPTION,
    database_url: str | None = DATABASE_URL_OPTION,
) -> None:
    _exit(cmd_assign(item_id, transaction_ids, database_url=database_url))


@app.command("release")
def release_cmd(
    transaction_ids: list[str] = TRANSACTION_ID_OPTION,
    database_url: str | None = DATABASE_URL_OPTION,
) -> None:
    _exit(cmd_release(transaction_ids, database_url=database_url))


@app.command("list-items")
def list_items_cmd(database_url: str | None = DATABASE_URL_OPTION) -> None:
    _exit(cmd_list_items(database_url=database_url))


@app.callback()
def _root(
    log_level: str | None = typer.Option(
        None, "--log-level", help="Log level (defaults to OFFBUDGET_LOG_LEVEL, then INFO)."
    ),
) -> None:
    """Load ``.env`` from the working directory and configure logging once."""

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging(log_level)


def main() -> None:  # pragma: no cover - console script entry
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
