from __future__ import annotations

import json
import textwrap
from pathlib import Path

import pytest
from typer.testing import CliRunner

from offbudget.cli import app, cmd_forecast_csv, cmd_forecast_file, cmd_forecast_item
from tests.helpers.db import bootstrap_sqlite_db, owner_by_external_id

runner = CliRunner()


@pytest.fixture(autouse=True)
def _quiet_logs(monkeypatch: pytest.MonkeyPatch) -> None:
    # Keep INFO records off the runner's stderr so stdout assertions stay exact.
    monkeypatch.setenv("OFFBUDGET_LOG_LEVEL", "WARNING")

_RENT_CSV = """
id,date,amount,recurring,description
jan,2024-01-01,-1500.00,true,Rent
feb,2024-01-31,-1500.00,true,Rent
late-fee,2024-02-05,-25.00,false,Late fee
"""


def _csv(tmp_path: Path, body: str = _RENT_CSV, name: str = "rent.csv") -> Path:
    p = tmp_path / name
    p.write_text(textwrap.dedent(body).lstrip("\n"), encoding="utf-8")
    return p


# ---- handlers -----------------------------------------------------------------


def test_forecast_csv_prints_interval_and_value(tmp_path: Path, capsys: pytest.CaptureFixture):
    rc = cmd_forecast_csv(str(_csv(tmp_path)))

    out = capsys.readouterr().out.splitlines()
    assert rc == 0
    assert out == ["recurrence_interval_days\t15", "predicted_next_value\t-1500.00"]


def test_forecast_csv_manual_interval_json(tmp_path: Path, capsys: pytest.CaptureFixture):
    rc = cmd_forecast_csv(str(_csv(tmp_path)), manual_interval=30, as_json=True)

    data = json.loads(capsys.readouterr().out)
    assert rc == 0
    assert data["recurrence_interval_days"] == 30
    assert data["predicted_next_value"] == -150_000
    assert data["insufficient_data"] is False


def test_forecast_csv_notes_insufficient_history(tmp_path: Path, capsys: pytest.CaptureFixture):
    p = _csv(tmp_path, "id,date,amount,recurring\nonly,2024-01-01,9.99,false\n")

    rc = cmd_forecast_csv(str(p))

    out = capsys.readouterr().out
    assert rc == 0
    assert "recurrence_interval_days\t0" in out
    assert "predicted_next_value\t0.00" in out
    assert "insufficient" in out


def test_forecast_csv_reports_missing_file(tmp_path: Path, capsys: pytest.CaptureFixture):
    rc = cmd_forecast_csv(str(tmp_path / "missing.csv"))

    assert rc == 1
    assert "File not found" in capsys.readouterr().err


def test_forecast_csv_reports_parse_errors(tmp_path: Path, capsys: pytest.CaptureFixture):
    p = _csv(tmp_path, "id,date\na,2024-01-01\n")

    rc = cmd_forecast_csv(str(p))

    assert rc == 1
    assert "Failed to parse CSV" in capsys.readouterr().err


def test_forecast_file(tmp_path: Path, capsys: pytest.CaptureFixture):
    p = tmp_path / "item.json"
    p.write_text(
        json.dumps(
            {
                "description": "streaming",
                "transactions": [
                    {"id": "a", "date": "2024-01-01", "amount": "15.49", "recurring": True},
                    {"id": "b", "date": "2024-02-01", "amount": "15.99", "recurring": True},
                    {"id": "c", "date": "2024-03-01", "amount": "15.99", "recurring": True},
                ],
                "adjustments": [{"id": "price-hike", "details": {"from": "15.49"}}],
            }
        ),
        encoding="utf-8",
    )

    rc = cmd_forecast_file(str(p), as_json=True)

    data = json.loads(capsys.readouterr().out)
    assert rc == 0
    # 60 days / 3; (1549 + 1599 + 1599) / 3 = 1582.33
    assert data["recurrence_interval_days"] == 20
    assert data["predicted_next_value"] == 1582


def test_forecast_file_rejects_unknown_keys(tmp_path: Path, capsys: pytest.CaptureFixture):
    p = tmp_path / "item.json"
    p.write_text(json.dumps({"description": "x", "colour": "red"}), encoding="utf-8")

    rc = cmd_forecast_file(str(p))

    assert rc == 1
    assert "Invalid item file" in capsys.readouterr().err


def test_forecast_item_without_database_url(capsys: pytest.CaptureFixture):
    rc = cmd_forecast_item(1)

    assert rc == 1
    assert "DATABASE_URL is not set" in capsys.readouterr().err


# ---- Typer app --------------------------------------------------------------------


def test_no_args_shows_help():
    result = runner.invoke(app, [])

    assert "forecast-csv" in result.output


def test_app_forecast_csv(tmp_path: Path):
    result = runner.invoke(app, ["forecast-csv", "--csv-path", str(_csv(tmp_path)), "--json"])

    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout)["recurrence_interval_days"] == 15


def test_app_error_exit_code(tmp_path: Path):
    result = runner.invoke(app, ["forecast-csv", "--csv-path", str(tmp_path / "nope.csv")])

    assert result.exit_code == 1


def test_db_workflow_end_to_end(tmp_path: Path):
    url = bootstrap_sqlite_db(tmp_path / "cli.db")
    db = ["--database-url", url]

    created = runner.invoke(app, ["create-item", "--description", "rent", *db])
    assert created.exit_code == 0, created.output
    rent_id = int(created.stdout.strip())

    other = runner.invoke(app, ["create-item", "--description", "fees", "--manual-interval", "90", *db])
    fees_id = int(other.stdout.strip())

    imported = runner.invoke(
        app, ["import-transactions", "--csv-path", str(_csv(tmp_path)), "--item-id", str(rent_id), *db]
    )
    assert imported.exit_code == 0, imported.output
    assert "imported\t3" in imported.stdout

    forecast = runner.invoke(app, ["forecast", "--item-id", str(rent_id), "--json", *db])
    assert forecast.exit_code == 0, forecast.output
    data = json.loads(forecast.stdout)
    assert data["recurrence_interval_days"] == 15
    assert data["predicted_next_value"] == -150_000

    moved = runner.invoke(app, ["assign", "--item-id", str(fees_id), "-t", "late-fee", *db])
    assert moved.exit_code == 0, moved.output
    assert "moved=1" in moved.stdout
    assert owner_by_external_id(url)["late-fee"] == fees_id

    released = runner.invoke(app, ["release", "-t", "jan", "-t", "ghost", *db])
    assert "released\t1" in released.stdout

    listed = runner.invoke(app, ["list-items", *db])
    assert listed.stdout.splitlines() == [f"{rent_id}\trent", f"{fees_id}\tfees"]

    unknown = runner.invoke(app, ["assign", "--item-id", str(rent_id), "-t", "ghost", *db])
    assert unknown.exit_code == 1


def test_forecast_missing_item(tmp_path: Path):
    url = bootstrap_sqlite_db(tmp_path / "cli.db")

    result = runner.invoke(app, ["forecast", "--item-id", "404", "--database-url", url])

    assert result.exit_code == 1
