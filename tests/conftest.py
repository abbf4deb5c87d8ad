"""Pytest configuration for test isolation.

The database client keeps one engine per process and the logging setup
configures the package logger once. Both are process-wide, so each test gets
them reset here; otherwise the first test's SQLite file (or CliRunner stream)
would leak into the next one.
"""

from __future__ import annotations

import pytest
from db.client import dispose_engine

from offbudget.logging_setup import reset_logging


@pytest.fixture(autouse=True)
def _isolate_process_state(monkeypatch: pytest.MonkeyPatch):
    """Start each test without DATABASE_URL, a cached engine, or log handlers."""

    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.delenv("OFFBUDGET_LOG_LEVEL", raising=False)
    dispose_engine()
    reset_logging()
    yield
    dispose_engine()
    reset_logging()
