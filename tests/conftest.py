"""Shared fixtures for the test suite."""

from __future__ import annotations

from contextlib import ExitStack
from datetime import date
from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock, patch

import pytest
from httpx import ASGITransport, AsyncClient

from app.db import get_session
from app.kpi.sessions import SessionRegistry
from app.main import app

# Wednesday; its Monday-aligned week starts 2026-02-16
TODAY = date(2026, 2, 18)


# ---------------------------------------------------------------------------
# Fake DB session (no real Postgres needed)
# ---------------------------------------------------------------------------

class FakeSession:
    """Minimal stand-in for AsyncSession that records every statement."""

    def __init__(self, rows: list[dict[str, Any]] | None = None, rowcount: int | None = None):
        self._rows = rows or []
        self._rowcount = rowcount
        self.executed: list[tuple[str, dict[str, Any]]] = []
        self.commits = 0
        self.rollbacks = 0
        self.fail_with: Exception | None = None

    async def execute(self, stmt, params=None):
        self.executed.append((str(stmt), dict(params or {})))
        if self.fail_with is not None:
            raise self.fail_with
        return FakeResult(self._rows, self._rowcount)

    async def commit(self):
        self.commits += 1

    async def rollback(self):
        self.rollbacks += 1

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        pass


class FakeResult:
    def __init__(self, rows: list[dict[str, Any]], rowcount: int | None = None):
        self._rows = rows
        self._keys = list(rows[0].keys()) if rows else []
        self.rowcount = len(rows) if rowcount is None else rowcount

    def keys(self):
        return self._keys

    def fetchall(self):
        return [tuple(r[k] for k in self._keys) for r in self._rows]

    def fetchone(self):
        rows = self.fetchall()
        return rows[0] if rows else None


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

STORE_DEFAULTS: dict[str, Any] = {
    "fetch_goal_overrides": [],
    "fetch_goal_override": None,
    "insert_goal_override": None,
    "update_goal_override": None,
    "fetch_entries_for_date": [],
    "fetch_entries_between": [],
    "fetch_entry": None,
    "insert_entry": None,
    "update_entry": None,
    "delete_entries_for_date": 0,
}


@pytest.fixture()
def mock_store():
    """Patch every store gateway call with an AsyncMock (attribute per function)."""
    with ExitStack() as stack:
        mocks = {
            name: stack.enter_context(
                patch(f"app.kpi.store.{name}", new_callable=AsyncMock, return_value=value)
            )
            for name, value in STORE_DEFAULTS.items()
        }
        yield SimpleNamespace(**mocks)


@pytest.fixture()
def fake_session():
    """Return a FakeSession with no rows (override _rows in tests if needed)."""
    return FakeSession()


@pytest.fixture()
def override_session(fake_session):
    """Override the FastAPI dependency so no real DB is needed."""
    async def _override():
        yield fake_session

    app.dependency_overrides[get_session] = _override
    yield fake_session
    app.dependency_overrides.clear()


@pytest.fixture()
def registry():
    previous = app.state.kpi_sessions
    app.state.kpi_sessions = SessionRegistry(today=lambda: TODAY)
    yield app.state.kpi_sessions
    app.state.kpi_sessions = previous


@pytest.fixture()
async def client(override_session, registry):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


def make_entry(
    category: str,
    value: float,
    entry_date: date = TODAY,
    time_frame: str = "daily",
    entry_id: int = 1,
    user_id: str = "user-1",
) -> dict[str, Any]:
    """Helper to build a fake kpi_entries row dict."""
    return {
        "id": entry_id,
        "user_id": user_id,
        "time_frame": time_frame,
        "category": category,
        "value": value,
        "entry_date": entry_date,
    }


def make_goal_override(
    category: str,
    min_target: float,
    max_target: float,
    time_frame: str = "daily",
    goal_id: int = 1,
    user_id: str = "user-1",
) -> dict[str, Any]:
    """Helper to build a fake kpi_goals row dict."""
    return {
        "id": goal_id,
        "user_id": user_id,
        "time_frame": time_frame,
        "category": category,
        "min_target": min_target,
        "max_target": max_target,
        "updated_at": None,
    }
