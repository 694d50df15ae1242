"""Remote store gateway — async CRUD over kpi_goals and kpi_entries.

kpi_goals:   id, user_id, time_frame, category, min_target, max_target, updated_at
kpi_entries: id, user_id, time_frame, category, value, entry_date

One logical goal row per (user_id, time_frame, category) and one logical
entry row per (user_id, time_frame, category, entry_date); callers upsert by
looking up first. Writes commit immediately. Driver/DB failures surface as
StoreError; an empty single-row lookup returns None.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Any, Sequence

from sqlalchemy import bindparam, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.kpi.errors import StoreError

logger = logging.getLogger(__name__)

_GOAL_COLUMNS = "id, user_id, time_frame, category, min_target, max_target, updated_at"
_ENTRY_COLUMNS = "id, user_id, time_frame, category, value, entry_date"


async def _execute(session: AsyncSession, stmt, params: dict[str, Any]):
    try:
        return await session.execute(stmt, params)
    except SQLAlchemyError as exc:
        logger.warning("KPI store query failed: %s", exc)
        await session.rollback()
        raise StoreError(str(exc)) from exc


async def _commit(session: AsyncSession) -> None:
    try:
        await session.commit()
    except SQLAlchemyError as exc:
        logger.warning("KPI store commit failed: %s", exc)
        await session.rollback()
        raise StoreError(str(exc)) from exc


def _rows(result) -> list[dict[str, Any]]:
    columns = list(result.keys())
    return [dict(zip(columns, r)) for r in result.fetchall()]


def _first(result) -> dict[str, Any] | None:
    row = result.fetchone()
    if row is None:
        return None
    return dict(zip(result.keys(), row))


# ---------------------------------------------------------------------------
# kpi_goals
# ---------------------------------------------------------------------------


async def fetch_goal_overrides(session: AsyncSession, user_id: str) -> Sequence[dict[str, Any]]:
    """Every goal override for the user, oldest update first."""
    query = (
        f"SELECT {_GOAL_COLUMNS} FROM kpi_goals "
        "WHERE user_id = :user_id "
        "ORDER BY updated_at, id"
    )
    result = await _execute(session, text(query), {"user_id": user_id})
    return _rows(result)


async def fetch_goal_override(
    session: AsyncSession,
    user_id: str,
    time_frame: str,
    category: str,
) -> dict[str, Any] | None:
    query = (
        f"SELECT {_GOAL_COLUMNS} FROM kpi_goals "
        "WHERE user_id = :user_id AND time_frame = :time_frame AND category = :category "
        "ORDER BY id DESC LIMIT 1"
    )
    params = {"user_id": user_id, "time_frame": time_frame, "category": category}
    result = await _execute(session, text(query), params)
    return _first(result)


async def insert_goal_override(
    session: AsyncSession,
    user_id: str,
    time_frame: str,
    category: str,
    min_target: float,
    max_target: float,
) -> None:
    query = (
        "INSERT INTO kpi_goals (user_id, time_frame, category, min_target, max_target, updated_at) "
        "VALUES (:user_id, :time_frame, :category, :min_target, :max_target, :updated_at)"
    )
    params = {
        "user_id": user_id,
        "time_frame": time_frame,
        "category": category,
        "min_target": min_target,
        "max_target": max_target,
        "updated_at": datetime.now(timezone.utc),
    }
    await _execute(session, text(query), params)
    await _commit(session)


async def update_goal_override(
    session: AsyncSession,
    goal_id: Any,
    min_target: float,
    max_target: float,
) -> None:
    query = (
        "UPDATE kpi_goals "
        "SET min_target = :min_target, max_target = :max_target, updated_at = :updated_at "
        "WHERE id = :id"
    )
    params = {
        "id": goal_id,
        "min_target": min_target,
        "max_target": max_target,
        "updated_at": datetime.now(timezone.utc),
    }
    await _execute(session, text(query), params)
    await _commit(session)


# ---------------------------------------------------------------------------
# kpi_entries
# ---------------------------------------------------------------------------


async def fetch_entries_for_date(
    session: AsyncSession,
    user_id: str,
    entry_date: date,
) -> Sequence[dict[str, Any]]:
    """All of the user's entries on one date, across time frames, in insertion order."""
    query = (
        f"SELECT {_ENTRY_COLUMNS} FROM kpi_entries "
        "WHERE user_id = :user_id AND entry_date = :entry_date "
        "ORDER BY id"
    )
    result = await _execute(session, text(query), {"user_id": user_id, "entry_date": entry_date})
    return _rows(result)


async def fetch_entries_between(
    session: AsyncSession,
    user_id: str,
    time_frame: str,
    start: date,
    end: date,
    categories: Sequence[str] | None = None,
) -> Sequence[dict[str, Any]]:
    """Entries with start <= entry_date <= end, optionally limited to categories."""
    query = (
        f"SELECT {_ENTRY_COLUMNS} FROM kpi_entries "
        "WHERE user_id = :user_id AND time_frame = :time_frame "
        "AND entry_date >= :start AND entry_date <= :end"
    )
    params: dict[str, Any] = {"user_id": user_id, "time_frame": time_frame, "start": start, "end": end}
    stmt_params = []
    if categories is not None:
        query += " AND category IN :categories"
        params["categories"] = list(categories)
        stmt_params.append(bindparam("categories", expanding=True))
    query += " ORDER BY entry_date, id"

    stmt = text(query)
    if stmt_params:
        stmt = stmt.bindparams(*stmt_params)
    result = await _execute(session, stmt, params)
    return _rows(result)


async def fetch_entry(
    session: AsyncSession,
    user_id: str,
    time_frame: str,
    category: str,
    entry_date: date,
) -> dict[str, Any] | None:
    query = (
        f"SELECT {_ENTRY_COLUMNS} FROM kpi_entries "
        "WHERE user_id = :user_id AND time_frame = :time_frame "
        "AND category = :category AND entry_date = :entry_date "
        "ORDER BY id DESC LIMIT 1"
    )
    params = {
        "user_id": user_id,
        "time_frame": time_frame,
        "category": category,
        "entry_date": entry_date,
    }
    result = await _execute(session, text(query), params)
    return _first(result)


async def insert_entry(
    session: AsyncSession,
    user_id: str,
    time_frame: str,
    category: str,
    value: float,
    entry_date: date,
) -> None:
    query = (
        "INSERT INTO kpi_entries (user_id, time_frame, category, value, entry_date) "
        "VALUES (:user_id, :time_frame, :category, :value, :entry_date)"
    )
    params = {
        "user_id": user_id,
        "time_frame": time_frame,
        "category": category,
        "value": value,
        "entry_date": entry_date,
    }
    await _execute(session, text(query), params)
    await _commit(session)


async def update_entry(session: AsyncSession, entry_id: Any, value: float) -> None:
    query = "UPDATE kpi_entries SET value = :value WHERE id = :id"
    await _execute(session, text(query), {"id": entry_id, "value": value})
    await _commit(session)


async def delete_entries_for_date(
    session: AsyncSession,
    user_id: str,
    time_frame: str,
    entry_date: date,
) -> int:
    """Delete the user's entries for one time frame and date. Returns rows removed."""
    query = (
        "DELETE FROM kpi_entries "
        "WHERE user_id = :user_id AND time_frame = :time_frame AND entry_date = :entry_date"
    )
    params = {"user_id": user_id, "time_frame": time_frame, "entry_date": entry_date}
    result = await _execute(session, text(query), params)
    await _commit(session)
    return result.rowcount or 0
