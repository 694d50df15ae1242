"""Trend series derivation — bucket raw entry rows by date.

Rows are the dicts returned by `store.fetch_entries_between`
(`category`, `value`, `entry_date`). Rows outside the window or with an
unknown category are dropped; missing days/weeks stay at zero.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Any, Iterable

from app.kpi.models import MonthlyPipelineDataPoint, WeeklyActivityTrendDataPoint

WEEKDAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")

# Daily category -> WeeklyActivityTrendDataPoint attribute
ACTIVITY_SERIES: dict[str, str] = {
    "newLeadsProspected": "leads",
    "emailsSent": "emails",
    "linkedinConnections": "dms",
    "coldCallsMade": "follow_ups",
    "meetingsBooked": "meetings",
}

PIPELINE_CATEGORY = "pipelineGenerated"


def _as_date(value: Any) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value[:10])
        except ValueError:
            return None
    return None


def _as_float(value: Any) -> float | None:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def activity_window(today: date, days: int = 7) -> list[date]:
    """Trailing `days` calendar dates ending with today, oldest first."""
    return [today - timedelta(days=offset) for offset in range(days - 1, -1, -1)]


def pipeline_week_starts(today: date, weeks: int = 4) -> list[date]:
    """Monday of each trailing week bucket, oldest first; the last one contains today."""
    current_monday = today - timedelta(days=today.weekday())
    return [current_monday - timedelta(weeks=offset) for offset in range(weeks - 1, -1, -1)]


def weekly_activity_trend(
    rows: Iterable[dict[str, Any]],
    today: date,
    days: int = 7,
) -> list[WeeklyActivityTrendDataPoint]:
    window = activity_window(today, days)
    buckets: dict[date, dict[str, float]] = {
        d: {attr: 0.0 for attr in ACTIVITY_SERIES.values()} for d in window
    }

    for row in rows:
        attr = ACTIVITY_SERIES.get(row.get("category"))
        entry_date = _as_date(row.get("entry_date"))
        value = _as_float(row.get("value"))
        if attr is None or entry_date not in buckets or value is None:
            continue
        buckets[entry_date][attr] += value

    return [
        WeeklyActivityTrendDataPoint(date=WEEKDAY_LABELS[d.weekday()], **buckets[d])
        for d in window
    ]


def monthly_pipeline_trend(
    rows: Iterable[dict[str, Any]],
    today: date,
    weeks: int = 4,
) -> list[MonthlyPipelineDataPoint]:
    starts = pipeline_week_starts(today, weeks)
    totals = [0.0] * len(starts)

    for row in rows:
        if row.get("category", PIPELINE_CATEGORY) != PIPELINE_CATEGORY:
            continue
        entry_date = _as_date(row.get("entry_date"))
        value = _as_float(row.get("value"))
        if entry_date is None or value is None:
            continue
        for idx, start in enumerate(starts):
            # Half-open [start, start + 7d): a Monday belongs to the week it opens
            if start <= entry_date < start + timedelta(days=7):
                totals[idx] += value
                break

    return [
        MonthlyPipelineDataPoint(name=f"Week {idx + 1}", value=total)
        for idx, total in enumerate(totals)
    ]
