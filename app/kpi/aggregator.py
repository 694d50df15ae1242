"""KPI aggregator — per-session state, trend derivation, write-through to the store.

One KpiAggregator is created per signed-in user (see sessions.py). It holds
the merged KpiData and the two trend series. Mutations update memory first,
then persist; a store failure becomes a notification and the in-memory
change is kept. A context without a user id is anonymous and every
operation is a silent no-op.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Callable
from zoneinfo import ZoneInfo

from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.kpi import features, store, trends
from app.kpi.catalog import build_initial_data
from app.kpi.errors import StoreError, UnknownCategoryError
from app.kpi.models import (
    DashboardState,
    GoalProgress,
    HistoryEntry,
    KpiData,
    KpiGoal,
    KpiTarget,
    MonthlyPipelineDataPoint,
    Notification,
    TimeFrame,
    TimeFrameProgress,
    WeeklyActivityTrendDataPoint,
)
from app.kpi.transfer import export_kpi_data, import_kpi_data

logger = logging.getLogger(__name__)


def local_today(tz_name: str | None = None) -> date:
    return datetime.now(ZoneInfo(tz_name or settings.default_tz)).date()


class KpiAggregator:
    def __init__(
        self,
        user_id: str | None,
        today: Callable[[], date] | None = None,
        activity_days: int | None = None,
        pipeline_weeks: int | None = None,
    ):
        self.user_id = user_id
        self._today = today or local_today
        self.activity_days = activity_days or settings.activity_trend_days
        self.pipeline_weeks = pipeline_weeks or settings.pipeline_trend_weeks

        self.data: KpiData = build_initial_data()
        self.weekly_activity: list[WeeklyActivityTrendDataPoint] = []
        self.monthly_pipeline: list[MonthlyPipelineDataPoint] = []
        self.notifications: list[Notification] = []
        self.loaded = False

    @property
    def authenticated(self) -> bool:
        return self.user_id is not None

    def today(self) -> date:
        return self._today()

    # ------------------------------------------------------------------
    # Load
    # ------------------------------------------------------------------

    async def load(self, session: AsyncSession) -> bool:
        """Rebuild state from the catalog, overrides, today's entries and trends.

        A store failure stops at the failing step: whatever was merged so far
        is kept, both trends stay empty, and a notification is queued.
        """
        if not self.authenticated:
            return False

        today = self.today()
        self.data = build_initial_data()
        self.weekly_activity = []
        self.monthly_pipeline = []
        self.loaded = False

        try:
            overrides = await store.fetch_goal_overrides(session, self.user_id)
            self._merge_overrides(overrides)

            entries = await store.fetch_entries_for_date(session, self.user_id, today)
            self._merge_entries(entries)

            window = trends.activity_window(today, self.activity_days)
            activity_rows = await store.fetch_entries_between(
                session,
                self.user_id,
                TimeFrame.daily.value,
                window[0],
                today,
                categories=list(trends.ACTIVITY_SERIES),
            )

            week_starts = trends.pipeline_week_starts(today, self.pipeline_weeks)
            pipeline_rows = await store.fetch_entries_between(
                session,
                self.user_id,
                TimeFrame.weekly.value,
                week_starts[0],
                today,
                categories=[trends.PIPELINE_CATEGORY],
            )
        except StoreError as exc:
            self._notify("Error loading KPI data", str(exc))
            return False

        self.weekly_activity = trends.weekly_activity_trend(activity_rows, today, self.activity_days)
        self.monthly_pipeline = trends.monthly_pipeline_trend(pipeline_rows, today, self.pipeline_weeks)
        self.loaded = True
        logger.info(
            "Loaded KPI data for user %s (%d overrides, %d entries today)",
            self.user_id,
            len(overrides),
            len(entries),
        )
        return True

    def _merge_overrides(self, rows: list[dict[str, Any]]) -> None:
        for row in rows:
            goal = self.data.goal(row.get("time_frame"), row.get("category"))
            if goal is None:
                logger.debug("Ignoring goal override for unknown slot %s/%s", row.get("time_frame"), row.get("category"))
                continue
            goal.target = KpiTarget(min=row["min_target"], max=row["max_target"])

    def _merge_entries(self, rows: list[dict[str, Any]]) -> None:
        # Rows arrive ordered by id, so the latest duplicate wins.
        for row in rows:
            goal = self.data.goal(row.get("time_frame"), row.get("category"))
            if goal is None:
                logger.debug("Ignoring entry for unknown slot %s/%s", row.get("time_frame"), row.get("category"))
                continue
            goal.current_value = float(row["value"])

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def _require_goal(self, time_frame: TimeFrame | str, category: str) -> KpiGoal:
        goal = self.data.goal(time_frame, category)
        if goal is None:
            raise UnknownCategoryError(TimeFrame(time_frame).value, category)
        return goal

    async def update_value(
        self,
        session: AsyncSession,
        time_frame: TimeFrame | str,
        category: str,
        value: float,
    ) -> bool:
        """Set today's value for one KPI. Returns True once the store confirmed it."""
        if not self.authenticated:
            return False

        time_frame = TimeFrame(time_frame)
        goal = self._require_goal(time_frame, category)
        goal.current_value = value

        today = self.today()
        try:
            existing = await store.fetch_entry(session, self.user_id, time_frame.value, category, today)
            if existing is None:
                await store.insert_entry(session, self.user_id, time_frame.value, category, value, today)
            else:
                await store.update_entry(session, existing["id"], value)
        except StoreError as exc:
            self._notify("Error saving KPI value", str(exc))
            return False
        return True

    async def update_target(
        self,
        session: AsyncSession,
        time_frame: TimeFrame | str,
        category: str,
        min_target: float,
        max_target: float,
    ) -> bool:
        """Replace the target range for one KPI. min <= max is not checked here."""
        if not self.authenticated:
            return False

        time_frame = TimeFrame(time_frame)
        goal = self._require_goal(time_frame, category)
        goal.target = KpiTarget(min=min_target, max=max_target)

        try:
            existing = await store.fetch_goal_override(session, self.user_id, time_frame.value, category)
            if existing is None:
                await store.insert_goal_override(
                    session, self.user_id, time_frame.value, category, min_target, max_target
                )
            else:
                await store.update_goal_override(session, existing["id"], min_target, max_target)
        except StoreError as exc:
            self._notify("Error saving KPI target", str(exc))
            return False
        return True

    async def reset_values(self, session: AsyncSession, time_frame: TimeFrame | str) -> bool:
        """Delete today's entries for a time frame, then zero it in memory."""
        if not self.authenticated:
            return False

        time_frame = TimeFrame(time_frame)
        try:
            removed = await store.delete_entries_for_date(session, self.user_id, time_frame.value, self.today())
        except StoreError as exc:
            self._notify(f"Error resetting {time_frame.value} values", str(exc))
            return False

        for _, goal in self.data.goals(time_frame).items():
            goal.current_value = 0.0
        logger.info("Reset %s values for user %s (%d entries removed)", time_frame.value, self.user_id, removed)
        return True

    def add_history_entry(self, entry_date: str, metrics: dict[str, float]) -> None:
        if not self.authenticated:
            return
        self.data.history.append(HistoryEntry(date=entry_date, metrics=dict(metrics)))

    # ------------------------------------------------------------------
    # Import / export
    # ------------------------------------------------------------------

    def export_json(self) -> str:
        return export_kpi_data(self.data)

    def import_json(self, raw: str | bytes) -> bool:
        """Replace in-memory data with an exported document.

        Raises ImportFormatError on malformed input, leaving state untouched.
        """
        if not self.authenticated:
            return False
        self.data = import_kpi_data(raw)
        self._notify("KPI data imported", "Your KPI data has been replaced by the imported file.", level="info")
        return True

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    def progress_summary(self) -> list[TimeFrameProgress]:
        summary: list[TimeFrameProgress] = []
        for time_frame in TimeFrame:
            goals = self.data.goals(time_frame)
            rows = []
            for category, goal in goals.items():
                progress = features.goal_progress(goal)
                rows.append(
                    GoalProgress(
                        category=category,
                        name=goal.name,
                        unit=goal.unit,
                        current_value=goal.current_value,
                        target=goal.target,
                        progress=round(progress, 1),
                        color=features.progress_color(progress),
                        display_value=features.display_value(goal),
                    )
                )
            summary.append(
                TimeFrameProgress(
                    time_frame=time_frame,
                    average_progress=features.average_progress(goals),
                    goals=rows,
                )
            )
        return summary

    def snapshot(self, include_notifications: bool = False) -> DashboardState:
        return DashboardState(
            user_id=self.user_id,
            loaded=self.loaded,
            data=self.data,
            weekly_activity=self.weekly_activity,
            monthly_pipeline=self.monthly_pipeline,
            progress=self.progress_summary(),
            notifications=self.drain_notifications() if include_notifications else [],
        )

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    def _notify(self, title: str, message: str, level: str = "error") -> None:
        if level == "error":
            logger.warning("%s for user %s: %s", title, self.user_id, message)
        else:
            logger.info("%s for user %s", title, self.user_id)
        self.notifications.append(Notification(title=title, message=message, level=level))

    def drain_notifications(self) -> list[Notification]:
        pending, self.notifications = self.notifications, []
        return pending
