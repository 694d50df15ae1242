"""KPI data contract — Pydantic v2 models.

Attributes are snake_case; the wire/export format is camelCase so category
keys match the identifiers stored in kpi_goals / kpi_entries.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class TimeFrame(str, Enum):
    daily = "daily"
    weekly = "weekly"
    monthly = "monthly"


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, allow_inf_nan=False)


class KpiTarget(CamelModel):
    min: float
    max: float  # expected >= min, not enforced


class KpiGoal(CamelModel):
    id: str
    name: str
    target: KpiTarget
    unit: str = ""
    current_value: float = 0.0


class GoalSet(CamelModel):
    """Fixed-field goal record for one time frame.

    Subclasses declare one KpiGoal field per category. `get` bridges the
    camelCase category strings used by the store to those fields.
    """

    @classmethod
    def categories(cls) -> list[str]:
        return [to_camel(name) for name in cls.model_fields]

    @classmethod
    def field_for(cls, category: str) -> str | None:
        for name in cls.model_fields:
            if to_camel(name) == category:
                return name
        return None

    def get(self, category: str) -> KpiGoal | None:
        name = self.field_for(category)
        if name is None:
            return None
        return getattr(self, name)

    def items(self) -> list[tuple[str, KpiGoal]]:
        return [(to_camel(name), getattr(self, name)) for name in type(self).model_fields]


class DailyGoals(GoalSet):
    emails_sent: KpiGoal
    cold_calls_made: KpiGoal
    linkedin_connections: KpiGoal
    new_leads_prospected: KpiGoal
    meetings_booked: KpiGoal


class WeeklyGoals(GoalSet):
    meetings_booked: KpiGoal
    pipeline_generated: KpiGoal
    new_accounts_touched: KpiGoal
    personalized_loom_videos: KpiGoal


class MonthlyGoals(GoalSet):
    sqls_created: KpiGoal
    opportunities_created: KpiGoal
    pipeline_value_created: KpiGoal
    closed_deals: KpiGoal


GOAL_SETS: dict[TimeFrame, type[GoalSet]] = {
    TimeFrame.daily: DailyGoals,
    TimeFrame.weekly: WeeklyGoals,
    TimeFrame.monthly: MonthlyGoals,
}


class HistoryEntry(CamelModel):
    date: str
    metrics: dict[str, float] = Field(default_factory=dict)


class KpiData(CamelModel):
    daily: DailyGoals
    weekly: WeeklyGoals
    monthly: MonthlyGoals
    history: list[HistoryEntry] = Field(default_factory=list)

    def goals(self, time_frame: TimeFrame | str) -> GoalSet:
        return getattr(self, TimeFrame(time_frame).value)

    def goal(self, time_frame: TimeFrame | str, category: str) -> KpiGoal | None:
        """Slot lookup for store rows; unknown time frames/categories give None."""
        try:
            goals = self.goals(time_frame)
        except ValueError:
            return None
        return goals.get(category)


# ---------------------------------------------------------------------------
# Trend series
# ---------------------------------------------------------------------------


class WeeklyActivityTrendDataPoint(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    date: str  # short weekday label
    leads: float = Field(default=0.0, alias="Leads")
    emails: float = Field(default=0.0, alias="Emails")
    dms: float = Field(default=0.0, alias="DMs")
    follow_ups: float = Field(default=0.0, alias="FollowUps")
    meetings: float = Field(default=0.0, alias="Meetings")


class MonthlyPipelineDataPoint(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str  # "Week N"
    value: float = Field(default=0.0, alias="Value")


# ---------------------------------------------------------------------------
# API payloads
# ---------------------------------------------------------------------------


class Notification(CamelModel):
    title: str
    message: str
    level: str = "error"  # "error" | "info"
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ValueUpdate(CamelModel):
    value: float


class TargetUpdate(CamelModel):
    min: float
    max: float


class MutationResult(CamelModel):
    persisted: bool
    data: KpiData


class GoalProgress(CamelModel):
    category: str
    name: str
    unit: str
    current_value: float
    target: KpiTarget
    progress: float  # 0–100
    color: str  # "danger" | "warning" | "info" | "success"
    display_value: str


class TimeFrameProgress(CamelModel):
    time_frame: TimeFrame
    average_progress: int
    goals: list[GoalProgress] = Field(default_factory=list)


class DashboardState(CamelModel):
    user_id: str | None = None
    loaded: bool = False
    data: KpiData
    weekly_activity: list[WeeklyActivityTrendDataPoint] = Field(default_factory=list)
    monthly_pipeline: list[MonthlyPipelineDataPoint] = Field(default_factory=list)
    progress: list[TimeFrameProgress] = Field(default_factory=list)
    notifications: list[Notification] = Field(default_factory=list)
