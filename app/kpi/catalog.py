"""Static goal catalog — no DB, config only.

Each GoalDefinition is the default target for one (time frame, category)
slot. `build_initial_data` turns the catalog into a fresh, mutable KpiData;
the definitions themselves are frozen and never touched.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass

from app.kpi.models import GOAL_SETS, KpiData, KpiGoal, KpiTarget, TimeFrame

_GOAL_ID_NAMESPACE = uuid.UUID("6f1d3c2a-4b0e-4c8f-9a57-2f0b9e4d7c11")


@dataclass(frozen=True, slots=True)
class GoalDefinition:
    time_frame: TimeFrame
    category: str
    name: str
    min_target: float
    max_target: float
    unit: str = ""

    @property
    def goal_id(self) -> str:
        return str(uuid.uuid5(_GOAL_ID_NAMESPACE, f"{self.time_frame.value}:{self.category}"))

    def to_goal(self) -> KpiGoal:
        return KpiGoal(
            id=self.goal_id,
            name=self.name,
            target=KpiTarget(min=self.min_target, max=self.max_target),
            unit=self.unit,
            current_value=0.0,
        )


GOAL_CATALOG: tuple[GoalDefinition, ...] = (
    # Daily activity
    GoalDefinition(TimeFrame.daily, "emailsSent", "Emails Sent", 50, 100),
    GoalDefinition(TimeFrame.daily, "coldCallsMade", "Cold Calls Made", 30, 60),
    GoalDefinition(TimeFrame.daily, "linkedinConnections", "LinkedIn Connections", 10, 20),
    GoalDefinition(TimeFrame.daily, "newLeadsProspected", "New Leads Prospected", 15, 30),
    GoalDefinition(TimeFrame.daily, "meetingsBooked", "Meetings Booked", 1, 2),
    # Weekly
    GoalDefinition(TimeFrame.weekly, "meetingsBooked", "Meetings Booked", 5, 10),
    GoalDefinition(TimeFrame.weekly, "pipelineGenerated", "Pipeline Generated", 25000, 100000, "$"),
    GoalDefinition(TimeFrame.weekly, "newAccountsTouched", "New Accounts Touched", 30, 60),
    GoalDefinition(TimeFrame.weekly, "personalizedLoomVideos", "Personalized Loom Videos", 5, 10),
    # Monthly
    GoalDefinition(TimeFrame.monthly, "sqlsCreated", "SQLs Created", 20, 40),
    GoalDefinition(TimeFrame.monthly, "opportunitiesCreated", "Opportunities Created", 10, 20),
    GoalDefinition(TimeFrame.monthly, "pipelineValueCreated", "Pipeline Value Created", 100000, 500000, "$"),
    GoalDefinition(TimeFrame.monthly, "closedDeals", "Closed Deals", 2, 5),
)


def list_goals(time_frame: TimeFrame | None = None) -> list[GoalDefinition]:
    if time_frame is None:
        return list(GOAL_CATALOG)
    return [g for g in GOAL_CATALOG if g.time_frame == time_frame]


def get_goal(time_frame: TimeFrame | str, category: str) -> GoalDefinition | None:
    for g in GOAL_CATALOG:
        if g.time_frame.value == time_frame and g.category == category:
            return g
    return None


def build_initial_data() -> KpiData:
    """Fresh KpiData from the catalog, every currentValue at 0."""
    sections = {}
    for time_frame, goal_set in GOAL_SETS.items():
        goals = {g.category: g.to_goal() for g in list_goals(time_frame)}
        sections[time_frame.value] = goal_set.model_validate(goals)
    return KpiData(history=[], **sections)
