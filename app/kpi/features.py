"""Pure stateless helpers — progress math and display formatting, no I/O."""

from __future__ import annotations

import calendar
from decimal import ROUND_HALF_UP, Decimal

from app.kpi.models import GoalSet, KpiGoal


def calculate_progress(current: float, min_target: float, max_target: float) -> float:
    """Progress (0–100) of `current` between the min and max targets.

    - max == min: 100 once current reaches the target, else 0
    - otherwise linear interpolation between min (0) and max (100), clamped
    """
    if max_target == min_target:
        return 100.0 if current >= min_target else 0.0
    progress = (current - min_target) / (max_target - min_target) * 100.0
    return min(max(progress, 0.0), 100.0)


def goal_progress(goal: KpiGoal) -> float:
    return calculate_progress(goal.current_value, goal.target.min, goal.target.max)


def progress_color(progress: float) -> str:
    """Map progress percentage to a colour token."""
    if progress < 25:
        return "danger"
    if progress < 50:
        return "warning"
    if progress < 75:
        return "info"
    return "success"


def average_progress(goals: GoalSet) -> int:
    """Mean progress across every goal of one time frame, rounded."""
    values = [goal_progress(goal) for _, goal in goals.items()]
    if not values:
        return 0
    return int(_round_half_up(sum(values) / len(values)))


def format_currency(value: float) -> str:
    """en-US dollars, grouped, no decimal places: 25000 -> '$25,000'."""
    amount = int(_round_half_up(value))
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,}"


def format_number(value: float) -> str:
    """en-US grouping with at most three fraction digits."""
    quantized = Decimal(str(value)).quantize(Decimal("0.001"), rounding=ROUND_HALF_UP)
    if quantized == quantized.to_integral_value():
        return f"{int(quantized):,}"
    return f"{quantized.normalize():,f}"


def display_value(goal: KpiGoal) -> str:
    if goal.unit == "$":
        return format_currency(goal.current_value)
    return format_number(goal.current_value)


def days_in_month(year: int, month: int) -> int:
    """`month` is 1-based."""
    return calendar.monthrange(year, month)[1]


def _round_half_up(value: float) -> Decimal:
    return Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
