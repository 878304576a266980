"""
Savings Goal Projections

Combines the goal record with the numeric formulas: where the balance
will be at the target date, how long until the target is reached, and
whether the goal is on track.
"""

from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict

from finflow.config import ProjectionSettings, get_settings
from finflow.diagnostics import DiagnosticsLogger
from finflow.models.finance import SavingsGoalProgress
from finflow.projections.formulas import GoalHorizon, compound_growth, goal_horizon


class GoalProjection(BaseModel):
    """Forward-looking view of one savings goal."""
    model_config = ConfigDict(frozen=True)

    goal_id: str
    progress_percent: float
    is_achieved: bool
    projected_amount: Decimal
    projection_months: int
    horizon: GoalHorizon
    months_until_target: Optional[int] = None
    days_remaining: Optional[int] = None
    on_track: Optional[bool] = None


def months_until(target: date, as_of: date) -> int:
    """Whole calendar months from `as_of` to `target`, never negative."""
    months = (target.year - as_of.year) * 12 + (target.month - as_of.month)
    if target.day < as_of.day:
        months -= 1
    return max(0, months)


def days_until(target: date, as_of: date) -> int:
    return (target - as_of).days


def project_goal(
    goal: SavingsGoalProgress,
    as_of: date,
    settings: Optional[ProjectionSettings] = None,
    diagnostics: Optional[DiagnosticsLogger] = None,
) -> GoalProjection:
    """
    Project a savings goal.

    The projected amount is taken at the target date, or after the default
    projection horizon (120 months) when the goal has no target date.
    A goal is on track when its horizon ends no later than its target date.
    """
    settings = settings or get_settings().projection

    if goal.target_date is not None:
        months_to_target = months_until(goal.target_date, as_of)
        projection_months = months_to_target
        days_remaining = days_until(goal.target_date, as_of)
    else:
        months_to_target = None
        projection_months = settings.default_projection_months
        days_remaining = None

    projected = compound_growth(
        goal.current_amount,
        goal.monthly_contribution,
        goal.interest_rate,
        goal.compounds_per_year,
        projection_months,
    )

    horizon = goal_horizon(
        goal.current_amount,
        goal.target_amount,
        goal.monthly_contribution,
        goal.interest_rate,
        cap_months=settings.horizon_cap_months,
    )
    if not horizon.is_reachable and diagnostics is not None:
        diagnostics.log_goal_unreachable(
            goal_id=goal.id,
            cap_months=settings.horizon_cap_months,
            final_amount=str(horizon.final_amount),
        )

    if goal.is_achieved:
        on_track = True
    elif months_to_target is None:
        on_track = None
    else:
        on_track = horizon.months <= months_to_target

    return GoalProjection(
        goal_id=goal.id,
        progress_percent=goal.progress_percent,
        is_achieved=goal.is_achieved,
        projected_amount=projected,
        projection_months=projection_months,
        horizon=horizon,
        months_until_target=months_to_target,
        days_remaining=days_remaining,
        on_track=on_track,
    )
