"""Projection formulas package."""

from finflow.projections.formulas import (
    BudgetStatus,
    BudgetTier,
    GoalHorizon,
    ProjectionPoint,
    budget_status,
    compound_growth,
    goal_horizon,
    monthly_equivalent,
    monthly_growth_factor,
    projection_series,
    round_cents,
)
from finflow.projections.goals import (
    GoalProjection,
    days_until,
    months_until,
    project_goal,
)

__all__ = [
    "BudgetStatus",
    "BudgetTier",
    "GoalHorizon",
    "GoalProjection",
    "ProjectionPoint",
    "budget_status",
    "compound_growth",
    "days_until",
    "goal_horizon",
    "monthly_equivalent",
    "monthly_growth_factor",
    "months_until",
    "project_goal",
    "projection_series",
    "round_cents",
]
