"""Aggregation, leveling and achievements."""

from finflow.aggregation.leveling import (
    ACHIEVEMENT_TIERS,
    ACHIEVEMENTS,
    LEVEL_TIERS,
    NET_WORTH_MILESTONES,
    AchievementContext,
    AchievementDefinition,
    AchievementStatus,
    Milestone,
    TierRange,
    TierTable,
    achievement_tier_for,
    evaluate_achievements,
    investment_level,
    net_worth_level,
    net_worth_tier,
    next_milestone,
    progress_in_tier,
    savings_goal_xp,
    total_xp,
)
from finflow.aggregation.summaries import (
    AllocationSlice,
    BudgetProgress,
    NetWorthSummary,
    PortfolioSummary,
    StreakStatus,
    allocation_breakdown,
    evaluate_budgets,
    evaluate_streak,
    evaluate_streaks,
    net_worth,
    portfolio_summary,
    recurring_monthly_total,
)

__all__ = [
    "ACHIEVEMENT_TIERS",
    "ACHIEVEMENTS",
    "LEVEL_TIERS",
    "NET_WORTH_MILESTONES",
    "AchievementContext",
    "AchievementDefinition",
    "AchievementStatus",
    "Milestone",
    "TierRange",
    "TierTable",
    "achievement_tier_for",
    "evaluate_achievements",
    "investment_level",
    "net_worth_level",
    "net_worth_tier",
    "next_milestone",
    "progress_in_tier",
    "savings_goal_xp",
    "total_xp",
    "AllocationSlice",
    "BudgetProgress",
    "NetWorthSummary",
    "PortfolioSummary",
    "StreakStatus",
    "allocation_breakdown",
    "evaluate_budgets",
    "evaluate_streak",
    "evaluate_streaks",
    "net_worth",
    "portfolio_summary",
    "recurring_monthly_total",
]
