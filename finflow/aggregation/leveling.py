"""
Leveling & Achievements

Tier lookups, net-worth levels, milestones and the achievement catalogue.

DESIGN DECISION: Tier tables are validated once, when built: ranges are
ordered, contiguous and non-overlapping, and only the last range may be
open-ended. A lookup is then a first-match scan that clamps values below
or above the table to the nearest boundary tier and never raises.
"""

import math
from decimal import Decimal
from typing import Iterable, Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from finflow.aggregation.summaries import BudgetProgress
from finflow.models.finance import (
    Account,
    FinanceStreak,
    Investment,
    SavingsGoalProgress,
    StreakType,
)
from finflow.projections.formulas import BudgetTier
from finflow.registry.categories import AccountType

Number = Union[int, float, Decimal]

MIN_LEVEL = 1
MAX_LEVEL = 100


# =============================================================================
# TIER TABLES
# =============================================================================

class TierRange(BaseModel):
    """An inclusive integer range with a name. `max=None` is open-ended."""
    model_config = ConfigDict(frozen=True)

    min: int
    max: Optional[int] = None
    name: str
    color: str = "#9CA3AF"

    @model_validator(mode='after')
    def validate_bounds(self) -> 'TierRange':
        if self.max is not None and self.max < self.min:
            raise ValueError(f"Tier '{self.name}' ends before it starts")
        return self

    def contains(self, value: int) -> bool:
        return self.min <= value and (self.max is None or value <= self.max)


class TierTable:
    """
    Ordered, contiguous tier ranges.

    Usage:
        table = TierTable([TierRange(min=1, max=10, name="Beginner"), ...])
        table.lookup(42).name
    """

    def __init__(self, tiers: Sequence[TierRange]):
        if not tiers:
            raise ValueError("A tier table needs at least one tier")
        for previous, current in zip(tiers, tiers[1:]):
            if previous.max is None:
                raise ValueError(f"Only the last tier may be open-ended, not '{previous.name}'")
            if current.min != previous.max + 1:
                raise ValueError(
                    f"Tiers '{previous.name}' and '{current.name}' are not contiguous"
                )
        self._tiers = tuple(tiers)

    @property
    def tiers(self) -> tuple[TierRange, ...]:
        return self._tiers

    def lookup(self, value: int) -> TierRange:
        """First tier containing the value, clamped to the table bounds."""
        for tier in self._tiers:
            if tier.contains(value):
                return tier
        if value > self._tiers[0].min:
            return self._tiers[-1]
        return self._tiers[0]


# =============================================================================
# NET WORTH LEVEL
# =============================================================================

LEVEL_TIERS = TierTable([
    TierRange(min=1, max=10, name="Beginner", color="#9CA3AF"),
    TierRange(min=11, max=20, name="Saver", color="#4ADE80"),
    TierRange(min=21, max=30, name="Investor", color="#60A5FA"),
    TierRange(min=31, max=40, name="Affluent", color="#C084FC"),
    TierRange(min=41, max=50, name="Wealthy", color="#FBBF24"),
    TierRange(min=51, max=60, name="Rich", color="#FB923C"),
    TierRange(min=61, max=70, name="Millionaire", color="#FB7185"),
    TierRange(min=71, max=80, name="Elite", color="#22D3EE"),
    TierRange(min=81, max=90, name="Tycoon", color="#818CF8"),
    TierRange(min=91, max=100, name="Legend", color="#FACC15"),
])


def net_worth_level(amount: Number) -> int:
    """
    Level 1..100 on a logarithmic scale.

    Every tenfold increase of net worth adds ten levels: 1,000 is level 30,
    1,000,000 is level 60. Zero, negative or NaN net worth is level 1;
    infinite net worth is the top level.
    """
    value = float(amount)
    if math.isnan(value) or value <= 0:
        return MIN_LEVEL
    if math.isinf(value):
        return MAX_LEVEL
    return min(MAX_LEVEL, max(MIN_LEVEL, math.floor(math.log10(value + 1) * 10)))


def investment_level(portfolio_value: Number) -> int:
    """Same scale as net_worth_level, applied to portfolio value."""
    return net_worth_level(portfolio_value)


def net_worth_tier(level: int) -> TierRange:
    return LEVEL_TIERS.lookup(level)


def progress_in_tier(level: int) -> float:
    """Progress through the level's tier, 0 <= p < 100."""
    tier = net_worth_tier(level)
    level = min(max(level, tier.min), tier.max)
    return (level - tier.min) / (tier.max - tier.min + 1) * 100


# =============================================================================
# MILESTONES & ACHIEVEMENTS
# =============================================================================

class Milestone(BaseModel):
    model_config = ConfigDict(frozen=True)

    amount: int
    icon: str
    title: str
    xp: int


NET_WORTH_MILESTONES = (
    Milestone(amount=1000, icon="🌱", title="First Thousand", xp=50),
    Milestone(amount=5000, icon="🌿", title="Savings Sprout", xp=100),
    Milestone(amount=10000, icon="🌳", title="10K Club", xp=200),
    Milestone(amount=25000, icon="💎", title="Wealth Builder", xp=300),
    Milestone(amount=50000, icon="🏆", title="Half Way to 100K", xp=400),
    Milestone(amount=100000, icon="👑", title="Six Figures", xp=500),
    Milestone(amount=250000, icon="🚀", title="Quarter Million", xp=750),
    Milestone(amount=500000, icon="🌟", title="Half Million", xp=1000),
    Milestone(amount=1000000, icon="💰", title="Millionaire", xp=2000),
)


def _achievement_tiers() -> TierTable:
    tiers = [TierRange(min=0, max=NET_WORTH_MILESTONES[0].amount - 1, name="Getting Started")]
    for milestone, following in zip(NET_WORTH_MILESTONES, NET_WORTH_MILESTONES[1:]):
        tiers.append(TierRange(min=milestone.amount, max=following.amount - 1, name=milestone.title))
    tiers.append(TierRange(min=NET_WORTH_MILESTONES[-1].amount, name=NET_WORTH_MILESTONES[-1].title))
    return TierTable(tiers)


ACHIEVEMENT_TIERS = _achievement_tiers()


def achievement_tier_for(net_worth: Number) -> TierRange:
    """Milestone tier of a net worth; negative and NaN values clamp to the first."""
    value = float(net_worth)
    if math.isnan(value) or value == -math.inf:
        return ACHIEVEMENT_TIERS.tiers[0]
    if value == math.inf:
        return ACHIEVEMENT_TIERS.tiers[-1]
    return ACHIEVEMENT_TIERS.lookup(math.floor(value))


def next_milestone(net_worth: Number) -> Optional[Milestone]:
    """The first milestone not yet reached, or None above the last one."""
    value = float(net_worth)
    if math.isnan(value):
        return NET_WORTH_MILESTONES[0]
    for milestone in NET_WORTH_MILESTONES:
        if value < milestone.amount:
            return milestone
    return None


def savings_goal_xp(target_amount: Number) -> int:
    """XP for reaching a savings goal, scaled by its target."""
    target = float(target_amount)
    if target >= 10000:
        return 150
    if target >= 5000:
        return 100
    if target >= 1000:
        return 75
    if target >= 500:
        return 50
    return 25


class AchievementDefinition(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str
    title: str
    description: str
    icon: str
    xp_reward: int
    threshold: Optional[int] = None


class AchievementStatus(BaseModel):
    model_config = ConfigDict(frozen=True)

    definition: AchievementDefinition
    unlocked: bool

    @property
    def key(self) -> str:
        return self.definition.key


ACHIEVEMENTS = tuple(
    [
        AchievementDefinition(
            key=f"net_worth_{milestone.amount}",
            title=milestone.title,
            description=f"Reach a net worth of {milestone.amount:,}",
            icon=milestone.icon,
            xp_reward=milestone.xp,
            threshold=milestone.amount,
        )
        for milestone in NET_WORTH_MILESTONES
    ]
    + [
        AchievementDefinition(
            key="savings_streak_7", title="Weekly Saver",
            description="7 days of positive cashflow", icon="🔥", xp_reward=50, threshold=7,
        ),
        AchievementDefinition(
            key="savings_streak_30", title="Monthly Saver",
            description="30 days of positive cashflow", icon="🏆", xp_reward=150, threshold=30,
        ),
        AchievementDefinition(
            key="first_goal", title="Goal Getter",
            description="First savings goal reached", icon="🎯", xp_reward=100,
        ),
        AchievementDefinition(
            key="first_investment", title="Investor",
            description="First investment made", icon="📈", xp_reward=75,
        ),
        AchievementDefinition(
            key="budget_master", title="Budget Master",
            description="Every budget kept", icon="📊", xp_reward=100,
        ),
        AchievementDefinition(
            key="debt_free", title="Debt Free",
            description="No debt left", icon="🆓", xp_reward=200,
        ),
        AchievementDefinition(
            key="diversified", title="Diversified",
            description="3+ different asset types", icon="🌈", xp_reward=75, threshold=3,
        ),
    ]
)


class AchievementContext(BaseModel):
    """Everything achievement conditions are evaluated against."""
    model_config = ConfigDict(frozen=True)

    net_worth: Decimal = Decimal("0")
    unlocked_keys: frozenset[str] = Field(default_factory=frozenset)
    accounts: list[Account] = Field(default_factory=list)
    streaks: list[FinanceStreak] = Field(default_factory=list)
    savings_goals: list[SavingsGoalProgress] = Field(default_factory=list)
    investments: list[Investment] = Field(default_factory=list)
    budget_progress: list[BudgetProgress] = Field(default_factory=list)


def _best_streak(streaks: Iterable[FinanceStreak], streak_type: StreakType) -> int:
    return max(
        (max(s.current_streak, s.longest_streak) for s in streaks if s.streak_type == streak_type),
        default=0,
    )


def _condition_holds(definition: AchievementDefinition, context: AchievementContext) -> bool:
    key = definition.key
    if key.startswith("net_worth_"):
        return context.net_worth >= definition.threshold
    if key.startswith("savings_streak_"):
        return _best_streak(context.streaks, StreakType.POSITIVE_CASHFLOW) >= definition.threshold
    if key == "first_goal":
        return any(goal.is_achieved for goal in context.savings_goals)
    if key == "first_investment":
        return any(item.quantity > 0 for item in context.investments)
    if key == "budget_master":
        return bool(context.budget_progress) and all(
            progress.tier != BudgetTier.OVER for progress in context.budget_progress
        )
    if key == "debt_free":
        return bool(context.accounts) and not any(
            account.account_type in (AccountType.CREDIT, AccountType.LOAN)
            and account.current_balance < 0
            for account in context.accounts
            if not account.is_excluded_from_net_worth
        )
    if key == "diversified":
        return len({item.asset_type for item in context.investments}) >= definition.threshold
    return False


def evaluate_achievements(
    net_worth: Number,
    unlocked_keys: Iterable[str] = (),
    accounts: Sequence[Account] = (),
    streaks: Sequence[FinanceStreak] = (),
    savings_goals: Sequence[SavingsGoalProgress] = (),
    investments: Sequence[Investment] = (),
    budget_progress: Sequence[BudgetProgress] = (),
) -> list[AchievementStatus]:
    """
    Status of every achievement, in catalogue order.

    An achievement is unlocked when its key was unlocked before or its
    condition holds for the given records. A NaN or infinite net worth
    counts as zero.
    """
    worth = Decimal(str(net_worth))
    context = AchievementContext(
        net_worth=worth if worth.is_finite() else Decimal("0"),
        unlocked_keys=frozenset(unlocked_keys),
        accounts=list(accounts),
        streaks=list(streaks),
        savings_goals=list(savings_goals),
        investments=list(investments),
        budget_progress=list(budget_progress),
    )
    return [
        AchievementStatus(
            definition=definition,
            unlocked=definition.key in context.unlocked_keys or _condition_holds(definition, context),
        )
        for definition in ACHIEVEMENTS
    ]


def total_xp(statuses: Iterable[AchievementStatus]) -> int:
    return sum(status.definition.xp_reward for status in statuses if status.unlocked)
