"""
Aggregation

Pure reducers over raw collections: net worth, portfolio totals, asset
allocation, streak records, budget progress and recurring totals.

Every reducer resolves its numeric edge cases to sentinels (0, 0 %, an
empty list) so no NaN or infinity reaches a dashboard.
"""

from collections import OrderedDict
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

from finflow.config import ProjectionSettings, get_settings
from finflow.diagnostics import DiagnosticsLogger
from finflow.models.finance import (
    Account,
    Budget,
    ExpenseRecord,
    FinanceStreak,
    Investment,
    RecurringFlow,
    StreakType,
)
from finflow.projections.formulas import (
    ZERO,
    BudgetTier,
    budget_status,
    monthly_equivalent,
    round_cents,
)
from finflow.registry.categories import (
    AccountType,
    AssetType,
    CategoryRegistry,
    ExpenseCategory,
    get_registry,
)

CASH_TYPES = frozenset({AccountType.CHECKING, AccountType.SAVINGS, AccountType.CASH})
DEBT_TYPES = frozenset({AccountType.CREDIT, AccountType.LOAN})


# =============================================================================
# NET WORTH
# =============================================================================

class NetWorthSummary(BaseModel):
    """
    Net worth split into buckets.

    `total` is the signed sum of every included balance; the buckets are
    informational and do not need to add up to it (OTHER accounts only
    count towards the total).
    """
    model_config = ConfigDict(frozen=True)

    total: Decimal = ZERO
    cash: Decimal = ZERO
    investments: Decimal = ZERO
    crypto: Decimal = ZERO
    debt: Decimal = Field(default=ZERO, description="Absolute value of negative debt balances")
    account_count: int = 0

    @property
    def assets(self) -> Decimal:
        return self.cash + self.investments + self.crypto


def net_worth(accounts: Iterable[Account]) -> NetWorthSummary:
    """Sum balances of accounts not excluded from net worth."""
    total = cash = investments = crypto = debt = ZERO
    count = 0

    for account in accounts:
        if account.is_excluded_from_net_worth:
            continue
        balance = account.current_balance
        count += 1
        total += balance

        if account.account_type in CASH_TYPES:
            cash += balance
        elif account.account_type == AccountType.INVESTMENT:
            investments += balance
        elif account.account_type == AccountType.CRYPTO:
            crypto += balance
        elif account.account_type in DEBT_TYPES:
            debt += abs(min(balance, ZERO))

    return NetWorthSummary(
        total=total,
        cash=cash,
        investments=investments,
        crypto=crypto,
        debt=debt,
        account_count=count,
    )


# =============================================================================
# PORTFOLIO
# =============================================================================

class PortfolioSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_value: Decimal = ZERO
    total_cost: Decimal = ZERO
    gain_loss: Decimal = ZERO
    return_percent: float = 0.0
    position_count: int = 0


class AllocationSlice(BaseModel):
    """Share of one asset type in the portfolio."""
    model_config = ConfigDict(frozen=True)

    asset_type: AssetType
    label: str
    color: str
    value: Decimal
    percentage: float


def portfolio_summary(investments: Sequence[Investment]) -> PortfolioSummary:
    """
    Market value against cost basis.

    A position without a current price is valued at its average cost.
    A zero cost basis reports a 0 % return.
    """
    total_value = sum((item.market_value for item in investments), ZERO)
    total_cost = sum((item.cost_basis for item in investments), ZERO)
    gain_loss = total_value - total_cost
    return_percent = float(gain_loss / total_cost * 100) if total_cost > 0 else 0.0

    return PortfolioSummary(
        total_value=round_cents(total_value),
        total_cost=round_cents(total_cost),
        gain_loss=round_cents(gain_loss),
        return_percent=return_percent,
        position_count=len(investments),
    )


def allocation_breakdown(
    investments: Sequence[Investment],
    registry: Optional[CategoryRegistry] = None,
) -> list[AllocationSlice]:
    """
    Group positions by asset type in first-seen order.

    Returns an empty list when the portfolio has no value.
    """
    registry = registry or get_registry()

    values: OrderedDict = OrderedDict()
    for item in investments:
        values[item.asset_type] = values.get(item.asset_type, ZERO) + item.market_value

    total = sum(values.values(), ZERO)
    if total <= 0:
        return []

    slices = []
    for asset_type, value in values.items():
        meta = registry.asset(asset_type)
        slices.append(AllocationSlice(
            asset_type=asset_type,
            label=meta.label,
            color=meta.color,
            value=round_cents(value),
            percentage=float(value / total * 100),
        ))
    return slices


# =============================================================================
# STREAKS
# =============================================================================

class StreakStatus(BaseModel):
    model_config = ConfigDict(frozen=True)

    streak_type: StreakType
    current: int
    longest: int
    is_record: bool
    xp_earned: int = 0


def evaluate_streak(streak: FinanceStreak) -> StreakStatus:
    """A streak is a record when it is running and at least the longest."""
    return StreakStatus(
        streak_type=streak.streak_type,
        current=streak.current_streak,
        longest=streak.longest_streak,
        is_record=streak.current_streak >= streak.longest_streak and streak.current_streak > 0,
        xp_earned=streak.current_streak * streak.xp_per_day,
    )


def evaluate_streaks(streaks: Iterable[FinanceStreak]) -> list[StreakStatus]:
    return [evaluate_streak(streak) for streak in streaks]


# =============================================================================
# BUDGETS
# =============================================================================

class BudgetProgress(BaseModel):
    """Spending of one category against its budget."""
    model_config = ConfigDict(frozen=True)

    category: ExpenseCategory
    spent: Decimal
    budget: Decimal
    remaining: Decimal
    percentage: float
    tier: BudgetTier


def evaluate_budgets(
    budgets: Sequence[Budget],
    expense_records: Sequence[ExpenseRecord],
    settings: Optional[ProjectionSettings] = None,
    diagnostics: Optional[DiagnosticsLogger] = None,
) -> list[BudgetProgress]:
    """
    Budget progress in budget order.

    Spending is summed per category. `remaining` goes negative when the
    budget is exceeded. A zero budget reports 0 % and is logged.
    """
    settings = settings or get_settings().projection

    spent_by_category: dict[ExpenseCategory, Decimal] = {}
    for record in expense_records:
        spent_by_category[record.category] = (
            spent_by_category.get(record.category, ZERO) + record.amount
        )

    results = []
    for budget in budgets:
        spent = spent_by_category.get(budget.category, ZERO)
        if budget.amount <= 0 and diagnostics is not None:
            diagnostics.log_budget_undefined(budget.category.value)
        status = budget_status(spent, budget.amount, settings)
        results.append(BudgetProgress(
            category=budget.category,
            spent=spent,
            budget=budget.amount,
            remaining=budget.amount - spent,
            percentage=status.percentage,
            tier=status.tier,
        ))
    return results


# =============================================================================
# RECURRING FLOWS
# =============================================================================

def recurring_monthly_total(flows: Iterable[RecurringFlow]) -> Decimal:
    """Monthly equivalent of all active recurring flows."""
    total = ZERO
    for flow in flows:
        if flow.is_active:
            total += monthly_equivalent(flow.amount, flow.frequency)
    return total
