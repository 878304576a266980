"""
Numeric Formulas

Compound growth, goal horizons, budget classification and projection
series. Pure functions over Decimal money.

DESIGN DECISION: Amounts are computed in Decimal and rounded to cents
(half up) only on the way out, so that the same inputs always produce
the same cents on every platform.

Rates are annual fractions: 0.07 means 7 % per year.
"""

import math
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from finflow.config import ProjectionSettings, get_settings
from finflow.models.finance import Frequency

ZERO = Decimal("0")
ONE = Decimal("1")
CENT = Decimal("0.01")
MONTHS_PER_YEAR = 12

Number = Union[int, float, Decimal]

# Monthly-equivalent multipliers of each recurring frequency
FREQUENCY_PER_MONTH = {
    Frequency.WEEKLY: Decimal(52) / Decimal(12),
    Frequency.BIWEEKLY: Decimal(26) / Decimal(12),
    Frequency.MONTHLY: ONE,
    Frequency.QUARTERLY: ONE / Decimal(3),
    Frequency.YEARLY: ONE / Decimal(12),
}


class BudgetTier(str, Enum):
    """Classification of spent versus budget."""
    UNDER = "under"
    WARNING = "warning"
    OVER = "over"


class BudgetStatus(BaseModel):
    """Spent percentage of a budget and its tier."""
    model_config = ConfigDict(frozen=True)

    percentage: float
    tier: BudgetTier


class GoalHorizon(BaseModel):
    """
    Months until a savings balance reaches its target.

    `months` is math.inf when the target is not reached within the cap;
    callers display that as "never".
    """
    model_config = ConfigDict(frozen=True)

    months: float
    final_amount: Decimal

    @property
    def is_reachable(self) -> bool:
        return not math.isinf(self.months)

    @property
    def years(self) -> float:
        return self.months / MONTHS_PER_YEAR


class ProjectionPoint(BaseModel):
    """One year of a compound-growth projection, in whole currency units."""
    model_config = ConfigDict(frozen=True)

    year: int = Field(ge=0)
    value: int
    contributions: int
    interest: int


def _coerce_amount(amount: Number) -> Decimal:
    if isinstance(amount, Decimal):
        return amount
    return Decimal(str(amount))


def round_cents(amount: Decimal) -> Decimal:
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def _round_units(amount: Decimal) -> int:
    return int(amount.quantize(ONE, rounding=ROUND_HALF_UP))


def _finite_or(amount: Number, default: Optional[Decimal]) -> Optional[Decimal]:
    """The amount as Decimal, or `default` when it is NaN or infinite."""
    try:
        value = _coerce_amount(amount)
    except (InvalidOperation, ValueError):
        return default
    return value if value.is_finite() else default


def _elapsed_months(months: Number) -> int:
    """Whole months of elapsed time; NaN, infinite or negative input is zero."""
    value = _finite_or(months, ZERO)
    if value <= 0:
        return 0
    return int(value)


def monthly_growth_factor(annual_rate: Number, compounds_per_year: int) -> Decimal:
    """
    Growth of one month under the given compounding frequency.

    With monthly compounding this is exactly 1 + rate / 12. Other
    frequencies use the equivalent monthly factor
    (1 + rate / n) ** (n / 12). A frequency of zero means no compounding.
    A NaN or infinite rate means no growth.
    """
    rate = _finite_or(annual_rate, ZERO)
    if compounds_per_year <= 0 or rate == ZERO:
        return ONE

    base = ONE + rate / Decimal(compounds_per_year)
    if base <= ZERO:
        return ZERO
    if compounds_per_year == MONTHS_PER_YEAR:
        return base
    return base ** (Decimal(compounds_per_year) / Decimal(MONTHS_PER_YEAR))


def compound_growth(
    principal: Number,
    monthly_contribution: Number,
    annual_rate: Number,
    compounds_per_year: int,
    months: Number,
) -> Decimal:
    """
    Balance after `months` of compounding with monthly contributions.

    The contribution is added at the end of every month, after that
    month's growth. Invalid elapsed time (NaN, negative) returns the
    principal unchanged. A NaN or infinite principal or contribution
    counts as zero.

    Returns the amount rounded to cents.
    """
    principal = _finite_or(principal, ZERO)
    elapsed = _elapsed_months(months)
    if elapsed == 0:
        return round_cents(principal)

    contribution = _finite_or(monthly_contribution, ZERO)
    factor = monthly_growth_factor(annual_rate, compounds_per_year)

    if factor == ONE:
        return round_cents(principal + contribution * elapsed)

    growth = factor ** elapsed
    # Future value: P * f^n + C * (f^n - 1) / (f - 1)
    balance = principal * growth + contribution * (growth - ONE) / (factor - ONE)
    return round_cents(balance)


def goal_horizon(
    current: Number,
    target_amount: Number,
    monthly_contribution: Number,
    annual_rate: Number,
    cap_months: Optional[int] = None,
) -> GoalHorizon:
    """
    Step month by month until the balance reaches the target.

    Each month: balance = balance * (1 + rate / 12) + contribution.
    Gives up after `cap_months` (default 1200) and reports
    months = inf with the balance reached so far. A NaN or infinite
    current balance, target or contribution is unreachable from the
    start; a NaN or infinite rate means no growth.
    """
    if cap_months is None:
        cap_months = get_settings().projection.horizon_cap_months

    balance = _finite_or(current, None)
    target = _finite_or(target_amount, None)
    contribution = _finite_or(monthly_contribution, None)
    if balance is None or target is None or contribution is None:
        return GoalHorizon(months=math.inf, final_amount=round_cents(balance or ZERO))

    monthly_rate = _finite_or(annual_rate, ZERO) / Decimal(MONTHS_PER_YEAR)
    factor = ONE + monthly_rate

    months = 0
    while balance < target:
        if months >= cap_months:
            return GoalHorizon(months=math.inf, final_amount=round_cents(balance))
        balance = balance * factor + contribution
        months += 1

    return GoalHorizon(months=months, final_amount=round_cents(balance))


def budget_status(
    spent: Number,
    budget: Number,
    settings: Optional[ProjectionSettings] = None,
) -> BudgetStatus:
    """
    Classify spending against a budget.

    <= 70 % is under, <= 95 % is warning, anything above is over.
    A budget of zero or less has no meaningful percentage and reports
    0 % / under; callers should not pass one. NaN or infinite input
    reports the same.
    """
    settings = settings or get_settings().projection
    budget = _finite_or(budget, None)
    spent = _finite_or(spent, None)
    if budget is None or spent is None or budget <= ZERO:
        return BudgetStatus(percentage=0.0, tier=BudgetTier.UNDER)

    percentage = float(spent / budget * 100)

    if percentage <= settings.budget_warning_threshold:
        tier = BudgetTier.UNDER
    elif percentage <= settings.budget_over_threshold:
        tier = BudgetTier.WARNING
    else:
        tier = BudgetTier.OVER

    return BudgetStatus(percentage=percentage, tier=tier)


def projection_series(
    principal: Number,
    monthly_contribution: Number,
    annual_rate: Number,
    years: int,
    compounds_per_year: int = MONTHS_PER_YEAR,
) -> list[ProjectionPoint]:
    """Yearly projection points for years 0..years (inclusive)."""
    principal = _finite_or(principal, ZERO)
    contribution = _finite_or(monthly_contribution, ZERO)

    points = []
    for year in range(max(0, years) + 1):
        months = year * MONTHS_PER_YEAR
        value = compound_growth(principal, contribution, annual_rate, compounds_per_year, months)
        contributions = principal + contribution * months
        points.append(ProjectionPoint(
            year=year,
            value=_round_units(value),
            contributions=_round_units(contributions),
            interest=_round_units(value - contributions),
        ))
    return points


def monthly_equivalent(amount: Number, frequency: Frequency) -> Decimal:
    """Convert a recurring amount to its per-month equivalent, in cents."""
    return round_cents(_coerce_amount(amount) * FREQUENCY_PER_MONTH[Frequency(frequency)])
