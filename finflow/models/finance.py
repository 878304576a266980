"""
Financial Record Models

The inputs of the engine: accounts, income and expense aggregates,
recurring flows, savings goals, investments, streaks and budgets.

These models are designed to:
1. Normalize category strings at the boundary
2. Reject structurally impossible records (negative goal amounts, reversed date ranges)
3. Stay immutable once built

DESIGN DECISION: Money is Decimal everywhere. Rates are plain floats
expressed as fractions (0.07 == 7 % per year).
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from finflow.registry.categories import (
    AccountType,
    AssetType,
    ExpenseCategory,
    IncomeCategory,
    normalize_key,
)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class Frequency(str, Enum):
    """How often a recurring flow repeats."""
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


class FlowSourceType(str, Enum):
    """Where a recurring flow takes money from."""
    INCOME = "income"
    ACCOUNT = "account"


class FlowTargetType(str, Enum):
    """Where a recurring flow puts money."""
    ACCOUNT = "account"
    EXPENSE = "expense"
    SAVINGS = "savings"


class StreakType(str, Enum):
    """Tracked finance habits."""
    POSITIVE_CASHFLOW = "positive_cashflow"
    SAVINGS_CONTRIBUTION = "savings_contribution"
    BUDGET_KEPT = "budget_kept"
    NO_IMPULSE_BUY = "no_impulse_buy"


class BudgetPeriod(str, Enum):
    """Period a budget amount applies to."""
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


def _normalize_frequency(value):
    if isinstance(value, str):
        normalized = "".join(ch for ch in value.strip().lower() if ch.isalnum())
        if normalized == "byweekly":
            normalized = "biweekly"
        return normalized
    return value


# =============================================================================
# ACCOUNTS
# =============================================================================

class Account(BaseModel):
    """
    A user account (bank, card, wallet, loan).

    The balance is signed: credit cards and loans carry negative balances.
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    id: str = Field(
        ...,
        min_length=1,
        description="Account identifier"
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Display name"
    )
    account_type: AccountType = Field(
        default=AccountType.CHECKING,
        description="Account category"
    )
    institution: Optional[str] = Field(
        default=None,
        max_length=200
    )
    current_balance: Decimal = Field(
        default=Decimal("0"),
        description="Signed current balance"
    )
    currency: str = Field(
        default="EUR",
        min_length=3,
        max_length=3
    )
    credit_limit: Optional[Decimal] = Field(
        default=None,
        ge=0
    )
    interest_rate: Optional[float] = Field(
        default=None,
        description="Annual rate as a fraction"
    )
    color: Optional[str] = None
    icon: Optional[str] = None
    is_excluded_from_net_worth: bool = False
    is_active: bool = True

    @field_validator('account_type', mode='before')
    @classmethod
    def normalize_account_type(cls, v):
        return normalize_key(AccountType, v)

    @field_validator('currency')
    @classmethod
    def normalize_currency(cls, v: str) -> str:
        return v.upper()


# =============================================================================
# AGGREGATES
# =============================================================================

class IncomeRecord(BaseModel):
    """Income of one category, aggregated over a period (usually 30 days)."""
    model_config = ConfigDict(frozen=True)

    category: IncomeCategory
    amount: Decimal = Field(..., ge=0)
    currency: str = "EUR"

    @field_validator('category', mode='before')
    @classmethod
    def normalize_category(cls, v):
        return normalize_key(IncomeCategory, v)


class ExpenseRecord(BaseModel):
    """Expenses of one category, aggregated over a period (usually 30 days)."""
    model_config = ConfigDict(frozen=True)

    category: ExpenseCategory
    amount: Decimal = Field(..., ge=0)
    currency: str = "EUR"

    @field_validator('category', mode='before')
    @classmethod
    def normalize_category(cls, v):
        return normalize_key(ExpenseCategory, v)


# =============================================================================
# RECURRING FLOWS
# =============================================================================

class FlowSource(BaseModel):
    """
    Source descriptor of a recurring flow.

    INCOME sources are identified by category, ACCOUNT sources by id.
    """
    model_config = ConfigDict(frozen=True)

    type: FlowSourceType
    id: Optional[str] = None
    category: Optional[IncomeCategory] = None

    @field_validator('category', mode='before')
    @classmethod
    def normalize_category(cls, v):
        if v is None or v == "":
            return None
        return normalize_key(IncomeCategory, v)


class FlowTarget(BaseModel):
    """
    Target descriptor of a recurring flow.

    EXPENSE targets are identified by category, ACCOUNT and SAVINGS by id.
    """
    model_config = ConfigDict(frozen=True)

    type: FlowTargetType
    id: Optional[str] = None
    category: Optional[ExpenseCategory] = None

    @field_validator('category', mode='before')
    @classmethod
    def normalize_category(cls, v):
        if v is None or v == "":
            return None
        return normalize_key(ExpenseCategory, v)


class RecurringFlow(BaseModel):
    """
    A standing order: a repeating transfer between two financial entities.

    Endpoints that do not resolve to a node of the graph being built are
    skipped by the builder, not rejected here.
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    id: str = Field(..., min_length=1)
    source: FlowSource
    target: FlowTarget
    amount: Decimal = Field(..., ge=0)
    frequency: Frequency = Frequency.MONTHLY
    name: str = Field(default="", max_length=200)
    description: Optional[str] = Field(default=None, max_length=1000)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    is_active: bool = True

    @field_validator('frequency', mode='before')
    @classmethod
    def normalize_frequency(cls, v):
        return _normalize_frequency(v)

    @model_validator(mode='after')
    def validate_dates(self) -> 'RecurringFlow':
        """Validate date range."""
        if self.start_date and self.end_date:
            if self.end_date < self.start_date:
                raise ValueError("Recurring flow end date cannot be before start date")
        return self

    def is_active_on(self, day: date) -> bool:
        """Active flag set and the day inside the optional date range."""
        if not self.is_active:
            return False
        if self.start_date and day < self.start_date:
            return False
        if self.end_date and day > self.end_date:
            return False
        return True


# =============================================================================
# SAVINGS GOALS
# =============================================================================

class SavingsGoalProgress(BaseModel):
    """
    A savings goal with its current progress.

    is_achieved and progress_percent are derived, never stored.
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    icon: str = "target"
    color: str = "#3B82F6"
    target_amount: Decimal = Field(..., ge=0)
    current_amount: Decimal = Field(default=Decimal("0"), ge=0)
    monthly_contribution: Decimal = Field(default=Decimal("0"), ge=0)
    interest_rate: float = Field(
        default=0.0,
        description="Annual rate as a fraction"
    )
    compounds_per_year: int = Field(default=12, ge=0)
    start_date: Optional[date] = None
    target_date: Optional[date] = None

    @property
    def is_achieved(self) -> bool:
        return self.current_amount >= self.target_amount

    @property
    def progress_percent(self) -> float:
        """Progress towards the target, capped at 100."""
        if self.target_amount <= 0:
            return 0.0
        return min(100.0, float(self.current_amount / self.target_amount * 100))

    @property
    def remaining_amount(self) -> Decimal:
        return max(Decimal("0"), self.target_amount - self.current_amount)


# =============================================================================
# INVESTMENTS, STREAKS, BUDGETS
# =============================================================================

class Investment(BaseModel):
    """A position held in an investment account."""
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    id: str = Field(..., min_length=1)
    account_id: Optional[str] = None
    symbol: str = Field(default="", max_length=20)
    name: str = Field(default="", max_length=200)
    asset_type: AssetType = AssetType.OTHER
    quantity: Decimal = Field(default=Decimal("0"), ge=0)
    average_cost: Optional[Decimal] = Field(default=None, ge=0)
    current_price: Optional[Decimal] = Field(default=None, ge=0)
    purchased_at: Optional[date] = None

    @field_validator('asset_type', mode='before')
    @classmethod
    def normalize_asset_type(cls, v):
        return normalize_key(AssetType, v)

    @property
    def unit_price(self) -> Decimal:
        """Current price, else average cost, else zero."""
        if self.current_price is not None:
            return self.current_price
        if self.average_cost is not None:
            return self.average_cost
        return Decimal("0")

    @property
    def market_value(self) -> Decimal:
        return self.quantity * self.unit_price

    @property
    def cost_basis(self) -> Decimal:
        return self.quantity * (self.average_cost or Decimal("0"))


class FinanceStreak(BaseModel):
    """Current and longest run of one tracked habit."""
    model_config = ConfigDict(frozen=True)

    streak_type: StreakType
    current_streak: int = Field(default=0, ge=0)
    longest_streak: int = Field(default=0, ge=0)
    last_success_date: Optional[date] = None
    xp_per_day: int = Field(default=5, ge=0)


class Budget(BaseModel):
    """Spending limit for one expense category."""
    model_config = ConfigDict(frozen=True)

    category: ExpenseCategory
    amount: Decimal = Field(..., ge=0)
    period: BudgetPeriod = BudgetPeriod.MONTHLY

    @field_validator('category', mode='before')
    @classmethod
    def normalize_category(cls, v):
        return normalize_key(ExpenseCategory, v)


class FinanceBundle(BaseModel):
    """
    Everything the engine reads for one user, in input order.

    Order matters: the same ordered bundle always yields the same graph.
    """
    model_config = ConfigDict(frozen=True)

    accounts: list[Account] = Field(default_factory=list)
    income_records: list[IncomeRecord] = Field(default_factory=list)
    expense_records: list[ExpenseRecord] = Field(default_factory=list)
    savings_goals: list[SavingsGoalProgress] = Field(default_factory=list)
    recurring_flows: list[RecurringFlow] = Field(default_factory=list)
    investments: list[Investment] = Field(default_factory=list)
    streaks: list[FinanceStreak] = Field(default_factory=list)
    budgets: list[Budget] = Field(default_factory=list)
