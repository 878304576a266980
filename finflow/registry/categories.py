"""
Category Registry

Static display metadata (label, color, icon) for the four category domains:
account types, income categories, expense categories and asset types.

DESIGN DECISION: Category keys are closed enums with an explicit OTHER
member. Raw strings coming from the outside are normalized once, at the
boundary, so that free text never travels through the graph.

The registry carries no state. Lookups of unknown keys return the
domain's OTHER entry and never raise.
"""

from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional, TypeVar, Union

import structlog
from pydantic import BaseModel, ConfigDict, Field


logger = structlog.get_logger(__name__)


# =============================================================================
# ENUMS - Closed sets of category keys
# =============================================================================

class AccountType(str, Enum):
    """Kinds of accounts a user can hold."""
    CHECKING = "checking"
    SAVINGS = "savings"
    CREDIT = "credit"
    INVESTMENT = "investment"
    CRYPTO = "crypto"
    CASH = "cash"
    LOAN = "loan"
    OTHER = "other"


class IncomeCategory(str, Enum):
    """Income categories."""
    SALARY = "salary"
    FREELANCE = "freelance"
    INVESTMENTS = "investments"
    RENTAL = "rental"
    OTHER = "other_income"


class ExpenseCategory(str, Enum):
    """
    Expense categories.

    SAVINGS and INVESTMENTS are money moved out of the spending pool
    rather than consumed; the cashflow summary reports them separately.
    """
    HOUSING = "housing"
    UTILITIES = "utilities"
    FOOD = "food"
    TRANSPORT = "transport"
    INSURANCE = "insurance"
    HEALTH = "health"
    COMMUNICATION = "communication"
    ENTERTAINMENT = "entertainment"
    SHOPPING = "shopping"
    EDUCATION = "education"
    GIFTS = "gifts"
    SUBSCRIPTIONS = "subscriptions"
    SAVINGS = "savings"
    INVESTMENTS = "investments"
    OTHER = "other_expense"


class AssetType(str, Enum):
    """Investment asset types."""
    STOCK = "stock"
    ETF = "etf"
    CRYPTO = "crypto"
    BOND = "bond"
    FUND = "fund"
    COMMODITY = "commodity"
    OTHER = "other"


class CategoryDomain(str, Enum):
    """The four lookup tables of the registry."""
    ACCOUNT = "account"
    INCOME = "income"
    EXPENSE = "expense"
    ASSET = "asset"


CategoryKey = Union[AccountType, IncomeCategory, ExpenseCategory, AssetType]
E = TypeVar("E", AccountType, IncomeCategory, ExpenseCategory, AssetType)

DOMAIN_ENUMS = MappingProxyType({
    CategoryDomain.ACCOUNT: AccountType,
    CategoryDomain.INCOME: IncomeCategory,
    CategoryDomain.EXPENSE: ExpenseCategory,
    CategoryDomain.ASSET: AssetType,
})

# Spellings seen in imported data that map onto a known key
_ALIASES: Mapping[type, Mapping[str, str]] = MappingProxyType({
    IncomeCategory: MappingProxyType({
        "other": "other_income",
        "gehalt": "salary",
        "wage": "salary",
        "wages": "salary",
        "dividends": "investments",
        "rent": "rental",
    }),
    ExpenseCategory: MappingProxyType({
        "other": "other_expense",
        "sparen": "savings",
        "investieren": "investments",
        "groceries": "food",
        "rent": "housing",
        "subscription": "subscriptions",
    }),
    AccountType: MappingProxyType({
        "giro": "checking",
        "current": "checking",
        "credit_card": "credit",
    }),
    AssetType: MappingProxyType({
        "stocks": "stock",
        "etfs": "etf",
        "bonds": "bond",
        "funds": "fund",
    }),
})


def normalize_key(enum_cls: type[E], value: Union[str, E, None]) -> E:
    """
    Map a raw category string onto the enum, falling back to OTHER.

    Matching is case-insensitive; spaces and dashes are read as underscores.
    """
    if isinstance(value, enum_cls):
        return value
    if value is None:
        return enum_cls.OTHER

    if isinstance(value, Enum):
        value = value.value
    key = str(value).strip().lower().replace(" ", "_").replace("-", "_")
    key = _ALIASES.get(enum_cls, {}).get(key, key)
    try:
        return enum_cls(key)
    except ValueError:
        logger.debug(
            "category_normalized",
            domain=enum_cls.__name__,
            raw_value=str(value),
            normalized=enum_cls.OTHER.value,
        )
        return enum_cls.OTHER


# =============================================================================
# METADATA
# =============================================================================

class CategoryMeta(BaseModel):
    """Display metadata for one category key."""
    model_config = ConfigDict(frozen=True)

    key: str = Field(..., description="Category key (enum value)")
    label: str = Field(..., min_length=1)
    color: str = Field(..., pattern=r"^#[0-9A-Fa-f]{6}$")
    icon: str = Field(..., min_length=1, description="Icon identifier")


def _table(*entries: tuple[CategoryKey, str, str, str]) -> Mapping[str, CategoryMeta]:
    return MappingProxyType({
        member.value: CategoryMeta(key=member.value, label=label, color=color, icon=icon)
        for member, label, color, icon in entries
    })


ACCOUNT_TYPES = _table(
    (AccountType.CHECKING, "Checking", "#3B82F6", "building-2"),
    (AccountType.SAVINGS, "Savings", "#10B981", "piggy-bank"),
    (AccountType.CREDIT, "Credit Card", "#EF4444", "credit-card"),
    (AccountType.INVESTMENT, "Brokerage", "#8B5CF6", "trending-up"),
    (AccountType.CRYPTO, "Crypto Wallet", "#F59E0B", "coins"),
    (AccountType.CASH, "Cash", "#6B7280", "wallet"),
    (AccountType.LOAN, "Loan", "#DC2626", "landmark"),
    (AccountType.OTHER, "Other", "#64748B", "circle"),
)

INCOME_CATEGORIES = _table(
    (IncomeCategory.SALARY, "Salary", "#10B981", "wallet"),
    (IncomeCategory.FREELANCE, "Freelance", "#34D399", "briefcase"),
    (IncomeCategory.INVESTMENTS, "Capital Income", "#6EE7B7", "trending-up"),
    (IncomeCategory.RENTAL, "Rental Income", "#A7F3D0", "dollar-sign"),
    (IncomeCategory.OTHER, "Other Income", "#D1FAE5", "gift"),
)

EXPENSE_CATEGORIES = _table(
    (ExpenseCategory.HOUSING, "Housing", "#EF4444", "home"),
    (ExpenseCategory.UTILITIES, "Utilities", "#F97316", "zap"),
    (ExpenseCategory.FOOD, "Food", "#F59E0B", "utensils"),
    (ExpenseCategory.TRANSPORT, "Transport", "#84CC16", "car"),
    (ExpenseCategory.INSURANCE, "Insurance", "#06B6D4", "shield"),
    (ExpenseCategory.HEALTH, "Health", "#EC4899", "heart"),
    (ExpenseCategory.COMMUNICATION, "Communication", "#8B5CF6", "smartphone"),
    (ExpenseCategory.ENTERTAINMENT, "Entertainment", "#6366F1", "gamepad-2"),
    (ExpenseCategory.SHOPPING, "Shopping", "#A855F7", "shopping-bag"),
    (ExpenseCategory.EDUCATION, "Education", "#14B8A6", "graduation-cap"),
    (ExpenseCategory.GIFTS, "Gifts", "#F43F5E", "gift"),
    (ExpenseCategory.SUBSCRIPTIONS, "Subscriptions", "#6366F1", "smartphone"),
    (ExpenseCategory.SAVINGS, "Savings", "#22C55E", "piggy-bank"),
    (ExpenseCategory.INVESTMENTS, "Investments", "#8B5CF6", "trending-up"),
    (ExpenseCategory.OTHER, "Other", "#64748B", "package"),
)

ASSET_TYPES = _table(
    (AssetType.STOCK, "Stocks", "#3B82F6", "bar-chart"),
    (AssetType.ETF, "ETFs", "#10B981", "layers"),
    (AssetType.CRYPTO, "Crypto", "#F59E0B", "coins"),
    (AssetType.BOND, "Bonds", "#8B5CF6", "file-text"),
    (AssetType.FUND, "Funds", "#EC4899", "pie-chart"),
    (AssetType.COMMODITY, "Commodities", "#F97316", "gem"),
    (AssetType.OTHER, "Other", "#6B7280", "circle"),
)


# =============================================================================
# REGISTRY
# =============================================================================

class CategoryRegistry:
    """
    Read-only lookup of category metadata.

    The default tables can be replaced by injecting custom ones, as long as
    every domain keeps an entry for its OTHER key.
    """

    def __init__(
        self,
        tables: Optional[Mapping[CategoryDomain, Mapping[str, CategoryMeta]]] = None,
    ):
        tables = tables or {
            CategoryDomain.ACCOUNT: ACCOUNT_TYPES,
            CategoryDomain.INCOME: INCOME_CATEGORIES,
            CategoryDomain.EXPENSE: EXPENSE_CATEGORIES,
            CategoryDomain.ASSET: ASSET_TYPES,
        }

        frozen = {}
        for domain, enum_cls in DOMAIN_ENUMS.items():
            table = tables.get(domain)
            if table is None:
                raise ValueError(f"Missing category table for domain: {domain.value}")
            if enum_cls.OTHER.value not in table:
                raise ValueError(
                    f"Category table '{domain.value}' needs a fallback "
                    f"entry for '{enum_cls.OTHER.value}'"
                )
            frozen[domain] = MappingProxyType(dict(table))
        self._tables = MappingProxyType(frozen)

    def lookup(
        self,
        domain: CategoryDomain,
        key: Union[str, CategoryKey, None],
    ) -> CategoryMeta:
        """Metadata for a key; unknown keys resolve to the OTHER entry."""
        enum_cls = DOMAIN_ENUMS[domain]
        member = normalize_key(enum_cls, key)
        table = self._tables[domain]
        return table.get(member.value, table[enum_cls.OTHER.value])

    def label(self, domain: CategoryDomain, key: Union[str, CategoryKey, None]) -> str:
        return self.lookup(domain, key).label

    def color(self, domain: CategoryDomain, key: Union[str, CategoryKey, None]) -> str:
        return self.lookup(domain, key).color

    def icon(self, domain: CategoryDomain, key: Union[str, CategoryKey, None]) -> str:
        return self.lookup(domain, key).icon

    def keys(self, domain: CategoryDomain) -> list[str]:
        """All keys of a domain, in table order."""
        return list(self._tables[domain].keys())

    def account(self, key: Union[str, AccountType, None]) -> CategoryMeta:
        return self.lookup(CategoryDomain.ACCOUNT, key)

    def income(self, key: Union[str, IncomeCategory, None]) -> CategoryMeta:
        return self.lookup(CategoryDomain.INCOME, key)

    def expense(self, key: Union[str, ExpenseCategory, None]) -> CategoryMeta:
        return self.lookup(CategoryDomain.EXPENSE, key)

    def asset(self, key: Union[str, AssetType, None]) -> CategoryMeta:
        return self.lookup(CategoryDomain.ASSET, key)


DEFAULT_REGISTRY = CategoryRegistry()


def get_registry() -> CategoryRegistry:
    """The shared default registry."""
    return DEFAULT_REGISTRY
