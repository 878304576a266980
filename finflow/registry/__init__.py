"""Category registry package."""

from finflow.registry.categories import (
    ACCOUNT_TYPES,
    ASSET_TYPES,
    EXPENSE_CATEGORIES,
    INCOME_CATEGORIES,
    AccountType,
    AssetType,
    CategoryDomain,
    CategoryMeta,
    CategoryRegistry,
    DEFAULT_REGISTRY,
    ExpenseCategory,
    IncomeCategory,
    get_registry,
    normalize_key,
)

__all__ = [
    "ACCOUNT_TYPES",
    "ASSET_TYPES",
    "EXPENSE_CATEGORIES",
    "INCOME_CATEGORIES",
    "AccountType",
    "AssetType",
    "CategoryDomain",
    "CategoryMeta",
    "CategoryRegistry",
    "DEFAULT_REGISTRY",
    "ExpenseCategory",
    "IncomeCategory",
    "get_registry",
    "normalize_key",
]
