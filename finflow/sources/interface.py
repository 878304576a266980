"""
Abstract Finance Data Source

DESIGN DECISION: The engine never queries a database itself. Records are
read through this interface. This allows us to:
1. Plug in any persistence layer without touching the engine
2. Use in-memory sources for testing
3. Retry transient failures in one place (the orchestrator)

The interface is read-only and synchronous, like the engine.
"""

from abc import ABC, abstractmethod

from finflow.models.finance import (
    Account,
    Budget,
    ExpenseRecord,
    FinanceBundle,
    FinanceStreak,
    IncomeRecord,
    Investment,
    RecurringFlow,
    SavingsGoalProgress,
)


class FinanceDataSource(ABC):
    """
    Read access to the records of one user.

    Every list keeps the source's order; the engine relies on it for
    deterministic ids and positions.
    """

    @abstractmethod
    def list_accounts(self) -> list[Account]:
        """
        List the user's accounts.

        Raises:
            SourceUnavailableError: If the source cannot be reached
        """
        pass

    @abstractmethod
    def list_income_records(self) -> list[IncomeRecord]:
        """Income aggregated per category for the current period."""
        pass

    @abstractmethod
    def list_expense_records(self) -> list[ExpenseRecord]:
        """Expenses aggregated per category for the current period."""
        pass

    @abstractmethod
    def list_savings_goals(self) -> list[SavingsGoalProgress]:
        pass

    @abstractmethod
    def list_recurring_flows(self) -> list[RecurringFlow]:
        pass

    @abstractmethod
    def list_investments(self) -> list[Investment]:
        pass

    @abstractmethod
    def list_streaks(self) -> list[FinanceStreak]:
        pass

    @abstractmethod
    def list_budgets(self) -> list[Budget]:
        pass

    def load_bundle(self) -> FinanceBundle:
        """Read every collection into one bundle."""
        return FinanceBundle(
            accounts=self.list_accounts(),
            income_records=self.list_income_records(),
            expense_records=self.list_expense_records(),
            savings_goals=self.list_savings_goals(),
            recurring_flows=self.list_recurring_flows(),
            investments=self.list_investments(),
            streaks=self.list_streaks(),
            budgets=self.list_budgets(),
        )


class SourceError(Exception):
    """Base exception for data source operations."""
    pass


class SourceUnavailableError(SourceError):
    """Transient failure reaching the source; safe to retry."""
    pass


class RecordNotFoundError(SourceError):
    """A requested record does not exist."""
    pass
