"""
In-Memory Finance Data Source

Serves records from plain lists. Used by tests and by callers that
already hold their records.
"""

from typing import Iterable, Optional

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
from finflow.sources.interface import FinanceDataSource, RecordNotFoundError


class InMemoryFinanceSource(FinanceDataSource):
    """
    FinanceDataSource over in-memory lists.

    Lists are copied on the way in and on the way out, so callers cannot
    mutate the source's state.
    """

    def __init__(
        self,
        accounts: Optional[Iterable[Account]] = None,
        income_records: Optional[Iterable[IncomeRecord]] = None,
        expense_records: Optional[Iterable[ExpenseRecord]] = None,
        savings_goals: Optional[Iterable[SavingsGoalProgress]] = None,
        recurring_flows: Optional[Iterable[RecurringFlow]] = None,
        investments: Optional[Iterable[Investment]] = None,
        streaks: Optional[Iterable[FinanceStreak]] = None,
        budgets: Optional[Iterable[Budget]] = None,
    ):
        self._accounts = list(accounts or [])
        self._income_records = list(income_records or [])
        self._expense_records = list(expense_records or [])
        self._savings_goals = list(savings_goals or [])
        self._recurring_flows = list(recurring_flows or [])
        self._investments = list(investments or [])
        self._streaks = list(streaks or [])
        self._budgets = list(budgets or [])

    @classmethod
    def from_bundle(cls, bundle: FinanceBundle) -> "InMemoryFinanceSource":
        return cls(
            accounts=bundle.accounts,
            income_records=bundle.income_records,
            expense_records=bundle.expense_records,
            savings_goals=bundle.savings_goals,
            recurring_flows=bundle.recurring_flows,
            investments=bundle.investments,
            streaks=bundle.streaks,
            budgets=bundle.budgets,
        )

    def list_accounts(self) -> list[Account]:
        return list(self._accounts)

    def list_income_records(self) -> list[IncomeRecord]:
        return list(self._income_records)

    def list_expense_records(self) -> list[ExpenseRecord]:
        return list(self._expense_records)

    def list_savings_goals(self) -> list[SavingsGoalProgress]:
        return list(self._savings_goals)

    def list_recurring_flows(self) -> list[RecurringFlow]:
        return list(self._recurring_flows)

    def list_investments(self) -> list[Investment]:
        return list(self._investments)

    def list_streaks(self) -> list[FinanceStreak]:
        return list(self._streaks)

    def list_budgets(self) -> list[Budget]:
        return list(self._budgets)

    def get_account(self, account_id: str) -> Account:
        """
        Look up one account by id.

        Raises:
            RecordNotFoundError: If no account has the id
        """
        for account in self._accounts:
            if account.id == account_id:
                return account
        raise RecordNotFoundError(f"Account not found: {account_id}")
