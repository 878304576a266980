"""
Cashflow Graph

Summary money-flow graph of one period, suitable for a Sankey chart:

    income-<category> -> income (pool) -> expense-<category>
                                       -> remaining (surplus, if any)

Savings and investment categories stay in the graph like any other
expense, but the summary reports them apart from plain spending.
"""

from decimal import Decimal
from typing import Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

from finflow.config import get_settings
from finflow.graph.builder import (
    INCOME_COLOR,
    expense_node_id,
    format_amount,
    income_node_id,
    sum_by_category,
)
from finflow.models.finance import ExpenseRecord, IncomeRecord
from finflow.models.graph import (
    AnchorNode,
    EdgeStyle,
    ExpenseNode,
    FlowGraph,
    FlowKind,
    GraphEdge,
    IncomeNode,
)
from finflow.registry.categories import CategoryRegistry, ExpenseCategory, get_registry

INCOME_POOL_ID = "income"
REMAINING_ID = "remaining"
REMAINING_COLOR = "#22C55E"

SAVINGS_CATEGORIES = frozenset({ExpenseCategory.SAVINGS})
INVESTMENT_CATEGORIES = frozenset({ExpenseCategory.INVESTMENTS})


class CategoryAmount(BaseModel):
    model_config = ConfigDict(frozen=True)

    category: str
    amount: Decimal


class MonthlyCashflow(BaseModel):
    """Totals of one period; `net` is income minus every outflow."""
    model_config = ConfigDict(frozen=True)

    income_total: Decimal = Decimal("0")
    expense_total: Decimal = Field(
        default=Decimal("0"),
        description="Plain spending, without savings and investments"
    )
    savings_total: Decimal = Decimal("0")
    investments_total: Decimal = Decimal("0")
    net: Decimal = Decimal("0")
    income: list[CategoryAmount] = Field(default_factory=list)
    expenses: list[CategoryAmount] = Field(default_factory=list)

    @property
    def savings_rate(self) -> float:
        """Share of income put into savings and investments, in percent."""
        if self.income_total <= 0:
            return 0.0
        return float((self.savings_total + self.investments_total) / self.income_total * 100)


class CashflowGraph(BaseModel):
    model_config = ConfigDict(frozen=True)

    graph: FlowGraph
    summary: MonthlyCashflow


def build_cashflow_graph(
    income_records: Sequence[IncomeRecord],
    expense_records: Sequence[ExpenseRecord],
    registry: Optional[CategoryRegistry] = None,
    currency: Optional[str] = None,
) -> CashflowGraph:
    """
    Build the pooled cashflow graph and its period summary.

    Records of the same category are merged. The `remaining` anchor only
    exists when income exceeds all outflows.
    """
    registry = registry or get_registry()
    currency = currency or get_settings().app.default_currency

    income_totals = sum_by_category(income_records)
    expense_totals = sum_by_category(expense_records)

    total_income = sum((amount for amount, _ in income_totals.values()), Decimal("0"))
    total_outflow = sum((amount for amount, _ in expense_totals.values()), Decimal("0"))
    remaining = total_income - total_outflow

    nodes = [AnchorNode(
        id=INCOME_POOL_ID,
        label="Income",
        color=INCOME_COLOR,
        icon="wallet",
        currency=currency,
        role="income_pool",
        amount=total_income,
    )]
    edges = []

    for category, (amount, _) in income_totals.items():
        meta = registry.income(category)
        node_id = income_node_id(category)
        nodes.append(IncomeNode(
            id=node_id,
            label=meta.label,
            color=meta.color,
            icon=meta.icon,
            currency=currency,
            category=category,
            amount=amount,
        ))
        edges.append(GraphEdge(
            id=f"edge-{node_id}-{INCOME_POOL_ID}",
            source=node_id,
            target=INCOME_POOL_ID,
            amount=amount,
            currency=currency,
            style=EdgeStyle.ONE_OFF,
            flow_kind=FlowKind.INCOME,
            label=format_amount(amount, currency),
            color=meta.color,
        ))

    for category, (amount, _) in expense_totals.items():
        meta = registry.expense(category)
        node_id = expense_node_id(category)
        nodes.append(ExpenseNode(
            id=node_id,
            label=meta.label,
            color=meta.color,
            icon=meta.icon,
            currency=currency,
            category=category,
            amount=amount,
        ))
        if category in SAVINGS_CATEGORIES or category in INVESTMENT_CATEGORIES:
            flow_kind = FlowKind.SAVINGS
        else:
            flow_kind = FlowKind.EXPENSE
        edges.append(GraphEdge(
            id=f"edge-{INCOME_POOL_ID}-{node_id}",
            source=INCOME_POOL_ID,
            target=node_id,
            amount=amount,
            currency=currency,
            style=EdgeStyle.ONE_OFF,
            flow_kind=flow_kind,
            label=format_amount(amount, currency),
            color=meta.color,
        ))

    if remaining > 0:
        nodes.append(AnchorNode(
            id=REMAINING_ID,
            label="Remaining",
            color=REMAINING_COLOR,
            icon="piggy-bank",
            currency=currency,
            role="surplus",
            amount=remaining,
        ))
        edges.append(GraphEdge(
            id=f"edge-{INCOME_POOL_ID}-{REMAINING_ID}",
            source=INCOME_POOL_ID,
            target=REMAINING_ID,
            amount=remaining,
            currency=currency,
            style=EdgeStyle.ONE_OFF,
            flow_kind=FlowKind.SAVINGS,
            label=format_amount(remaining, currency),
            color=REMAINING_COLOR,
        ))

    savings_total = sum(
        (amount for category, (amount, _) in expense_totals.items() if category in SAVINGS_CATEGORIES),
        Decimal("0"),
    )
    investments_total = sum(
        (amount for category, (amount, _) in expense_totals.items() if category in INVESTMENT_CATEGORIES),
        Decimal("0"),
    )
    plain_expenses = [
        CategoryAmount(category=category.value, amount=amount)
        for category, (amount, _) in expense_totals.items()
        if category not in SAVINGS_CATEGORIES and category not in INVESTMENT_CATEGORIES
    ]

    summary = MonthlyCashflow(
        income_total=total_income,
        expense_total=sum((item.amount for item in plain_expenses), Decimal("0")),
        savings_total=savings_total,
        investments_total=investments_total,
        net=remaining,
        income=[
            CategoryAmount(category=category.value, amount=amount)
            for category, (amount, _) in income_totals.items()
        ],
        expenses=plain_expenses,
    )

    return CashflowGraph(graph=FlowGraph(nodes=nodes, edges=edges), summary=summary)
