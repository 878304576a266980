"""Money-flow graph building and layout."""

from finflow.graph.builder import (
    EXPENSE_COLOR,
    INCOME_COLOR,
    SAVINGS_COLOR,
    TRANSFER_COLOR,
    FlowGraphBuilder,
    PrimaryAccountSelector,
    account_node_id,
    account_of_type,
    build_flow_graph,
    expense_node_id,
    first_account,
    format_amount,
    highest_balance_account,
    income_node_id,
    savings_node_id,
)
from finflow.graph.layout import LayeredLayoutEngine, layout
from finflow.graph.sankey import (
    INCOME_POOL_ID,
    REMAINING_ID,
    CashflowGraph,
    CategoryAmount,
    MonthlyCashflow,
    build_cashflow_graph,
)

__all__ = [
    "EXPENSE_COLOR",
    "INCOME_COLOR",
    "SAVINGS_COLOR",
    "TRANSFER_COLOR",
    "FlowGraphBuilder",
    "PrimaryAccountSelector",
    "account_node_id",
    "account_of_type",
    "build_flow_graph",
    "expense_node_id",
    "first_account",
    "format_amount",
    "highest_balance_account",
    "income_node_id",
    "savings_node_id",
    "LayeredLayoutEngine",
    "layout",
    "INCOME_POOL_ID",
    "REMAINING_ID",
    "CashflowGraph",
    "CategoryAmount",
    "MonthlyCashflow",
    "build_cashflow_graph",
]
