"""
Data Models Package

This package contains all Pydantic models used by FinFlow.
All data flowing through the engine must conform to these schemas.
"""

from finflow.models.finance import (
    Account,
    Budget,
    BudgetPeriod,
    ExpenseRecord,
    FinanceBundle,
    FinanceStreak,
    FlowSource,
    FlowSourceType,
    FlowTarget,
    FlowTargetType,
    Frequency,
    IncomeRecord,
    Investment,
    RecurringFlow,
    SavingsGoalProgress,
    StreakType,
)
from finflow.models.graph import (
    AccountNode,
    AnchorNode,
    EdgeStyle,
    ExpenseNode,
    FlowGraph,
    FlowKind,
    GraphEdge,
    GraphNode,
    IncomeNode,
    NodeKind,
    Orientation,
    Position,
    PositionedGraph,
    SavingsNode,
    SkippedFlow,
    SkipReason,
)
from finflow.models.diagnostics import (
    DiagnosticEvent,
    DiagnosticEventBuilder,
    DiagnosticEventType,
    DiagnosticSeverity,
)

__all__ = [
    # Finance records
    "Account",
    "Budget",
    "BudgetPeriod",
    "ExpenseRecord",
    "FinanceBundle",
    "FinanceStreak",
    "FlowSource",
    "FlowSourceType",
    "FlowTarget",
    "FlowTargetType",
    "Frequency",
    "IncomeRecord",
    "Investment",
    "RecurringFlow",
    "SavingsGoalProgress",
    "StreakType",
    # Graph models
    "AccountNode",
    "AnchorNode",
    "EdgeStyle",
    "ExpenseNode",
    "FlowGraph",
    "FlowKind",
    "GraphEdge",
    "GraphNode",
    "IncomeNode",
    "NodeKind",
    "Orientation",
    "Position",
    "PositionedGraph",
    "SavingsNode",
    "SkippedFlow",
    "SkipReason",
    # Diagnostic models
    "DiagnosticEvent",
    "DiagnosticEventBuilder",
    "DiagnosticEventType",
    "DiagnosticSeverity",
]
