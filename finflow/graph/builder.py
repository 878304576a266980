"""
Money-Flow Graph Builder

Turns a bundle of finance records into nodes and edges:

    income categories -> primary account -> expense categories
                                         -> savings goals
    plus one edge per resolvable recurring flow

DESIGN DECISION: Ids are derived from record keys only
(`income-salary`, `account-<id>`, `edge-<source>-<target>`), never from
counters or randomness. The same ordered input always yields the same
graph, which lets a renderer diff two builds node by node.

Unresolvable recurring flows are dropped and reported; they never raise.
"""

from collections import OrderedDict
from datetime import date
from decimal import Decimal
from typing import Callable, Iterable, Optional, Sequence

from finflow.config import get_settings
from finflow.diagnostics import DiagnosticsLogger
from finflow.models.finance import (
    Account,
    Budget,
    ExpenseRecord,
    FinanceBundle,
    FlowSourceType,
    FlowTargetType,
    IncomeRecord,
    RecurringFlow,
    SavingsGoalProgress,
)
from finflow.models.graph import (
    FREQUENCY_SHORT,
    AccountNode,
    EdgeStyle,
    ExpenseNode,
    FlowGraph,
    FlowKind,
    GraphEdge,
    IncomeNode,
    SavingsNode,
    SkippedFlow,
    SkipReason,
)
from finflow.projections.formulas import budget_status
from finflow.registry.categories import (
    AccountType,
    CategoryRegistry,
    ExpenseCategory,
    IncomeCategory,
    get_registry,
)

INCOME_COLOR = "#10B981"
EXPENSE_COLOR = "#EF4444"
SAVINGS_COLOR = "#8B5CF6"
TRANSFER_COLOR = "#3B82F6"

PrimaryAccountSelector = Callable[[Sequence[Account]], Optional[Account]]


# =============================================================================
# PRIMARY ACCOUNT SELECTORS
# =============================================================================

def first_account(accounts: Sequence[Account]) -> Optional[Account]:
    """The first account in input order."""
    return accounts[0] if accounts else None


def highest_balance_account(accounts: Sequence[Account]) -> Optional[Account]:
    """The account with the largest balance; ties go to the earlier one."""
    best = None
    for account in accounts:
        if best is None or account.current_balance > best.current_balance:
            best = account
    return best


def account_of_type(account_type: AccountType) -> PrimaryAccountSelector:
    """First account of the given type, else the first account."""
    def select(accounts: Sequence[Account]) -> Optional[Account]:
        for account in accounts:
            if account.account_type == account_type:
                return account
        return first_account(accounts)
    return select


# =============================================================================
# NODE IDS
# =============================================================================

def income_node_id(category: IncomeCategory) -> str:
    return f"income-{category.value}"


def expense_node_id(category: ExpenseCategory) -> str:
    return f"expense-{category.value}"


def account_node_id(account_id: str) -> str:
    return f"account-{account_id}"


def savings_node_id(goal_id: str) -> str:
    return f"savings-{goal_id}"


def format_amount(amount: Decimal, currency: str) -> str:
    """Whole-unit amount with thousands separators, e.g. '3,000 EUR'."""
    return f"{amount:,.0f} {currency}"


def sum_by_category(records: Iterable) -> "OrderedDict":
    """Merge records of the same category, keeping first-seen order."""
    totals: OrderedDict = OrderedDict()
    for record in records:
        if record.category in totals:
            amount, currency = totals[record.category]
            totals[record.category] = (amount + record.amount, currency)
        else:
            totals[record.category] = (record.amount, record.currency)
    return totals


class FlowGraphBuilder:
    """
    Builds the money-flow graph.

    The builder holds configuration only; every call to build() is
    independent and side-effect free apart from diagnostics logging.
    """

    def __init__(
        self,
        registry: Optional[CategoryRegistry] = None,
        primary_account_selector: PrimaryAccountSelector = first_account,
        currency: Optional[str] = None,
    ):
        """
        Initialize builder.

        Args:
            registry: Category metadata used to label nodes.
            primary_account_selector: Picks the account that anchors
                aggregate income, expense and savings edges.
            currency: Currency of recurring flows and goal contributions,
                which carry none of their own.
        """
        self._registry = registry or get_registry()
        self._select_primary = primary_account_selector
        self._currency = currency or get_settings().app.default_currency

    def build_bundle(
        self,
        bundle: FinanceBundle,
        as_of: Optional[date] = None,
        diagnostics: Optional[DiagnosticsLogger] = None,
    ) -> FlowGraph:
        """Build the graph from a FinanceBundle."""
        return self.build(
            accounts=bundle.accounts,
            income_records=bundle.income_records,
            expense_records=bundle.expense_records,
            savings_goals=bundle.savings_goals,
            recurring_flows=bundle.recurring_flows,
            budgets=bundle.budgets,
            as_of=as_of,
            diagnostics=diagnostics,
        )

    def build(
        self,
        accounts: Sequence[Account],
        income_records: Sequence[IncomeRecord] = (),
        expense_records: Sequence[ExpenseRecord] = (),
        savings_goals: Sequence[SavingsGoalProgress] = (),
        recurring_flows: Sequence[RecurringFlow] = (),
        budgets: Sequence[Budget] = (),
        as_of: Optional[date] = None,
        diagnostics: Optional[DiagnosticsLogger] = None,
    ) -> FlowGraph:
        """
        Build nodes and edges.

        Steps:
        1. Income nodes from aggregates, then from recurring income sources
        2. One node per account
        3. Expense nodes from aggregates, then from recurring expense targets
        4. One node per savings goal
        5. Aggregate edges through the primary account, then recurring edges

        Without accounts the graph is empty: there is no account to anchor
        aggregate edges, so nothing is emitted at all.

        Args:
            as_of: When given, recurring flows outside their date range
                on that day are skipped as inactive.
            diagnostics: Collects skipped flows and fallbacks. A local
                logger is used when omitted.
        """
        diagnostics = diagnostics or DiagnosticsLogger()
        accounts = list(accounts)

        if not accounts:
            diagnostics.log_primary_account_missing(account_count=0)
            return FlowGraph()

        skipped: list[SkippedFlow] = []
        flows = self._eligible_flows(recurring_flows, as_of, skipped, diagnostics)

        nodes: OrderedDict = OrderedDict()
        income_totals = sum_by_category(income_records)
        expense_totals = sum_by_category(expense_records)
        budgets_by_category = {}
        for budget in budgets:
            budgets_by_category.setdefault(budget.category, budget)

        # 1. Income nodes
        for category, (amount, currency) in income_totals.items():
            self._add_income_node(nodes, category, amount, currency, name=None, is_recurring=False)
        for flow in flows:
            if flow.source.type == FlowSourceType.INCOME and flow.source.category is not None:
                self._add_income_node(
                    nodes, flow.source.category, flow.amount, self._currency,
                    name=flow.name or None, is_recurring=True,
                )

        # 2. Account nodes
        primary = self._resolve_primary(accounts, diagnostics)
        for account in accounts:
            node_id = account_node_id(account.id)
            if node_id in nodes:
                continue
            meta = self._registry.account(account.account_type)
            nodes[node_id] = AccountNode(
                id=node_id,
                label=account.name,
                color=account.color or meta.color,
                icon=account.icon or meta.icon,
                currency=account.currency,
                account_id=account.id,
                account_type=account.account_type,
                institution=account.institution,
                balance=account.current_balance,
                is_primary=primary is not None and account.id == primary.id,
            )

        # 3. Expense nodes
        for category, (amount, currency) in expense_totals.items():
            self._add_expense_node(
                nodes, category, amount, currency, None,
                budgets_by_category.get(category), diagnostics,
            )
        for flow in flows:
            if flow.target.type == FlowTargetType.EXPENSE and flow.target.category is not None:
                self._add_expense_node(
                    nodes, flow.target.category, flow.amount, self._currency, flow.name or None,
                    budgets_by_category.get(flow.target.category), diagnostics,
                )

        # 4. Savings goal nodes
        for goal in savings_goals:
            node_id = savings_node_id(goal.id)
            if node_id in nodes:
                continue
            nodes[node_id] = SavingsNode(
                id=node_id,
                label=goal.name,
                color=goal.color,
                icon=goal.icon,
                goal_id=goal.id,
                target_amount=goal.target_amount,
                current_amount=goal.current_amount,
                monthly_contribution=goal.monthly_contribution,
                progress_percent=goal.progress_percent,
                is_achieved=goal.is_achieved,
            )

        # 5. Edges
        edges: list[GraphEdge] = []
        primary_id = account_node_id(primary.id) if primary is not None else None
        if primary_id is not None:
            edges.extend(self._aggregate_edges(
                primary_id, income_totals, expense_totals, savings_goals,
            ))

        for flow in flows:
            edge = self._recurring_edge(flow, nodes, skipped, diagnostics)
            if edge is not None:
                edges.append(edge)

        graph = FlowGraph(
            nodes=list(nodes.values()),
            edges=edges,
            primary_account_id=primary_id,
            skipped_flows=skipped,
        )
        diagnostics.log_graph_built(
            node_count=len(graph.nodes),
            edge_count=len(graph.edges),
            skipped_flow_count=len(skipped),
        )
        return graph

    def _eligible_flows(
        self,
        recurring_flows: Sequence[RecurringFlow],
        as_of: Optional[date],
        skipped: list[SkippedFlow],
        diagnostics: DiagnosticsLogger,
    ) -> list[RecurringFlow]:
        """Drop inactive flows and repeated flow ids."""
        eligible = []
        seen_ids = set()
        for flow in recurring_flows:
            if flow.id in seen_ids:
                diagnostics.log_duplicate_flow(flow.id)
                skipped.append(SkippedFlow(flow_id=flow.id, reason=SkipReason.DUPLICATE_ID))
                continue
            seen_ids.add(flow.id)

            active = flow.is_active_on(as_of) if as_of is not None else flow.is_active
            if not active:
                diagnostics.log_flow_skipped(flow.id, SkipReason.INACTIVE.value)
                skipped.append(SkippedFlow(flow_id=flow.id, reason=SkipReason.INACTIVE))
                continue
            eligible.append(flow)
        return eligible

    def _resolve_primary(
        self,
        accounts: list[Account],
        diagnostics: DiagnosticsLogger,
    ) -> Optional[Account]:
        selected = self._select_primary(accounts)
        if selected is None:
            diagnostics.log_primary_account_missing(account_count=len(accounts))
            return None
        if not any(account.id == selected.id for account in accounts):
            # Selectors must pick from the given accounts
            diagnostics.log_primary_account_missing(
                account_count=len(accounts),
                selected_id=selected.id,
            )
            return None
        return selected

    def _add_income_node(
        self,
        nodes: OrderedDict,
        category: IncomeCategory,
        amount: Decimal,
        currency: str,
        name: Optional[str],
        is_recurring: bool,
    ) -> None:
        node_id = income_node_id(category)
        if node_id in nodes:
            return
        meta = self._registry.income(category)
        nodes[node_id] = IncomeNode(
            id=node_id,
            label=name or meta.label,
            color=meta.color,
            icon=meta.icon,
            currency=currency,
            category=category,
            amount=amount,
            is_recurring=is_recurring,
        )

    def _add_expense_node(
        self,
        nodes: OrderedDict,
        category: ExpenseCategory,
        amount: Decimal,
        currency: str,
        name: Optional[str],
        budget: Optional[Budget],
        diagnostics: DiagnosticsLogger,
    ) -> None:
        node_id = expense_node_id(category)
        if node_id in nodes:
            return
        meta = self._registry.expense(category)

        budget_amount = None
        budget_percentage = None
        budget_tier = None
        if budget is not None:
            budget_amount = budget.amount
            if budget.amount <= 0:
                diagnostics.log_budget_undefined(category.value)
            status = budget_status(amount, budget.amount)
            budget_percentage = status.percentage
            budget_tier = status.tier.value

        nodes[node_id] = ExpenseNode(
            id=node_id,
            label=name or meta.label,
            color=meta.color,
            icon=meta.icon,
            currency=currency,
            category=category,
            amount=amount,
            budget=budget_amount,
            budget_percentage=budget_percentage,
            budget_tier=budget_tier,
        )

    def _aggregate_edges(
        self,
        primary_id: str,
        income_totals: OrderedDict,
        expense_totals: OrderedDict,
        savings_goals: Sequence[SavingsGoalProgress],
    ) -> list[GraphEdge]:
        """Income -> primary, primary -> expenses, primary -> funded goals."""
        edges = []

        for category, (amount, currency) in income_totals.items():
            source = income_node_id(category)
            edges.append(GraphEdge(
                id=f"edge-{source}-{primary_id}",
                source=source,
                target=primary_id,
                amount=amount,
                currency=currency,
                style=EdgeStyle.ONE_OFF,
                flow_kind=FlowKind.INCOME,
                label=format_amount(amount, currency),
                color=INCOME_COLOR,
            ))

        for category, (amount, currency) in expense_totals.items():
            target = expense_node_id(category)
            edges.append(GraphEdge(
                id=f"edge-{primary_id}-{target}",
                source=primary_id,
                target=target,
                amount=amount,
                currency=currency,
                style=EdgeStyle.ONE_OFF,
                flow_kind=FlowKind.EXPENSE,
                label=format_amount(amount, currency),
                color=EXPENSE_COLOR,
            ))

        seen_goals = set()
        for goal in savings_goals:
            if goal.id in seen_goals or goal.monthly_contribution <= 0:
                continue
            seen_goals.add(goal.id)
            target = savings_node_id(goal.id)
            edges.append(GraphEdge(
                id=f"edge-{primary_id}-{target}",
                source=primary_id,
                target=target,
                amount=goal.monthly_contribution,
                currency=self._currency,
                style=EdgeStyle.ONE_OFF,
                flow_kind=FlowKind.SAVINGS,
                label=format_amount(goal.monthly_contribution, self._currency),
                color=goal.color,
            ))

        return edges

    def _recurring_edge(
        self,
        flow: RecurringFlow,
        nodes: OrderedDict,
        skipped: list[SkippedFlow],
        diagnostics: DiagnosticsLogger,
    ) -> Optional[GraphEdge]:
        source_id = self._source_node_id(flow)
        target_id = self._target_node_id(flow)

        if source_id is None or source_id not in nodes:
            diagnostics.log_flow_skipped(flow.id, SkipReason.UNRESOLVED_SOURCE.value, source_id)
            skipped.append(SkippedFlow(
                flow_id=flow.id,
                reason=SkipReason.UNRESOLVED_SOURCE,
                unresolved_node_id=source_id,
            ))
            return None
        if target_id is None or target_id not in nodes:
            diagnostics.log_flow_skipped(flow.id, SkipReason.UNRESOLVED_TARGET.value, target_id)
            skipped.append(SkippedFlow(
                flow_id=flow.id,
                reason=SkipReason.UNRESOLVED_TARGET,
                unresolved_node_id=target_id,
            ))
            return None

        if flow.source.type == FlowSourceType.INCOME:
            flow_kind, color = FlowKind.INCOME, INCOME_COLOR
        elif flow.target.type == FlowTargetType.SAVINGS:
            flow_kind, color = FlowKind.SAVINGS, SAVINGS_COLOR
        elif flow.target.type == FlowTargetType.EXPENSE:
            flow_kind, color = FlowKind.EXPENSE, EXPENSE_COLOR
        else:
            flow_kind, color = FlowKind.TRANSFER, TRANSFER_COLOR

        period = FREQUENCY_SHORT[flow.frequency]
        return GraphEdge(
            id=f"recurring-{flow.id}",
            source=source_id,
            target=target_id,
            amount=flow.amount,
            currency=self._currency,
            style=EdgeStyle.RECURRING,
            flow_kind=flow_kind,
            frequency=flow.frequency,
            period_label=period,
            label=f"{format_amount(flow.amount, self._currency)}/{period}",
            color=color,
            flow_id=flow.id,
            flow_name=flow.name or None,
        )

    @staticmethod
    def _source_node_id(flow: RecurringFlow) -> Optional[str]:
        source = flow.source
        if source.type == FlowSourceType.INCOME and source.category is not None:
            return income_node_id(source.category)
        if source.type == FlowSourceType.ACCOUNT and source.id:
            return account_node_id(source.id)
        return None

    @staticmethod
    def _target_node_id(flow: RecurringFlow) -> Optional[str]:
        target = flow.target
        if target.type == FlowTargetType.ACCOUNT and target.id:
            return account_node_id(target.id)
        if target.type == FlowTargetType.EXPENSE and target.category is not None:
            return expense_node_id(target.category)
        if target.type == FlowTargetType.SAVINGS and target.id:
            return savings_node_id(target.id)
        return None


def build_flow_graph(
    accounts: Sequence[Account],
    income_records: Sequence[IncomeRecord] = (),
    expense_records: Sequence[ExpenseRecord] = (),
    savings_goals: Sequence[SavingsGoalProgress] = (),
    recurring_flows: Sequence[RecurringFlow] = (),
    primary_account_selector: PrimaryAccountSelector = first_account,
) -> FlowGraph:
    """Build a graph with the default registry."""
    builder = FlowGraphBuilder(primary_account_selector=primary_account_selector)
    return builder.build(
        accounts=accounts,
        income_records=income_records,
        expense_records=expense_records,
        savings_goals=savings_goals,
        recurring_flows=recurring_flows,
    )
