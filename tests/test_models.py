"""
Tests for FinFlow

Test strategy:
1. Unit tests for individual components (models, formulas, registry)
2. Integration tests for flows (with in-memory data sources)
3. No network or database access in tests
"""

import pytest
from datetime import date
from decimal import Decimal

from pydantic import TypeAdapter, ValidationError

from finflow.models import (
    Account,
    AccountNode,
    Budget,
    DiagnosticEvent,
    DiagnosticEventBuilder,
    DiagnosticEventType,
    DiagnosticSeverity,
    ExpenseRecord,
    FlowGraph,
    FlowSource,
    FlowSourceType,
    FlowTarget,
    FlowTargetType,
    Frequency,
    GraphEdge,
    GraphNode,
    IncomeNode,
    IncomeRecord,
    Investment,
    NodeKind,
    Orientation,
    RecurringFlow,
    SavingsGoalProgress,
)
from finflow.registry import AccountType, AssetType, ExpenseCategory, IncomeCategory


class TestFinanceModels:
    """Tests for finance record models."""

    def test_account_creation(self):
        """Test Account model creation."""
        account = Account(
            id="acc-1",
            name="Main Account",
            account_type="checking",
            institution="Sparkasse",
            current_balance=Decimal("2500.50"),
        )
        assert account.account_type == AccountType.CHECKING
        assert account.currency == "EUR"
        assert not account.is_excluded_from_net_worth

    def test_account_strips_whitespace(self):
        """Test that whitespace is stripped from the account name."""
        account = Account(id="acc-1", name="  Main  ")
        assert account.name == "Main"

    def test_account_normalizes_type_and_currency(self):
        """Test boundary normalization of type and currency."""
        account = Account(id="acc-1", name="Wallet", account_type="Giro", currency="usd")
        assert account.account_type == AccountType.CHECKING
        assert account.currency == "USD"

    def test_account_unknown_type_is_other(self):
        """Test that unknown account types fall back to OTHER."""
        account = Account(id="acc-1", name="Vault", account_type="treasure_chest")
        assert account.account_type == AccountType.OTHER

    def test_account_is_immutable(self):
        """Test that accounts are frozen."""
        account = Account(id="acc-1", name="Main")
        with pytest.raises(ValidationError):
            account.name = "Changed"

    def test_records_normalize_category(self):
        """Test category normalization of aggregate records."""
        income = IncomeRecord(category="Salary", amount=Decimal("3000"))
        expense = ExpenseRecord(category="sparen", amount=Decimal("200"))
        assert income.category == IncomeCategory.SALARY
        assert expense.category == ExpenseCategory.SAVINGS

    def test_record_rejects_negative_amount(self):
        """Test that negative aggregate amounts are rejected."""
        with pytest.raises(ValueError):
            ExpenseRecord(category="food", amount=Decimal("-1"))

    def test_recurring_flow_creation(self):
        """Test RecurringFlow model creation."""
        flow = RecurringFlow(
            id="rf-1",
            source=FlowSource(type=FlowSourceType.ACCOUNT, id="acc-1"),
            target=FlowTarget(type=FlowTargetType.EXPENSE, category="housing"),
            amount=Decimal("950"),
            frequency="Monthly",
            name="Rent",
        )
        assert flow.frequency == Frequency.MONTHLY
        assert flow.target.category == ExpenseCategory.HOUSING

    def test_recurring_flow_frequency_spellings(self):
        """Test alternative frequency spellings."""
        flow = RecurringFlow(
            id="rf-1",
            source=FlowSource(type="income", category="salary"),
            target=FlowTarget(type="account", id="acc-1"),
            amount=Decimal("100"),
            frequency="bi-weekly",
        )
        assert flow.frequency == Frequency.BIWEEKLY

    def test_recurring_flow_date_validation(self):
        """Test that end date cannot be before start date."""
        with pytest.raises(ValueError):
            RecurringFlow(
                id="rf-1",
                source=FlowSource(type="account", id="acc-1"),
                target=FlowTarget(type="account", id="acc-2"),
                amount=Decimal("100"),
                start_date=date(2026, 6, 1),
                end_date=date(2026, 1, 1),
            )

    def test_recurring_flow_is_active_on(self):
        """Test the active date range check."""
        flow = RecurringFlow(
            id="rf-1",
            source=FlowSource(type="account", id="acc-1"),
            target=FlowTarget(type="account", id="acc-2"),
            amount=Decimal("100"),
            start_date=date(2026, 1, 1),
            end_date=date(2026, 12, 31),
        )
        assert flow.is_active_on(date(2026, 6, 1))
        assert not flow.is_active_on(date(2025, 12, 31))
        assert not flow.is_active_on(date(2027, 1, 1))

    def test_savings_goal_derived_fields(self):
        """Test progress and achievement derivation."""
        goal = SavingsGoalProgress(
            id="g1",
            name="Vacation",
            target_amount=Decimal("2000"),
            current_amount=Decimal("500"),
        )
        assert goal.progress_percent == pytest.approx(25.0)
        assert not goal.is_achieved
        assert goal.remaining_amount == Decimal("1500")

    def test_savings_goal_progress_is_capped(self):
        """Test that progress never exceeds 100 percent."""
        goal = SavingsGoalProgress(
            id="g1",
            name="Vacation",
            target_amount=Decimal("1000"),
            current_amount=Decimal("1500"),
        )
        assert goal.progress_percent == 100.0
        assert goal.is_achieved
        assert goal.remaining_amount == Decimal("0")

    def test_savings_goal_rejects_negative_current(self):
        """Test that current amount must be non-negative."""
        with pytest.raises(ValueError):
            SavingsGoalProgress(
                id="g1",
                name="Vacation",
                target_amount=Decimal("1000"),
                current_amount=Decimal("-1"),
            )

    def test_investment_unit_price_fallback(self):
        """Test current price, then average cost, then zero."""
        priced = Investment(id="i1", quantity=Decimal("2"), current_price=Decimal("10"), average_cost=Decimal("8"))
        unpriced = Investment(id="i2", quantity=Decimal("2"), average_cost=Decimal("8"))
        bare = Investment(id="i3", quantity=Decimal("2"))

        assert priced.market_value == Decimal("20")
        assert unpriced.market_value == Decimal("16")
        assert bare.market_value == Decimal("0")
        assert priced.cost_basis == Decimal("16")

    def test_investment_asset_type_normalized(self):
        """Test asset type aliases."""
        assert Investment(id="i1", asset_type="ETFs").asset_type == AssetType.ETF

    def test_budget_normalizes_category(self):
        """Test Budget category normalization."""
        assert Budget(category="Groceries", amount=Decimal("400")).category == ExpenseCategory.FOOD


class TestGraphModels:
    """Tests for graph value objects."""

    def test_node_union_discriminates_on_kind(self):
        """Test that the node union picks the right model."""
        adapter = TypeAdapter(GraphNode)
        node = adapter.validate_python({
            "kind": "income",
            "id": "income-salary",
            "label": "Salary",
            "category": "salary",
            "amount": "3000",
        })
        assert isinstance(node, IncomeNode)
        assert node.category == IncomeCategory.SALARY

    def test_edge_requires_endpoints(self):
        """Test that empty endpoints are rejected."""
        with pytest.raises(ValueError):
            GraphEdge(id="e1", source="", target="b", amount=Decimal("1"))

    def test_flow_graph_helpers(self):
        """Test node lookup helpers."""
        graph = FlowGraph(
            nodes=[
                AccountNode(id="account-a", label="A", account_id="a"),
                IncomeNode(id="income-salary", label="Salary", category="salary"),
            ],
            edges=[
                GraphEdge(id="e1", source="income-salary", target="account-a", amount=Decimal("1")),
            ],
        )
        assert graph.node_ids == ["account-a", "income-salary"]
        assert graph.node("account-a").kind == "account"
        assert graph.node("missing") is None
        assert len(graph.nodes_of_kind(NodeKind.INCOME)) == 1
        assert len(graph.edges_touching("account-a")) == 1
        assert not graph.is_empty

    def test_orientation_parse(self):
        """Test orientation short forms."""
        assert Orientation.parse("LR") == Orientation.HORIZONTAL
        assert Orientation.parse("tb") == Orientation.VERTICAL
        assert Orientation.parse(Orientation.VERTICAL) == Orientation.VERTICAL
        with pytest.raises(ValueError):
            Orientation.parse("diagonal")


class TestDiagnosticModels:
    """Tests for diagnostic event models."""

    def test_diagnostic_event_creation(self):
        """Test DiagnosticEvent model creation."""
        event = DiagnosticEvent(
            event_type=DiagnosticEventType.GRAPH_BUILT,
            description="Graph built",
        )
        assert event.event_id is not None
        assert event.timestamp is not None
        assert event.severity == DiagnosticSeverity.INFO

    def test_diagnostic_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = DiagnosticEvent(
            event_type=DiagnosticEventType.CYCLE_BROKEN,
            severity=DiagnosticSeverity.WARNING,
            description="Cycle broken",
            entity_id="account-a",
        )
        log_dict = event.to_log_dict()
        assert log_dict["event_type"] == "cycle_broken"
        assert log_dict["severity"] == "warning"
        assert log_dict["entity_id"] == "account-a"

    def test_builder_flow_skipped(self):
        """Test DiagnosticEventBuilder.flow_skipped."""
        event = DiagnosticEventBuilder.flow_skipped(
            flow_id="rf-1",
            reason="unresolved_target",
            unresolved_node_id="account-missing",
        )
        assert event.event_type == DiagnosticEventType.FLOW_SKIPPED
        assert event.severity == DiagnosticSeverity.WARNING
        assert event.entity_id == "rf-1"
        assert event.details["unresolved_node_id"] == "account-missing"

    def test_builder_source_error(self):
        """Test DiagnosticEventBuilder.source_error."""
        event = DiagnosticEventBuilder.source_error("load_bundle", "timeout")
        assert event.severity == DiagnosticSeverity.ERROR
        assert event.details["error_message"] == "timeout"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
