"""
Integration tests for the engine flows, using in-memory data sources.
"""

import pytest
from datetime import date
from decimal import Decimal

from tenacity import wait_none

from finflow.diagnostics import DiagnosticsLogger
from finflow.models import (
    Account,
    Budget,
    DiagnosticEventType,
    ExpenseRecord,
    FlowSource,
    FlowTarget,
    IncomeRecord,
    Orientation,
    RecurringFlow,
    SavingsGoalProgress,
)
from finflow.orchestrator import (
    BundleLoader,
    DashboardSummaryFlow,
    MoneyFlowPipeline,
    create_engine_components,
)
from finflow.projections import BudgetTier
from finflow.sources import (
    InMemoryFinanceSource,
    RecordNotFoundError,
    SourceError,
    SourceUnavailableError,
)

AS_OF = date(2026, 10, 19)


def make_source(**overrides) -> InMemoryFinanceSource:
    data = dict(
        accounts=[
            Account(id="a1", name="Checking", current_balance=Decimal("1500")),
            Account(id="a2", name="Savings", account_type="savings", current_balance=Decimal("5000")),
        ],
        income_records=[IncomeRecord(category="salary", amount=Decimal("3000"))],
        expense_records=[
            ExpenseRecord(category="food", amount=Decimal("400")),
            ExpenseRecord(category="savings", amount=Decimal("500")),
        ],
        savings_goals=[
            SavingsGoalProgress(
                id="g1", name="Car", target_amount=Decimal("10000"),
                current_amount=Decimal("2000"), monthly_contribution=Decimal("200"),
            ),
        ],
        recurring_flows=[
            RecurringFlow(
                id="rf-1", name="Rent",
                source=FlowSource(type="account", id="a1"),
                target=FlowTarget(type="expense", category="housing"),
                amount=Decimal("100"),
            ),
            RecurringFlow(
                id="rf-2",
                source=FlowSource(type="account", id="a1"),
                target=FlowTarget(type="account", id="ghost"),
                amount=Decimal("50"),
            ),
        ],
        budgets=[Budget(category="food", amount=Decimal("500"))],
    )
    data.update(overrides)
    return InMemoryFinanceSource(**data)


class FlakySource(InMemoryFinanceSource):
    """Fails a number of reads before serving its records."""

    def __init__(self, failures: int, error: Exception, **kwargs):
        super().__init__(**kwargs)
        self.failures = failures
        self.error = error
        self.calls = 0

    def list_accounts(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error
        return super().list_accounts()


class TestInMemorySource:
    """Tests for InMemoryFinanceSource."""

    def test_load_bundle(self):
        """Test that every collection ends up in the bundle."""
        bundle = make_source().load_bundle()
        assert len(bundle.accounts) == 2
        assert len(bundle.recurring_flows) == 2
        assert bundle.budgets[0].amount == Decimal("500")

    def test_lists_are_copied(self):
        """Test that callers cannot mutate the source."""
        source = make_source()
        source.list_accounts().clear()
        assert len(source.list_accounts()) == 2

    def test_get_account(self):
        """Test lookup by id."""
        source = make_source()
        assert source.get_account("a2").name == "Savings"
        with pytest.raises(RecordNotFoundError):
            source.get_account("missing")

    def test_from_bundle(self):
        """Test rebuilding a source from a bundle."""
        bundle = make_source().load_bundle()
        assert InMemoryFinanceSource.from_bundle(bundle).load_bundle() == bundle


class TestBundleLoader:
    """Tests for retrying bundle loads."""

    def test_transient_failures_are_retried(self):
        """Test that an unavailable source is retried until it answers."""
        source = FlakySource(2, SourceUnavailableError("busy"), accounts=[Account(id="a1", name="A")])
        loader = BundleLoader(source, wait=wait_none())
        bundle = loader.load(DiagnosticsLogger())
        assert source.calls == 3
        assert bundle.accounts[0].id == "a1"

    def test_retries_are_bounded(self):
        """Test that the last transient error is raised."""
        source = FlakySource(5, SourceUnavailableError("down"))
        pipeline = MoneyFlowPipeline(source, loader=BundleLoader(source, wait=wait_none()))

        with pytest.raises(SourceUnavailableError):
            pipeline.run()
        assert source.calls == 3

    def test_other_errors_are_not_retried(self):
        """Test that a permanent source error is raised at once and logged."""
        source = FlakySource(1, SourceError("bad credentials"))
        loader = BundleLoader(source, wait=wait_none())
        diagnostics = DiagnosticsLogger()

        with pytest.raises(SourceError):
            loader.load(diagnostics)
        assert source.calls == 1
        events = diagnostics.events_of_type(DiagnosticEventType.SOURCE_ERROR)
        assert events[0].details["error_message"] == "bad credentials"


class TestMoneyFlowPipeline:
    """Tests for MoneyFlowPipeline."""

    def test_run(self):
        """Test the full load, build and layout flow."""
        source = make_source()
        result = MoneyFlowPipeline(source).run(orientation="LR", as_of=AS_OF)
        graph = result.graph

        assert graph.orientation == Orientation.HORIZONTAL
        assert graph.ranks["income-salary"] == 0
        assert graph.ranks["account-a1"] == 1
        assert graph.ranks["expense-food"] == 2
        assert graph.ranks["expense-housing"] == 2
        assert all(node.position is not None for node in graph.nodes)
        assert result.flow_graph.primary_account_id == "account-a1"

    def test_skipped_flows_are_reported(self):
        """Test that a dangling flow is listed and logged."""
        result = MoneyFlowPipeline(make_source()).run(as_of=AS_OF)
        assert result.skipped_flow_ids == ["rf-2"]
        assert any(
            event.event_type == DiagnosticEventType.FLOW_SKIPPED
            for event in result.diagnostics
        )

    def test_flows_outside_date_range_are_skipped(self):
        """Test that as_of filters recurring flows."""
        flows = [RecurringFlow(
            id="rf-9",
            source=FlowSource(type="account", id="a1"),
            target=FlowTarget(type="expense", category="housing"),
            amount=Decimal("100"),
            start_date=date(2027, 1, 1),
        )]
        result = MoneyFlowPipeline(make_source(recurring_flows=flows)).run(as_of=AS_OF)
        assert result.flow_graph.node("expense-housing") is None
        assert result.skipped_flow_ids == ["rf-9"]

    def test_empty_source(self):
        """Test that no data yields an empty graph."""
        result = MoneyFlowPipeline(InMemoryFinanceSource()).run()
        assert result.graph.nodes == []
        assert result.graph.edges == []

    def test_runs_do_not_share_diagnostics(self):
        """Test that each run starts with fresh diagnostics."""
        pipeline = MoneyFlowPipeline(make_source())
        first = pipeline.run(as_of=AS_OF)
        second = pipeline.run(as_of=AS_OF)
        assert len(first.diagnostics) == len(second.diagnostics)

    def test_run_is_deterministic(self):
        """Test that the same source gives the same graph."""
        pipeline = MoneyFlowPipeline(make_source())
        assert pipeline.run(as_of=AS_OF).graph == pipeline.run(as_of=AS_OF).graph


class TestDashboardSummaryFlow:
    """Tests for DashboardSummaryFlow."""

    def test_summary(self):
        """Test the dashboard numbers of the sample source."""
        summary = DashboardSummaryFlow(make_source()).summarize(AS_OF)

        assert summary.net_worth.total == Decimal("6500")
        assert summary.net_worth_level == 38
        assert summary.level_tier.name == "Affluent"
        assert summary.achievement_tier.name == "Savings Sprout"
        assert summary.next_milestone.amount == 10000

        assert summary.cashflow.income_total == Decimal("3000")
        assert summary.cashflow.savings_total == Decimal("500")
        assert summary.cashflow.net == Decimal("2100")

        assert summary.budgets[0].tier == BudgetTier.WARNING
        assert [goal.goal_id for goal in summary.goals] == ["g1"]
        assert summary.recurring_monthly_total == Decimal("150.00")

    def test_achievements(self):
        """Test unlocked achievements and XP."""
        summary = DashboardSummaryFlow(make_source()).summarize(AS_OF)
        unlocked = {status.key for status in summary.achievements if status.unlocked}

        assert unlocked == {"net_worth_1000", "net_worth_5000", "budget_master", "debt_free"}
        assert summary.total_xp == 450

    def test_stored_unlocks(self):
        """Test that stored unlocks are carried into the summary."""
        summary = DashboardSummaryFlow(make_source()).summarize(
            AS_OF, unlocked_keys=frozenset({"first_investment"}),
        )
        unlocked = {status.key for status in summary.achievements if status.unlocked}
        assert "first_investment" in unlocked

    def test_empty_source(self):
        """Test the summary of a user without data."""
        summary = DashboardSummaryFlow(InMemoryFinanceSource()).summarize(AS_OF)
        assert summary.net_worth.total == Decimal("0")
        assert summary.net_worth_level == 1
        assert summary.achievement_tier.name == "Getting Started"
        assert summary.allocation == []
        assert summary.total_xp == 0


class TestCreateEngineComponents:
    """Tests for the component factory."""

    def test_components_share_source(self):
        """Test that both flows read the same source."""
        pipeline, dashboard = create_engine_components(make_source())
        assert pipeline.run(as_of=AS_OF).flow_graph.primary_account_id == "account-a1"
        assert dashboard.summarize(AS_OF).net_worth.total == Decimal("6500")

    def test_default_source_is_empty(self):
        """Test the factory without a source."""
        pipeline, _ = create_engine_components()
        assert pipeline.run().graph.nodes == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
