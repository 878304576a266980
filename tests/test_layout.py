"""
Tests for the layered layout engine.
"""

import pytest
from decimal import Decimal

from finflow.config import LayoutSettings
from finflow.diagnostics import DiagnosticsLogger
from finflow.graph import LayeredLayoutEngine, build_flow_graph, layout
from finflow.models import (
    Account,
    AccountNode,
    DiagnosticEventType,
    ExpenseRecord,
    FlowGraph,
    FlowSource,
    FlowTarget,
    GraphEdge,
    IncomeRecord,
    Orientation,
    Position,
    RecurringFlow,
    SavingsGoalProgress,
)


def sample_graph() -> FlowGraph:
    return build_flow_graph(
        accounts=[
            Account(id="a1", name="Checking"),
            Account(id="a2", name="Savings", account_type="savings"),
        ],
        income_records=[IncomeRecord(category="salary", amount=Decimal("3000"))],
        expense_records=[ExpenseRecord(category="food", amount=Decimal("400"))],
    )


def plain_graph(node_ids, edge_pairs) -> FlowGraph:
    return FlowGraph(
        nodes=[AccountNode(id=node_id, label=node_id, account_id=node_id) for node_id in node_ids],
        edges=[
            GraphEdge(id=f"{source}->{target}", source=source, target=target, amount=Decimal("1"))
            for source, target in edge_pairs
        ],
    )


@pytest.fixture
def engine():
    return LayeredLayoutEngine(LayoutSettings())


class TestRanking:
    """Tests for rank assignment."""

    def test_longest_path_ranks(self, engine):
        """Test ranks of the basic scenario."""
        result = engine.layout(sample_graph(), orientation=Orientation.HORIZONTAL)
        assert result.ranks == {
            "income-salary": 0,
            "account-a1": 1,
            "account-a2": 0,
            "expense-food": 2,
        }
        assert result.broken_cycle_nodes == []

    def test_rank_is_longest_path(self, engine):
        """Test that a shortcut edge does not pull a node forward."""
        graph = plain_graph(["a", "b", "c"], [("a", "b"), ("b", "c"), ("a", "c")])
        assert engine.layout(graph).ranks == {"a": 0, "b": 1, "c": 2}

    def test_rank_monotonicity(self, engine):
        """Test that every edge goes at least one rank forward."""
        graph = build_flow_graph(
            accounts=[Account(id="a1", name="Checking"), Account(id="a2", name="Savings")],
            income_records=[IncomeRecord(category="salary", amount=Decimal("3000"))],
            expense_records=[ExpenseRecord(category="food", amount=Decimal("400"))],
            savings_goals=[
                SavingsGoalProgress(
                    id="g1", name="Trip", target_amount=Decimal("1000"),
                    monthly_contribution=Decimal("50"),
                ),
            ],
            recurring_flows=[
                RecurringFlow(
                    id="rf-1",
                    source=FlowSource(type="account", id="a1"),
                    target=FlowTarget(type="account", id="a2"),
                    amount=Decimal("200"),
                ),
                RecurringFlow(
                    id="rf-2",
                    source=FlowSource(type="account", id="a2"),
                    target=FlowTarget(type="savings", id="g1"),
                    amount=Decimal("100"),
                ),
            ],
        )
        result = engine.layout(graph)
        for edge in result.edges:
            assert result.ranks[edge.target] >= result.ranks[edge.source] + 1

    def test_two_node_cycle_is_broken(self, engine):
        """Test that the earliest node of a cycle is forced to rank 0."""
        diagnostics = DiagnosticsLogger()
        graph = plain_graph(["x", "y"], [("x", "y"), ("y", "x")])
        result = engine.layout(graph, diagnostics=diagnostics)

        assert result.ranks == {"x": 0, "y": 1}
        assert result.broken_cycle_nodes == ["x"]
        events = diagnostics.events_of_type(DiagnosticEventType.CYCLE_BROKEN)
        assert [event.entity_id for event in events] == ["x"]

    def test_self_loop(self, engine):
        """Test that a self loop terminates."""
        result = engine.layout(plain_graph(["s"], [("s", "s")]))
        assert result.ranks == {"s": 0}
        assert result.broken_cycle_nodes == ["s"]

    def test_cycle_behind_a_source(self, engine):
        """Test a cycle reachable from a regular source."""
        graph = plain_graph(["src", "a", "b"], [("src", "a"), ("a", "b"), ("b", "a")])
        result = engine.layout(graph)
        assert result.ranks["src"] == 0
        assert result.broken_cycle_nodes == ["a"]
        assert result.ranks["b"] == result.ranks["a"] + 1

    def test_pass_limit(self):
        """Test that exhausting the pass limit puts the rest in rank 0."""
        engine = LayeredLayoutEngine(LayoutSettings(max_relaxation_passes=1))
        graph = plain_graph(
            ["p", "q", "r", "s"],
            [("p", "q"), ("q", "p"), ("r", "s"), ("s", "r")],
        )
        result = engine.layout(graph)
        assert result.broken_cycle_nodes == ["p", "r", "s"]
        assert result.ranks == {"p": 0, "q": 1, "r": 0, "s": 0}

    def test_dangling_edges_are_ignored(self, engine):
        """Test that edges to unknown nodes are dropped."""
        graph = FlowGraph(
            nodes=[AccountNode(id="a", label="a", account_id="a")],
            edges=[GraphEdge(id="e1", source="a", target="ghost", amount=Decimal("1"))],
        )
        result = engine.layout(graph)
        assert result.edges == []
        assert result.ranks == {"a": 0}


class TestCoordinates:
    """Tests for position assignment."""

    def test_horizontal_positions(self, engine):
        """Test left-to-right coordinates of the basic scenario."""
        result = engine.layout(sample_graph(), orientation="horizontal")

        assert result.position_of("income-salary") == Position(x=50, y=50)
        assert result.position_of("account-a2") == Position(x=50, y=250)
        assert result.position_of("account-a1") == Position(x=320, y=150)
        assert result.position_of("expense-food") == Position(x=590, y=150)
        assert result.width == 790
        assert result.height == 420

    def test_vertical_positions(self, engine):
        """Test top-to-bottom coordinates of the basic scenario."""
        result = engine.layout(sample_graph(), orientation="TB")

        assert result.orientation == Orientation.VERTICAL
        assert result.position_of("income-salary") == Position(x=50, y=50)
        assert result.position_of("account-a2") == Position(x=280, y=50)
        assert result.position_of("account-a1") == Position(x=165, y=290)
        assert result.position_of("expense-food") == Position(x=165, y=530)

    def test_orientation_does_not_change_ranks(self, engine):
        """Test that both orientations share one ranking."""
        horizontal = engine.layout(sample_graph(), orientation="LR")
        vertical = engine.layout(sample_graph(), orientation="TB")
        assert horizontal.ranks == vertical.ranks

    def test_layout_is_deterministic(self, engine):
        """Test that identical input yields identical output."""
        assert engine.layout(sample_graph()) == engine.layout(sample_graph())

    def test_every_node_is_positioned(self, engine):
        """Test that no node is left without a position."""
        result = engine.layout(sample_graph())
        assert all(node.position is not None for node in result.nodes)

    def test_custom_geometry(self):
        """Test injected node size and spacing."""
        settings = LayoutSettings(
            node_width=100, node_height=50, rank_spacing=20,
            node_spacing=10, margin_x=0, margin_y=0,
        )
        result = LayeredLayoutEngine(settings).layout(
            plain_graph(["a", "b"], [("a", "b")]),
            orientation="horizontal",
        )
        assert result.position_of("a") == Position(x=0, y=0)
        assert result.position_of("b") == Position(x=120, y=0)

    def test_empty_graph(self, engine):
        """Test that an empty graph lays out to nothing."""
        result = engine.layout(FlowGraph())
        assert result.nodes == []
        assert result.width == 0
        assert result.height == 0

    def test_explicit_node_and_edge_lists(self, engine):
        """Test laying out lists instead of a graph."""
        graph = sample_graph()
        result = engine.layout(nodes=graph.nodes, edges=graph.edges, orientation="horizontal")
        assert result.ranks["expense-food"] == 2

    def test_module_level_layout(self):
        """Test the layout() convenience function."""
        diagnostics = DiagnosticsLogger()
        result = layout(sample_graph(), orientation="LR", diagnostics=diagnostics)
        assert result.position_of("account-a1") == Position(x=320, y=150)
        assert diagnostics.events_of_type(DiagnosticEventType.LAYOUT_COMPUTED)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
