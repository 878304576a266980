"""
Main Orchestrator for FinFlow

This module ties together all the components and defines the
end-to-end flows for:
1. Money flow (source -> bundle -> graph -> layout)
2. Dashboard summary (source -> net worth, levels, budgets, goals, achievements)

DESIGN DECISION: The orchestrator is the only place that talks to a data
source. Transient source failures are retried here; everything below it
is pure computation over the loaded bundle.

Each run gets its own DiagnosticsLogger, so events never leak between runs.
"""

from datetime import date
from decimal import Decimal
from typing import Optional, Union

import structlog
from pydantic import BaseModel, ConfigDict, Field
from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from tenacity.wait import wait_base

from finflow.aggregation import (
    AchievementStatus,
    AllocationSlice,
    BudgetProgress,
    Milestone,
    NetWorthSummary,
    PortfolioSummary,
    StreakStatus,
    TierRange,
    achievement_tier_for,
    allocation_breakdown,
    evaluate_achievements,
    evaluate_budgets,
    evaluate_streaks,
    investment_level,
    net_worth,
    net_worth_level,
    net_worth_tier,
    next_milestone,
    portfolio_summary,
    progress_in_tier,
    recurring_monthly_total,
    total_xp,
)
from finflow.config import get_settings
from finflow.diagnostics import DiagnosticsLogger
from finflow.graph import (
    FlowGraphBuilder,
    LayeredLayoutEngine,
    MonthlyCashflow,
    build_cashflow_graph,
)
from finflow.models import (
    DiagnosticEvent,
    FinanceBundle,
    FlowGraph,
    Orientation,
    PositionedGraph,
)
from finflow.projections import GoalProjection, project_goal
from finflow.sources import (
    FinanceDataSource,
    InMemoryFinanceSource,
    SourceError,
    SourceUnavailableError,
)

logger = structlog.get_logger(__name__)

SOURCE_ATTEMPTS = 3


def _log_retry(retry_state: RetryCallState) -> None:
    logger.warning(
        "source_retry",
        attempt=retry_state.attempt_number,
        error=str(retry_state.outcome.exception()),
    )


class BundleLoader:
    """
    Loads a FinanceBundle with retries on transient source failures.

    SourceUnavailableError is retried with exponential backoff (3 attempts).
    Any other SourceError is raised immediately.
    """

    def __init__(
        self,
        source: FinanceDataSource,
        attempts: int = SOURCE_ATTEMPTS,
        wait: Optional[wait_base] = None,
    ):
        self._source = source
        self._retrying = Retrying(
            stop=stop_after_attempt(attempts),
            wait=wait or wait_exponential(multiplier=1, min=2, max=10),
            retry=retry_if_exception_type(SourceUnavailableError),
            before_sleep=_log_retry,
            reraise=True,
        )

    def load(self, diagnostics: DiagnosticsLogger) -> FinanceBundle:
        try:
            return self._retrying(self._source.load_bundle)
        except SourceError as e:
            diagnostics.log_source_error(operation="load_bundle", error_message=str(e))
            raise


# =============================================================================
# MONEY FLOW
# =============================================================================

class PipelineResult(BaseModel):
    """Positioned graph of one run plus everything reported on the way."""
    model_config = ConfigDict(frozen=True)

    graph: PositionedGraph
    flow_graph: FlowGraph
    diagnostics: list[DiagnosticEvent] = Field(default_factory=list)

    @property
    def skipped_flow_ids(self) -> list[str]:
        return self.flow_graph.skipped_flow_ids


class MoneyFlowPipeline:
    """
    Orchestrates the money flow graph.

    Flow:
    1. Load -> read the bundle from the source (with retry)
    2. Build -> nodes and edges via FlowGraphBuilder
    3. Layout -> ranks and positions via LayeredLayoutEngine
    """

    def __init__(
        self,
        source: FinanceDataSource,
        builder: Optional[FlowGraphBuilder] = None,
        layout_engine: Optional[LayeredLayoutEngine] = None,
        loader: Optional[BundleLoader] = None,
    ):
        self._loader = loader or BundleLoader(source)
        self._builder = builder or FlowGraphBuilder()
        self._layout_engine = layout_engine or LayeredLayoutEngine()

    def run(
        self,
        orientation: Union[Orientation, str, None] = None,
        as_of: Optional[date] = None,
    ) -> PipelineResult:
        """
        Build and lay out the money flow graph.

        Raises:
            SourceError: If the bundle cannot be loaded
        """
        diagnostics = DiagnosticsLogger()
        bundle = self._loader.load(diagnostics)
        return self.run_bundle(bundle, orientation=orientation, as_of=as_of, diagnostics=diagnostics)

    def run_bundle(
        self,
        bundle: FinanceBundle,
        orientation: Union[Orientation, str, None] = None,
        as_of: Optional[date] = None,
        diagnostics: Optional[DiagnosticsLogger] = None,
    ) -> PipelineResult:
        """Build and lay out an already loaded bundle."""
        diagnostics = diagnostics or DiagnosticsLogger()
        flow_graph = self._builder.build_bundle(bundle, as_of=as_of, diagnostics=diagnostics)
        positioned = self._layout_engine.layout(
            flow_graph,
            orientation=orientation,
            diagnostics=diagnostics,
        )
        return PipelineResult(
            graph=positioned,
            flow_graph=flow_graph,
            diagnostics=diagnostics.events,
        )


# =============================================================================
# DASHBOARD
# =============================================================================

class DashboardSummary(BaseModel):
    """Summary numbers for the finance dashboard."""
    model_config = ConfigDict(frozen=True)

    as_of: date
    net_worth: NetWorthSummary
    net_worth_level: int
    level_tier: TierRange
    progress_in_tier: float
    achievement_tier: TierRange
    next_milestone: Optional[Milestone] = None
    portfolio: PortfolioSummary
    investment_level: int
    allocation: list[AllocationSlice] = Field(default_factory=list)
    streaks: list[StreakStatus] = Field(default_factory=list)
    budgets: list[BudgetProgress] = Field(default_factory=list)
    goals: list[GoalProjection] = Field(default_factory=list)
    achievements: list[AchievementStatus] = Field(default_factory=list)
    total_xp: int = 0
    cashflow: MonthlyCashflow
    recurring_monthly_total: Decimal = Decimal("0")
    diagnostics: list[DiagnosticEvent] = Field(default_factory=list)


class DashboardSummaryFlow:
    """
    Orchestrates the dashboard summary.

    All numbers are derived from one bundle read; nothing is cached
    between calls.
    """

    def __init__(
        self,
        source: FinanceDataSource,
        loader: Optional[BundleLoader] = None,
    ):
        self._loader = loader or BundleLoader(source)

    def summarize(
        self,
        as_of: date,
        unlocked_keys: frozenset[str] = frozenset(),
    ) -> DashboardSummary:
        """
        Summarize the user's finances on a given day.

        Raises:
            SourceError: If the bundle cannot be loaded
        """
        diagnostics = DiagnosticsLogger()
        bundle = self._loader.load(diagnostics)
        return self.summarize_bundle(bundle, as_of, unlocked_keys, diagnostics)

    def summarize_bundle(
        self,
        bundle: FinanceBundle,
        as_of: date,
        unlocked_keys: frozenset[str] = frozenset(),
        diagnostics: Optional[DiagnosticsLogger] = None,
    ) -> DashboardSummary:
        diagnostics = diagnostics or DiagnosticsLogger()
        settings = get_settings().projection

        worth = net_worth(bundle.accounts)
        level = net_worth_level(worth.total)
        portfolio = portfolio_summary(bundle.investments)
        budgets = evaluate_budgets(
            bundle.budgets,
            bundle.expense_records,
            settings=settings,
            diagnostics=diagnostics,
        )
        goals = [
            project_goal(goal, as_of, settings=settings, diagnostics=diagnostics)
            for goal in bundle.savings_goals
        ]
        achievements = evaluate_achievements(
            worth.total,
            unlocked_keys=unlocked_keys,
            accounts=bundle.accounts,
            streaks=bundle.streaks,
            savings_goals=bundle.savings_goals,
            investments=bundle.investments,
            budget_progress=budgets,
        )
        active_flows = [flow for flow in bundle.recurring_flows if flow.is_active_on(as_of)]

        logger.debug(
            "dashboard_summarized",
            net_worth=str(worth.total),
            level=level,
            goal_count=len(goals),
        )

        return DashboardSummary(
            as_of=as_of,
            net_worth=worth,
            net_worth_level=level,
            level_tier=net_worth_tier(level),
            progress_in_tier=progress_in_tier(level),
            achievement_tier=achievement_tier_for(worth.total),
            next_milestone=next_milestone(worth.total),
            portfolio=portfolio,
            investment_level=investment_level(portfolio.total_value),
            allocation=allocation_breakdown(bundle.investments),
            streaks=evaluate_streaks(bundle.streaks),
            budgets=budgets,
            goals=goals,
            achievements=achievements,
            total_xp=total_xp(achievements),
            cashflow=build_cashflow_graph(bundle.income_records, bundle.expense_records).summary,
            recurring_monthly_total=recurring_monthly_total(active_flows),
            diagnostics=diagnostics.events,
        )


def create_engine_components(
    source: Optional[FinanceDataSource] = None,
) -> tuple[MoneyFlowPipeline, DashboardSummaryFlow]:
    """
    Factory function to create the engine flows.

    Args:
        source: Finance data source. An empty in-memory source is used
                when omitted.

    Returns:
        (money_flow_pipeline, dashboard_summary_flow)
    """
    source = source or InMemoryFinanceSource()
    loader = BundleLoader(source)
    return (
        MoneyFlowPipeline(source, loader=loader),
        DashboardSummaryFlow(source, loader=loader),
    )
