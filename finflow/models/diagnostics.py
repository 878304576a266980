"""
Diagnostic Models for FinFlow

The engine never raises on unresolvable input. Every record it drops,
every cycle it breaks and every goal it cannot reach is reported as a
diagnostic event instead.

This provides:
1. Visibility into partial graphs
2. Debugging information when numbers look wrong
3. A list the caller can show next to the rendered graph

DESIGN DECISION: Events are plain values. Collecting them has no effect
on the computed graph or numbers.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class DiagnosticEventType(str, Enum):
    """
    Types of events the engine reports.
    """
    # Graph building
    FLOW_SKIPPED = "flow_skipped"
    DUPLICATE_FLOW = "duplicate_flow"
    PRIMARY_ACCOUNT_MISSING = "primary_account_missing"
    GRAPH_BUILT = "graph_built"

    # Layout
    CYCLE_BROKEN = "cycle_broken"
    LAYOUT_COMPUTED = "layout_computed"

    # Projections
    GOAL_UNREACHABLE = "goal_unreachable"
    BUDGET_UNDEFINED = "budget_undefined"

    # Data source
    SOURCE_ERROR = "source_error"


class DiagnosticSeverity(str, Enum):
    """Severity level for diagnostic events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DiagnosticEvent(BaseModel):
    """
    A single diagnostic event.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: DiagnosticEventType = Field(
        ...,
        description="Type of event"
    )
    severity: DiagnosticSeverity = Field(
        default=DiagnosticSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'recurring_flow', 'node', 'savings_goal')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "description": self.description,
            "details": self.details,
        }


class DiagnosticEventBuilder:
    """
    Helper class to build diagnostic events with common patterns.

    Usage:
        event = DiagnosticEventBuilder.flow_skipped(flow_id, reason, node_id)
        event = DiagnosticEventBuilder.cycle_broken(node_id, pass_number)
    """

    @staticmethod
    def flow_skipped(
        flow_id: str,
        reason: str,
        unresolved_node_id: Optional[str] = None,
    ) -> DiagnosticEvent:
        return DiagnosticEvent(
            event_type=DiagnosticEventType.FLOW_SKIPPED,
            severity=DiagnosticSeverity.WARNING,
            entity_type="recurring_flow",
            entity_id=flow_id,
            description=f"Recurring flow skipped: {reason}",
            details={
                "reason": reason,
                "unresolved_node_id": unresolved_node_id,
            },
        )

    @staticmethod
    def duplicate_flow(flow_id: str) -> DiagnosticEvent:
        return DiagnosticEvent(
            event_type=DiagnosticEventType.DUPLICATE_FLOW,
            severity=DiagnosticSeverity.WARNING,
            entity_type="recurring_flow",
            entity_id=flow_id,
            description=f"Recurring flow id appears more than once: {flow_id}",
        )

    @staticmethod
    def primary_account_missing(
        account_count: int,
        selected_id: Optional[str] = None,
    ) -> DiagnosticEvent:
        return DiagnosticEvent(
            event_type=DiagnosticEventType.PRIMARY_ACCOUNT_MISSING,
            severity=DiagnosticSeverity.WARNING,
            entity_type="account",
            entity_id=selected_id,
            description="No primary account; aggregate edges were not emitted",
            details={
                "account_count": account_count,
            },
        )

    @staticmethod
    def graph_built(
        node_count: int,
        edge_count: int,
        skipped_flow_count: int,
    ) -> DiagnosticEvent:
        return DiagnosticEvent(
            event_type=DiagnosticEventType.GRAPH_BUILT,
            severity=DiagnosticSeverity.DEBUG,
            entity_type="graph",
            description=f"Graph built with {node_count} nodes and {edge_count} edges",
            details={
                "node_count": node_count,
                "edge_count": edge_count,
                "skipped_flow_count": skipped_flow_count,
            },
        )

    @staticmethod
    def cycle_broken(node_id: str, pass_number: int) -> DiagnosticEvent:
        return DiagnosticEvent(
            event_type=DiagnosticEventType.CYCLE_BROKEN,
            severity=DiagnosticSeverity.WARNING,
            entity_type="node",
            entity_id=node_id,
            description=f"Cycle broken by forcing node {node_id} to rank 0",
            details={
                "pass_number": pass_number,
            },
        )

    @staticmethod
    def layout_computed(
        node_count: int,
        rank_count: int,
        orientation: str,
    ) -> DiagnosticEvent:
        return DiagnosticEvent(
            event_type=DiagnosticEventType.LAYOUT_COMPUTED,
            severity=DiagnosticSeverity.DEBUG,
            entity_type="graph",
            description=f"Layout computed: {node_count} nodes in {rank_count} ranks",
            details={
                "node_count": node_count,
                "rank_count": rank_count,
                "orientation": orientation,
            },
        )

    @staticmethod
    def goal_unreachable(
        goal_id: str,
        cap_months: int,
        final_amount: str,
    ) -> DiagnosticEvent:
        return DiagnosticEvent(
            event_type=DiagnosticEventType.GOAL_UNREACHABLE,
            severity=DiagnosticSeverity.INFO,
            entity_type="savings_goal",
            entity_id=goal_id,
            description=f"Savings goal not reachable within {cap_months} months",
            details={
                "cap_months": cap_months,
                "final_amount": final_amount,
            },
        )

    @staticmethod
    def budget_undefined(category: str) -> DiagnosticEvent:
        return DiagnosticEvent(
            event_type=DiagnosticEventType.BUDGET_UNDEFINED,
            severity=DiagnosticSeverity.WARNING,
            entity_type="budget",
            entity_id=category,
            description=f"Budget for '{category}' is zero; status reported as 0%",
        )

    @staticmethod
    def source_error(
        operation: str,
        error_message: str,
    ) -> DiagnosticEvent:
        return DiagnosticEvent(
            event_type=DiagnosticEventType.SOURCE_ERROR,
            severity=DiagnosticSeverity.ERROR,
            entity_type="source",
            description=f"Finance data source failed during {operation}",
            details={
                "operation": operation,
                "error_message": error_message,
            },
        )
