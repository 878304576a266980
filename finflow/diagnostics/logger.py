"""
Diagnostics Logger

DESIGN DECISION: Every record the engine drops and every fallback it takes
is reported. This provides:
1. Observability of partial graphs
2. Debugging capability for surprising numbers
3. A list of skipped items the caller can show to the user

The diagnostics logger:
- Is synchronous, like the rest of the engine
- Always logs locally through structlog
- Keeps the events of one run in memory for the caller
"""

import logging
from typing import Optional

import structlog

from finflow.config import get_settings
from finflow.models.diagnostics import (
    DiagnosticEvent,
    DiagnosticEventBuilder,
    DiagnosticEventType,
    DiagnosticSeverity,
)


def configure_logging(level: Optional[str] = None, log_format: Optional[str] = None) -> None:
    """
    Configure structlog for local logging.

    Called once on import; call again to switch level or renderer.
    """
    app_settings = get_settings().app
    level = (level or app_settings.log_level).upper()
    log_format = log_format or app_settings.log_format

    renderer = (
        structlog.dev.ConsoleRenderer()
        if log_format == "console"
        else structlog.processors.JSONRenderer()
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    package_logger = logging.getLogger("finflow")
    package_logger.setLevel(level)
    if not package_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(message)s"))
        package_logger.addHandler(handler)


configure_logging()


class DiagnosticsLogger:
    """
    Collects diagnostic events of one engine run.

    Logs events locally and keeps them in order for the caller.
    Create one per run; events are never shared between runs.
    """

    def __init__(self):
        self._events: list[DiagnosticEvent] = []
        self._logger = structlog.get_logger(__name__)

    def log(self, event: DiagnosticEvent) -> DiagnosticEvent:
        """
        Record a diagnostic event.

        Always logs locally at the level matching the event severity.
        """
        log_dict = event.to_log_dict()

        if event.severity == DiagnosticSeverity.ERROR:
            self._logger.error("diagnostic_event", **log_dict)
        elif event.severity == DiagnosticSeverity.WARNING:
            self._logger.warning("diagnostic_event", **log_dict)
        elif event.severity == DiagnosticSeverity.DEBUG:
            self._logger.debug("diagnostic_event", **log_dict)
        else:
            self._logger.info("diagnostic_event", **log_dict)

        self._events.append(event)
        return event

    @property
    def events(self) -> list[DiagnosticEvent]:
        """Events recorded so far, oldest first."""
        return list(self._events)

    def events_of_type(self, event_type: DiagnosticEventType) -> list[DiagnosticEvent]:
        return [event for event in self._events if event.event_type == event_type]

    @property
    def has_warnings(self) -> bool:
        return any(
            event.severity in (DiagnosticSeverity.WARNING, DiagnosticSeverity.ERROR)
            for event in self._events
        )

    def clear(self) -> None:
        self._events.clear()

    def log_flow_skipped(
        self,
        flow_id: str,
        reason: str,
        unresolved_node_id: Optional[str] = None,
    ) -> None:
        """Log a recurring flow that produced no edge."""
        self.log(DiagnosticEventBuilder.flow_skipped(
            flow_id=flow_id,
            reason=reason,
            unresolved_node_id=unresolved_node_id,
        ))

    def log_duplicate_flow(self, flow_id: str) -> None:
        self.log(DiagnosticEventBuilder.duplicate_flow(flow_id))

    def log_primary_account_missing(
        self,
        account_count: int,
        selected_id: Optional[str] = None,
    ) -> None:
        self.log(DiagnosticEventBuilder.primary_account_missing(
            account_count=account_count,
            selected_id=selected_id,
        ))

    def log_graph_built(
        self,
        node_count: int,
        edge_count: int,
        skipped_flow_count: int,
    ) -> None:
        self.log(DiagnosticEventBuilder.graph_built(
            node_count=node_count,
            edge_count=edge_count,
            skipped_flow_count=skipped_flow_count,
        ))

    def log_cycle_broken(self, node_id: str, pass_number: int) -> None:
        """Log a node forced to rank 0."""
        self.log(DiagnosticEventBuilder.cycle_broken(
            node_id=node_id,
            pass_number=pass_number,
        ))

    def log_layout_computed(
        self,
        node_count: int,
        rank_count: int,
        orientation: str,
    ) -> None:
        self.log(DiagnosticEventBuilder.layout_computed(
            node_count=node_count,
            rank_count=rank_count,
            orientation=orientation,
        ))

    def log_goal_unreachable(
        self,
        goal_id: str,
        cap_months: int,
        final_amount: str,
    ) -> None:
        self.log(DiagnosticEventBuilder.goal_unreachable(
            goal_id=goal_id,
            cap_months=cap_months,
            final_amount=final_amount,
        ))

    def log_budget_undefined(self, category: str) -> None:
        self.log(DiagnosticEventBuilder.budget_undefined(category))

    def log_source_error(self, operation: str, error_message: str) -> None:
        """Log a failed read from the finance data source."""
        self.log(DiagnosticEventBuilder.source_error(
            operation=operation,
            error_message=error_message,
        ))
