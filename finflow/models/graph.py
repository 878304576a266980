"""
Money-Flow Graph Models

Immutable value objects produced by the graph builder and the layout engine.

DESIGN DECISION: Nodes are a discriminated union over `kind`.
A renderer maps kinds to visual components; nothing in here knows
about rendering beyond a color and an icon name.
"""

from decimal import Decimal
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from finflow.models.finance import Frequency
from finflow.registry.categories import AccountType, ExpenseCategory, IncomeCategory


# =============================================================================
# ENUMS
# =============================================================================

class NodeKind(str, Enum):
    """Kinds of graph nodes."""
    INCOME = "income"
    EXPENSE = "expense"
    ACCOUNT = "account"
    SAVINGS = "savings"
    ANCHOR = "anchor"


class EdgeStyle(str, Enum):
    """
    Rendering hint of an edge.

    RECURRING edges come from standing orders, ONE_OFF edges from
    aggregated transactions.
    """
    RECURRING = "recurring"
    ONE_OFF = "one_off"


class FlowKind(str, Enum):
    """What an edge moves money for."""
    INCOME = "income"
    EXPENSE = "expense"
    SAVINGS = "savings"
    TRANSFER = "transfer"


class Orientation(str, Enum):
    """Direction of the main layout axis."""
    VERTICAL = "vertical"      # top to bottom
    HORIZONTAL = "horizontal"  # left to right

    @classmethod
    def parse(cls, value: Union[str, "Orientation"]) -> "Orientation":
        """Accept enum values and the short forms TB / LR."""
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower()
        aliases = {"tb": "vertical", "lr": "horizontal"}
        return cls(aliases.get(normalized, normalized))


class SkipReason(str, Enum):
    """Why a recurring flow produced no edge."""
    UNRESOLVED_SOURCE = "unresolved_source"
    UNRESOLVED_TARGET = "unresolved_target"
    INACTIVE = "inactive"
    DUPLICATE_ID = "duplicate_id"


FREQUENCY_SHORT = {
    Frequency.WEEKLY: "wk",
    Frequency.BIWEEKLY: "2wk",
    Frequency.MONTHLY: "mo",
    Frequency.QUARTERLY: "qtr",
    Frequency.YEARLY: "yr",
}


# =============================================================================
# NODES
# =============================================================================

class Position(BaseModel):
    """Top-left corner of a node box."""
    model_config = ConfigDict(frozen=True)

    x: float
    y: float


class _NodeBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Stable id, unique per build")
    label: str = Field(..., description="Display name")
    color: str = Field(default="#6B7280")
    icon: Optional[str] = None
    currency: str = "EUR"
    position: Optional[Position] = Field(
        default=None,
        description="Set by the layout engine"
    )


class IncomeNode(_NodeBase):
    kind: Literal["income"] = "income"
    category: IncomeCategory
    amount: Decimal = Decimal("0")
    is_recurring: bool = False


class ExpenseNode(_NodeBase):
    kind: Literal["expense"] = "expense"
    category: ExpenseCategory
    amount: Decimal = Decimal("0")
    budget: Optional[Decimal] = None
    budget_percentage: Optional[float] = None
    budget_tier: Optional[str] = None


class AccountNode(_NodeBase):
    kind: Literal["account"] = "account"
    account_id: str
    account_type: AccountType = AccountType.CHECKING
    institution: Optional[str] = None
    balance: Decimal = Decimal("0")
    is_primary: bool = False


class SavingsNode(_NodeBase):
    kind: Literal["savings"] = "savings"
    goal_id: str
    target_amount: Decimal
    current_amount: Decimal
    monthly_contribution: Decimal
    progress_percent: float = Field(ge=0.0, le=100.0)
    is_achieved: bool = False


class AnchorNode(_NodeBase):
    """Synthetic hub, e.g. the income pool of the cashflow graph."""
    kind: Literal["anchor"] = "anchor"
    role: str
    amount: Decimal = Decimal("0")


GraphNode = Annotated[
    Union[IncomeNode, ExpenseNode, AccountNode, SavingsNode, AnchorNode],
    Field(discriminator="kind"),
]


# =============================================================================
# EDGES
# =============================================================================

class GraphEdge(BaseModel):
    """
    A directed money movement between two nodes.

    Both endpoints exist in the graph the edge belongs to.
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    source: str = Field(..., min_length=1, description="Source node id")
    target: str = Field(..., min_length=1, description="Target node id")
    amount: Decimal = Field(..., description="Weight in currency units")
    currency: str = "EUR"
    style: EdgeStyle = EdgeStyle.ONE_OFF
    flow_kind: FlowKind = FlowKind.TRANSFER
    frequency: Optional[Frequency] = None
    period_label: str = Field(default="mo", description="Short period, e.g. 'mo'")
    label: str = ""
    color: str = "#6B7280"

    # Set for edges that come from a recurring flow
    flow_id: Optional[str] = None
    flow_name: Optional[str] = None


class SkippedFlow(BaseModel):
    """A recurring flow that was left out of the graph, and why."""
    model_config = ConfigDict(frozen=True)

    flow_id: str
    reason: SkipReason
    unresolved_node_id: Optional[str] = None


# =============================================================================
# GRAPHS
# =============================================================================

class FlowGraph(BaseModel):
    """Output of the graph builder: nodes and edges in build order."""
    model_config = ConfigDict(frozen=True)

    nodes: list[GraphNode] = Field(default_factory=list)
    edges: list[GraphEdge] = Field(default_factory=list)
    primary_account_id: Optional[str] = Field(
        default=None,
        description="Node id of the account anchoring aggregate edges"
    )
    skipped_flows: list[SkippedFlow] = Field(default_factory=list)

    @property
    def node_ids(self) -> list[str]:
        return [node.id for node in self.nodes]

    @property
    def skipped_flow_ids(self) -> list[str]:
        return [skipped.flow_id for skipped in self.skipped_flows]

    @property
    def is_empty(self) -> bool:
        return not self.nodes

    def node(self, node_id: str) -> Optional[GraphNode]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def nodes_of_kind(self, kind: NodeKind) -> list[GraphNode]:
        return [node for node in self.nodes if node.kind == kind.value]

    def edges_touching(self, node_id: str) -> list[GraphEdge]:
        return [
            edge for edge in self.edges
            if edge.source == node_id or edge.target == node_id
        ]


class PositionedGraph(BaseModel):
    """
    Output of the layout engine.

    Every node carries a position; `ranks` maps node id to its layer.
    """
    model_config = ConfigDict(frozen=True)

    nodes: list[GraphNode] = Field(default_factory=list)
    edges: list[GraphEdge] = Field(default_factory=list)
    orientation: Orientation = Orientation.HORIZONTAL
    ranks: dict[str, int] = Field(default_factory=dict)
    width: float = 0.0
    height: float = 0.0
    broken_cycle_nodes: list[str] = Field(
        default_factory=list,
        description="Nodes forced to rank 0 to break a cycle"
    )

    def position_of(self, node_id: str) -> Optional[Position]:
        for node in self.nodes:
            if node.id == node_id:
                return node.position
        return None
