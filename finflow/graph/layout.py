"""
Layered Layout Engine

Assigns every node a rank (layer) and a top-left position so that money
flows along one main axis: left to right, or top to bottom.

Ranking:
    A node's rank is one more than the largest rank of its predecessors;
    nodes without predecessors sit in rank 0. Ranks are resolved in
    topological order, visiting nodes in input order.

Cycles:
    When no remaining node is ready, the earliest unresolved node (input
    order) is forced to rank 0 and resolution continues. Each forced node
    is reported, so a layout always terminates and never fails.

Coordinates:
    Along the main axis each rank is one node extent plus the rank
    spacing after the previous one. Across it, nodes of a rank are stacked
    in input order and centered against the widest rank.

DESIGN DECISION: No crossing minimisation. Within-rank order is input
order, so identical input always produces identical coordinates.
"""

from collections import OrderedDict
from typing import Optional, Sequence, Union

from finflow.config import LayoutSettings, get_settings
from finflow.diagnostics import DiagnosticsLogger
from finflow.models.graph import (
    FlowGraph,
    GraphEdge,
    Orientation,
    Position,
    PositionedGraph,
)


class LayeredLayoutEngine:
    """
    Computes ranks and positions for a flow graph.

    Geometry comes from LayoutSettings (defaults: 150x120 nodes, 120 between
    ranks, 80 between nodes of a rank, 50 margin).
    """

    def __init__(self, settings: Optional[LayoutSettings] = None):
        self.settings = settings or get_settings().layout

    def layout(
        self,
        graph: Union[FlowGraph, PositionedGraph, None] = None,
        orientation: Union[Orientation, str, None] = None,
        nodes: Optional[Sequence] = None,
        edges: Optional[Sequence[GraphEdge]] = None,
        diagnostics: Optional[DiagnosticsLogger] = None,
    ) -> PositionedGraph:
        """
        Lay out a graph.

        Pass either a graph or explicit node and edge lists. Edges whose
        endpoints are not both present are ignored for ranking and are
        left out of the result.

        Args:
            orientation: HORIZONTAL / VERTICAL, or "LR" / "TB".
                Defaults to the configured orientation.
        """
        diagnostics = diagnostics or DiagnosticsLogger()
        if graph is not None:
            nodes = graph.nodes
            edges = graph.edges
        nodes = list(nodes or [])
        edges = list(edges or [])
        orientation = Orientation.parse(orientation or self.settings.default_orientation)

        node_ids = list(OrderedDict.fromkeys(node.id for node in nodes))
        known = set(node_ids)
        edges = [edge for edge in edges if edge.source in known and edge.target in known]

        ranks, broken = self.assign_ranks(node_ids, edges, diagnostics)
        positions = self.assign_positions(node_ids, ranks, orientation)

        positioned_nodes = [
            node.model_copy(update={"position": positions[node.id]})
            for node in nodes
        ]
        width, height = self._canvas_size(positions)

        rank_count = max(ranks.values()) + 1 if ranks else 0
        diagnostics.log_layout_computed(
            node_count=len(positioned_nodes),
            rank_count=rank_count,
            orientation=orientation.value,
        )

        return PositionedGraph(
            nodes=positioned_nodes,
            edges=edges,
            orientation=orientation,
            ranks=ranks,
            width=width,
            height=height,
            broken_cycle_nodes=broken,
        )

    def assign_ranks(
        self,
        node_ids: Sequence[str],
        edges: Sequence[GraphEdge],
        diagnostics: Optional[DiagnosticsLogger] = None,
    ) -> tuple[dict[str, int], list[str]]:
        """
        Longest-path ranking with cycle breaking.

        Returns:
            Tuple of (node id -> rank, ids forced to rank 0)
        """
        diagnostics = diagnostics or DiagnosticsLogger()
        order = {node_id: index for index, node_id in enumerate(node_ids)}
        successors: dict[str, list[str]] = {node_id: [] for node_id in node_ids}
        pending: dict[str, int] = {node_id: 0 for node_id in node_ids}

        for edge in edges:
            successors[edge.source].append(edge.target)
            pending[edge.target] += 1

        ranks: dict[str, int] = {}
        done: set[str] = set()
        broken: list[str] = []
        ready = [node_id for node_id in node_ids if pending[node_id] == 0]
        for node_id in ready:
            ranks[node_id] = 0

        max_passes = self.settings.max_relaxation_passes or len(node_ids)
        passes = 0

        while True:
            while ready:
                ready.sort(key=order.__getitem__)
                current = ready.pop(0)
                done.add(current)
                for successor in successors[current]:
                    # Edges back into finished nodes close a cycle
                    if successor in done:
                        continue
                    pending[successor] -= 1
                    ranks[successor] = max(ranks.get(successor, 0), ranks[current] + 1)
                    if pending[successor] == 0:
                        ready.append(successor)

            unresolved = [node_id for node_id in node_ids if node_id not in done]
            if not unresolved:
                break

            passes += 1
            if passes > max_passes:
                for node_id in unresolved:
                    ranks[node_id] = 0
                    done.add(node_id)
                    broken.append(node_id)
                    diagnostics.log_cycle_broken(node_id, passes)
                break

            forced = unresolved[0]
            pending[forced] = 0
            ranks[forced] = 0
            broken.append(forced)
            diagnostics.log_cycle_broken(forced, passes)
            ready.append(forced)

        return ranks, broken

    def assign_positions(
        self,
        node_ids: Sequence[str],
        ranks: dict[str, int],
        orientation: Orientation,
    ) -> dict[str, Position]:
        """Top-left position of every node from its rank and in-rank index."""
        settings = self.settings
        horizontal = orientation == Orientation.HORIZONTAL

        if horizontal:
            main_extent, cross_extent = settings.node_width, settings.node_height
            main_margin, cross_margin = settings.margin_x, settings.margin_y
        else:
            main_extent, cross_extent = settings.node_height, settings.node_width
            main_margin, cross_margin = settings.margin_y, settings.margin_x

        layers: dict[int, list[str]] = {}
        for node_id in node_ids:
            layers.setdefault(ranks[node_id], []).append(node_id)

        def span(count: int) -> float:
            return count * cross_extent + (count - 1) * settings.node_spacing

        max_span = max((span(len(members)) for members in layers.values()), default=0.0)

        positions: dict[str, Position] = {}
        for rank, members in layers.items():
            center_main = main_margin + rank * (main_extent + settings.rank_spacing) + main_extent / 2
            offset = (max_span - span(len(members))) / 2
            for index, node_id in enumerate(members):
                center_cross = (
                    cross_margin + offset
                    + index * (cross_extent + settings.node_spacing)
                    + cross_extent / 2
                )
                main = center_main - main_extent / 2
                cross = center_cross - cross_extent / 2
                if horizontal:
                    positions[node_id] = Position(x=main, y=cross)
                else:
                    positions[node_id] = Position(x=cross, y=main)
        return positions

    def _canvas_size(self, positions: dict[str, Position]) -> tuple[float, float]:
        if not positions:
            return 0.0, 0.0
        settings = self.settings
        width = max(p.x for p in positions.values()) + settings.node_width + settings.margin_x
        height = max(p.y for p in positions.values()) + settings.node_height + settings.margin_y
        return width, height


def layout(
    graph: Union[FlowGraph, PositionedGraph],
    orientation: Union[Orientation, str, None] = None,
    settings: Optional[LayoutSettings] = None,
    diagnostics: Optional[DiagnosticsLogger] = None,
) -> PositionedGraph:
    """Lay out a graph with a throwaway engine."""
    return LayeredLayoutEngine(settings).layout(
        graph,
        orientation=orientation,
        diagnostics=diagnostics,
    )
