"""
Bounded breadth-first traversal over typed graph edges.

One run seeds a result with the root node and expands it level by level in
one or two directions. Both directions write into the same result, so a node
reached by the outgoing pass is never expanded again by the incoming pass.
Neighbor lists are capped by the store; nodes with more neighbors than the
cap are silently truncated.
"""

from typing import List, Optional, Protocol

from ..errors import GraphStoreError, NodeNotFoundError
from ..types import Direction, GraphEdge, GraphNode, TraversalResult
from ..utils.logger import app_logger


class NodeStore(Protocol):
    def get_node(self, node_id: str, include_metrics: bool = False) -> Optional[GraphNode]: ...

    def get_neighbors(self, node_id: str, edge_kind: str, direction: Direction, cap: int,
                      node_kind: Optional[str] = None,
                      include_metrics: bool = False) -> List[GraphNode]: ...


class GraphTraverser:
    """Breadth-first neighborhood expansion with depth limits and fan-out caps."""

    def __init__(self, store: NodeStore):
        self.logger = app_logger.bind(component="graph_traverser")
        self.store = store

    def traverse(self, root_id: str, max_depth: int, direction: Optional[Direction],
                 edge_kind: str, node_kind: Optional[str] = None, neighbor_cap: int = 30,
                 include_metrics: bool = False) -> TraversalResult:
        """Collect the neighborhood of ``root_id``.

        Args:
            root_id: Identifier of the seed node.
            max_depth: Number of BFS levels to expand per direction.
            direction: Direction to expand in; None leaves only the seed.
            edge_kind: Edge kind to follow, e.g. "call" or "dfg".
            node_kind: Only neighbors of this node kind are visible.
            neighbor_cap: Maximum neighbors fetched per node per direction.
            include_metrics: Attach function metrics to returned nodes.

        Returns:
            TraversalResult with nodes at their first discovery depth and every
            traversed edge in recording order.

        Raises:
            NodeNotFoundError: The root does not exist.
        """
        root = self.store.get_node(root_id, include_metrics=include_metrics)
        if root is None:
            raise NodeNotFoundError(root_id)

        result = TraversalResult.seeded(root)
        if direction is None:
            return result

        for pass_direction in direction.passes():
            self._expand(result, root_id, max_depth, pass_direction, edge_kind,
                         node_kind, neighbor_cap, include_metrics)

        self.logger.debug(
            f"Traversed {edge_kind} edges from {root_id} ({direction.value}, depth {max_depth}): "
            f"{len(result.nodes)} nodes, {len(result.edges)} edges"
        )
        return result

    def _expand(self, result: TraversalResult, root_id: str, max_depth: int,
                direction: Direction, edge_kind: str, node_kind: Optional[str],
                neighbor_cap: int, include_metrics: bool):
        """Run one single-direction BFS pass into ``result``."""
        frontier = [root_id]

        for depth in range(1, max_depth + 1):
            if not frontier:
                break

            next_frontier = []
            for current_id in frontier:
                try:
                    neighbors = self.store.get_neighbors(
                        current_id, edge_kind, direction, neighbor_cap,
                        node_kind=node_kind, include_metrics=include_metrics,
                    )
                except GraphStoreError as e:
                    self.logger.warning(f"Skipping expansion of {current_id} ({direction.value}): {e}")
                    continue

                for neighbor in neighbors:
                    result.record_edge(_oriented_edge(current_id, neighbor.id, direction, edge_kind))
                    if result.discover(neighbor, depth):
                        next_frontier.append(neighbor.id)

            frontier = next_frontier


def _oriented_edge(current_id: str, neighbor_id: str, direction: Direction, edge_kind: str) -> GraphEdge:
    if direction is Direction.OUTGOING:
        return GraphEdge(source=current_id, target=neighbor_id, kind=edge_kind)
    return GraphEdge(source=neighbor_id, target=current_id, kind=edge_kind)
