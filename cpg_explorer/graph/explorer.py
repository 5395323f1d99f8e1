from typing import Optional

from ..errors import InvalidInputError
from ..types import TraversalResult
from ..utils.logger import app_logger
from .profiles import TraversalProfile, call_graph_profile, data_flow_profile
from .traversal import GraphTraverser, NodeStore


class CodeGraphExplorer:
    """Call-graph and data-flow neighborhoods over a node store."""

    def __init__(self, store: NodeStore,
                 call_graph: Optional[TraversalProfile] = None,
                 data_flow: Optional[TraversalProfile] = None):
        self.logger = app_logger.bind(component="code_graph_explorer")
        self.traverser = GraphTraverser(store)
        self.call_graph_profile = call_graph or call_graph_profile()
        self.data_flow_profile = data_flow or data_flow_profile()

    def call_graph(self, root_id: Optional[str], depth: Optional[int] = None,
                   direction: Optional[str] = None) -> TraversalResult:
        """BFS over call edges between functions."""
        return self.explore(self.call_graph_profile, root_id, depth, direction)

    def data_flow(self, root_id: Optional[str], depth: Optional[int] = None,
                  direction: Optional[str] = None) -> TraversalResult:
        """BFS over dfg edges, definitions to uses and back."""
        return self.explore(self.data_flow_profile, root_id, depth, direction)

    def explore(self, profile: TraversalProfile, root_id: Optional[str],
                depth: Optional[int] = None, direction: Optional[str] = None) -> TraversalResult:
        if root_id is None or not root_id.strip():
            raise InvalidInputError("node id is required")

        max_depth = profile.clamp_depth(depth)
        resolved = profile.resolve_direction(direction)
        self.logger.info(
            f"{profile.name}: root={root_id} depth={max_depth} "
            f"direction={resolved.value if resolved else 'none'}"
        )

        return self.traverser.traverse(
            root_id,
            max_depth,
            resolved,
            profile.edge_kind,
            node_kind=profile.node_kind,
            neighbor_cap=profile.neighbor_cap,
            include_metrics=profile.include_metrics,
        )
