"""Configuration of the call-graph and data-flow traversals."""

from dataclasses import dataclass, field
from typing import Dict, Optional

from ..config import Settings, settings
from ..types import Direction


@dataclass(frozen=True)
class TraversalProfile:
    """Edge kind, caps and parameter rules for one traversal endpoint."""

    name: str
    edge_kind: str
    neighbor_cap: int
    default_depth: int
    max_depth: int
    default_direction: str
    directions: Dict[str, Direction] = field(default_factory=dict)
    # Used when the direction value is not in ``directions``; None means no expansion.
    unknown_direction: Optional[Direction] = None
    node_kind: Optional[str] = None
    include_metrics: bool = False

    def clamp_depth(self, depth: Optional[int]) -> int:
        """Apply the default and clamp depth to [1, max_depth]."""
        if depth is None:
            depth = self.default_depth
        if depth < 1:
            return 1
        if depth > self.max_depth:
            return self.max_depth
        return depth

    def resolve_direction(self, value: Optional[str]) -> Optional[Direction]:
        """Map a request direction onto a traversal direction."""
        if not value:
            value = self.default_direction
        return self.directions.get(value, self.unknown_direction)


def call_graph_profile(config: Settings = settings) -> TraversalProfile:
    return TraversalProfile(
        name="callgraph",
        edge_kind="call",
        neighbor_cap=config.call_graph_neighbor_cap,
        default_depth=config.call_graph_default_depth,
        max_depth=config.call_graph_max_depth,
        default_direction="both",
        directions={
            "outgoing": Direction.OUTGOING,
            "incoming": Direction.INCOMING,
            "both": Direction.BOTH,
            "callees": Direction.OUTGOING,
            "callers": Direction.INCOMING,
        },
        unknown_direction=Direction.BOTH,
        node_kind="function",
        include_metrics=True,
    )


def data_flow_profile(config: Settings = settings) -> TraversalProfile:
    # Unrecognized directions expand nothing here, unlike the call graph.
    return TraversalProfile(
        name="dataflow",
        edge_kind="dfg",
        neighbor_cap=config.data_flow_neighbor_cap,
        default_depth=config.data_flow_default_depth,
        max_depth=config.data_flow_max_depth,
        default_direction="forward",
        directions={
            "forward": Direction.OUTGOING,
            "backward": Direction.INCOMING,
            "both": Direction.BOTH,
        },
        unknown_direction=None,
    )
