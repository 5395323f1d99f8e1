from typing import List, Dict, Any, Optional, Tuple
from dataclasses import dataclass, field
from enum import Enum


class Direction(Enum):
    """Traversal direction relative to the node being expanded."""
    OUTGOING = "outgoing"
    INCOMING = "incoming"
    BOTH = "both"

    def passes(self) -> Tuple["Direction", ...]:
        """Single-direction passes in execution order; BOTH runs outgoing first."""
        if self is Direction.BOTH:
            return (Direction.OUTGOING, Direction.INCOMING)
        return (self,)


@dataclass(frozen=True)
class GraphNode:
    """A program entity read from the graph store."""
    id: str
    kind: str
    label: str
    package: str = ""
    file: str = ""
    line: int = 0
    complexity: Optional[int] = None
    fan_in: Optional[int] = None
    fan_out: Optional[int] = None

    @property
    def has_metrics(self) -> bool:
        return self.complexity is not None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        data = {
            "id": self.id,
            "label": self.label,
            "kind": self.kind,
            "package": self.package,
            "file": self.file,
            "line": self.line,
        }
        if self.has_metrics:
            data["complexity"] = self.complexity
            data["fan_in"] = self.fan_in
            data["fan_out"] = self.fan_out
        return data


@dataclass(frozen=True)
class GraphEdge:
    """A directed, kind-tagged relation between two nodes."""
    source: str
    target: str
    kind: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "source": self.source,
            "target": self.target,
            "kind": self.kind,
        }


@dataclass(frozen=True)
class TraversalNode:
    """A node as seen by one traversal run."""
    node: GraphNode
    depth: int
    is_root: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        data = self.node.to_dict()
        data["depth"] = self.depth
        data["is_root"] = self.is_root
        return data


@dataclass
class TraversalResult:
    """Nodes keyed by id at their first discovery depth, plus every traversed edge."""
    nodes: Dict[str, TraversalNode] = field(default_factory=dict)
    edges: List[GraphEdge] = field(default_factory=list)

    @classmethod
    def seeded(cls, root: GraphNode) -> "TraversalResult":
        result = cls()
        result.nodes[root.id] = TraversalNode(node=root, depth=0, is_root=True)
        return result

    def __contains__(self, node_id: str) -> bool:
        return node_id in self.nodes

    def discover(self, node: GraphNode, depth: int) -> bool:
        """Register a node at ``depth`` unless already known. Returns True on first discovery."""
        if node.id in self.nodes:
            return False
        self.nodes[node.id] = TraversalNode(node=node, depth=depth)
        return True

    def record_edge(self, edge: GraphEdge):
        self.edges.append(edge)

    def depth_of(self, node_id: str) -> Optional[int]:
        entry = self.nodes.get(node_id)
        return entry.depth if entry else None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "nodes": [node.to_dict() for node in self.nodes.values()],
            "edges": [edge.to_dict() for edge in self.edges],
        }
