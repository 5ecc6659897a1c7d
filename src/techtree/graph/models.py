"""Graph data models for the technique tree."""

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from ..errors import DanglingEndpointError, InvalidParentError
from ..models.records import EdgeRecord, MediaClip, PointRecord, PositionRecord

logger = logging.getLogger(__name__)


class NodeType(str, Enum):
    """Node categories; drive relationship inference and styling."""
    VARIANT = "variant"
    MY_MOVE = "myMove"
    OPPONENT_MOVE = "opponentMove"
    OUTCOME = "outcome"


ROOT_TYPE = NodeType.VARIANT


@dataclass(frozen=True)
class Position:
    """Canvas coordinates of a node."""
    x: float
    y: float


@dataclass
class TreeNode:
    """A position, move or outcome in the technique tree."""
    id: str
    label: str
    node_type: NodeType
    parent_id: str | None = None
    depth: int = 0
    media: MediaClip | None = None
    position: Position | None = None  # Derived, owned by the layout engine
    pinned: bool = False  # Position set by a manual move

    def to_record(self) -> PositionRecord:
        """Convert to the persisted positions-collection record."""
        return PositionRecord(
            name=self.label,
            node_type=self.node_type.value,
            parent_id=self.parent_id,
            depth=self.depth,
            position=PointRecord(x=self.position.x, y=self.position.y) if self.position else None,
            media=self.media,
            pinned=self.pinned,
        )

    @classmethod
    def from_record(cls, record_id: str, record: PositionRecord) -> "TreeNode":
        """Build a node from a persisted record."""
        return cls(
            id=record_id,
            label=record.name,
            node_type=NodeType(record.node_type),
            parent_id=record.parent_id,
            depth=record.depth,
            media=record.media,
            position=Position(record.position.x, record.position.y) if record.position else None,
            pinned=record.pinned,
        )


@dataclass(frozen=True)
class TreeEdge:
    """Directed connection between two nodes."""
    id: str
    source: str
    target: str

    def to_record(self) -> EdgeRecord:
        return EdgeRecord(from_id=self.source, to_id=self.target)

    @classmethod
    def from_record(cls, record_id: str, record: EdgeRecord) -> "TreeEdge":
        return cls(id=record_id, source=record.from_id, target=record.to_id)


class TechniqueGraph:
    """In-memory node and edge sets for one graph session.

    Nodes and edges keep insertion order; the layout engine relies on it
    for first-seen-first-placed ordering.
    """

    def __init__(self):
        self._nodes: Dict[str, TreeNode] = {}
        self._edges: Dict[str, TreeEdge] = {}

    @property
    def nodes(self) -> List[TreeNode]:
        return list(self._nodes.values())

    @property
    def edges(self) -> List[TreeEdge]:
        return list(self._edges.values())

    def get_node(self, node_id: str) -> Optional[TreeNode]:
        return self._nodes.get(node_id)

    def has_node(self, node_id: str) -> bool:
        return node_id in self._nodes

    def get_edge(self, edge_id: str) -> Optional[TreeEdge]:
        return self._edges.get(edge_id)

    def add_node(self, node: TreeNode) -> None:
        """Add a node, enforcing the parent and depth invariants.

        Raises:
            InvalidParentError: If parent_id does not reference an existing node
                or depth does not follow from the parent
            ValueError: If a node with the same id already exists
        """
        if node.id in self._nodes:
            raise ValueError(f"Duplicate node id: {node.id}")

        if node.parent_id is None:
            if node.depth != 0:
                raise InvalidParentError(f"Root node {node.id} must have depth 0, got {node.depth}")
        else:
            parent = self._nodes.get(node.parent_id)
            if parent is None:
                raise InvalidParentError(f"Parent {node.parent_id} of node {node.id} does not exist")
            if node.depth != parent.depth + 1:
                raise InvalidParentError(
                    f"Node {node.id} has depth {node.depth}, expected {parent.depth + 1} under {parent.id}"
                )

        self._nodes[node.id] = node
        logger.debug(f"Added node {node.id} ({node.node_type.value}) at depth {node.depth}")

    def add_edge(self, edge: TreeEdge) -> None:
        """Add an edge between two existing nodes.

        Raises:
            DanglingEndpointError: If source or target does not exist
            ValueError: If an edge with the same id already exists
        """
        if edge.id in self._edges:
            raise ValueError(f"Duplicate edge id: {edge.id}")
        for endpoint in (edge.source, edge.target):
            if endpoint not in self._nodes:
                raise DanglingEndpointError(f"Edge {edge.id} references missing node {endpoint}")

        self._edges[edge.id] = edge
        logger.debug(f"Added edge {edge.source} -> {edge.target}")

    def replace_all(self, nodes: Iterable[TreeNode], edges: Iterable[TreeEdge]) -> None:
        """Replace the whole content with a snapshot.

        Nodes whose parent is absent are kept as orphans. Edges with a missing
        endpoint are dropped.
        """
        self._nodes = {node.id: node for node in nodes}
        self._edges = {}
        dropped = 0
        for edge in edges:
            if edge.source in self._nodes and edge.target in self._nodes:
                self._edges[edge.id] = edge
            else:
                dropped += 1
        if dropped:
            logger.warning(f"Dropped {dropped} edge(s) with missing endpoints from snapshot")
        logger.debug(f"Loaded snapshot with {len(self._nodes)} nodes and {len(self._edges)} edges")

    def apply_positions(self, positions: Dict[str, Position]) -> None:
        """Write computed positions back onto the nodes."""
        for node_id, position in positions.items():
            node = self._nodes.get(node_id)
            if node is not None:
                node.position = position

    def children_of(self, parent_id: str) -> List[TreeNode]:
        return [n for n in self._nodes.values() if n.parent_id == parent_id]

    def roots(self) -> List[TreeNode]:
        return [n for n in self._nodes.values() if n.parent_id is None]

    def edges_from(self, node_id: str) -> List[TreeEdge]:
        return [e for e in self._edges.values() if e.source == node_id]

    def max_depth(self) -> int:
        if not self._nodes:
            return 0
        return max(n.depth for n in self._nodes.values())

    def copy_nodes(self) -> List[TreeNode]:
        """Detached copies of all nodes, safe to hand to consumers."""
        return [replace(n) for n in self._nodes.values()]

    def statistics(self) -> Dict[str, Any]:
        """Get counts by node type plus totals."""
        stats: Dict[str, Any] = {}
        for node_type in NodeType:
            count = len([n for n in self._nodes.values() if n.node_type == node_type])
            if count > 0:
                stats[node_type.value] = count
        stats["nodes"] = len(self._nodes)
        stats["edges"] = len(self._edges)
        stats["max_depth"] = self.max_depth()
        return stats
