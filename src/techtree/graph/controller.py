"""Graph controller: the single entry point for mutating a technique graph.

Every operation runs to completion (model mutation, layout pass, listener
notification) before the next one starts. Store writes happen last and never
roll back local state; the next snapshot load reconciles.
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Callable, List

from ..config import LayoutConfig
from ..errors import NodeNotFoundError, PersistenceFailedError, StoreError
from ..models.records import EDGES_COLLECTION, POSITIONS_COLLECTION, MediaClip
from ..store.base import DocumentStore
from .layout import TreeLayoutEngine
from .models import NodeType, Position, TechniqueGraph, TreeEdge, TreeNode
from .resolver import Placement, resolve_placement

logger = logging.getLogger(__name__)


@dataclass
class GraphView:
    """What a presentation layer needs to draw the graph."""
    nodes: List[TreeNode]
    edges: List[TreeEdge]
    selected_node_id: str | None
    annotation_mode: bool = False


GraphListener = Callable[[GraphView], None]


def _new_id() -> str:
    return uuid.uuid4().hex


class GraphController:
    """Orchestrates relationship inference, mutation, layout and mirroring.

    Session state:
        selected_node_id: anchor for the next add. Set by select_node and
            add_node, never cleared automatically.
        annotation_mode: set by begin_annotation, cleared by add_node.
    """

    def __init__(
        self,
        settings: LayoutConfig | None = None,
        store: DocumentStore | None = None,
        id_factory: Callable[[], str] = _new_id,
    ):
        self.settings = settings or LayoutConfig()
        self.store = store
        self.graph = TechniqueGraph()
        self.layout_engine = TreeLayoutEngine(self.settings)
        self.selected_node_id: str | None = None
        self.annotation_mode = False
        self._new_id = id_factory
        self._listeners: List[GraphListener] = []

    # ─── Selection ────────────────────────────────

    def select_node(self, node_id: str) -> None:
        """Select a node. Unknown ids are ignored."""
        if not self.graph.has_node(node_id):
            logger.debug(f"Ignoring selection of unknown node {node_id}")
            return
        self.selected_node_id = node_id
        self._notify()

    def begin_annotation(self) -> None:
        """Enter annotation mode; the next add_node leaves it."""
        self.annotation_mode = True
        self._notify()

    # ─── Mutations ────────────────────────────────

    def add_node(self, declared_type: NodeType | str, label: str, media: MediaClip | None = None) -> str:
        """Add a node placed relative to the current selection.

        Returns:
            Id of the new node, which becomes the selection

        Raises:
            ValueError: If the label is blank or the type is unknown
            SelectedNodeMissingError: If the selection no longer exists, or a
                sibling add is anchored on a node whose parent is gone
            PersistenceFailedError: If mirroring to the store fails; the node
                and its parent edge stay in the graph. When the node write
                fails the parent edge is not mirrored either.
        """
        declared_type = NodeType(declared_type)
        label = label.strip()
        if not label:
            raise ValueError("Node label must not be empty")

        placement = resolve_placement(self.graph, declared_type, self.selected_node_id)

        node = TreeNode(
            id=self._new_id(),
            label=label,
            node_type=declared_type,
            parent_id=placement.parent_id,
            depth=placement.depth,
            media=media,
            position=self._transient_position(placement),
        )
        self.graph.add_node(node)

        # Sibling edges come from the selected node's parent, not the selected node
        edge = None
        if placement.parent_id is not None:
            edge = TreeEdge(id=self._new_id(), source=placement.parent_id, target=node.id)
            self.graph.add_edge(edge)

        self.relayout()
        self.selected_node_id = node.id
        self.annotation_mode = False
        logger.info(f"Added {declared_type.value} '{label}' as {placement.relation.value} (id={node.id})")
        self._notify()

        self._mirror_node(node)
        if edge is not None:
            self._mirror_edge(edge)
        return node.id

    def connect_manually(self, source_id: str, target_id: str) -> str:
        """Create a free-form edge. Parent, depth and layout are unaffected.

        Raises:
            DanglingEndpointError: If either endpoint does not exist
            PersistenceFailedError: If mirroring to the store fails
        """
        edge = TreeEdge(id=self._new_id(), source=source_id, target=target_id)
        self.graph.add_edge(edge)
        logger.info(f"Connected {source_id} -> {target_id}")
        self._notify()

        self._mirror_edge(edge)
        return edge.id

    def load_snapshot(self, nodes: List[TreeNode], edges: List[TreeEdge]) -> None:
        """Replace the whole graph with an external snapshot and lay it out."""
        self.graph.replace_all(nodes, edges)
        self.relayout()
        self._notify()

    def move_node(self, node_id: str, x: float, y: float) -> None:
        """Manually reposition a node without a layout pass.

        With preserve_manual_positions the node is pinned and later layout
        passes keep it in place until reorganize(); otherwise the next layout
        pass overwrites the position.

        Raises:
            NodeNotFoundError: If the node does not exist
            PersistenceFailedError: If mirroring to the store fails
        """
        node = self.graph.get_node(node_id)
        if node is None:
            raise NodeNotFoundError(f"Node {node_id} does not exist")

        node.position = Position(x, y)
        node.pinned = self.settings.preserve_manual_positions
        self._notify()

        self._update_stored_node(node_id, {"position": {"x": x, "y": y}, "pinned": node.pinned})

    def reorganize(self) -> None:
        """Drop all manual pins and recompute the layout."""
        unpinned = []
        for node in self.graph.nodes:
            if node.pinned:
                node.pinned = False
                unpinned.append(node.id)

        self.relayout()
        self._notify()

        for node_id in unpinned:
            self._update_stored_node(node_id, {"pinned": False})

    def relayout(self) -> None:
        """Run one layout pass over the whole graph."""
        pinned = frozenset()
        if self.settings.preserve_manual_positions:
            pinned = frozenset(n.id for n in self.graph.nodes if n.pinned)
        positions = self.layout_engine.layout(self.graph.nodes, pinned)
        self.graph.apply_positions(positions)

    # ─── Consumers ────────────────────────────────

    def view(self) -> GraphView:
        return GraphView(
            nodes=self.graph.copy_nodes(),
            edges=self.graph.edges,
            selected_node_id=self.selected_node_id,
            annotation_mode=self.annotation_mode,
        )

    def subscribe(self, listener: GraphListener) -> Callable[[], None]:
        """Register a listener called with a fresh view after each change."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ─── Internals ────────────────────────────────

    def _transient_position(self, placement: Placement) -> Position:
        if placement.parent_id is not None:
            parent = self.graph.get_node(placement.parent_id)
            if parent is not None and parent.position is not None:
                return Position(parent.position.x, self.layout_engine.row_y(placement.depth))
        return Position(self.settings.origin_x, self.layout_engine.row_y(placement.depth))

    def _notify(self) -> None:
        if not self._listeners:
            return
        view = self.view()
        for listener in list(self._listeners):
            listener(view)

    def _mirror_node(self, node: TreeNode) -> None:
        if self.store is None:
            return
        fields = node.to_record().model_dump(by_alias=True, mode="json")
        try:
            self.store.create_record(POSITIONS_COLLECTION, fields, record_id=node.id)
        except StoreError as e:
            logger.error(f"Failed to persist node {node.id}: {e}")
            raise PersistenceFailedError(f"Failed to persist node {node.id}: {e}", record_id=node.id) from e

    def _mirror_edge(self, edge: TreeEdge) -> None:
        if self.store is None:
            return
        fields = edge.to_record().model_dump(by_alias=True, mode="json")
        try:
            self.store.create_record(EDGES_COLLECTION, fields, record_id=edge.id)
        except StoreError as e:
            logger.error(f"Failed to persist edge {edge.id}: {e}")
            raise PersistenceFailedError(f"Failed to persist edge {edge.id}: {e}", record_id=edge.id) from e

    def _update_stored_node(self, node_id: str, fields: dict) -> None:
        if self.store is None:
            return
        try:
            self.store.update_record(POSITIONS_COLLECTION, node_id, fields)
        except StoreError as e:
            logger.error(f"Failed to persist node {node_id}: {e}")
            raise PersistenceFailedError(f"Failed to persist node {node_id}: {e}", record_id=node_id) from e
