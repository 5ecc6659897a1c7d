"""Materialize store change events into controller snapshots.

The synchronizer mirrors the positions and edges collections from change
events, and after a quiet period of ``debounce_ms`` hands the full node and
edge set to ``GraphController.load_snapshot``. It is the only path by which
store changes reach the graph.
"""

import logging
import time
from typing import Any, Callable, Dict, List, Tuple

from pydantic import ValidationError

from ..graph.controller import GraphController
from ..graph.models import TreeEdge, TreeNode
from ..models.records import EDGES_COLLECTION, POSITIONS_COLLECTION, EdgeRecord, PositionRecord
from .base import ChangeEvent, ChangeKind, DocumentStore

logger = logging.getLogger(__name__)

RecordList = List[Tuple[str, Dict[str, Any]]]


def materialize_snapshot(
    position_records: RecordList,
    edge_records: RecordList,
) -> Tuple[List[TreeNode], List[TreeEdge]]:
    """Convert raw store records into nodes and edges.

    Malformed records are skipped with a warning.
    """
    nodes: List[TreeNode] = []
    for record_id, fields in position_records:
        try:
            nodes.append(TreeNode.from_record(record_id, PositionRecord.model_validate(fields)))
        except (ValidationError, ValueError) as e:
            logger.warning(f"Skipping malformed position record {record_id}: {e}")

    edges: List[TreeEdge] = []
    for record_id, fields in edge_records:
        try:
            edges.append(TreeEdge.from_record(record_id, EdgeRecord.model_validate(fields)))
        except ValidationError as e:
            logger.warning(f"Skipping malformed edge record {record_id}: {e}")

    return nodes, edges


class SnapshotSync:
    """Debounced bridge from store subscriptions to controller snapshots."""

    def __init__(
        self,
        store: DocumentStore,
        controller: GraphController,
        debounce_ms: int = 250,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.store = store
        self.controller = controller
        self.debounce_seconds = debounce_ms / 1000
        self._clock = clock
        self._mirror: Dict[str, Dict[str, Dict[str, Any]]] = {
            POSITIONS_COLLECTION: {},
            EDGES_COLLECTION: {},
        }
        self._unsubscribers: List[Callable[[], None]] = []
        self._pending = False
        self._last_event_at = 0.0

    @property
    def pending(self) -> bool:
        """Whether changes arrived since the last flush."""
        return self._pending

    def start(self) -> None:
        """Subscribe to both collections. Existing records arrive as ADDED events."""
        if self._unsubscribers:
            return
        for collection in (POSITIONS_COLLECTION, EDGES_COLLECTION):
            self._unsubscribers.append(self.store.subscribe(collection, self._on_event))

    def stop(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []

    def pump(self) -> bool:
        """Flush if changes are pending and the debounce window has elapsed.

        Returns:
            True if a snapshot was loaded
        """
        if not self._pending:
            return False
        if self._clock() - self._last_event_at < self.debounce_seconds:
            return False
        self.flush()
        return True

    def flush(self) -> None:
        """Load the mirrored records into the controller now."""
        nodes, edges = materialize_snapshot(
            list(self._mirror[POSITIONS_COLLECTION].items()),
            list(self._mirror[EDGES_COLLECTION].items()),
        )
        self._pending = False
        logger.debug(f"Flushing snapshot with {len(nodes)} nodes and {len(edges)} edges")
        self.controller.load_snapshot(nodes, edges)

    def _on_event(self, event: ChangeEvent) -> None:
        records = self._mirror.setdefault(event.collection, {})
        if event.kind == ChangeKind.REMOVED:
            records.pop(event.record_id, None)
        else:
            records[event.record_id] = dict(event.fields)

        self._pending = True
        self._last_event_at = self._clock()
