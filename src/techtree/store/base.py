"""Abstract document store used to mirror the technique graph.

The store is the system of record across sessions. Writers create records in
named collections; observers receive change events per collection.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Tuple

logger = logging.getLogger(__name__)


class ChangeKind(str, Enum):
    """Kinds of change delivered to store observers."""
    ADDED = "added"
    MODIFIED = "modified"
    REMOVED = "removed"


@dataclass(frozen=True)
class ChangeEvent:
    """A single change to a record in a collection."""
    kind: ChangeKind
    collection: str
    record_id: str
    fields: Dict[str, Any] = field(default_factory=dict)


ChangeListener = Callable[[ChangeEvent], None]


class DocumentStore(ABC):
    """Record store with per-collection change subscriptions."""

    def __init__(self):
        self._listeners: Dict[str, List[ChangeListener]] = {}

    @abstractmethod
    def create_record(self, collection: str, fields: Dict[str, Any], record_id: str | None = None) -> str:
        """Create a record and return its id.

        Raises:
            StoreError: If the write is rejected
        """
        ...

    @abstractmethod
    def update_record(self, collection: str, record_id: str, fields: Dict[str, Any]) -> None:
        """Merge fields into an existing record.

        Raises:
            StoreError: If the record does not exist or the write is rejected
        """
        ...

    @abstractmethod
    def delete_record(self, collection: str, record_id: str) -> None:
        """Remove a record. Unknown ids are ignored."""
        ...

    @abstractmethod
    def list_records(self, collection: str) -> List[Tuple[str, Dict[str, Any]]]:
        """Return (record_id, fields) pairs in creation order."""
        ...

    def subscribe(self, collection: str, listener: ChangeListener) -> Callable[[], None]:
        """Register a listener for a collection.

        The listener first receives an ADDED event for every existing record,
        then every later change. Returns a callable that unsubscribes.
        """
        self._listeners.setdefault(collection, []).append(listener)
        for record_id, fields in self.list_records(collection):
            listener(ChangeEvent(ChangeKind.ADDED, collection, record_id, fields))

        def unsubscribe() -> None:
            listeners = self._listeners.get(collection, [])
            if listener in listeners:
                listeners.remove(listener)

        return unsubscribe

    def _emit(self, event: ChangeEvent) -> None:
        for listener in list(self._listeners.get(event.collection, [])):
            listener(event)
