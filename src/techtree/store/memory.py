"""In-memory document store."""

import copy
import logging
import uuid
from typing import Any, Dict, List, Tuple

from ..errors import StoreError
from .base import ChangeEvent, ChangeKind, DocumentStore

logger = logging.getLogger(__name__)


class MemoryDocumentStore(DocumentStore):
    """Document store kept in process memory.

    Subclasses make it durable by overriding ``_persist``; a failing persist
    leaves the in-memory collection unchanged.
    """

    def __init__(self):
        super().__init__()
        self._collections: Dict[str, Dict[str, Dict[str, Any]]] = {}

    def create_record(self, collection: str, fields: Dict[str, Any], record_id: str | None = None) -> str:
        records = self._collections.setdefault(collection, {})
        record_id = record_id or uuid.uuid4().hex
        if record_id in records:
            raise StoreError(f"Record {record_id} already exists in {collection}")

        records[record_id] = copy.deepcopy(fields)
        try:
            self._persist(collection)
        except StoreError:
            del records[record_id]
            raise

        logger.debug(f"Created record {record_id} in {collection}")
        self._emit(ChangeEvent(ChangeKind.ADDED, collection, record_id, copy.deepcopy(fields)))
        return record_id

    def update_record(self, collection: str, record_id: str, fields: Dict[str, Any]) -> None:
        records = self._collections.get(collection, {})
        if record_id not in records:
            raise StoreError(f"Record {record_id} not found in {collection}")

        previous = records[record_id]
        records[record_id] = {**previous, **copy.deepcopy(fields)}
        try:
            self._persist(collection)
        except StoreError:
            records[record_id] = previous
            raise

        self._emit(ChangeEvent(ChangeKind.MODIFIED, collection, record_id, copy.deepcopy(records[record_id])))

    def delete_record(self, collection: str, record_id: str) -> None:
        records = self._collections.get(collection, {})
        if record_id not in records:
            return

        before = dict(records)
        removed = records.pop(record_id)
        try:
            self._persist(collection)
        except StoreError:
            records.clear()
            records.update(before)
            raise

        self._emit(ChangeEvent(ChangeKind.REMOVED, collection, record_id, removed))

    def list_records(self, collection: str) -> List[Tuple[str, Dict[str, Any]]]:
        records = self._collections.get(collection, {})
        return [(record_id, copy.deepcopy(fields)) for record_id, fields in records.items()]

    def _persist(self, collection: str) -> None:
        """Write a collection to durable storage. No-op in memory."""
        pass
