"""JSON file document store and CLI session state.

Each collection lives in ``<store dir>/<collection>.json``; the whole file is
rewritten on every change.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..errors import StoreError
from .memory import MemoryDocumentStore

logger = logging.getLogger(__name__)

SCHEMA_VERSION = "1.0.0"
SESSION_FILENAME = "session.json"


class JsonDocumentStore(MemoryDocumentStore):
    """Document store persisted as one JSON file per collection."""

    def __init__(self, store_dir: str | Path):
        super().__init__()
        self.store_dir = Path(store_dir)
        self._load_existing()

    def collection_path(self, collection: str) -> Path:
        return self.store_dir / f"{collection}.json"

    def _load_existing(self) -> None:
        if not self.store_dir.exists():
            return

        for path in sorted(self.store_dir.glob("*.json")):
            if path.name == SESSION_FILENAME:
                continue
            try:
                with open(path, encoding="utf-8") as f:
                    data = json.load(f)
            except json.JSONDecodeError as e:
                raise StoreError(f"Invalid JSON in collection file {path}: {e}") from e
            except (OSError, UnicodeDecodeError) as e:
                raise StoreError(f"Failed to read collection file {path}: {e}") from e

            if not isinstance(data, dict):
                raise StoreError(f"Collection file {path} does not contain a JSON object")
            records = data.get("records", {})
            if not isinstance(records, dict):
                raise StoreError(f"Collection file {path} has no records mapping")
            self._collections[path.stem] = records
            logger.debug(f"Loaded {len(records)} record(s) from {path}")

    def _persist(self, collection: str) -> None:
        path = self.collection_path(collection)
        data = {
            "schema_version": SCHEMA_VERSION,
            "collection": collection,
            "records": self._collections.get(collection, {}),
        }
        try:
            self.store_dir.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
        except (OSError, TypeError) as e:
            raise StoreError(f"Failed to write {path}: {e}") from e


class SessionState(BaseModel):
    """Per-store session fields kept between CLI invocations."""
    selected_node_id: str | None = Field(alias="selectedNodeId", default=None)
    annotation_mode: bool = Field(alias="annotationMode", default=False)

    model_config = ConfigDict(populate_by_name=True)


def load_session(store_dir: str | Path) -> SessionState:
    """Load session state, falling back to an empty session."""
    path = Path(store_dir) / SESSION_FILENAME
    if not path.exists():
        return SessionState()

    try:
        with open(path, encoding="utf-8") as f:
            return SessionState.model_validate(json.load(f))
    except (json.JSONDecodeError, ValidationError) as e:
        logger.warning(f"Ignoring unreadable session file {path}: {e}")
        return SessionState()


def save_session(store_dir: str | Path, session: SessionState) -> None:
    path = Path(store_dir) / SESSION_FILENAME
    data: Dict[str, Any] = session.model_dump(by_alias=True)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
    except OSError as e:
        raise StoreError(f"Failed to write {path}: {e}") from e
