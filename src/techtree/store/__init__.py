"""Document store collaborators for the technique graph."""

from .base import ChangeEvent, ChangeKind, DocumentStore
from .json_store import JsonDocumentStore, SessionState, load_session, save_session
from .memory import MemoryDocumentStore

__all__ = [
    "ChangeEvent",
    "ChangeKind",
    "DocumentStore",
    "MemoryDocumentStore",
    "JsonDocumentStore",
    "SessionState",
    "load_session",
    "save_session",
]
