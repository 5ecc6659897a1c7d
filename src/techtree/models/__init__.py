"""Pydantic data models for persisted techtree records."""

from techtree.models.records import (
    EDGES_COLLECTION,
    POSITIONS_COLLECTION,
    EdgeRecord,
    MediaClip,
    PointRecord,
    PositionRecord,
)

__all__ = [
    "POSITIONS_COLLECTION",
    "EDGES_COLLECTION",
    "MediaClip",
    "PointRecord",
    "PositionRecord",
    "EdgeRecord",
]
