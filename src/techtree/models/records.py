"""Persisted record models for the positions and edges collections."""

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field, field_serializer, model_validator

POSITIONS_COLLECTION = "positions"
EDGES_COLLECTION = "edges"


class MediaClip(BaseModel):
    """Video clip attached to a node. Opaque to resolver and layout."""

    source_id: str = Field(alias="sourceId", description="Canonical clip source identifier")
    start_offset: float = Field(alias="startOffset", ge=0, description="Clip start in seconds")
    end_offset: float = Field(alias="endOffset", description="Clip end in seconds")
    loop: bool = Field(default=True, description="Whether playback loops the clip")

    @model_validator(mode="after")
    def validate_offsets(self):
        if self.end_offset <= self.start_offset:
            raise ValueError(
                f"end_offset ({self.end_offset}) must be greater than start_offset ({self.start_offset})"
            )
        return self

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class PointRecord(BaseModel):
    x: float
    y: float


class PositionRecord(BaseModel):
    """A node as stored in the positions collection."""

    name: str = Field(description="Display label")
    node_type: str = Field(alias="nodeType", default="variant")
    parent_id: str | None = Field(alias="parentId", default=None)
    depth: int = Field(default=0, ge=0)
    position: PointRecord | None = None
    media: MediaClip | None = None
    pinned: bool = False
    created_at: datetime = Field(alias="createdAt", default_factory=lambda: datetime.now(UTC))

    model_config = ConfigDict(populate_by_name=True)

    @field_serializer("created_at")
    def serialize_created_at(self, value: datetime) -> str:
        """Serialize datetime to ISO format."""
        return value.isoformat()


class EdgeRecord(BaseModel):
    """An edge as stored in the edges collection."""

    from_id: str = Field(alias="fromId")
    to_id: str = Field(alias="toId")
    created_at: datetime = Field(alias="createdAt", default_factory=lambda: datetime.now(UTC))

    model_config = ConfigDict(populate_by_name=True)

    @field_serializer("created_at")
    def serialize_created_at(self, value: datetime) -> str:
        """Serialize datetime to ISO format."""
        return value.isoformat()
