"""
NoteBox: Pydantic Request/Response Schemas
=============================================

What:  Pydantic models defining the JSON contract of the note routes.
Why:   Typed request parsing, consistent serialization and OpenAPI docs.

Why request fields are Optional:
    A missing field must produce a 400 with a fixed message such as
    "Title is required", not FastAPI's generic 422. Presence and blankness
    are checked by the route handlers; the schema only guarantees that any
    value present is a string.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class NoteCreateRequest(BaseModel):
    """Body of POST /add."""
    title: Optional[str] = Field(default=None, description="Note title (required, non-blank)")
    description: Optional[str] = Field(default=None, description="Note body (required, non-blank)")


class NoteIdRequest(BaseModel):
    """Body of POST /get and DELETE /delete."""
    id: Optional[str] = Field(default=None, description="Note identifier (required)")


class NoteUpdateRequest(NoteIdRequest):
    """Body of POST /update."""
    title: Optional[str] = Field(default=None, description="New title")
    description: Optional[str] = Field(default=None, description="New description")


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class NoteOut(BaseModel):
    """
    A note as returned to clients.

    created_at is read from the ORM attribute and written as "createdAt";
    either spelling validates, since FastAPI re-validates dumped responses.
    """
    id: str = Field(description="Unique note identifier")
    title: str
    description: str
    created_at: datetime = Field(
        validation_alias=AliasChoices("created_at", "createdAt"),
        serialization_alias="createdAt",
        description="When the note was created (UTC ISO 8601)",
    )

    model_config = ConfigDict(from_attributes=True)


class NoteEnvelope(BaseModel):
    """`{"note": ...}`; note is null when POST /get finds nothing."""
    note: Optional[NoteOut] = None


class NoteListEnvelope(BaseModel):
    """`{"notes": [...]}` in database order."""
    notes: List[NoteOut] = Field(default_factory=list)


class MessageResponse(BaseModel):
    """`{"message": ...}` body of every 400 response."""
    message: str


class HealthResponse(BaseModel):
    """
    Health check response.

    A backend that can't reach its database is effectively down, so the
    database probe decides the overall status.
    """
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
