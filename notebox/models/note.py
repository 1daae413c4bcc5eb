"""
NoteBox: Note SQLAlchemy Model
=================================

What:  ORM model representing the `notes` table.
Why:   Maps Python objects to database rows for type-safe database operations.
Who:   Used by NoteStore for every operation and by Alembic for the schema.

Table Design:
    - id: UUID4 rendered as text, generated in Python so the value is known
      right after the INSERT flush (no extra SELECT needed)
    - title / description: TEXT, no length limit
    - created_at: UTC with timezone, set once at insert and never updated.
      SQLite keeps no offset, so values read back are re-tagged as UTC.

    No secondary indexes: the only lookups are by primary key or full scans.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import TypeDecorator

from notebox.database import Base


def _new_id() -> str:
    return str(uuid.uuid4())


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class UTCDateTime(TypeDecorator):
    """Timezone-aware UTC datetime on every backend."""

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None and value.tzinfo is not None:
            return value.astimezone(timezone.utc)
        return value

    def process_result_value(self, value, dialect):
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class Note(Base):
    """
    A short text note.

    Lifecycle:
        1. Inserted by NoteStore.create (id and created_at assigned here)
        2. title/description overwritten by NoteStore.update
        3. Removed permanently by NoteStore.delete
    """

    __tablename__ = "notes"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=_new_id,
    )

    title: Mapped[str] = mapped_column(Text, nullable=False)

    description: Mapped[str] = mapped_column(Text, nullable=False)

    # No onupdate: updates never touch this column
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
        default=_utc_now,
    )

    def __repr__(self) -> str:
        return f"<Note(id={self.id}, title={self.title!r}, created_at='{self.created_at}')>"
