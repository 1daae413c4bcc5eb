"""
NoteBox: Note Store
======================

What:  The five note operations: create, get_by_id, list_all, update, delete.
Why:   Keeps every database statement in one place, independent of HTTP.
How:   Each operation opens its own transaction from the session factory,
       runs exactly one statement and commits before returning.
Who:   Called by the route handlers in notebox.routes.notes.

Statement per operation:
    create     INSERT INTO notes ...
    get_by_id  SELECT ... WHERE id = :id
    list_all   SELECT ... (no ORDER BY; database order)
    update     UPDATE notes SET title, description WHERE id = :id RETURNING *
    delete     DELETE FROM notes WHERE id = :id RETURNING *

Error Handling Strategy:
    Any SQLAlchemyError, and any transport error the driver raises unwrapped
    (asyncpg reports a refused or timed-out connect as OSError or
    asyncio.TimeoutError), is wrapped in PersistenceError (original chained).
    UPDATE/DELETE returning no row raises NotFoundError. No retries.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, List, Optional

from fastapi import Request
from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from notebox.exceptions import NotFoundError, PersistenceError
from notebox.models.note import Note

logger = logging.getLogger(__name__)


class NoteStore:
    """
    Stateless gateway over the `notes` table.

    Holds only the session factory; no note is cached between calls, so
    two concurrent requests never share a session. Row-level concurrency
    is left to the database.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    @asynccontextmanager
    async def _transaction(self, operation: str) -> AsyncIterator[AsyncSession]:
        """Session in a transaction; commits on exit, wraps database failures."""
        try:
            async with self._session_factory.begin() as session:
                yield session
        except (SQLAlchemyError, OSError, asyncio.TimeoutError) as e:
            logger.error("Database error during %s: %s", operation, str(e))
            raise PersistenceError(
                operation=operation,
                context={"error_type": type(e).__name__},
            ) from e

    async def create(self, title: str, description: str) -> Note:
        """
        Insert a new note. id and created_at are assigned by the model defaults.

        Raises:
            PersistenceError: INSERT or COMMIT failed
        """
        note = Note(title=title, description=description)
        async with self._transaction("create") as session:
            session.add(note)
            await session.flush()
        logger.info("Note created: %s", note.id)
        return note

    async def get_by_id(self, note_id: str) -> Optional[Note]:
        """Returns None when no note has this id; absence is not an error."""
        async with self._transaction("get_by_id") as session:
            result = await session.execute(select(Note).where(Note.id == note_id))
            return result.scalar_one_or_none()

    async def list_all(self) -> List[Note]:
        async with self._transaction("list_all") as session:
            result = await session.execute(select(Note))
            return list(result.scalars().all())

    async def update(self, note_id: str, title: str, description: str) -> Note:
        """
        Overwrite title and description of one note.

        id and created_at are never part of the SET clause.

        Raises:
            NotFoundError: no row has this id
            PersistenceError: UPDATE or COMMIT failed
        """
        statement = (
            update(Note)
            .where(Note.id == note_id)
            .values(title=title, description=description)
            .returning(Note)
        )
        async with self._transaction("update") as session:
            result = await session.execute(statement)
            note = result.scalar_one_or_none()

        if note is None:
            raise NotFoundError(resource="note", resource_id=note_id)
        logger.info("Note updated: %s", note_id)
        return note

    async def delete(self, note_id: str) -> Note:
        """
        Permanently remove one note and return its last state.

        Raises:
            NotFoundError: no row has this id (including a second delete)
            PersistenceError: DELETE or COMMIT failed
        """
        statement = delete(Note).where(Note.id == note_id).returning(Note)
        async with self._transaction("delete") as session:
            result = await session.execute(statement)
            note = result.scalar_one_or_none()

        if note is None:
            raise NotFoundError(resource="note", resource_id=note_id)
        logger.info("Note deleted: %s", note_id)
        return note


def get_note_store(request: Request) -> NoteStore:
    """FastAPI dependency: the NoteStore built by create_app() for this app."""
    return request.app.state.note_store
