"""
NoteBox: Notes Route Handlers
================================

What:  The five note endpoints: /add, /get, /update, /all, /delete.
How:   Each handler validates its required fields, calls one NoteStore
       operation and wraps the result. Failures are raised, never formatted
       here; the global handlers in main.py map them to responses.

Route Inventory:
    POST   /add     title, description  → {note}
    POST   /get     id                  → {note | null}
    POST   /update  id                  → {note}
    GET    /all     -                   → {notes}
    DELETE /delete  id                  → empty 200

Validation:
    A missing or whitespace-only required field raises ValidationError
    before the store is touched, so invalid input never reaches the
    database.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Response

from notebox.exceptions import ErrorMessage, ValidationError
from notebox.schemas.note import (
    MessageResponse,
    NoteCreateRequest,
    NoteEnvelope,
    NoteIdRequest,
    NoteListEnvelope,
    NoteOut,
    NoteUpdateRequest,
)
from notebox.services.note_store import NoteStore, get_note_store

ERROR_RESPONSES = {
    400: {"description": "Missing or blank required field", "model": MessageResponse},
    500: {"description": "Database failure (empty body)"},
}


def _require(value: Optional[str], field: str, message: ErrorMessage) -> str:
    """Returns value unchanged, or raises ValidationError if absent or blank."""
    if value is None or not value.strip():
        raise ValidationError(message=message.value, field=field)
    return value


def create_notes_router(prefix: str = "") -> APIRouter:
    """Builds a fresh router so every app instance owns its own route table."""
    router = APIRouter(prefix=prefix, tags=["Notes"])

    @router.post(
        "/add",
        response_model=NoteEnvelope,
        responses=ERROR_RESPONSES,
        summary="Create a note",
    )
    async def add_note(
        payload: Optional[NoteCreateRequest] = None,
        store: NoteStore = Depends(get_note_store),
    ) -> NoteEnvelope:
        payload = payload or NoteCreateRequest()
        title = _require(payload.title, "title", ErrorMessage.NO_TITLE)
        description = _require(payload.description, "description", ErrorMessage.NO_DESCRIPTION)

        note = await store.create(title=title, description=description)
        return NoteEnvelope(note=NoteOut.model_validate(note))

    @router.post(
        "/get",
        response_model=NoteEnvelope,
        responses=ERROR_RESPONSES,
        summary="Fetch one note by id",
    )
    async def get_note(
        payload: Optional[NoteIdRequest] = None,
        store: NoteStore = Depends(get_note_store),
    ) -> NoteEnvelope:
        payload = payload or NoteIdRequest()
        note_id = _require(payload.id, "id", ErrorMessage.NO_ID)

        note = await store.get_by_id(note_id)
        if note is None:
            return NoteEnvelope(note=None)
        return NoteEnvelope(note=NoteOut.model_validate(note))

    @router.post(
        "/update",
        response_model=NoteEnvelope,
        responses=ERROR_RESPONSES,
        summary="Overwrite a note's title and description",
    )
    async def update_note(
        payload: Optional[NoteUpdateRequest] = None,
        store: NoteStore = Depends(get_note_store),
    ) -> NoteEnvelope:
        payload = payload or NoteUpdateRequest()
        note_id = _require(payload.id, "id", ErrorMessage.NO_ID)

        # title/description are not checked here; a missing one fails the
        # NOT NULL constraint and surfaces as a persistence error
        note = await store.update(
            note_id=note_id,
            title=payload.title,
            description=payload.description,
        )
        return NoteEnvelope(note=NoteOut.model_validate(note))

    @router.get(
        "/all",
        response_model=NoteListEnvelope,
        responses={500: ERROR_RESPONSES[500]},
        summary="List every note",
    )
    async def all_notes(store: NoteStore = Depends(get_note_store)) -> NoteListEnvelope:
        notes = await store.list_all()
        return NoteListEnvelope(notes=[NoteOut.model_validate(n) for n in notes])

    @router.delete(
        "/delete",
        response_class=Response,
        responses={200: {"description": "Deleted (empty body)"}, **ERROR_RESPONSES},
        summary="Delete a note",
    )
    async def delete_note(
        payload: Optional[NoteIdRequest] = None,
        store: NoteStore = Depends(get_note_store),
    ) -> Response:
        payload = payload or NoteIdRequest()
        note_id = _require(payload.id, "id", ErrorMessage.NO_ID)

        await store.delete(note_id)
        return Response(status_code=200)

    return router
