"""Notes CRUD, enrichment and embedding endpoints."""

from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Query, status

from smart_notes.api.deps import (
    CurrentUserIdDep,
    EmbeddingServiceDep,
    LLMClientDep,
    SessionDep,
)
from smart_notes.schemas.note import (
    BackfillResponse,
    EmbeddingResponse,
    NoteCreate,
    NoteListResponse,
    NoteResponse,
    NoteStatsResponse,
    NoteUpdate,
)
from smart_notes.services.enrichment_service import EnrichmentService
from smart_notes.services.note_service import NoteService
from smart_notes.tasks.processing_tasks import enrich_note_in_background
from smart_notes.utils.events import event_manager

router = APIRouter(prefix="/api", tags=["notes"])


@router.post(
    "/notes", response_model=NoteResponse, status_code=status.HTTP_201_CREATED
)
async def create_note(
    note_data: NoteCreate,
    session: SessionDep,
    user_id: CurrentUserIdDep,
    llm: LLMClientDep,
    embedder: EmbeddingServiceDep,
    background_tasks: BackgroundTasks,
) -> NoteResponse:
    """
    Create a note.

    The note is returned immediately with 'pending' enrichment; summary,
    tags, key topics and the embedding are filled in the background.
    """
    note = NoteService(session).create_note(
        user_id=user_id,
        title=note_data.title,
        content=note_data.content,
        tags=note_data.tags,
    )
    assert note.id is not None
    background_tasks.add_task(enrich_note_in_background, note.id, llm, embedder)
    await event_manager.broadcast(user_id, "note-created", str(note.id))
    return NoteResponse.model_validate(note)


@router.get("/notes", response_model=NoteListResponse)
def list_notes(
    session: SessionDep,
    user_id: CurrentUserIdDep,
    page: Annotated[int, Query(ge=1)] = 1,
    page_size: Annotated[int, Query(ge=1, le=100)] = 12,
    tag: str | None = None,
) -> NoteListResponse:
    """List the current user's notes, most recently updated first."""
    notes, total = NoteService(session).list_notes(
        user_id, page=page, page_size=page_size, tag=tag
    )
    return NoteListResponse(
        notes=[NoteResponse.model_validate(n) for n in notes],
        total=total,
        page=page,
        page_size=page_size,
        has_more=page * page_size < total,
    )


@router.get("/notes/stats", response_model=NoteStatsResponse)
def get_stats(session: SessionDep, user_id: CurrentUserIdDep) -> NoteStatsResponse:
    """Dashboard counters for the current user."""
    return NoteStatsResponse(**NoteService(session).get_stats(user_id))


@router.get("/notes/{note_id}", response_model=NoteResponse)
def get_note(note_id: int, session: SessionDep, user_id: CurrentUserIdDep) -> NoteResponse:
    """Get a single note by ID."""
    note = NoteService(session).get_note(note_id, user_id)
    return NoteResponse.model_validate(note)


@router.patch("/notes/{note_id}", response_model=NoteResponse)
async def update_note(
    note_id: int,
    update_data: NoteUpdate,
    session: SessionDep,
    user_id: CurrentUserIdDep,
    llm: LLMClientDep,
    embedder: EmbeddingServiceDep,
    background_tasks: BackgroundTasks,
) -> NoteResponse:
    """
    Update a note.

    Changing the title or content resets enrichment to 'pending' and
    re-enriches the note in the background.
    """
    note, needs_enrichment = NoteService(session).update_note(
        note_id,
        user_id,
        title=update_data.title,
        content=update_data.content,
        tags=update_data.tags,
        summary=update_data.summary,
    )
    if needs_enrichment:
        background_tasks.add_task(enrich_note_in_background, note_id, llm, embedder)
    return NoteResponse.model_validate(note)


@router.delete("/notes/{note_id}")
async def delete_note(note_id: int, session: SessionDep, user_id: CurrentUserIdDep) -> dict:
    """Delete a note with its documents and chat history."""
    NoteService(session).delete_note(note_id, user_id)
    await event_manager.broadcast(user_id, "note-deleted", str(note_id))
    return {"success": True}


@router.post("/notes/{note_id}/enrich", response_model=NoteResponse)
async def enrich_note(
    note_id: int,
    session: SessionDep,
    user_id: CurrentUserIdDep,
    llm: LLMClientDep,
    embedder: EmbeddingServiceDep,
) -> NoteResponse:
    """Enrich a note now and return the result."""
    note = NoteService(session).get_note(note_id, user_id)
    note = await EnrichmentService(session, llm, embedder).enrich_note(note)
    return NoteResponse.model_validate(note)


@router.post("/notes/{note_id}/embedding", response_model=EmbeddingResponse)
async def regenerate_embedding(
    note_id: int,
    session: SessionDep,
    user_id: CurrentUserIdDep,
    llm: LLMClientDep,
    embedder: EmbeddingServiceDep,
) -> EmbeddingResponse:
    """Regenerate a single note's embedding."""
    note = NoteService(session).get_note(note_id, user_id)
    dimensions = await EnrichmentService(session, llm, embedder).regenerate_note_embedding(
        note
    )
    return EmbeddingResponse(success=True, note_id=note_id, dimensions=dimensions)


@router.post("/embeddings/backfill", response_model=BackfillResponse)
async def backfill_embeddings(
    session: SessionDep,
    user_id: CurrentUserIdDep,
    llm: LLMClientDep,
    embedder: EmbeddingServiceDep,
    missing_only: bool = False,
) -> BackfillResponse:
    """
    Embed all of the current user's notes and documents.

    Provider calls are made one at a time with a short pause between them.
    """
    report = await EnrichmentService(session, llm, embedder).backfill_embeddings(
        user_id, missing_only=missing_only
    )
    return BackfillResponse(**report)
