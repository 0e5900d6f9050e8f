"""Document upload and extraction endpoints."""

from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, File, UploadFile, status

from smart_notes.api.deps import (
    CurrentUserIdDep,
    EmbeddingServiceDep,
    LLMClientDep,
    SessionDep,
)
from smart_notes.config import settings
from smart_notes.schemas.document import DocumentListResponse, DocumentResponse
from smart_notes.services.document_service import DocumentService
from smart_notes.services.enrichment_service import EnrichmentService
from smart_notes.tasks.processing_tasks import extract_document_in_background

router = APIRouter(prefix="/api", tags=["documents"])


@router.post(
    "/notes/{note_id}/documents",
    response_model=DocumentResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def upload_document(
    note_id: int,
    file: Annotated[UploadFile, File(description="Document to attach to the note")],
    session: SessionDep,
    user_id: CurrentUserIdDep,
    llm: LLMClientDep,
    embedder: EmbeddingServiceDep,
    background_tasks: BackgroundTasks,
) -> DocumentResponse:
    """
    Attach a document to a note.

    The document is stored immediately with 'pending' status; text
    extraction and insights happen in the background.
    """
    # Read at most one byte past the limit
    data = await file.read(settings.max_upload_bytes + 1)
    document = await DocumentService(session).save_upload(
        user_id=user_id,
        note_id=note_id,
        file_name=file.filename or "",
        data=data,
        content_type=file.content_type,
    )
    assert document.id is not None
    background_tasks.add_task(extract_document_in_background, document.id, llm, embedder)
    return DocumentResponse.model_validate(document)


@router.get("/notes/{note_id}/documents", response_model=DocumentListResponse)
def list_documents(
    note_id: int, session: SessionDep, user_id: CurrentUserIdDep
) -> DocumentListResponse:
    """List the documents attached to a note."""
    documents = DocumentService(session).list_for_note(note_id, user_id)
    return DocumentListResponse(
        documents=[DocumentResponse.model_validate(d) for d in documents]
    )


@router.get("/documents/{document_id}", response_model=DocumentResponse)
def get_document(
    document_id: int, session: SessionDep, user_id: CurrentUserIdDep
) -> DocumentResponse:
    """Get a single document by ID."""
    document = DocumentService(session).get_document(document_id, user_id)
    return DocumentResponse.model_validate(document)


@router.post("/documents/{document_id}/extract", response_model=DocumentResponse)
async def extract_document(
    document_id: int,
    session: SessionDep,
    user_id: CurrentUserIdDep,
    llm: LLMClientDep,
    embedder: EmbeddingServiceDep,
) -> DocumentResponse:
    """Run text extraction and insight generation now."""
    document = DocumentService(session).get_document(document_id, user_id)
    document = await EnrichmentService(session, llm, embedder).extract_document(document)
    return DocumentResponse.model_validate(document)


@router.delete("/documents/{document_id}")
def delete_document(document_id: int, session: SessionDep, user_id: CurrentUserIdDep) -> dict:
    """Delete a document and its stored file."""
    DocumentService(session).delete_document(document_id, user_id)
    return {"success": True}
