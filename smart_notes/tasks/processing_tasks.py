"""Background enrichment tasks for notes and documents."""

import logging

from sqlmodel import Session

from smart_notes import database
from smart_notes.models.document import Document
from smart_notes.models.note import Note
from smart_notes.services.embedding_service import EmbeddingService
from smart_notes.services.enrichment_service import EnrichmentService
from smart_notes.services.llm_client import RateLimitedLLMClient
from smart_notes.utils.datetime import utc_now
from smart_notes.utils.events import event_manager
from smart_notes.utils.exceptions import PersistenceError, SmartNotesException

logger = logging.getLogger(__name__)


def _mark_failed(session: Session, record: Note | Document, error: Exception) -> None:
    """
    Record a failure on a note or document, logging if even that fails.

    Only messages from our own exceptions are stored; anything else is
    recorded as a generic failure and left to the log.
    """
    try:
        session.rollback()
        record.enrichment_status = "failed"
        record.error_message = (
            error.detail if isinstance(error, SmartNotesException) else "Processing failed"
        )
        record.updated_at = utc_now()
        session.add(record)
        database.commit(session)
    except PersistenceError:
        logger.error(f"Could not record failure for {type(record).__name__} {record.id}")


async def enrich_note_in_background(
    note_id: int, llm: RateLimitedLLMClient, embedder: EmbeddingService
) -> None:
    """
    Enrich a newly created or edited note.

    Runs with its own database session after the response is sent.
    """
    with Session(database.engine) as session:
        note = session.get(Note, note_id)
        if not note:
            logger.error(f"Note {note_id} not found for enrichment")
            return
        user_id = note.user_id

        await event_manager.broadcast(user_id, f"note-status-{note_id}", "processing")
        try:
            await EnrichmentService(session, llm, embedder).enrich_note(note)
        except Exception as e:
            logger.exception(f"Failed to enrich note {note_id}: {e}")
            _mark_failed(session, note, e)
            await event_manager.broadcast(user_id, f"note-status-{note_id}", "failed")
            return

        await event_manager.broadcast(user_id, f"note-status-{note_id}", "completed")
        await event_manager.broadcast(user_id, f"note-enriched-{note_id}", "completed")
        logger.info(f"Successfully enriched note {note_id}")


async def extract_document_in_background(
    document_id: int, llm: RateLimitedLLMClient, embedder: EmbeddingService
) -> None:
    """Extract text and insights from an uploaded document."""
    with Session(database.engine) as session:
        document = session.get(Document, document_id)
        if not document:
            logger.error(f"Document {document_id} not found for extraction")
            return
        user_id = document.user_id

        try:
            document = await EnrichmentService(session, llm, embedder).extract_document(document)
        except Exception as e:
            logger.exception(f"Failed to extract document {document_id}: {e}")
            _mark_failed(session, document, e)
            await event_manager.broadcast(
                user_id, f"document-enriched-{document_id}", "failed"
            )
            return

        await event_manager.broadcast(
            user_id, f"document-enriched-{document_id}", document.enrichment_status
        )
