"""Service modules for business logic."""

from smart_notes.services.chat_service import ChatService
from smart_notes.services.document_service import DocumentService
from smart_notes.services.enrichment_service import EnrichmentService
from smart_notes.services.note_service import NoteService
from smart_notes.services.notebook_service import NotebookService
from smart_notes.services.search_service import SearchService
from smart_notes.services.topic_service import TopicService

__all__ = [
    "ChatService",
    "DocumentService",
    "EnrichmentService",
    "NoteService",
    "NotebookService",
    "SearchService",
    "TopicService",
]
