"""API routes module."""

from smart_notes.api.routes.auth import router as auth_router
from smart_notes.api.routes.chat import router as chat_router
from smart_notes.api.routes.documents import router as documents_router
from smart_notes.api.routes.events import router as events_router
from smart_notes.api.routes.notebooks import router as notebooks_router
from smart_notes.api.routes.notes import router as notes_router
from smart_notes.api.routes.search import router as search_router
from smart_notes.api.routes.topics import router as topics_router

__all__ = [
    "auth_router",
    "chat_router",
    "documents_router",
    "events_router",
    "notebooks_router",
    "notes_router",
    "search_router",
    "topics_router",
]
