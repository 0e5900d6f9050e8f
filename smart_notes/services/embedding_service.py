"""Embedding generation for notes and documents."""

import logging
from functools import lru_cache

from smart_notes.config import settings
from smart_notes.models.document import Document
from smart_notes.models.note import Note
from smart_notes.services.gemini_service import GeminiService
from smart_notes.utils.exceptions import ProviderError

logger = logging.getLogger(__name__)


def note_searchable_text(note: Note) -> str:
    """Text embedded for a note."""
    return "\n".join(
        [
            note.title or "",
            note.content or "",
            " ".join(note.tags or []),
            note.summary or "",
            " ".join(note.key_topics or []),
        ]
    )


def document_searchable_text(document: Document) -> str:
    """Text embedded for a document."""
    return "\n".join(
        [
            document.file_name or "",
            document.summary or "",
            "\n".join(document.key_insights or []),
            " ".join(document.topic_labels or []),
            (document.extracted_text or "")[:5000],
        ]
    )


class EmbeddingService:
    """Convert text into fixed-length vectors through the provider."""

    def __init__(
        self,
        provider: GeminiService,
        dimensions: int | None = None,
        max_chars: int | None = None,
    ):
        """
        Initialize the embedding service.

        Args:
            provider: Provider performing the HTTP call
            dimensions: Expected vector length
            max_chars: Input truncation length
        """
        self.provider = provider
        self.dimensions = dimensions or settings.embedding_dimensions
        self.max_chars = max_chars or settings.embedding_max_chars

    async def embed(self, text: str) -> list[float]:
        """
        Embed text.

        Args:
            text: Text to embed (truncated to max_chars)

        Returns:
            Vector of exactly `dimensions` floats

        Raises:
            ProviderError: If the text is blank, the call fails, or the
                vector has the wrong length
        """
        if not text or not text.strip():
            raise ProviderError("Cannot embed empty text")

        vector = await self.provider.embed_content(text[: self.max_chars])
        if len(vector) != self.dimensions:
            raise ProviderError(
                f"Embedding has {len(vector)} dimensions, expected {self.dimensions}"
            )

        logger.debug(f"Generated embedding with {len(vector)} dimensions")
        return vector

    async def embed_note(self, note: Note) -> list[float]:
        """Embed a note's searchable text."""
        return await self.embed(note_searchable_text(note))

    async def embed_document(self, document: Document) -> list[float]:
        """Embed a document's searchable text."""
        return await self.embed(document_searchable_text(document))


@lru_cache
def get_embedding_service() -> EmbeddingService:
    """Process-wide embedding service."""
    return EmbeddingService(provider=GeminiService())
