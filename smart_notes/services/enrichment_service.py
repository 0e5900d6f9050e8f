"""Note enrichment and document insight extraction."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from pathlib import Path

from sqlmodel import Session, select

from smart_notes.config import settings
from smart_notes.database import commit
from smart_notes.models.document import Document
from smart_notes.models.note import Note
from smart_notes.schemas.enrichment import DocumentInsightsPayload, NoteEnrichmentPayload
from smart_notes.services.document_service import (
    MIN_EXTRACTABLE_CHARS,
    file_extension,
    read_document_text,
)
from smart_notes.services.embedding_service import EmbeddingService, document_searchable_text
from smart_notes.services.llm_client import RateLimitedLLMClient
from smart_notes.utils.datetime import utc_now
from smart_notes.utils.exceptions import ProviderError
from smart_notes.utils.llm_json import parse_llm_json
from smart_notes.utils.text import leading_sentences, leading_words, meaningful_words, merge_unique
from smart_notes.utils.vector import serialize_vector

logger = logging.getLogger(__name__)

NOTE_PROMPT = """Analyze this note and provide a JSON response with summary, tags, and key_topics.

Title: {title}
Note: {content}

Respond ONLY with valid JSON in this exact format:
{{"summary": "brief summary here", "tags": ["tag1", "tag2", "tag3"], "key_topics": ["topic1", "topic2", "topic3"]}}"""

DOCUMENT_PROMPT = """Extract key information from this document and provide:
1. A concise summary (max 150 words)
2. Key insights (3-5 bullet points)
3. Main topics (3-5 keywords)
4. Topic labels for categorization (3-5 labels like "research", "technical", "business", etc.)

Document content:
{text}

Respond ONLY with valid JSON in this exact format:
{{ "summary": "...", "key_insights": ["insight1", "insight2"], "topics": ["topic1", "topic2"], "topic_labels": ["label1", "label2"] }}"""


def fallback_note_enrichment(title: str, content: str) -> NoteEnrichmentPayload:
    """
    Deterministic enrichment used when the provider is unavailable.

    Summary is the first 20 words; tags are the first five meaningful words
    and key topics the first three of those.
    """
    text = content if content.strip() else title
    words = meaningful_words(text)[:5]
    return NoteEnrichmentPayload(
        summary=leading_words(text, 20) or title or "Untitled note",
        tags=words or ["note"],
        key_topics=words[:3] or ["general"],
    )


def fallback_document_insights(text: str) -> DocumentInsightsPayload:
    """Deterministic document insights used when the provider is unavailable."""
    topics = meaningful_words(text)[:5]
    return DocumentInsightsPayload(
        summary=leading_sentences(text, 3, 200) or "Document uploaded successfully",
        key_insights=[
            f"Document contains {len(text.split())} words",
            "Extracted from uploaded file",
            "Ready for reference",
        ],
        topics=topics or ["document"],
        topic_labels=topics[:3] or ["general"],
    )


def pdf_placeholder(file_name: str) -> DocumentInsightsPayload:
    """Insights for a PDF whose text could not be read."""
    return DocumentInsightsPayload(
        summary=(
            f'PDF file "{file_name}" uploaded. Text extraction failed - this may be a '
            "scanned/image-based PDF. The file is stored and available for download."
        ),
        key_insights=[
            "PDF stored successfully",
            "Text extraction not available for this PDF",
            "Download to view full content",
        ],
        topics=["pdf", "document"],
        topic_labels=["pdf", "stored"],
    )


def unsupported_placeholder(file_name: str, extension: str) -> DocumentInsightsPayload:
    """Insights for a file type that is stored but not read."""
    label = extension or "document"
    return DocumentInsightsPayload(
        summary=(
            f'{label.upper()} file "{file_name}" uploaded. This file type is not supported '
            "for text extraction. The file is stored and available for download."
        ),
        key_insights=[
            f"File type: {label.upper()}",
            "Stored securely",
            "Available for download",
        ],
        topics=[label],
        topic_labels=[label, "stored"],
    )


def prompt_document_text(text: str) -> str:
    """Truncate document text for the extraction prompt."""
    limit = settings.max_prompt_document_chars
    if len(text) > limit:
        return text[:limit] + "...[truncated]"
    return text


class EnrichmentService:
    """Populate AI metadata and embeddings on notes and documents."""

    def __init__(
        self,
        session: Session,
        llm: RateLimitedLLMClient,
        embedder: EmbeddingService,
    ):
        """
        Initialize the enrichment service.

        Args:
            session: Database session
            llm: Client used for text generation
            embedder: Service used to embed searchable text
        """
        self.session = session
        self.llm = llm
        self.embedder = embedder

    def _set_status(self, record: Note | Document, status: str) -> None:
        record.enrichment_status = status
        self.session.add(record)
        commit(self.session)

    async def _generate_note_enrichment(self, note: Note) -> NoteEnrichmentPayload:
        prompt = NOTE_PROMPT.format(title=note.title, content=note.content)
        try:
            answer = await self.llm.generate(prompt, temperature=0.7, max_output_tokens=800)
            return parse_llm_json(answer, NoteEnrichmentPayload)
        except ProviderError as e:
            logger.warning(f"AI enrichment failed for note {note.id}, using fallback: {e}")
            return fallback_note_enrichment(note.title, note.content)

    async def embed_note(self, note: Note) -> bool:
        """
        Regenerate and store a note embedding, best effort.

        Returns:
            True if an embedding was stored; on failure the embedding is cleared
        """
        try:
            vector = await self.embedder.embed_note(note)
        except ProviderError as e:
            logger.warning(f"Embedding failed for note {note.id}: {e}")
            note.embedding = None
            return False
        note.embedding = serialize_vector(vector)
        return True

    async def embed_document(self, document: Document) -> bool:
        """Regenerate and store a document embedding, best effort."""
        try:
            vector = await self.embedder.embed_document(document)
        except ProviderError as e:
            logger.warning(f"Embedding failed for document {document.id}: {e}")
            document.embedding = None
            return False
        document.embedding = serialize_vector(vector)
        return True

    async def enrich_note(self, note: Note) -> Note:
        """
        Generate summary, tags and key topics for a note, then its embedding.

        AI tags are appended after the user's own tags. Provider failures
        fall back to deterministic heuristics.

        Args:
            note: Note to enrich (attached to this service's session)

        Returns:
            The enriched note

        Raises:
            PersistenceError: If the note cannot be saved
        """
        self._set_status(note, "processing")

        result = await self._generate_note_enrichment(note)
        note.summary = result.summary
        note.tags = merge_unique(note.tags or [], result.tags)
        note.key_topics = merge_unique(result.key_topics)
        await self.embed_note(note)

        note.enrichment_status = "completed"
        note.error_message = None
        note.updated_at = utc_now()
        self.session.add(note)
        commit(self.session)
        self.session.refresh(note)
        logger.info(f"Enriched note {note.id} (embedding: {note.embedding is not None})")
        return note

    async def _generate_document_insights(
        self, document: Document
    ) -> tuple[DocumentInsightsPayload, str | None]:
        extension = file_extension(document.file_name)
        text = await read_document_text(Path(document.file_path), extension)

        if text is None:
            if extension == "pdf":
                return pdf_placeholder(document.file_name), None
            return unsupported_placeholder(document.file_name, extension), None

        if len(text.strip()) < MIN_EXTRACTABLE_CHARS:
            raise ProviderError("No text could be extracted from the file")

        prompt = DOCUMENT_PROMPT.format(text=prompt_document_text(text))
        try:
            answer = await self.llm.generate(prompt, temperature=0.7, max_output_tokens=1000)
            insights = parse_llm_json(answer, DocumentInsightsPayload)
        except ProviderError as e:
            logger.warning(
                f"AI extraction failed for document {document.id}, using fallback: {e}"
            )
            insights = fallback_document_insights(text)
        return insights, text

    async def extract_document(self, document: Document) -> Document:
        """
        Extract text and insights from a stored document.

        Topic labels are merged into the parent note's key topics and the
        document embedding is generated afterwards.

        Args:
            document: Document to process (attached to this service's session)

        Returns:
            The processed document; status is failed when no text was extractable

        Raises:
            PersistenceError: If the document cannot be saved
        """
        self._set_status(document, "processing")

        try:
            insights, text = await self._generate_document_insights(document)
        except (OSError, ProviderError) as e:
            logger.error(f"Extraction failed for document {document.id}: {e}")
            document.enrichment_status = "failed"
            document.error_message = str(e) if isinstance(e, ProviderError) else "File unreadable"
            document.updated_at = utc_now()
            self.session.add(document)
            commit(self.session)
            return document

        if text is not None:
            document.extracted_text = text[: settings.max_extracted_chars]
        document.summary = insights.summary
        document.key_insights = insights.key_insights
        document.topics = insights.topics
        document.topic_labels = insights.topic_labels or insights.topics

        note = self.session.get(Note, document.note_id)
        if note and note.user_id == document.user_id:
            note.key_topics = merge_unique(note.key_topics or [], document.topic_labels)
            self.session.add(note)

        await self.embed_document(document)

        document.enrichment_status = "completed"
        document.error_message = None
        document.updated_at = utc_now()
        self.session.add(document)
        commit(self.session)
        self.session.refresh(document)
        logger.info(f"Extracted document {document.id} for note {document.note_id}")
        return document

    async def regenerate_note_embedding(self, note: Note) -> int:
        """
        Regenerate one note's embedding, raising on provider failure.

        Returns:
            Dimensionality of the stored vector

        Raises:
            ProviderError: If the embedding cannot be produced
            PersistenceError: If the note cannot be saved
        """
        vector = await self.embedder.embed_note(note)
        note.embedding = serialize_vector(vector)
        self.session.add(note)
        commit(self.session)
        logger.info(f"Regenerated embedding for note {note.id}")
        return len(vector)

    async def backfill_embeddings(
        self,
        user_id: int,
        missing_only: bool = False,
        delay_seconds: float | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> dict:
        """
        Embed every note, then every document, of a user.

        Calls are made one at a time with a fixed pause between provider
        calls. Failures are counted and listed without stopping the run.

        Args:
            user_id: Owner user ID
            missing_only: Skip records that already have an embedding
            delay_seconds: Pause between provider calls
            sleep: Coroutine used for the pause

        Returns:
            Counters and error messages for the run
        """
        delay = settings.backfill_delay_seconds if delay_seconds is None else delay_seconds
        report = {
            "notes_processed": 0,
            "notes_failed": 0,
            "documents_processed": 0,
            "documents_failed": 0,
            "skipped": 0,
            "errors": [],
        }
        calls = 0

        async def pace() -> None:
            nonlocal calls
            if calls and delay > 0:
                await sleep(delay)
            calls += 1

        notes = self.session.exec(select(Note).where(Note.user_id == user_id).order_by(Note.id)).all()
        for note in notes:
            if missing_only and note.embedding:
                report["skipped"] += 1
                continue
            await pace()
            try:
                vector = await self.embedder.embed_note(note)
            except ProviderError as e:
                report["notes_failed"] += 1
                report["errors"].append(f"Note {note.id}: {e.detail}")
                continue
            note.embedding = serialize_vector(vector)
            self.session.add(note)
            commit(self.session)
            report["notes_processed"] += 1

        documents = self.session.exec(
            select(Document).where(Document.user_id == user_id).order_by(Document.id)
        ).all()
        for document in documents:
            if missing_only and document.embedding:
                report["skipped"] += 1
                continue
            if len(document_searchable_text(document).strip()) < MIN_EXTRACTABLE_CHARS:
                report["documents_failed"] += 1
                report["errors"].append(f"Document {document.id}: not enough text to embed")
                continue
            await pace()
            try:
                vector = await self.embedder.embed_document(document)
            except ProviderError as e:
                report["documents_failed"] += 1
                report["errors"].append(f"Document {document.id}: {e.detail}")
                continue
            document.embedding = serialize_vector(vector)
            self.session.add(document)
            commit(self.session)
            report["documents_processed"] += 1

        processed = report["notes_processed"] + report["documents_processed"]
        failed = report["notes_failed"] + report["documents_failed"]
        report["success"] = failed == 0
        report["message"] = f"Embedded {processed} records, {failed} failed, {report['skipped']} skipped"
        logger.info(f"Backfill for user {user_id}: {report['message']}")
        return report
