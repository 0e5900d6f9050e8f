"""Search over notes and documents: lexical, fast embedding and semantic."""

import logging

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from smart_notes.config import settings
from smart_notes.models.document import Document
from smart_notes.models.note import Note
from smart_notes.services.embedding_service import EmbeddingService
from smart_notes.utils.exceptions import ProviderError, ValidationError
from smart_notes.utils.text import any_contains, contains
from smart_notes.utils.vector import deserialize_vector, rank, serialize_vector

logger = logging.getLogger(__name__)

LEXICAL_FETCH_LIMIT = 20


def note_score(note: Note, term: str) -> int:
    """Weighted lexical score of a note for a search term."""
    score = 0
    if contains(note.title, term):
        score += 10
    if any_contains(note.tags, term):
        score += 7
    if any_contains(note.key_topics, term):
        score += 6
    if contains(note.summary, term):
        score += 5
    if contains(note.content, term):
        score += 3
    return score


def document_score(document: Document, term: str) -> int:
    """Weighted lexical score of a document for a search term."""
    score = 0
    if contains(document.file_name, term):
        score += 10
    if contains(document.summary, term):
        score += 8
    if any_contains(document.topic_labels, term):
        score += 7
    if any_contains(document.key_insights, term):
        score += 6
    if contains(document.extracted_text, term):
        score += 4
    return score


def note_result(note: Note, score: float) -> dict:
    """Project a note into a search result."""
    return {
        "type": "note",
        "id": note.id,
        "title": note.title,
        "content": note.content,
        "summary": note.summary,
        "tags": note.tags or [],
        "key_topics": note.key_topics or [],
        "score": float(score),
    }


def document_result(document: Document, note_title: str | None, score: float) -> dict:
    """Project a document into a search result."""
    return {
        "type": "document",
        "id": document.id,
        "title": document.file_name,
        "content": document.summary or (document.extracted_text or "")[:200],
        "summary": document.summary,
        "key_insights": document.key_insights or [],
        "topic_labels": document.topic_labels or [],
        "note_id": document.note_id,
        "note_title": note_title,
        "file_path": document.file_path,
        "file_size": document.file_size,
        "score": float(score),
    }


def _response(query: str, notes: list[dict], documents: list[dict], fallback: bool) -> dict:
    combined = sorted(notes + documents, key=lambda r: r["score"], reverse=True)
    combined = combined[: settings.search_combined_limit]
    return {
        "results": combined,
        "query": query,
        "counts": {
            "notes": len(notes),
            "documents": len(documents),
            "total": len(combined),
        },
        "fallback": fallback,
    }


class SearchService:
    """Search a user's notes and documents."""

    def __init__(self, session: Session, embedder: EmbeddingService | None = None):
        """
        Initialize the search service.

        Args:
            session: Database session
            embedder: Embedding service (required for fast and semantic search)
        """
        self.session = session
        self.embedder = embedder

    @staticmethod
    def _clean_query(query: str) -> str:
        query = (query or "").strip()
        if not query:
            raise ValidationError("Query is required")
        return query

    def _note_titles(self, note_ids: set[int]) -> dict[int, str]:
        if not note_ids:
            return {}
        rows = self.session.exec(
            select(Note.id, Note.title).where(Note.id.in_(note_ids))  # type: ignore[union-attr]
        ).all()
        return {note_id: title for note_id, title in rows}

    def _document_results(self, scored: list[tuple[Document, float]]) -> list[dict]:
        titles = self._note_titles({doc.note_id for doc, _ in scored})
        return [document_result(doc, titles.get(doc.note_id), score) for doc, score in scored]

    # Lexical

    def _lexical_notes(self, user_id: int, term: str) -> list[dict]:
        statement = (
            select(Note)
            .where(Note.user_id == user_id)
            .order_by(Note.updated_at.desc(), Note.id.desc())  # type: ignore
        )
        matches = [
            note
            for note in self.session.exec(statement)
            if contains(note.title, term)
            or contains(note.content, term)
            or contains(note.summary, term)
        ][:LEXICAL_FETCH_LIMIT]
        return [note_result(note, note_score(note, term)) for note in matches]

    def _lexical_documents(self, user_id: int, term: str) -> list[dict]:
        statement = (
            select(Document)
            .where(Document.user_id == user_id)
            .order_by(Document.created_at.desc(), Document.id.desc())  # type: ignore
        )
        matches = [
            doc
            for doc in self.session.exec(statement)
            if contains(doc.file_name, term)
            or contains(doc.summary, term)
            or contains(doc.extracted_text, term)
        ][:LEXICAL_FETCH_LIMIT]
        return self._document_results([(doc, document_score(doc, term)) for doc in matches])

    def lexical_search(self, user_id: int, query: str, fallback: bool = False) -> dict:
        """
        Case-insensitive substring search with weighted scores.

        Args:
            user_id: Owner user ID
            query: Search text
            fallback: Whether this search stands in for a failed vector search

        Returns:
            Search response dict (results, query, counts, fallback)
        """
        query = self._clean_query(query)
        notes = self._lexical_notes(user_id, query)
        documents = self._lexical_documents(user_id, query)
        logger.info(
            f"Lexical search '{query}' found {len(notes)} notes, {len(documents)} documents"
        )
        return _response(query, notes, documents, fallback)

    # Fast (notes only, ranked in Python)

    async def fast_search(self, user_id: int, query: str) -> dict:
        """
        Embed the query and rank the user's notes in Python.

        Falls back to substring matching on title, content and tags when the
        embedding cannot be produced.
        """
        query = self._clean_query(query)
        try:
            query_vector = await self._embed_query(query)
        except ProviderError as e:
            logger.warning(f"Query embedding failed, using text fallback: {e}")
            return _response(query, self._fast_fallback(user_id, query), [], True)

        notes = self._notes_with_embeddings(user_id)
        by_id = {note.id: note for note in notes}
        ranked = rank(
            query_vector,
            [(note.id, deserialize_vector(note.embedding)) for note in notes],
            threshold=settings.search_threshold,
            limit=settings.search_limit,
        )
        results = [note_result(by_id[note_id], score) for note_id, score in ranked]
        return _response(query, results, [], False)

    def _fast_fallback(self, user_id: int, term: str) -> list[dict]:
        statement = (
            select(Note)
            .where(Note.user_id == user_id)
            .order_by(Note.updated_at.desc(), Note.id.desc())  # type: ignore
        )
        matches = [
            note
            for note in self.session.exec(statement)
            if contains(note.title, term)
            or contains(note.content, term)
            or any_contains(note.tags, term)
        ][: settings.search_limit]
        return [note_result(note, note_score(note, term)) for note in matches]

    # Semantic (notes and documents)

    async def semantic_search(self, user_id: int, query: str) -> dict:
        """
        Vector search over notes and documents.

        Each entity type is matched in SQL through sqlite-vec; if that query
        fails the candidates are ranked in Python instead. When the query
        cannot be embedded, or nothing passes the threshold, lexical search
        is used and flagged as a fallback.
        """
        query = self._clean_query(query)
        try:
            query_vector = await self._embed_query(query)
        except ProviderError as e:
            logger.warning(f"Query embedding failed, using lexical fallback: {e}")
            return self.lexical_search(user_id, query, fallback=True)

        note_matches = self._match("notes", user_id, query_vector)
        if note_matches is None:
            notes = self._notes_with_embeddings(user_id)
            note_matches = self._rank_records(query_vector, notes)

        document_matches = self._match("documents", user_id, query_vector)
        if document_matches is None:
            documents = self._documents_with_embeddings(user_id)
            document_matches = self._rank_records(query_vector, documents)

        if not note_matches and not document_matches:
            logger.info(f"No vector matches for '{query}', using lexical fallback")
            return self.lexical_search(user_id, query, fallback=True)

        notes_by_id = self._load(Note, [i for i, _ in note_matches])
        docs_by_id = self._load(Document, [i for i, _ in document_matches])
        note_results = [
            note_result(notes_by_id[i], score) for i, score in note_matches if i in notes_by_id
        ]
        document_results = self._document_results(
            [(docs_by_id[i], score) for i, score in document_matches if i in docs_by_id]
        )
        return _response(query, note_results, document_results, False)

    async def _embed_query(self, query: str) -> list[float]:
        if self.embedder is None:
            raise ProviderError("Embedding service unavailable")
        return await self.embedder.embed(query)

    def _notes_with_embeddings(self, user_id: int) -> list[Note]:
        statement = (
            select(Note)
            .where(Note.user_id == user_id, Note.embedding.is_not(None))  # type: ignore[union-attr]
            .order_by(Note.updated_at.desc(), Note.id.desc())  # type: ignore
        )
        return list(self.session.exec(statement).all())

    def _documents_with_embeddings(self, user_id: int) -> list[Document]:
        statement = (
            select(Document)
            .where(Document.user_id == user_id, Document.embedding.is_not(None))  # type: ignore[union-attr]
            .order_by(Document.created_at.desc(), Document.id.desc())  # type: ignore
        )
        return list(self.session.exec(statement).all())

    @staticmethod
    def _rank_records(
        query_vector: list[float], records: list[Note] | list[Document]
    ) -> list[tuple[int, float]]:
        return rank(
            query_vector,
            [(record.id, deserialize_vector(record.embedding)) for record in records],
            threshold=settings.search_threshold,
            limit=settings.search_limit,
        )

    def _match(
        self, table: str, user_id: int, query_vector: list[float]
    ) -> list[tuple[int, float]] | None:
        """
        Cosine match in SQL via sqlite-vec.

        Returns None when the query cannot run (extension missing, malformed
        vectors) so the caller ranks in Python.
        """
        query_blob = serialize_vector(query_vector)
        sql = text(
            f"""
            SELECT id, 1 - vec_distance_cosine(embedding, :query_vec) AS score
            FROM {table}
            WHERE user_id = :user_id
              AND embedding IS NOT NULL
              AND length(embedding) = :vec_len
              AND 1 - vec_distance_cosine(embedding, :query_vec) > :threshold
            ORDER BY score DESC
            LIMIT :limit
            """
        )
        try:
            rows = self.session.execute(
                sql,
                {
                    "query_vec": query_blob,
                    "user_id": user_id,
                    "vec_len": len(query_blob),
                    "threshold": settings.search_threshold,
                    "limit": settings.search_limit,
                },
            ).all()
        except SQLAlchemyError as e:
            logger.warning(f"Vector SQL on {table} failed, ranking in Python: {e}")
            self.session.rollback()
            return None

        logger.info(f"Vector SQL on {table} found {len(rows)} matches")
        return [(row.id, float(row.score)) for row in rows]

    def _load(self, model: type[Note] | type[Document], ids: list[int]) -> dict:
        if not ids:
            return {}
        records = self.session.exec(select(model).where(model.id.in_(ids))).all()  # type: ignore[union-attr]
        return {record.id: record for record in records}
