"""Note service for CRUD operations, notebooks and dashboard stats."""

import logging
from pathlib import Path

from sqlalchemy import delete
from sqlmodel import Session, func, select

from smart_notes.database import commit
from smart_notes.models.chat import ChatMessage
from smart_notes.models.document import Document
from smart_notes.models.note import Note
from smart_notes.utils.datetime import days_ago, utc_now
from smart_notes.utils.exceptions import NotFoundError, ValidationError
from smart_notes.utils.text import merge_unique

logger = logging.getLogger(__name__)


class NoteService:
    """Service for note CRUD operations."""

    def __init__(self, session: Session):
        """
        Initialize the note service.

        Args:
            session: Database session
        """
        self.session = session

    def create_note(
        self, user_id: int, title: str, content: str = "", tags: list[str] | None = None
    ) -> Note:
        """
        Create a new note with pending enrichment.

        Args:
            user_id: Owner user ID
            title: Note title
            content: Note body
            tags: Notebook tags chosen by the user

        Returns:
            Created Note instance

        Raises:
            ValidationError: If the title is blank
        """
        if not title or not title.strip():
            raise ValidationError("Title is required")

        note = Note(
            user_id=user_id,
            title=title.strip(),
            content=content,
            tags=merge_unique(tags or []),
            enrichment_status="pending",
        )
        self.session.add(note)
        commit(self.session)
        self.session.refresh(note)
        logger.info(f"Created note {note.id} for user {user_id}")
        return note

    def get_note(self, note_id: int, user_id: int) -> Note:
        """
        Get a single note by ID, ensuring user ownership.

        Args:
            note_id: Note ID to fetch
            user_id: Owner user ID for verification

        Returns:
            Note instance

        Raises:
            NotFoundError: If note not found or doesn't belong to user
        """
        note = self.session.get(Note, note_id)
        if not note or note.user_id != user_id:
            raise NotFoundError("Note")
        return note

    def list_notes(
        self,
        user_id: int,
        page: int = 1,
        page_size: int = 12,
        tag: str | None = None,
    ) -> tuple[list[Note], int]:
        """
        List notes for a user, most recently updated first.

        Args:
            user_id: Owner user ID
            page: Page number (1-indexed)
            page_size: Notes per page
            tag: Only notes carrying this tag (case-insensitive)

        Returns:
            Tuple of (notes on the page, total matching notes)
        """
        page = max(1, page)
        page_size = min(100, max(1, page_size))
        skip = (page - 1) * page_size

        statement = (
            select(Note)
            .where(Note.user_id == user_id)
            .order_by(Note.updated_at.desc(), Note.id.desc())  # type: ignore
        )

        if tag:
            # Tags live in a JSON column; filter in Python to stay portable
            wanted = tag.lower()
            notes = [
                note
                for note in self.session.exec(statement).all()
                if any(t.lower() == wanted for t in note.tags or [])
            ]
            return notes[skip : skip + page_size], len(notes)

        count_statement = select(func.count()).select_from(Note).where(
            Note.user_id == user_id
        )
        total = self.session.exec(count_statement).one()
        notes = list(self.session.exec(statement.offset(skip).limit(page_size)).all())
        return notes, total

    def list_all_notes(self, user_id: int) -> list[Note]:
        """All of a user's notes, most recently updated first."""
        statement = (
            select(Note)
            .where(Note.user_id == user_id)
            .order_by(Note.updated_at.desc(), Note.id.desc())  # type: ignore
        )
        return list(self.session.exec(statement).all())

    def update_note(
        self,
        note_id: int,
        user_id: int,
        title: str | None = None,
        content: str | None = None,
        tags: list[str] | None = None,
        summary: str | None = None,
    ) -> tuple[Note, bool]:
        """
        Update a note's fields.

        Args:
            note_id: Note ID to update
            user_id: Owner user ID for verification
            title: Optional new title
            content: Optional new content
            tags: Optional replacement tag list
            summary: Optional hand-edited summary

        Returns:
            Tuple of (updated note, whether it needs re-enrichment)

        Raises:
            NotFoundError: If note not found or doesn't belong to user
            ValidationError: If the new title is blank
        """
        note = self.get_note(note_id, user_id)
        needs_enrichment = False

        if title is not None:
            if not title.strip():
                raise ValidationError("Title cannot be empty")
            if title.strip() != note.title:
                note.title = title.strip()
                needs_enrichment = True

        if content is not None and content != note.content:
            note.content = content
            needs_enrichment = True

        if tags is not None:
            note.tags = merge_unique(tags)

        if summary is not None:
            note.summary = summary

        if needs_enrichment:
            note.enrichment_status = "pending"

        note.updated_at = utc_now()
        self.session.add(note)
        commit(self.session)
        self.session.refresh(note)
        return note, needs_enrichment

    def delete_note(self, note_id: int, user_id: int) -> bool:
        """
        Delete a note with its chat history, documents and stored files.

        Args:
            note_id: Note ID to delete
            user_id: Owner user ID for verification

        Returns:
            True if deleted

        Raises:
            NotFoundError: If note not found or doesn't belong to user
        """
        note = self.get_note(note_id, user_id)

        documents = self.session.exec(
            select(Document).where(Document.note_id == note_id)
        ).all()
        file_paths = [document.file_path for document in documents]
        for document in documents:
            self.session.delete(document)

        self.session.execute(delete(ChatMessage).where(ChatMessage.note_id == note_id))  # type: ignore[arg-type]
        self.session.delete(note)
        commit(self.session)
        for file_path in file_paths:
            remove_stored_file(file_path)
        logger.info(
            f"Deleted note {note_id} with {len(documents)} documents for user {user_id}"
        )
        return True

    def tag_counts(self, user_id: int) -> dict[str, int]:
        """
        Count notes per tag.

        Returns:
            Mapping of lowercased tag to number of notes carrying it
        """
        counts: dict[str, int] = {}
        for tags in self.session.exec(select(Note.tags).where(Note.user_id == user_id)):
            for tag in {t.lower() for t in tags or []}:
                counts[tag] = counts.get(tag, 0) + 1
        return counts

    def get_stats(self, user_id: int) -> dict[str, int]:
        """
        Dashboard counters for a user.

        Returns:
            Dict with total_notes, notes_this_week, enriched_notes, total_documents
        """
        total_notes = self.session.exec(
            select(func.count()).select_from(Note).where(Note.user_id == user_id)
        ).one()
        notes_this_week = self.session.exec(
            select(func.count())
            .select_from(Note)
            .where(Note.user_id == user_id, Note.created_at >= days_ago(7))
        ).one()
        enriched_notes = self.session.exec(
            select(func.count())
            .select_from(Note)
            .where(Note.user_id == user_id, Note.summary.is_not(None))  # type: ignore[union-attr]
        ).one()
        total_documents = self.session.exec(
            select(func.count()).select_from(Document).where(Document.user_id == user_id)
        ).one()
        return {
            "total_notes": total_notes,
            "notes_this_week": notes_this_week,
            "enriched_notes": enriched_notes,
            "total_documents": total_documents,
        }


def remove_stored_file(file_path: str | None) -> None:
    """Delete a stored upload, logging rather than failing when it is gone."""
    if not file_path:
        return
    path = Path(file_path)
    try:
        if path.exists():
            path.unlink()
            logger.info(f"Deleted stored file: {path}")
    except OSError as e:
        logger.error(f"Error deleting stored file {path}: {e}")
