"""Document storage and text extraction."""

import asyncio
import logging
import uuid
from pathlib import Path

import pymupdf
from sqlmodel import Session, select

from smart_notes.config import settings
from smart_notes.database import commit
from smart_notes.models.document import Document
from smart_notes.services.note_service import NoteService, remove_stored_file
from smart_notes.utils.exceptions import NotFoundError, PersistenceError, ValidationError

logger = logging.getLogger(__name__)

TEXT_EXTENSIONS = frozenset(
    {"txt", "md", "json", "csv", "html", "xml", "js", "ts", "jsx", "tsx", "css"}
)
MIN_EXTRACTABLE_CHARS = 10


def file_extension(file_name: str) -> str:
    """Lowercased extension without the dot ("" when there is none)."""
    return Path(file_name).suffix.lower().lstrip(".")


def _read_pdf_text(path: Path) -> str:
    """Extract all page text from a PDF. Blocking; run in a worker thread."""
    with pymupdf.open(path) as pdf:
        pages = [page.get_text() for page in pdf]
    return "\n".join(pages).strip()


def _write_upload(path: Path, data: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)


async def read_document_text(path: Path, extension: str) -> str | None:
    """
    Read the text of a stored document.

    Args:
        path: Stored file path
        extension: Lowercased extension without the dot

    Returns:
        Extracted text, or None when the type is unsupported or the PDF
        has no readable text
    """
    if extension in TEXT_EXTENSIONS:
        raw = await asyncio.to_thread(path.read_bytes)
        return raw.decode("utf-8", errors="replace")

    if extension == "pdf":
        try:
            text = await asyncio.to_thread(_read_pdf_text, path)
        except (pymupdf.FileDataError, RuntimeError, ValueError) as e:
            logger.warning(f"PDF extraction failed for {path.name}: {e}")
            return None
        return text or None

    return None


class DocumentService:
    """Service for documents attached to notes."""

    def __init__(self, session: Session):
        """
        Initialize the document service.

        Args:
            session: Database session
        """
        self.session = session

    async def save_upload(
        self,
        user_id: int,
        note_id: int,
        file_name: str,
        data: bytes,
        content_type: str | None = None,
    ) -> Document:
        """
        Store an uploaded file and create its pending Document.

        Args:
            user_id: Owner user ID
            note_id: Parent note ID (must belong to the user)
            file_name: Original file name
            data: File bytes
            content_type: MIME type reported by the client

        Returns:
            Created Document

        Raises:
            NotFoundError: If the note is absent or not owned
            ValidationError: If the file is empty, unnamed or too large
        """
        NoteService(self.session).get_note(note_id, user_id)

        if not file_name:
            raise ValidationError("File name is required")
        if not data:
            raise ValidationError("Uploaded file is empty")
        if len(data) > settings.max_upload_bytes:
            raise ValidationError(
                f"File exceeds the upload limit of {settings.max_upload_bytes} bytes"
            )

        user_dir = Path(settings.upload_dir) / str(user_id)
        suffix = Path(file_name).suffix.lower()
        file_path = user_dir / f"{uuid.uuid4()}{suffix}"
        await asyncio.to_thread(_write_upload, file_path, data)

        document = Document(
            user_id=user_id,
            note_id=note_id,
            file_name=Path(file_name).name,
            file_path=str(file_path),
            file_size=len(data),
            content_type=content_type,
            enrichment_status="pending",
        )
        self.session.add(document)
        try:
            commit(self.session)
        except PersistenceError:
            remove_stored_file(str(file_path))
            raise
        self.session.refresh(document)
        logger.info(
            f"Stored document {document.id} ({document.file_size} bytes) for note {note_id}"
        )
        return document

    def get_document(self, document_id: int, user_id: int) -> Document:
        """
        Get a document by ID, ensuring user ownership.

        Raises:
            NotFoundError: If absent or owned by another user
        """
        document = self.session.get(Document, document_id)
        if not document or document.user_id != user_id:
            raise NotFoundError("Document")
        return document

    def list_for_note(self, note_id: int, user_id: int) -> list[Document]:
        """Documents of a note, newest first."""
        NoteService(self.session).get_note(note_id, user_id)
        statement = (
            select(Document)
            .where(Document.note_id == note_id, Document.user_id == user_id)
            .order_by(Document.created_at.desc(), Document.id.desc())  # type: ignore
        )
        return list(self.session.exec(statement).all())

    def list_for_user(self, user_id: int) -> list[Document]:
        """All of a user's documents, newest first."""
        statement = (
            select(Document)
            .where(Document.user_id == user_id)
            .order_by(Document.created_at.desc(), Document.id.desc())  # type: ignore
        )
        return list(self.session.exec(statement).all())

    def delete_document(self, document_id: int, user_id: int) -> None:
        """Delete a document and its stored file."""
        document = self.get_document(document_id, user_id)
        file_path = document.file_path
        self.session.delete(document)
        commit(self.session)
        remove_stored_file(file_path)
        logger.info(f"Deleted document {document_id} for user {user_id}")
