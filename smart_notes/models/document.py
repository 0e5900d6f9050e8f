"""Document model."""

from datetime import datetime

from sqlalchemy import JSON, Column, Index, LargeBinary, Text
from sqlmodel import Field, SQLModel

from smart_notes.utils.datetime import utc_now


class Document(SQLModel, table=True):  # type: ignore
    """Uploaded file attached to a note, with extracted text and insights."""

    __tablename__ = "documents"  # type: ignore

    id: int | None = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    note_id: int = Field(foreign_key="notes.id", index=True)

    # Stored file
    file_name: str
    file_path: str
    file_size: int = Field(default=0)
    content_type: str | None = Field(default=None)

    # Extraction results
    extracted_text: str | None = Field(default=None, sa_column=Column(Text))
    summary: str | None = Field(default=None, sa_column=Column(Text))
    key_insights: list[str] = Field(default_factory=list, sa_column=Column(JSON))
    topics: list[str] = Field(default_factory=list, sa_column=Column(JSON))
    topic_labels: list[str] = Field(default_factory=list, sa_column=Column(JSON))

    # Vector embedding (float32 bytes)
    embedding: bytes | None = Field(default=None, sa_column=Column(LargeBinary))

    enrichment_status: str = Field(default="pending", index=True)
    error_message: str | None = Field(default=None)

    created_at: datetime = Field(default_factory=utc_now, index=True)
    updated_at: datetime = Field(default_factory=utc_now)

    __table_args__ = (Index("ix_documents_user_note", "user_id", "note_id"),)
