"""Note model."""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import JSON, Column, Index, LargeBinary, Text
from sqlmodel import Field, Relationship, SQLModel

from smart_notes.utils.datetime import utc_now

if TYPE_CHECKING:
    from smart_notes.models.user import User


class Note(SQLModel, table=True):  # type: ignore
    """Note with user-authored content and AI-generated metadata."""

    __tablename__ = "notes"  # type: ignore

    id: int | None = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)

    # Content
    title: str = Field(default="")
    content: str = Field(default="", sa_column=Column(Text, nullable=False))
    tags: list[str] = Field(default_factory=list, sa_column=Column(JSON))

    # Enrichment
    summary: str | None = Field(default=None, sa_column=Column(Text))
    key_topics: list[str] = Field(default_factory=list, sa_column=Column(JSON))

    # Vector embedding (float32 bytes)
    embedding: bytes | None = Field(default=None, sa_column=Column(LargeBinary))

    # Enrichment state
    enrichment_status: str = Field(
        default="pending", index=True
    )  # pending, processing, completed, failed
    error_message: str | None = Field(default=None)

    # Timestamps
    created_at: datetime = Field(default_factory=utc_now, index=True)
    updated_at: datetime = Field(default_factory=utc_now)

    # Relationships
    user: "User" = Relationship(back_populates="notes")

    __table_args__ = (
        Index("ix_notes_user_updated", "user_id", "updated_at"),
        Index("ix_notes_user_created", "user_id", "created_at"),
    )
