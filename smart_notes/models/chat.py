"""Chat history model."""

from datetime import datetime

from sqlalchemy import Column, Text
from sqlmodel import Field, SQLModel

from smart_notes.utils.datetime import utc_now


class ChatMessage(SQLModel, table=True):  # type: ignore
    """A single message of a note's Q&A conversation."""

    __tablename__ = "chat_history"  # type: ignore

    id: int | None = Field(default=None, primary_key=True)
    note_id: int = Field(foreign_key="notes.id", index=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    role: str  # user, assistant
    content: str = Field(sa_column=Column(Text, nullable=False))
    timestamp: datetime = Field(default_factory=utc_now, index=True)
