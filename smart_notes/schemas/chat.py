"""Chat history and note Q&A schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


class ChatMessageIn(BaseModel):
    """A message submitted for storage."""

    role: Literal["user", "assistant"]
    content: str = Field(min_length=1)
    timestamp: datetime | None = None


class ChatMessageResponse(BaseModel):
    """A stored chat message."""

    id: int
    note_id: int
    role: str
    content: str
    timestamp: datetime

    model_config = {"from_attributes": True}


class ChatHistorySave(BaseModel):
    """Batch of messages to append to a note's history."""

    messages: list[ChatMessageIn] = Field(min_length=1)


class ChatHistoryResponse(BaseModel):
    """A note's chat history, oldest first."""

    chat_history: list[ChatMessageResponse]


class ChatSaveResponse(BaseModel):
    """Number of messages appended."""

    success: bool = True
    saved: int


class NoteQuestion(BaseModel):
    """A question about a note, with optional prior conversation."""

    question: str = Field(min_length=1)
    chat_history: list[ChatMessageIn] | None = None


class NoteAnswer(BaseModel):
    """The assistant's answer."""

    answer: str
    note_id: int
    timestamp: datetime
