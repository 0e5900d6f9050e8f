"""Pydantic schemas for request/response validation."""

from smart_notes.schemas.auth import Token, TokenData, UserCreate, UserResponse
from smart_notes.schemas.chat import (
    ChatHistoryResponse,
    ChatHistorySave,
    NoteAnswer,
    NoteQuestion,
)
from smart_notes.schemas.document import DocumentListResponse, DocumentResponse
from smart_notes.schemas.note import (
    NoteCreate,
    NoteListResponse,
    NoteResponse,
    NoteUpdate,
)
from smart_notes.schemas.notebooks import NotebookCreate, NotebookListResponse
from smart_notes.schemas.search import SearchRequest, SearchResponse
from smart_notes.schemas.topics import TopicAnalysisResponse

__all__ = [
    "Token",
    "TokenData",
    "UserCreate",
    "UserResponse",
    "ChatHistoryResponse",
    "ChatHistorySave",
    "NoteAnswer",
    "NoteQuestion",
    "DocumentListResponse",
    "DocumentResponse",
    "NoteCreate",
    "NoteListResponse",
    "NoteResponse",
    "NoteUpdate",
    "NotebookCreate",
    "NotebookListResponse",
    "SearchRequest",
    "SearchResponse",
    "TopicAnalysisResponse",
]
