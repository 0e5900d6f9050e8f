"""Database models."""

from smart_notes.models.chat import ChatMessage
from smart_notes.models.document import Document
from smart_notes.models.note import Note
from smart_notes.models.user import User, UserSettings

__all__ = ["User", "UserSettings", "Note", "Document", "ChatMessage"]
