"""Per-note chat history and question answering."""

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import delete
from sqlmodel import Session, select

from smart_notes.database import commit
from smart_notes.models.chat import ChatMessage
from smart_notes.models.note import Note
from smart_notes.services.note_service import NoteService
from smart_notes.utils.datetime import utc_now
from smart_notes.utils.exceptions import ValidationError

logger = logging.getLogger(__name__)

HISTORY_WINDOW = 5

QA_PROMPT = """You are an AI assistant helping the user understand and work with their note.

Here is the note content:
{context}

Your role:
- Answer questions about the note content
- Provide summaries and explanations
- Suggest improvements or action items
- Help rewrite or clarify content
- Generate ideas based on the note

Important:
- Base your answers ONLY on the note content provided
- Be concise and helpful
- If asked to create something (action items, summary, etc.), format it clearly
- If the note doesn't contain information to answer the question, say so politely

{history}User question: {question}

Your answer:"""


@dataclass
class Turn:
    """A conversation turn used to build the Q&A prompt."""

    role: str
    content: str


def note_context(note: Note) -> str:
    """Note fields given to the model as context."""
    lines = [f"Note Title: {note.title}", "Note Content:", note.content or ""]
    if note.summary:
        lines.append(f"AI Summary: {note.summary}")
    if note.key_topics:
        lines.append(f"Key Topics: {', '.join(note.key_topics)}")
    if note.tags:
        lines.append(f"Tags: {', '.join(note.tags)}")
    return "\n".join(lines).strip()


def build_qa_prompt(note: Note, question: str, history: list[Turn]) -> str:
    """Prompt with note context, the last few turns and the question."""
    recent = history[-HISTORY_WINDOW:]
    conversation = "\n".join(
        f"{'User' if turn.role == 'user' else 'Assistant'}: {turn.content}" for turn in recent
    )
    history_block = f"Previous conversation:\n{conversation}\n\n" if conversation else ""
    return QA_PROMPT.format(
        context=note_context(note), history=history_block, question=question.strip()
    )


class ChatService:
    """Chat history storage and note Q&A."""

    def __init__(self, session: Session, llm=None):
        """
        Initialize the chat service.

        Args:
            session: Database session
            llm: Client used to answer questions
        """
        self.session = session
        self.llm = llm

    def get_history(self, note_id: int, user_id: int) -> list[ChatMessage]:
        """Messages of a note, oldest first."""
        NoteService(self.session).get_note(note_id, user_id)
        statement = (
            select(ChatMessage)
            .where(ChatMessage.note_id == note_id, ChatMessage.user_id == user_id)
            .order_by(ChatMessage.timestamp.asc(), ChatMessage.id.asc())  # type: ignore
        )
        return list(self.session.exec(statement).all())

    def save_messages(
        self,
        note_id: int,
        user_id: int,
        messages: list[tuple[str, str, datetime | None]],
    ) -> int:
        """
        Append messages to a note's history.

        Args:
            note_id: Note ID
            user_id: Owner user ID
            messages: (role, content, timestamp) triples; missing timestamps
                default to now

        Returns:
            Number of messages stored
        """
        NoteService(self.session).get_note(note_id, user_id)
        for role, content, timestamp in messages:
            self.session.add(
                ChatMessage(
                    note_id=note_id,
                    user_id=user_id,
                    role=role,
                    content=content,
                    timestamp=timestamp or utc_now(),
                )
            )
        commit(self.session)
        logger.info(f"Saved {len(messages)} chat messages for note {note_id}")
        return len(messages)

    def clear_history(self, note_id: int, user_id: int) -> None:
        """Delete every message of a note."""
        NoteService(self.session).get_note(note_id, user_id)
        self.session.execute(
            delete(ChatMessage).where(
                ChatMessage.note_id == note_id, ChatMessage.user_id == user_id
            )
        )
        commit(self.session)
        logger.info(f"Cleared chat history for note {note_id}")

    async def answer(
        self,
        note_id: int,
        user_id: int,
        question: str,
        history: list[Turn] | None = None,
    ) -> str:
        """
        Answer a question about a note.

        Args:
            note_id: Note ID
            user_id: Owner user ID
            question: The user's question
            history: Prior turns; stored history is used when omitted

        Returns:
            The model's answer

        Raises:
            NotFoundError: If the note is absent or not owned
            ValidationError: If the question is blank
            RateLimitExceeded: If the provider stays rate limited
            ProviderError: On any other provider failure
        """
        if not question or not question.strip():
            raise ValidationError("Question is required")

        note = NoteService(self.session).get_note(note_id, user_id)
        if history is None:
            history = [
                Turn(role=m.role, content=m.content)
                for m in self.get_history(note_id, user_id)
            ]

        prompt = build_qa_prompt(note, question, history)
        answer = await self.llm.generate(prompt, temperature=0.7, max_output_tokens=1000)
        logger.info(f"Answered question on note {note_id} ({len(answer)} chars)")
        return answer
