"""Per-note chat history and Q&A endpoints."""

from fastapi import APIRouter

from smart_notes.api.deps import CurrentUserIdDep, LLMClientDep, SessionDep
from smart_notes.schemas.chat import (
    ChatHistoryResponse,
    ChatHistorySave,
    ChatMessageResponse,
    ChatSaveResponse,
    NoteAnswer,
    NoteQuestion,
)
from smart_notes.services.chat_service import ChatService, Turn
from smart_notes.utils.datetime import utc_now

router = APIRouter(prefix="/api/notes", tags=["chat"])


@router.get("/{note_id}/chat", response_model=ChatHistoryResponse)
def get_chat_history(
    note_id: int, session: SessionDep, user_id: CurrentUserIdDep
) -> ChatHistoryResponse:
    """Get a note's chat history, oldest first."""
    messages = ChatService(session).get_history(note_id, user_id)
    return ChatHistoryResponse(
        chat_history=[ChatMessageResponse.model_validate(m) for m in messages]
    )


@router.post("/{note_id}/chat", response_model=ChatSaveResponse)
def save_chat_messages(
    note_id: int,
    payload: ChatHistorySave,
    session: SessionDep,
    user_id: CurrentUserIdDep,
) -> ChatSaveResponse:
    """Append messages to a note's chat history."""
    saved = ChatService(session).save_messages(
        note_id,
        user_id,
        [(m.role, m.content, m.timestamp) for m in payload.messages],
    )
    return ChatSaveResponse(saved=saved)


@router.delete("/{note_id}/chat")
def clear_chat_history(note_id: int, session: SessionDep, user_id: CurrentUserIdDep) -> dict:
    """Delete a note's chat history."""
    ChatService(session).clear_history(note_id, user_id)
    return {"success": True}


@router.post("/{note_id}/qa", response_model=NoteAnswer)
async def ask_note(
    note_id: int,
    question: NoteQuestion,
    session: SessionDep,
    user_id: CurrentUserIdDep,
    llm: LLMClientDep,
) -> NoteAnswer:
    """
    Ask the assistant a question about a note.

    Uses the chat history from the request when given, else the stored one.
    """
    history = None
    if question.chat_history is not None:
        history = [Turn(role=m.role, content=m.content) for m in question.chat_history]

    answer = await ChatService(session, llm).answer(
        note_id, user_id, question.question, history=history
    )
    return NoteAnswer(answer=answer, note_id=note_id, timestamp=utc_now())
