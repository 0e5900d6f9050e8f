"""Topic clustering endpoint."""

from fastapi import APIRouter

from smart_notes.api.deps import CurrentUserIdDep, LLMClientDep, SessionDep
from smart_notes.schemas.topics import TopicAnalysisResponse
from smart_notes.services.topic_service import TopicService

router = APIRouter(prefix="/api/topics", tags=["topics"])


@router.post("/analyze", response_model=TopicAnalysisResponse)
async def analyze_topics(
    session: SessionDep, user_id: CurrentUserIdDep, llm: LLMClientDep
) -> TopicAnalysisResponse:
    """Group the current user's notes into named topic clusters."""
    result = await TopicService(session, llm).analyze(user_id)
    return TopicAnalysisResponse(**result)
