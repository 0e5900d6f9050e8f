"""Search endpoints."""

from fastapi import APIRouter

from smart_notes.api.deps import CurrentUserIdDep, EmbeddingServiceDep, SessionDep
from smart_notes.schemas.search import SearchRequest, SearchResponse
from smart_notes.services.search_service import SearchService

router = APIRouter(prefix="/api", tags=["search"])


@router.post("/search", response_model=SearchResponse)
def lexical_search(
    request: SearchRequest, session: SessionDep, user_id: CurrentUserIdDep
) -> SearchResponse:
    """
    Search notes and documents by text.

    Results are scored by which fields contain the query.
    """
    return SearchResponse(**SearchService(session).lexical_search(user_id, request.query))


@router.post("/search/fast", response_model=SearchResponse)
async def fast_search(
    request: SearchRequest,
    session: SessionDep,
    user_id: CurrentUserIdDep,
    embedder: EmbeddingServiceDep,
) -> SearchResponse:
    """
    Rank notes by embedding similarity to the query.

    Falls back to text matching when the query cannot be embedded.
    """
    result = await SearchService(session, embedder).fast_search(user_id, request.query)
    return SearchResponse(**result)


@router.post("/search/semantic", response_model=SearchResponse)
async def semantic_search(
    request: SearchRequest,
    session: SessionDep,
    user_id: CurrentUserIdDep,
    embedder: EmbeddingServiceDep,
) -> SearchResponse:
    """
    Search notes and documents by vector similarity.

    Falls back to text search when embedding fails or nothing matches.
    """
    result = await SearchService(session, embedder).semantic_search(user_id, request.query)
    return SearchResponse(**result)
