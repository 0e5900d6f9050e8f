"""API dependencies for dependency injection."""

from collections.abc import Generator
from typing import Annotated

from fastapi import Depends, Header
from fastapi.security import OAuth2PasswordBearer
from sqlmodel import Session, select

from smart_notes.database import get_session
from smart_notes.models.user import User
from smart_notes.services.auth_service import decode_access_token
from smart_notes.services.embedding_service import EmbeddingService, get_embedding_service
from smart_notes.services.llm_client import RateLimitedLLMClient, get_llm_client
from smart_notes.utils.exceptions import AuthError

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


def get_db() -> Generator[Session, None, None]:
    """Get database session dependency."""
    yield from get_session()


SessionDep = Annotated[Session, Depends(get_db)]


def get_current_user(
    session: SessionDep,
    token: Annotated[str | None, Depends(oauth2_scheme)],
    authorization: Annotated[str | None, Header()] = None,
) -> User:
    """
    Get the current authenticated user from a JWT or a long-lived API token.

    Args:
        session: Database session
        token: Bearer token from the OAuth2 flow
        authorization: Raw Authorization header (for API token fallback)

    Returns:
        Authenticated User instance

    Raises:
        AuthError: If authentication fails
    """
    if token:
        try:
            token_data = decode_access_token(token)
        except AuthError:
            token_data = None
        if token_data and token_data.user_id is not None:
            user = session.get(User, token_data.user_id)
            if user:
                return user

    # Not a JWT: try it as an API token
    if authorization and authorization.startswith("Bearer "):
        api_token = authorization.removeprefix("Bearer ").strip()
        if api_token:
            user = session.exec(select(User).where(User.api_token == api_token)).first()
            if user:
                return user

    raise AuthError("Not authenticated")


CurrentUserDep = Annotated[User, Depends(get_current_user)]


def get_current_user_id(current_user: CurrentUserDep) -> int:
    """Get the current user's ID, asserting it's not None."""
    assert current_user.id is not None
    return current_user.id


CurrentUserIdDep = Annotated[int, Depends(get_current_user_id)]

LLMClientDep = Annotated[RateLimitedLLMClient, Depends(get_llm_client)]
EmbeddingServiceDep = Annotated[EmbeddingService, Depends(get_embedding_service)]
