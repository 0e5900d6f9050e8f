"""Authentication endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from fastapi.security import OAuth2PasswordRequestForm

from smart_notes.api.deps import CurrentUserDep, SessionDep
from smart_notes.config import settings
from smart_notes.schemas.auth import ApiTokenResponse, Token, UserCreate, UserResponse
from smart_notes.services import auth_service

router = APIRouter(prefix="/api/auth", tags=["authentication"])


def _issue_token(user_id: int) -> Token:
    return Token(
        access_token=auth_service.create_access_token(user_id),
        expires_in=settings.access_token_expire_minutes * 60,
    )


@router.post("/register", response_model=Token, status_code=status.HTTP_201_CREATED)
def register(user_data: UserCreate, session: SessionDep) -> Token:
    """
    Register a new user account.

    Returns JWT token on successful registration.
    """
    user = auth_service.register_user(session, user_data.username, user_data.password)
    assert user.id is not None
    return _issue_token(user.id)


@router.post("/login", response_model=Token)
def login(
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()], session: SessionDep
) -> Token:
    """
    Login with username and password.

    Returns JWT token on successful authentication.
    """
    user = auth_service.authenticate_user(session, form_data.username, form_data.password)
    assert user.id is not None
    return _issue_token(user.id)


@router.get("/me", response_model=UserResponse)
def get_current_user_info(current_user: CurrentUserDep) -> UserResponse:
    """Get the current authenticated user's information."""
    return UserResponse.model_validate(current_user)


@router.post("/api-token", response_model=ApiTokenResponse)
def generate_api_token(current_user: CurrentUserDep, session: SessionDep) -> ApiTokenResponse:
    """
    Generate a new long-lived API token.

    The token never expires and can be used in the Authorization header.
    Generating a new token invalidates the previous one.
    """
    return ApiTokenResponse(api_token=auth_service.rotate_api_token(session, current_user))


@router.delete("/api-token", status_code=status.HTTP_204_NO_CONTENT)
def revoke_api_token(current_user: CurrentUserDep, session: SessionDep) -> None:
    """Revoke the current API token."""
    auth_service.revoke_api_token(session, current_user)
