"""Authentication service for password hashing, JWT and API tokens."""

import logging
import secrets
from datetime import timedelta

import bcrypt
from jose import JWTError, jwt
from sqlmodel import Session, select

from smart_notes.config import settings
from smart_notes.database import commit
from smart_notes.models.user import User, UserSettings
from smart_notes.schemas.auth import TokenData
from smart_notes.utils.datetime import utc_now
from smart_notes.utils.exceptions import AuthError, ValidationError

logger = logging.getLogger(__name__)


def get_password_hash(password: str) -> str:
    """
    Hash a plain text password.

    Args:
        password: Plain text password

    Returns:
        Hashed password string
    """
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check a plain password against its bcrypt hash."""
    return bcrypt.checkpw(
        plain_password.encode("utf-8"), hashed_password.encode("utf-8")
    )


def create_access_token(user_id: int, expires_delta: timedelta | None = None) -> str:
    """
    Create a JWT access token.

    Args:
        user_id: User ID to encode in the token
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT string
    """
    expire = utc_now() + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    return jwt.encode(
        {"sub": str(user_id), "exp": expire},
        settings.secret_key,
        algorithm=settings.algorithm,
    )


def decode_access_token(token: str) -> TokenData:
    """
    Decode and validate a JWT access token.

    Raises:
        AuthError: If token is invalid or expired
    """
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError as e:
        raise AuthError(f"Token validation failed: {e}") from e

    user_id_str: str | None = payload.get("sub")
    if user_id_str is None:
        raise AuthError("Invalid token payload")
    try:
        return TokenData(user_id=int(user_id_str))
    except ValueError as e:
        raise AuthError("Invalid user ID in token") from e


def register_user(session: Session, username: str, password: str) -> User:
    """
    Create a user with default settings.

    Raises:
        ValidationError: If the username is blank or taken
    """
    username = username.strip()
    if not username or not password:
        raise ValidationError("Username and password are required")

    existing = session.exec(select(User).where(User.username == username)).first()
    if existing:
        raise ValidationError("Username already registered")

    user = User(username=username, hashed_password=get_password_hash(password))
    session.add(user)
    commit(session)
    session.refresh(user)

    session.add(UserSettings(user_id=user.id))
    commit(session)
    logger.info(f"Registered user {user.id}")
    return user


def authenticate_user(session: Session, username: str, password: str) -> User:
    """
    Look up a user by credentials.

    Raises:
        AuthError: If the username is unknown or the password is wrong
    """
    user = session.exec(select(User).where(User.username == username)).first()
    if not user or not verify_password(password, user.hashed_password):
        raise AuthError("Incorrect username or password")
    return user


def rotate_api_token(session: Session, user: User) -> str:
    """Issue a new long-lived API token, invalidating the previous one."""
    user.api_token = secrets.token_urlsafe(32)
    session.add(user)
    commit(session)
    return user.api_token


def revoke_api_token(session: Session, user: User) -> None:
    """Remove the user's API token."""
    user.api_token = None
    session.add(user)
    commit(session)
