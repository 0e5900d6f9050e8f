"""User and UserSettings models."""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlmodel import Field, Relationship, SQLModel

from smart_notes.utils.datetime import utc_now

if TYPE_CHECKING:
    from smart_notes.models.note import Note


class User(SQLModel, table=True):
    """User account model."""

    __tablename__ = "users"

    id: int | None = Field(default=None, primary_key=True)
    username: str = Field(unique=True, index=True)
    hashed_password: str
    created_at: datetime = Field(default_factory=utc_now)

    # Long-lived API token for scripts and integrations
    api_token: str | None = Field(default=None, unique=True, index=True)

    # Relationships
    settings: "UserSettings" = Relationship(
        back_populates="user",
        sa_relationship_kwargs={"uselist": False, "lazy": "joined"},
    )
    notes: list["Note"] = Relationship(back_populates="user")


class UserSettings(SQLModel, table=True):
    """Per-user preferences."""

    __tablename__ = "user_settings"

    id: int | None = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", unique=True, index=True)

    # User-defined notebooks (JSON array of {id, label, color})
    custom_notebooks: str = Field(default="[]")

    # Relationships
    user: User = Relationship(back_populates="settings")
