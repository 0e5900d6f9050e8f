"""Account and token schemas."""

from datetime import datetime
from typing import Annotated

from pydantic import AliasChoices, BaseModel, Field, StringConstraints, field_validator

Username = Annotated[str, StringConstraints(strip_whitespace=True, min_length=3, max_length=50)]


class UserCreate(BaseModel):
    """Registration payload. The username is trimmed, the password is kept verbatim."""

    username: Username
    password: str = Field(min_length=6, max_length=128)


class UserResponse(BaseModel):
    """Public view of an account; secrets are reduced to flags."""

    id: int
    username: str
    created_at: datetime
    has_api_token: bool = Field(
        default=False, validation_alias=AliasChoices("has_api_token", "api_token")
    )

    model_config = {"from_attributes": True}

    @field_validator("has_api_token", mode="before")
    @classmethod
    def _token_present(cls, value: object) -> bool:
        return bool(value)


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int


class TokenData(BaseModel):
    """Claims decoded from an access token."""

    user_id: int | None = None


class ApiTokenResponse(BaseModel):
    """A freshly rotated integration token, shown once."""

    api_token: str
    message: str = "Send as 'Authorization: Bearer <token>'; rotating again revokes this one"
