"""Document schemas."""

from datetime import datetime

from pydantic import AliasChoices, BaseModel, Field, field_validator


class DocumentResponse(BaseModel):
    """Schema for document response."""

    id: int
    note_id: int
    file_name: str
    file_path: str
    file_size: int
    content_type: str | None
    summary: str | None
    key_insights: list[str]
    topics: list[str]
    topic_labels: list[str]
    enrichment_status: str
    error_message: str | None
    has_embedding: bool = Field(
        default=False, validation_alias=AliasChoices("has_embedding", "embedding")
    )
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}

    @field_validator("has_embedding", mode="before")
    @classmethod
    def _embedding_present(cls, value: object) -> bool:
        return bool(value)

    @field_validator("key_insights", "topics", "topic_labels", mode="before")
    @classmethod
    def _none_as_empty(cls, value: object) -> object:
        return value or []


class DocumentListResponse(BaseModel):
    """Documents attached to a note."""

    documents: list[DocumentResponse]
