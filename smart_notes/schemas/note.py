"""Note schemas."""

from datetime import datetime

from pydantic import AliasChoices, BaseModel, Field, field_validator


class NoteCreate(BaseModel):
    """Schema for note creation."""

    title: str = Field(min_length=1, max_length=500)
    content: str = ""
    tags: list[str] = []


class NoteUpdate(BaseModel):
    """Schema for note updates."""

    title: str | None = Field(default=None, min_length=1, max_length=500)
    content: str | None = None
    tags: list[str] | None = None
    summary: str | None = None


class NoteResponse(BaseModel):
    """Schema for note response."""

    id: int
    title: str
    content: str
    tags: list[str]
    summary: str | None
    key_topics: list[str]
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

    @field_validator("tags", "key_topics", mode="before")
    @classmethod
    def _none_as_empty(cls, value: object) -> object:
        return value or []


class NoteListResponse(BaseModel):
    """Schema for paginated note list."""

    notes: list[NoteResponse]
    total: int
    page: int
    page_size: int
    has_more: bool


class NoteStatsResponse(BaseModel):
    """Dashboard counters."""

    total_notes: int
    notes_this_week: int
    enriched_notes: int
    total_documents: int


class EmbeddingResponse(BaseModel):
    """Result of regenerating a single note embedding."""

    success: bool
    note_id: int
    dimensions: int


class BackfillResponse(BaseModel):
    """Result of an embedding backfill run."""

    success: bool = True
    notes_processed: int = 0
    notes_failed: int = 0
    documents_processed: int = 0
    documents_failed: int = 0
    skipped: int = 0
    errors: list[str] = []
    message: str = ""
