"""Search schemas."""

from typing import Literal

from pydantic import BaseModel


class SearchRequest(BaseModel):
    """Schema for a search request."""

    query: str


class SearchResultItem(BaseModel):
    """A note or document projected into a ranked result."""

    type: Literal["note", "document"]
    id: int
    title: str
    content: str
    summary: str | None = None
    score: float

    # Note fields
    tags: list[str] | None = None
    key_topics: list[str] | None = None

    # Document fields
    key_insights: list[str] | None = None
    topic_labels: list[str] | None = None
    note_id: int | None = None
    note_title: str | None = None
    file_path: str | None = None
    file_size: int | None = None


class SearchCounts(BaseModel):
    """Result counts per entity type."""

    notes: int
    documents: int
    total: int


class SearchResponse(BaseModel):
    """Schema for search results."""

    results: list[SearchResultItem]
    query: str
    counts: SearchCounts
    fallback: bool = False
