"""Strict schemas for JSON returned by the generative model."""

from pydantic import BaseModel, Field, field_validator

_COLORS = {"lavender", "mint", "peach", "sky", "rose"}


class _StrictPayload(BaseModel):
    model_config = {"extra": "ignore", "str_strip_whitespace": True}

    @field_validator("*", mode="before")
    @classmethod
    def _drop_blank_items(cls, value: object) -> object:
        if isinstance(value, list):
            return [item for item in value if isinstance(item, str) and item.strip()]
        return value


class NoteEnrichmentPayload(_StrictPayload):
    """Expected shape of a note enrichment answer."""

    summary: str = Field(min_length=1)
    tags: list[str] = []
    key_topics: list[str] = []


class DocumentInsightsPayload(_StrictPayload):
    """Expected shape of a document extraction answer."""

    summary: str = Field(min_length=1)
    key_insights: list[str] = []
    topics: list[str] = []
    topic_labels: list[str] = []


class ClusterSpec(BaseModel):
    """One cluster proposed by the model."""

    model_config = {"extra": "ignore", "populate_by_name": True}

    name: str = Field(min_length=1)
    description: str = ""
    note_ids: list[str] = Field(alias="noteIds", min_length=1)
    color: str = "lavender"

    @field_validator("note_ids", mode="before")
    @classmethod
    def _ids_as_strings(cls, value: object) -> object:
        if isinstance(value, list):
            return [str(item) for item in value]
        return value

    @field_validator("color", mode="before")
    @classmethod
    def _known_color(cls, value: object) -> str:
        return value if isinstance(value, str) and value in _COLORS else "lavender"


class ClusterPayload(BaseModel):
    """Expected shape of a topic clustering answer."""

    clusters: list[ClusterSpec] = Field(min_length=1)
