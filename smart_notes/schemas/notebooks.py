"""Notebook schemas."""

from pydantic import BaseModel, Field


class NotebookCreate(BaseModel):
    """Schema for creating a custom notebook."""

    name: str = Field(min_length=1, max_length=100)


class NotebookResponse(BaseModel):
    """A notebook with its live note count."""

    id: str
    label: str
    color: str
    count: int
    custom: bool = False


class NotebookListResponse(BaseModel):
    """Default and custom notebooks."""

    notebooks: list[NotebookResponse]
