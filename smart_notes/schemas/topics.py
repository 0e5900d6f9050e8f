"""Topic clustering schemas."""

from datetime import datetime

from pydantic import BaseModel


class ClusterNote(BaseModel):
    """A member note of a cluster."""

    id: int
    title: str
    summary: str | None


class TopicCluster(BaseModel):
    """A named group of related notes."""

    name: str
    description: str
    note_ids: list[int]
    color: str
    count: int
    notes: list[ClusterNote] = []


class TopicAnalysisResponse(BaseModel):
    """Clusters over all of a user's notes."""

    clusters: list[TopicCluster]
    total_notes: int
    analyzed_at: datetime
    fallback: bool = False
