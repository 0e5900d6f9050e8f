"""Topic clustering over a user's notes."""

import logging

from sqlmodel import Session

from smart_notes.models.note import Note
from smart_notes.schemas.enrichment import ClusterPayload
from smart_notes.services.note_service import NoteService
from smart_notes.utils import PALETTE
from smart_notes.utils.datetime import utc_now
from smart_notes.utils.exceptions import ProviderError
from smart_notes.utils.llm_json import parse_llm_json

logger = logging.getLogger(__name__)

MAX_CLUSTERS = 6
MIN_CLUSTER_SIZE = 2

TITLE_KEYWORDS = [
    ("lecture", "lectures"),
    ("habit", "habits"),
    ("tech", "technology"),
    ("code", "coding"),
]

CLUSTER_PROMPT = """Analyze these notes and create 3-6 topic clusters. Group similar notes together.

Notes (ID: Title - Summary):
{notes}

Return ONLY valid JSON:
{{
  "clusters": [
    {{
      "name": "Short Name",
      "description": "Brief description (max 50 chars)",
      "noteIds": ["id1", "id2"],
      "color": "lavender",
      "count": 2
    }}
  ]
}}

Colors: lavender, mint, peach, sky, rose. Keep descriptions under 50 characters."""


def note_digest(note: Note) -> str:
    """One-line description of a note for the clustering prompt."""
    body = note.summary or (note.content or "")[:200]
    topics = ", ".join(note.key_topics or []) or "none"
    return f"{note.title}. {body}. Topics: {topics}"


def main_topic(note: Note) -> str:
    """Grouping key: first tag, else first key topic, else a title keyword."""
    for values in (note.tags, note.key_topics):
        if values and values[0].strip():
            return values[0].strip().lower()

    title = (note.title or "").lower()
    for keyword, topic in TITLE_KEYWORDS:
        if keyword in title:
            return topic
    return "general"


def fallback_clusters(notes: list[Note]) -> list[dict]:
    """
    Group notes by main topic without the AI provider.

    Groups with fewer than two notes are dropped; first-seen order is kept.
    """
    groups: dict[str, list[Note]] = {}
    for note in notes:
        groups.setdefault(main_topic(note), []).append(note)

    kept = [(topic, members) for topic, members in groups.items() if len(members) >= MIN_CLUSTER_SIZE]
    return [
        {
            "name": topic[:1].upper() + topic[1:],
            "description": f"{len(members)} notes about {topic}",
            "note_ids": [note.id for note in members],
            "color": PALETTE[i % len(PALETTE)],
        }
        for i, (topic, members) in enumerate(kept[:MAX_CLUSTERS])
    ]


class TopicService:
    """Cluster notes into named topics."""

    def __init__(self, session: Session, llm):
        self.session = session
        self.llm = llm

    async def _ai_clusters(self, notes: list[Note]) -> list[dict]:
        lines = "\n".join(f"{note.id}: {note_digest(note)[:150]}..." for note in notes)
        answer = await self.llm.generate(
            CLUSTER_PROMPT.format(notes=lines), temperature=0.7, max_output_tokens=2000
        )
        payload = parse_llm_json(answer, ClusterPayload)

        known_ids = {str(note.id): note.id for note in notes}
        clusters = []
        for proposed in payload.clusters[:MAX_CLUSTERS]:
            note_ids = [known_ids[i] for i in dict.fromkeys(proposed.note_ids) if i in known_ids]
            if not note_ids:
                continue
            clusters.append(
                {
                    "name": proposed.name,
                    "description": proposed.description,
                    "note_ids": note_ids,
                    "color": proposed.color,
                }
            )
        if not clusters:
            raise ProviderError("AI clusters reference no known notes")
        return clusters

    async def analyze(self, user_id: int) -> dict:
        """
        Cluster all of a user's notes.

        Returns:
            Dict with clusters (each carrying its member notes), total_notes,
            analyzed_at and fallback
        """
        notes = NoteService(self.session).list_all_notes(user_id)
        if not notes:
            return {
                "clusters": [],
                "total_notes": 0,
                "analyzed_at": utc_now(),
                "fallback": False,
            }

        fallback = False
        try:
            clusters = await self._ai_clusters(notes)
        except ProviderError as e:
            logger.warning(f"AI clustering failed for user {user_id}, using fallback: {e}")
            clusters = fallback_clusters(notes)
            fallback = True

        by_id = {note.id: note for note in notes}
        for cluster in clusters:
            members = [by_id[i] for i in cluster["note_ids"] if i in by_id]
            cluster["count"] = len(members)
            cluster["notes"] = [
                {"id": note.id, "title": note.title, "summary": note.summary}
                for note in members
            ]

        logger.info(f"Built {len(clusters)} clusters over {len(notes)} notes (fallback: {fallback})")
        return {
            "clusters": clusters,
            "total_notes": len(notes),
            "analyzed_at": utc_now(),
            "fallback": fallback,
        }
