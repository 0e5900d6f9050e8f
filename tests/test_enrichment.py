"""Tests for enrichment heuristics and the enrichment service."""

import pytest
from sqlmodel import Session

from smart_notes.models import Document, Note
from smart_notes.services.enrichment_service import (
    EnrichmentService,
    fallback_document_insights,
    fallback_note_enrichment,
    prompt_document_text,
)
from smart_notes.services.embedding_service import note_searchable_text
from smart_notes.utils.vector import deserialize_vector, serialize_vector


def test_fallback_note_enrichment():
    """Test the heuristic summary, tags and topics."""
    content = " ".join(f"word{i:02d}" for i in range(25))
    result = fallback_note_enrichment("Title", content)
    assert result.summary == " ".join(f"word{i:02d}" for i in range(20)) + "..."
    assert result.tags == ["word00", "word01", "word02", "word03", "word04"]
    assert result.key_topics == ["word00", "word01", "word02"]


def test_fallback_note_enrichment_short_words():
    """Test notes without long words still get a tag and topic."""
    result = fallback_note_enrichment("Hi", "ok go")
    assert result.summary == "ok go"
    assert result.tags == ["note"]
    assert result.key_topics == ["general"]


def test_fallback_document_insights():
    """Test heuristic document insights."""
    insights = fallback_document_insights("Alpha beta gamma. Second sentence here! Third?")
    assert insights.summary.startswith("Alpha beta gamma. Second sentence here. Third")
    assert insights.key_insights[0] == "Document contains 7 words"
    assert insights.topic_labels == ["alpha", "gamma", "second"]


def test_prompt_document_text_truncates():
    """Test long documents are truncated for the prompt."""
    text = "x" * 15001
    truncated = prompt_document_text(text)
    assert truncated.endswith("...[truncated]")
    assert len(truncated) == 15000 + len("...[truncated]")
    assert prompt_document_text("short") == "short"


@pytest.mark.asyncio
async def test_enrich_note_clears_stale_embedding(session: Session, test_note, fake_llm, fake_embedder):
    """Test a failed embedding does not leave an outdated vector behind."""
    test_note.embedding = serialize_vector([1.0, 0.0])
    session.add(test_note)
    session.commit()

    note = await EnrichmentService(session, fake_llm, fake_embedder).enrich_note(test_note)
    assert note.enrichment_status == "completed"
    assert note.embedding is None


@pytest.mark.asyncio
async def test_enrich_note_stores_embedding(session: Session, test_user, fake_llm, fake_embedder):
    """Test the embedding is computed from the enriched note."""
    fake_llm.answers.append('{"summary": "S", "tags": ["t"], "key_topics": ["k"]}')
    fake_embedder.default = [0.6, 0.8]
    note = Note(user_id=test_user.id, title="T", content="C", tags=["work"])
    session.add(note)
    session.commit()

    note = await EnrichmentService(session, fake_llm, fake_embedder).enrich_note(note)
    assert note.tags == ["work", "t"]
    assert fake_embedder.calls == [note_searchable_text(note)]
    assert deserialize_vector(note.embedding).tolist() == pytest.approx([0.6, 0.8])


@pytest.mark.asyncio
async def test_backfill_paces_calls(session: Session, test_user, fake_llm, fake_embedder):
    """Test backfill sleeps between provider calls and skips short documents."""
    fake_embedder.default = [1.0, 0.0]
    notes = [Note(user_id=test_user.id, title=f"Note {i}") for i in range(3)]
    session.add_all(notes)
    session.commit()
    session.refresh(notes[0])
    session.add(
        Document(
            user_id=test_user.id,
            note_id=notes[0].id,
            file_name="a",
            file_path="a",
        )
    )
    session.commit()

    sleeps: list[float] = []

    async def record_sleep(seconds: float) -> None:
        sleeps.append(seconds)

    report = await EnrichmentService(session, fake_llm, fake_embedder).backfill_embeddings(
        test_user.id, delay_seconds=0.1, sleep=record_sleep
    )
    assert report["notes_processed"] == 3
    assert report["documents_failed"] == 1
    assert report["errors"][0].endswith("not enough text to embed")
    assert sleeps == [0.1, 0.1]
    assert report["success"] is False
