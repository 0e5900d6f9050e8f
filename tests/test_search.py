"""Tests for search endpoints."""

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from smart_notes.models import Document, Note
from smart_notes.services.search_service import SearchService, document_score, note_score
from smart_notes.utils.exceptions import ValidationError
from smart_notes.utils.vector import serialize_vector


@pytest.fixture(name="embedded_notes")
def embedded_notes_fixture(session: Session, test_user, test_note) -> dict[str, Note]:
    """Notes with two-dimensional embeddings and a document on the first."""
    test_note.embedding = serialize_vector([1.0, 0.0])
    unrelated = Note(
        user_id=test_user.id,
        title="Sourdough bread",
        content="Feed the starter twice a day",
        embedding=serialize_vector([0.0, 1.0]),
    )
    session.add_all([test_note, unrelated])
    session.commit()

    document = Document(
        user_id=test_user.id,
        note_id=test_note.id,
        file_name="python-guide.txt",
        file_path="/tmp/python-guide.txt",
        file_size=42,
        summary="A guide to typing in Python",
        topic_labels=["technical"],
        embedding=serialize_vector([0.8, 0.6]),
        enrichment_status="completed",
    )
    session.add(document)
    session.commit()
    return {"python": test_note, "bread": unrelated}


def test_search_requires_auth(client: TestClient):
    """Test that search requires authentication."""
    response = client.post(
        "/api/search",
        json={"query": "test"},
    )
    assert response.status_code == 401


def test_note_score_weights(test_note):
    """Test each matching field adds its weight."""
    # title 10 + key topic 6 + summary 5 + content 3
    assert note_score(test_note, "PYTHON") == 24
    assert note_score(test_note, "work") == 7
    assert note_score(test_note, "missing") == 0


def test_document_score_weights():
    """Test document field weights."""
    document = Document(
        user_id=1,
        note_id=1,
        file_name="report.pdf",
        file_path="x",
        summary="Quarterly report",
        key_insights=["Revenue grew"],
        topic_labels=["finance"],
        extracted_text="The report covers revenue",
    )
    assert document_score(document, "report") == 10 + 8 + 4
    assert document_score(document, "revenue") == 6 + 4
    assert document_score(document, "finance") == 7


def test_lexical_search(client: TestClient, auth_headers, embedded_notes):
    """Test lexical search covers notes and documents, best first."""
    response = client.post("/api/search", headers=auth_headers, json={"query": "python"})
    assert response.status_code == 200
    data = response.json()
    assert data["fallback"] is False
    assert data["counts"] == {"notes": 1, "documents": 1, "total": 2}
    note, document = data["results"]
    assert note["type"] == "note"
    assert note["score"] == 24
    assert document["type"] == "document"
    assert document["note_title"] == "Python programming"
    # file name 10 + summary 8
    assert document["score"] == 18


def test_lexical_search_blank_query(session: Session, test_user):
    """Test a blank query is rejected."""
    with pytest.raises(ValidationError):
        SearchService(session).lexical_search(test_user.id, "   ")


def test_lexical_search_blank_query_endpoint(client: TestClient, auth_headers):
    """Test a blank query is a bad request."""
    response = client.post("/api/search", headers=auth_headers, json={"query": " "})
    assert response.status_code == 400


def test_lexical_search_other_user(client: TestClient, other_headers, embedded_notes):
    """Test search never returns another user's records."""
    data = client.post("/api/search", headers=other_headers, json={"query": "python"}).json()
    assert data["results"] == []


def test_fast_search_ranks_by_embedding(
    client: TestClient, auth_headers, embedded_notes, fake_embedder
):
    """Test fast search returns notes above the similarity threshold."""
    fake_embedder.vectors["typing"] = [1.0, 0.0]
    data = client.post("/api/search/fast", headers=auth_headers, json={"query": "typing"}).json()
    assert data["fallback"] is False
    assert [r["id"] for r in data["results"]] == [embedded_notes["python"].id]
    assert data["results"][0]["score"] == pytest.approx(1.0)
    assert data["counts"]["documents"] == 0


def test_fast_search_fallback(client: TestClient, auth_headers, embedded_notes):
    """Test fast search falls back to text matching when embedding fails."""
    data = client.post("/api/search/fast", headers=auth_headers, json={"query": "sourdough"}).json()
    assert data["fallback"] is True
    assert [r["title"] for r in data["results"]] == ["Sourdough bread"]


def test_semantic_search_notes_and_documents(
    client: TestClient, auth_headers, embedded_notes, fake_embedder
):
    """Test semantic search merges notes and documents by score."""
    fake_embedder.vectors["static typing"] = [1.0, 0.0]
    response = client.post(
        "/api/search/semantic", headers=auth_headers, json={"query": "static typing"}
    )
    assert response.status_code == 200
    data = response.json()
    assert data["fallback"] is False
    assert [r["type"] for r in data["results"]] == ["note", "document"]
    assert data["results"][0]["score"] == pytest.approx(1.0, abs=1e-5)
    assert data["results"][1]["score"] == pytest.approx(0.8, abs=1e-5)
    assert data["results"][1]["note_title"] == "Python programming"


def test_semantic_search_falls_back_without_matches(
    client: TestClient, auth_headers, embedded_notes, fake_embedder
):
    """Test lexical results are returned when nothing is similar enough."""
    fake_embedder.vectors["python"] = [-1.0, -1.0]
    data = client.post(
        "/api/search/semantic", headers=auth_headers, json={"query": "python"}
    ).json()
    assert data["fallback"] is True
    assert data["counts"]["notes"] == 1


def test_semantic_search_falls_back_on_provider_error(
    client: TestClient, auth_headers, embedded_notes
):
    """Test lexical results are returned when the query cannot be embedded."""
    data = client.post(
        "/api/search/semantic", headers=auth_headers, json={"query": "bread"}
    ).json()
    assert data["fallback"] is True
    assert data["results"][0]["title"] == "Sourdough bread"


def test_semantic_search_python_ranking(session: Session, embedded_notes, fake_embedder):
    """Test the in-Python ranking used when the SQL match is unavailable."""
    service = SearchService(session, fake_embedder)
    notes = service._notes_with_embeddings(embedded_notes["python"].user_id)
    ranked = service._rank_records([0.0, 1.0], notes)
    assert ranked == [(embedded_notes["bread"].id, pytest.approx(1.0))]
