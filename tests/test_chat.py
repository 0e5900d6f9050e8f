"""Tests for note chat history and Q&A."""

from fastapi.testclient import TestClient

from smart_notes.services.chat_service import Turn, build_qa_prompt
from smart_notes.utils.exceptions import RateLimitExceeded


def test_chat_history_roundtrip(client: TestClient, auth_headers, test_note):
    """Test saving, listing and clearing chat history."""
    url = f"/api/notes/{test_note.id}/chat"
    response = client.post(
        url,
        headers=auth_headers,
        json={
            "messages": [
                {"role": "user", "content": "What is this?", "timestamp": "2024-01-01T10:00:00Z"},
                {"role": "assistant", "content": "A note.", "timestamp": "2024-01-01T10:00:05Z"},
            ]
        },
    )
    assert response.status_code == 200
    assert response.json() == {"success": True, "saved": 2}

    history = client.get(url, headers=auth_headers).json()["chat_history"]
    assert [m["role"] for m in history] == ["user", "assistant"]
    assert history[1]["content"] == "A note."

    response = client.delete(url, headers=auth_headers)
    assert response.status_code == 200
    assert client.get(url, headers=auth_headers).json()["chat_history"] == []


def test_chat_invalid_role(client: TestClient, auth_headers, test_note):
    """Test only user and assistant roles are accepted."""
    response = client.post(
        f"/api/notes/{test_note.id}/chat",
        headers=auth_headers,
        json={"messages": [{"role": "system", "content": "x"}]},
    )
    assert response.status_code == 400


def test_chat_other_users_note(client: TestClient, other_headers, test_note):
    """Test another user's note history is not found."""
    response = client.get(f"/api/notes/{test_note.id}/chat", headers=other_headers)
    assert response.status_code == 404


def test_qa_answer(client: TestClient, auth_headers, test_note, fake_llm):
    """Test a question is answered from the note context."""
    fake_llm.answers.append("  It is about Python.  ")
    response = client.post(
        f"/api/notes/{test_note.id}/qa",
        headers=auth_headers,
        json={
            "question": "What is this note about?",
            "chat_history": [{"role": "user", "content": "Earlier question"}],
        },
    )
    assert response.status_code == 200
    data = response.json()
    assert data["answer"] == "  It is about Python.  "
    assert data["note_id"] == test_note.id
    prompt = fake_llm.prompts[0]
    assert "Note Title: Python programming" in prompt
    assert "User: Earlier question" in prompt
    assert "User question: What is this note about?" in prompt


def test_qa_rate_limited(client: TestClient, auth_headers, test_note, fake_llm):
    """Test provider rate limiting surfaces as 429 with a friendly message."""
    fake_llm.answers.append(RateLimitExceeded())
    response = client.post(
        f"/api/notes/{test_note.id}/qa",
        headers=auth_headers,
        json={"question": "Summarize"},
    )
    assert response.status_code == 429
    assert "busy" in response.json()["detail"]


def test_qa_provider_unavailable(client: TestClient, auth_headers, test_note):
    """Test other provider failures are a bad gateway."""
    response = client.post(
        f"/api/notes/{test_note.id}/qa",
        headers=auth_headers,
        json={"question": "Summarize"},
    )
    assert response.status_code == 502


def test_qa_blank_question(client: TestClient, auth_headers, test_note):
    """Test an empty question is rejected."""
    response = client.post(
        f"/api/notes/{test_note.id}/qa", headers=auth_headers, json={"question": ""}
    )
    assert response.status_code == 400


def test_qa_prompt_keeps_last_five_turns(test_note):
    """Test only the most recent turns are included in the prompt."""
    history = [Turn(role="user", content=f"turn {i}") for i in range(8)]
    prompt = build_qa_prompt(test_note, "next?", history)
    assert "turn 2" not in prompt
    assert "turn 3" in prompt
    assert "turn 7" in prompt
