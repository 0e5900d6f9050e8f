"""Tests for document upload and extraction."""

from pathlib import Path

import pymupdf
import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from smart_notes.config import settings
from smart_notes.models import Document, Note
from smart_notes.services.document_service import file_extension, read_document_text

TEXT = b"Meeting notes about project deadlines and budget planning for next quarter."


def upload(client: TestClient, headers, note_id: int, name: str, data: bytes, mime: str):
    return client.post(
        f"/api/notes/{note_id}/documents",
        headers=headers,
        files={"file": (name, data, mime)},
    )


def test_upload_text_document(
    client: TestClient, auth_headers, test_note, session: Session
):
    """Test a text upload is stored and extracted with the fallback insights."""
    response = upload(client, auth_headers, test_note.id, "minutes.txt", TEXT, "text/plain")
    assert response.status_code == 202
    created = response.json()
    assert created["enrichment_status"] == "pending"
    assert created["file_size"] == len(TEXT)
    assert Path(created["file_path"]).read_bytes() == TEXT

    data = client.get(f"/api/documents/{created['id']}", headers=auth_headers).json()
    assert data["enrichment_status"] == "completed"
    assert data["topic_labels"] == ["meeting", "notes", "project"]
    assert data["key_insights"][0] == f"Document contains {len(TEXT.split())} words"
    assert data["has_embedding"] is False

    document = session.get(Document, created["id"])
    session.refresh(document)
    assert document.extracted_text == TEXT.decode()

    # Topic labels are merged into the parent note
    note = session.get(Note, test_note.id)
    session.refresh(note)
    assert note.key_topics == ["python", "meeting", "notes", "project"]


def test_upload_list_and_delete(client: TestClient, auth_headers, test_note):
    """Test listing a note's documents and deleting one with its file."""
    created = upload(client, auth_headers, test_note.id, "a.md", TEXT, "text/markdown").json()

    listed = client.get(f"/api/notes/{test_note.id}/documents", headers=auth_headers).json()
    assert [d["id"] for d in listed["documents"]] == [created["id"]]

    response = client.delete(f"/api/documents/{created['id']}", headers=auth_headers)
    assert response.status_code == 200
    assert not Path(created["file_path"]).exists()
    response = client.get(f"/api/documents/{created['id']}", headers=auth_headers)
    assert response.status_code == 404


def test_upload_empty_file(client: TestClient, auth_headers, test_note):
    """Test an empty upload is rejected."""
    response = upload(client, auth_headers, test_note.id, "empty.txt", b"", "text/plain")
    assert response.status_code == 400


def test_upload_over_size_limit(client: TestClient, auth_headers, test_note, monkeypatch):
    """Test uploads larger than the configured limit are rejected unsaved."""
    monkeypatch.setattr(settings, "max_upload_bytes", 16)

    response = upload(client, auth_headers, test_note.id, "big.txt", b"x" * 17, "text/plain")
    assert response.status_code == 400
    assert response.json()["detail"] == "File exceeds the upload limit of 16 bytes"
    assert not any(Path(settings.upload_dir).rglob("*.txt"))

    response = upload(client, auth_headers, test_note.id, "ok.txt", b"x" * 16, "text/plain")
    assert response.status_code == 202


def test_upload_to_other_users_note(client: TestClient, other_headers, test_note):
    """Test uploads require owning the note."""
    response = upload(client, other_headers, test_note.id, "x.txt", TEXT, "text/plain")
    assert response.status_code == 404


def test_upload_too_little_text(client: TestClient, auth_headers, test_note):
    """Test a document without enough text is marked failed."""
    created = upload(client, auth_headers, test_note.id, "tiny.txt", b"hi", "text/plain").json()
    data = client.get(f"/api/documents/{created['id']}", headers=auth_headers).json()
    assert data["enrichment_status"] == "failed"
    assert data["error_message"] == "No text could be extracted from the file"


def test_upload_unsupported_type(client: TestClient, auth_headers, test_note):
    """Test unsupported file types are stored with placeholder insights."""
    created = upload(
        client, auth_headers, test_note.id, "photo.PNG", b"\x89PNG\r\n", "image/png"
    ).json()
    data = client.get(f"/api/documents/{created['id']}", headers=auth_headers).json()
    assert data["enrichment_status"] == "completed"
    assert data["topic_labels"] == ["png", "stored"]
    assert "not supported" in data["summary"]


def test_upload_unreadable_pdf(client: TestClient, auth_headers, test_note):
    """Test a PDF without readable text gets the PDF placeholder."""
    created = upload(
        client, auth_headers, test_note.id, "scan.pdf", b"not really a pdf", "application/pdf"
    ).json()
    data = client.get(f"/api/documents/{created['id']}", headers=auth_headers).json()
    assert data["enrichment_status"] == "completed"
    assert data["topic_labels"] == ["pdf", "stored"]


def test_extract_endpoint_uses_model_answer(
    client: TestClient, auth_headers, test_note, fake_llm
):
    """Test explicit extraction with a model answer."""
    created = upload(client, auth_headers, test_note.id, "b.txt", TEXT, "text/plain").json()
    fake_llm.answers.append(
        '{"summary": "Budget meeting", "key_insights": ["Deadline moved"],'
        ' "topics": ["budget"], "topic_labels": ["finance"]}'
    )
    response = client.post(f"/api/documents/{created['id']}/extract", headers=auth_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["summary"] == "Budget meeting"
    assert data["topic_labels"] == ["finance"]
    assert TEXT.decode() in fake_llm.prompts[-1]


def test_file_extension():
    """Test extension normalization."""
    assert file_extension("Report.PDF") == "pdf"
    assert file_extension("archive.tar.gz") == "gz"
    assert file_extension("README") == ""


@pytest.mark.asyncio
async def test_read_pdf_text(tmp_path):
    """Test text is read from every PDF page."""
    path = tmp_path / "two-pages.pdf"
    pdf = pymupdf.open()
    for text in ("First page text", "Second page text"):
        page = pdf.new_page()
        page.insert_text((72, 72), text)
    pdf.save(path)
    pdf.close()

    extracted = await read_document_text(path, "pdf")
    assert "First page text" in extracted
    assert "Second page text" in extracted


@pytest.mark.asyncio
async def test_read_text_replaces_invalid_bytes(tmp_path):
    """Test undecodable bytes do not fail extraction."""
    path = tmp_path / "bad.txt"
    path.write_bytes(b"caf\xe9 menu")
    assert await read_document_text(path, "txt") == "caf\ufffd menu"
    assert await read_document_text(path, "docx") is None
