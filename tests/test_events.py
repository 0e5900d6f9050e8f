"""Tests for the Server-Sent Events manager."""

import pytest

from smart_notes.utils.events import EventManager, format_event


def test_format_event():
    """Test SSE message encoding."""
    assert format_event("note-created", "7") == "event: note-created\ndata: 7\n\n"


@pytest.mark.asyncio
async def test_broadcast_without_subscribers():
    """Test broadcasting to a user with no open streams is a no-op."""
    manager = EventManager()
    assert await manager.broadcast(1, "note-created", "1") == 0


@pytest.mark.asyncio
async def test_subscribe_receives_user_events():
    """Test events reach only the subscribed user's streams."""
    manager = EventManager()
    stream = manager.subscribe(1)
    assert await anext(stream) == ": ping\n\n"
    assert manager.connection_count(1) == 1

    assert await manager.broadcast(2, "note-created", "9") == 0
    assert await manager.broadcast(1, "note-enriched-5", "completed") == 1
    assert await anext(stream) == "event: note-enriched-5\ndata: completed\n\n"

    await stream.aclose()
    assert manager.connection_count(1) == 0


def test_events_requires_auth(client):
    """Test the event stream requires authentication."""
    response = client.get("/api/events")
    assert response.status_code == 401
