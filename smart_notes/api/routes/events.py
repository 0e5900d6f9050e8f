"""Server-Sent Events stream of enrichment updates."""

from fastapi import APIRouter
from fastapi.responses import StreamingResponse

from smart_notes.api.deps import CurrentUserIdDep
from smart_notes.utils.events import event_manager

router = APIRouter(tags=["events"])


@router.get("/api/events")
async def events_endpoint(user_id: CurrentUserIdDep) -> StreamingResponse:
    """SSE endpoint for real-time updates."""
    return StreamingResponse(
        event_manager.subscribe(user_id),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",  # Disable buffering for Nginx
        },
    )
