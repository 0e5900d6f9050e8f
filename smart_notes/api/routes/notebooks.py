"""Notebook endpoints."""

from fastapi import APIRouter, status

from smart_notes.api.deps import CurrentUserIdDep, SessionDep
from smart_notes.schemas.notebooks import (
    NotebookCreate,
    NotebookListResponse,
    NotebookResponse,
)
from smart_notes.services.notebook_service import NotebookService

router = APIRouter(prefix="/api/notebooks", tags=["notebooks"])


@router.get("", response_model=NotebookListResponse)
def list_notebooks(session: SessionDep, user_id: CurrentUserIdDep) -> NotebookListResponse:
    """Default and custom notebooks with their note counts."""
    notebooks = NotebookService(session).list_notebooks(user_id)
    return NotebookListResponse(notebooks=[NotebookResponse(**nb) for nb in notebooks])


@router.post("", response_model=NotebookResponse, status_code=status.HTTP_201_CREATED)
def create_notebook(
    payload: NotebookCreate, session: SessionDep, user_id: CurrentUserIdDep
) -> NotebookResponse:
    """Add a custom notebook."""
    return NotebookResponse(**NotebookService(session).add_notebook(user_id, payload.name))


@router.delete("/{notebook_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_notebook(notebook_id: str, session: SessionDep, user_id: CurrentUserIdDep) -> None:
    """Remove a custom notebook. Notes keep their tags."""
    NotebookService(session).remove_notebook(user_id, notebook_id)
