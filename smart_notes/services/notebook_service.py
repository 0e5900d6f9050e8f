"""Notebooks: default and user-defined tags with live note counts."""

import json
import logging
import re

from sqlmodel import Session, select

from smart_notes.database import commit
from smart_notes.models.user import UserSettings
from smart_notes.services.note_service import NoteService
from smart_notes.utils import DEFAULT_NOTEBOOKS, PALETTE, get_custom_notebooks
from smart_notes.utils.exceptions import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")


def notebook_id_for(name: str) -> str:
    """Lowercased name with whitespace runs replaced by dashes."""
    return _WHITESPACE.sub("-", name.strip().lower())


class NotebookService:
    """Manage a user's notebooks."""

    def __init__(self, session: Session):
        self.session = session

    def _get_settings(self, user_id: int) -> UserSettings:
        statement = select(UserSettings).where(UserSettings.user_id == user_id)
        user_settings = self.session.exec(statement).first()
        if not user_settings:
            user_settings = UserSettings(user_id=user_id)
            self.session.add(user_settings)
            commit(self.session)
            self.session.refresh(user_settings)
        return user_settings

    def list_notebooks(self, user_id: int) -> list[dict]:
        """
        Default notebooks followed by custom ones, each with a note count.

        Args:
            user_id: Owner user ID

        Returns:
            List of {id, label, color, count, custom} dicts
        """
        counts = NoteService(self.session).tag_counts(user_id)
        custom = get_custom_notebooks(self._get_settings(user_id).custom_notebooks)

        notebooks = [
            {**nb, "count": counts.get(nb["id"].lower(), 0), "custom": False}
            for nb in DEFAULT_NOTEBOOKS
        ]
        notebooks.extend(
            {
                "id": nb["id"],
                "label": nb.get("label", nb["id"]),
                "color": nb.get("color", PALETTE[0]),
                "count": counts.get(str(nb["id"]).lower(), 0),
                "custom": True,
            }
            for nb in custom
        )
        return notebooks

    def add_notebook(self, user_id: int, name: str) -> dict:
        """
        Add a custom notebook.

        Args:
            user_id: Owner user ID
            name: Display name

        Returns:
            The created notebook

        Raises:
            ValidationError: If the name is blank or the notebook already exists
        """
        label = name.strip()
        notebook_id = notebook_id_for(label)
        if not notebook_id:
            raise ValidationError("Notebook name is required")

        user_settings = self._get_settings(user_id)
        custom = get_custom_notebooks(user_settings.custom_notebooks)
        existing_ids = {nb["id"] for nb in DEFAULT_NOTEBOOKS} | {nb["id"] for nb in custom}
        if notebook_id in existing_ids:
            raise ValidationError(f"Notebook '{label}' already exists")

        notebook = {
            "id": notebook_id,
            "label": label,
            "color": PALETTE[len(custom) % len(PALETTE)],
        }
        custom.append(notebook)
        user_settings.custom_notebooks = json.dumps(custom)
        self.session.add(user_settings)
        commit(self.session)
        logger.info(f"User {user_id} added notebook '{notebook_id}'")
        return {**notebook, "count": 0, "custom": True}

    def remove_notebook(self, user_id: int, notebook_id: str) -> None:
        """
        Remove a custom notebook. Notes keep their tags.

        Raises:
            NotFoundError: If no custom notebook has this id
        """
        user_settings = self._get_settings(user_id)
        custom = get_custom_notebooks(user_settings.custom_notebooks)
        remaining = [nb for nb in custom if nb["id"] != notebook_id]
        if len(remaining) == len(custom):
            raise NotFoundError("Notebook")

        user_settings.custom_notebooks = json.dumps(remaining)
        self.session.add(user_settings)
        commit(self.session)
        logger.info(f"User {user_id} removed notebook '{notebook_id}'")
