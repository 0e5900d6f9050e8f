"""Utility modules."""

import json

from smart_notes.utils.exceptions import (
    AuthError,
    NoAnswerError,
    NotFoundError,
    PersistenceError,
    ProviderError,
    RateLimitExceeded,
    SmartNotesException,
    ValidationError,
)

PALETTE = ["lavender", "mint", "peach", "sky", "rose"]

DEFAULT_NOTEBOOKS = [
    {"id": "personal", "label": "Personal", "color": "lavender"},
    {"id": "work", "label": "Work", "color": "mint"},
    {"id": "ideas", "label": "Ideas", "color": "peach"},
]

__all__ = [
    "AuthError",
    "NoAnswerError",
    "NotFoundError",
    "PersistenceError",
    "ProviderError",
    "RateLimitExceeded",
    "SmartNotesException",
    "ValidationError",
    "PALETTE",
    "DEFAULT_NOTEBOOKS",
    "get_custom_notebooks",
]


def get_custom_notebooks(custom_notebooks_json: str) -> list[dict]:
    """
    Parse stored custom notebooks JSON.

    Args:
        custom_notebooks_json: JSON array of {id, label, color}

    Returns:
        List of notebook dicts (empty on malformed input)
    """
    try:
        notebooks = json.loads(custom_notebooks_json)
    except json.JSONDecodeError:
        return []
    if not isinstance(notebooks, list):
        return []
    return [nb for nb in notebooks if isinstance(nb, dict) and "id" in nb]
