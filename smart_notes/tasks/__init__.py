"""Background tasks module."""

from smart_notes.tasks.processing_tasks import (
    enrich_note_in_background,
    extract_document_in_background,
)

__all__ = ["enrich_note_in_background", "extract_document_in_background"]
