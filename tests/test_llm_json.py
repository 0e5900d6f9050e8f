"""Tests for parsing JSON out of model answers."""

import pytest

from smart_notes.schemas.enrichment import ClusterPayload, NoteEnrichmentPayload
from smart_notes.utils.exceptions import ProviderError
from smart_notes.utils.llm_json import extract_json_object, parse_llm_json


@pytest.mark.parametrize(
    "answer",
    [
        '{"a": 1}',
        'Here you go:\n```json\n{"a": 1}\n```\nAnything else?',
        '```\n{"a": 1}\n```',
        'Result: {"a": 1} -- done',
    ],
)
def test_extract_json_object(answer):
    """Test objects are found inside fences and prose."""
    assert extract_json_object(answer) == {"a": 1}


@pytest.mark.parametrize("answer", ["no json here", '{"a": 1', "[1, 2]", '{"a": }'])
def test_extract_json_object_failures(answer):
    """Test unusable answers raise provider errors."""
    with pytest.raises(ProviderError):
        extract_json_object(answer)


def test_parse_llm_json_drops_blank_items():
    """Test blank and non-string list items are discarded."""
    payload = parse_llm_json(
        '{"summary": " Short ", "tags": ["a", "", 3, " b "], "extra": true}',
        NoteEnrichmentPayload,
    )
    assert payload.summary == "Short"
    assert payload.tags == ["a", "b"]
    assert payload.key_topics == []


def test_parse_llm_json_requires_summary():
    """Test a missing summary fails validation."""
    with pytest.raises(ProviderError):
        parse_llm_json('{"tags": ["a"]}', NoteEnrichmentPayload)


def test_cluster_payload_requires_clusters():
    """Test an empty cluster list is rejected."""
    with pytest.raises(ProviderError):
        parse_llm_json('{"clusters": []}', ClusterPayload)
