"""Tests for vector serialization and cosine ranking."""

import numpy as np
import pytest

from smart_notes.utils.vector import (
    cosine_similarity,
    deserialize_vector,
    rank,
    serialize_vector,
    vector_dimensions,
)


def test_serialize_vector_is_float32():
    """Test vectors are stored as float32 bytes."""
    blob = serialize_vector([0.5, -1.0, 2.0])
    assert len(blob) == 12
    assert vector_dimensions(blob) == 3
    np.testing.assert_allclose(deserialize_vector(blob), [0.5, -1.0, 2.0])


def test_deserialize_malformed_blob():
    """Test missing or truncated blobs deserialize to None."""
    assert deserialize_vector(None) is None
    assert deserialize_vector(b"") is None
    assert deserialize_vector(b"\x00\x01\x02") is None


def test_cosine_self_similarity():
    """Test a vector is perfectly similar to itself."""
    assert cosine_similarity([0.3, 0.4, 0.5], [0.3, 0.4, 0.5]) == pytest.approx(1.0)


def test_cosine_orthogonal_and_opposite():
    """Test orthogonal and opposite vectors."""
    assert cosine_similarity([1, 0], [0, 1]) == pytest.approx(0.0)
    assert cosine_similarity([1, 0], [-1, 0]) == pytest.approx(-1.0)


@pytest.mark.parametrize(
    "vec_a, vec_b",
    [
        ([0, 0], [1, 0]),
        ([1, 0], [1, 0, 0]),
        ([], []),
        (None, [1, 0]),
        ([float("nan"), 1], [1, 0]),
    ],
)
def test_cosine_degenerate_inputs_score_zero(vec_a, vec_b):
    """Test zero, mismatched, empty, missing and non-finite vectors score 0."""
    assert cosine_similarity(vec_a, vec_b) == 0.0


def test_rank_applies_threshold_and_order():
    """Test ranking drops scores at or below the threshold."""
    candidates = [
        ("orthogonal", [0.0, 1.0]),
        ("close", [0.9, 0.1]),
        ("exact", [1.0, 0.0]),
        ("missing", None),
    ]
    ranked = rank([1.0, 0.0], candidates, threshold=0.5, limit=10)
    assert [cid for cid, _ in ranked] == ["exact", "close"]
    assert ranked[0][1] == pytest.approx(1.0)


def test_rank_limit_and_stable_ties():
    """Test the limit and that equal scores keep fetch order."""
    candidates = [(i, [1.0, 0.0]) for i in range(5)]
    ranked = rank([2.0, 0.0], candidates, threshold=0.5, limit=3)
    assert [cid for cid, _ in ranked] == [0, 1, 2]


def test_rank_non_positive_limit():
    """Test a zero limit returns nothing."""
    assert rank([1.0, 0.0], [(1, [1.0, 0.0])], limit=0) == []
