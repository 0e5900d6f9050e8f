"""Vector serialization and similarity utilities."""

from collections.abc import Sequence
from typing import Hashable, TypeVar

import numpy as np

K = TypeVar("K", bound=Hashable)


def serialize_vector(vector: np.ndarray | list[float]) -> bytes:
    """
    Serialize a vector to bytes for storage in SQLite.

    Args:
        vector: Numpy array or list of floats

    Returns:
        Bytes representation of vector as float32
    """
    if isinstance(vector, list):
        vector = np.array(vector, dtype=np.float32)
    elif vector.dtype != np.float32:
        vector = vector.astype(np.float32)
    return vector.tobytes()


def deserialize_vector(blob: bytes | None) -> np.ndarray | None:
    """
    Deserialize float32 bytes back into a numpy array.

    Returns None for missing or malformed blobs.
    """
    if not blob or len(blob) % 4 != 0:
        return None
    return np.frombuffer(blob, dtype=np.float32)


def vector_dimensions(blob: bytes | None) -> int:
    """Number of float32 components stored in a blob."""
    if not blob:
        return 0
    return len(blob) // 4


def cosine_similarity(
    vec_a: np.ndarray | Sequence[float] | None,
    vec_b: np.ndarray | Sequence[float] | None,
) -> float:
    """
    Cosine similarity between two vectors.

    Vectors that are missing, empty, of different lengths, zero-magnitude
    or non-finite score 0.0.
    """
    if vec_a is None or vec_b is None:
        return 0.0

    a = np.asarray(vec_a, dtype=np.float64)
    b = np.asarray(vec_b, dtype=np.float64)
    if a.ndim != 1 or b.ndim != 1 or a.size == 0 or a.shape != b.shape:
        return 0.0

    norm_a = float(np.linalg.norm(a))
    norm_b = float(np.linalg.norm(b))
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0

    score = float(np.dot(a, b) / (norm_a * norm_b))
    if not np.isfinite(score):
        return 0.0
    return score


def rank(
    query_vector: np.ndarray | Sequence[float],
    candidates: Sequence[tuple[K, np.ndarray | Sequence[float] | None]],
    threshold: float = 0.5,
    limit: int = 10,
) -> list[tuple[K, float]]:
    """
    Rank candidates by cosine similarity to the query vector.

    Args:
        query_vector: Query embedding
        candidates: (id, vector) pairs in fetch order
        threshold: Scores at or below this value are discarded
        limit: Maximum entries returned

    Returns:
        (id, score) pairs ordered by score descending; ties keep fetch order
    """
    if limit <= 0:
        return []

    scored = [
        (candidate_id, cosine_similarity(query_vector, vector))
        for candidate_id, vector in candidates
    ]
    matches = [(cid, score) for cid, score in scored if score > threshold]
    # sorted() is stable, so equal scores keep their fetch order
    matches = sorted(matches, key=lambda item: item[1], reverse=True)
    return matches[:limit]
