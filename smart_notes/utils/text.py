"""Deterministic text heuristics used when the AI provider is unavailable."""

import re

STOP_WORDS = frozenset(
    {
        "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for",
        "of", "with", "is", "are", "was", "were", "this", "that", "these",
        "those", "from", "have", "has", "been", "about", "there", "their",
        "which", "would", "could", "should",
    }
)

_NON_WORD = re.compile(r"[^a-z0-9-]")
_SENTENCE_SPLIT = re.compile(r"[.!?]+")


def normalize_word(word: str) -> str:
    """Lowercase a word and strip everything but letters, digits and dashes."""
    return _NON_WORD.sub("", word.lower()).strip("-")


def meaningful_words(text: str, min_length: int = 5) -> list[str]:
    """
    Unique normalized words of at least min_length characters, in order.

    Stop words are skipped.
    """
    seen: set[str] = set()
    words = []
    for raw in text.split():
        word = normalize_word(raw)
        if len(word) < min_length or word in STOP_WORDS or word in seen:
            continue
        seen.add(word)
        words.append(word)
    return words


def leading_words(text: str, count: int) -> str:
    """First count words of text, with an ellipsis when truncated."""
    words = text.split()
    summary = " ".join(words[:count])
    if len(words) > count:
        summary += "..."
    return summary


def leading_sentences(text: str, count: int = 3, max_chars: int = 200) -> str:
    """First sentences of text joined back together, capped at max_chars."""
    sentences = [s.strip() for s in _SENTENCE_SPLIT.split(text) if s.strip()]
    summary = ". ".join(sentences[:count])[:max_chars]
    if summary and len(text) > max_chars:
        summary += "..."
    return summary


def merge_unique(*groups: list[str]) -> list[str]:
    """Concatenate lists, dropping case-insensitive duplicates and blanks."""
    seen: set[str] = set()
    merged = []
    for group in groups:
        for item in group or []:
            value = item.strip()
            key = value.lower()
            if not value or key in seen:
                continue
            seen.add(key)
            merged.append(value)
    return merged


def contains(haystack: str | None, needle: str) -> bool:
    """Case-insensitive substring test tolerant of None."""
    if not haystack:
        return False
    return needle.lower() in haystack.lower()


def any_contains(values: list[str] | None, needle: str) -> bool:
    """True when any value contains needle, case-insensitively."""
    return any(contains(value, needle) for value in values or [])
