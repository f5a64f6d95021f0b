"""Case-insensitive substring matching, positional scoring, and snippets.

These helpers are shared by every search source. Matching is a plain
lower-cased substring test: no regex, no tokenization, no fuzziness.
"""

from __future__ import annotations

from collections.abc import Iterable

SNIPPET_MAX_LENGTH = 160

_ELLIPSIS = "..."


def find_match(haystack: str | None, needle: str) -> int | None:
    """Return the first index of ``needle`` in ``haystack`` ignoring case.

    A missing or empty haystack is simply no match.
    """
    if not haystack:
        return None
    index = haystack.lower().find(needle.lower())
    return index if index != -1 else None


def contains(haystack: str | None, needle: str) -> bool:
    return find_match(haystack, needle) is not None


def score_match(text: str | None, query: str) -> float:
    """Score one field: 0 without a match, otherwise 0.3-0.5.

    Earlier occurrences score higher within the band.
    """
    index = find_match(text, query)
    if index is None:
        return 0.0
    bonus = max(0.0, 1 - index / max(1, len(text)))
    return 0.3 + bonus * 0.2


def build_snippet(text: str, query: str, max_length: int = SNIPPET_MAX_LENGTH) -> str:
    """Extract an excerpt of ``text`` centred on the first query occurrence.

    The window starts a third of ``max_length`` before the match so the
    matched term stays visible in long lines. Ellipses mark truncation on
    either side. Without a match the head of the text is returned as-is.
    """
    index = find_match(text, query)
    if index is None:
        return text[:max_length]

    start = max(0, index - max_length // 3)
    end = min(len(text), start + max_length)
    prefix = _ELLIPSIS if start > 0 else ""
    suffix = _ELLIPSIS if end < len(text) else ""
    return f"{prefix}{text[start:end].strip()}{suffix}"


def best_snippet(texts: Iterable[str | None], query: str) -> str:
    """Snippet from the first candidate that contains the query.

    Falls back to the head of the first non-empty candidate.
    """
    candidates = list(texts)
    for text in candidates:
        if text and contains(text, query):
            return build_snippet(text, query)
    for text in candidates:
        if text:
            return text[:SNIPPET_MAX_LENGTH]
    return ""
