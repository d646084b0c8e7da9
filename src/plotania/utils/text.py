"""Small text helpers for word counts and UI messages."""

from __future__ import annotations


def word_count(text: str) -> int:
    """Count whitespace-delimited tokens."""
    return len(text.split())


def word_diff(original: str, revised: str) -> int:
    """Word-count delta between a revision and its original (cosmetic only)."""
    return word_count(revised) - word_count(original)


def clip(text: str | None, max_len: int = 120) -> str:
    """Collapse whitespace and cut ``text`` to ``max_len`` characters with an ellipsis."""
    collapsed = " ".join((text or "").split())
    if len(collapsed) <= max_len:
        return collapsed
    return collapsed[: max_len - 1] + "…"
