"""Excerpt extraction around literal query matches.

The excerpt is a heuristic that runs independently of scoring: it looks for
the raw query text, not for analyzed terms, so a document that matched only
through stemming gets its leading window without highlights.
"""

from __future__ import annotations

import re


DEFAULT_CONTEXT_CHARS = 400
DEFAULT_MARKER = "**"


def compile_query_pattern(query: str) -> re.Pattern[str] | None:
    """Return a case-insensitive literal pattern for ``query``, or None when blank."""
    if not query.strip():
        return None
    return re.compile(re.escape(query), re.IGNORECASE)


def excerpt_window(
    content: str,
    pattern: re.Pattern[str] | None,
    *,
    context_chars: int = DEFAULT_CONTEXT_CHARS,
    query_length: int = 0,
) -> tuple[int, int]:
    """Return ``(start, end)`` of the window around the first match.

    Without a match the window starts at offset 0 and ends where a match at
    offset -1 would have ended: ``query_length + context_chars - 1``.
    """
    match = pattern.search(content) if pattern is not None else None
    if match is None:
        return 0, max(0, min(len(content), query_length + context_chars - 1))
    start = max(0, match.start() - context_chars)
    end = min(len(content), match.end() + context_chars)
    return start, end


def highlight_matches(text: str, pattern: re.Pattern[str] | None, marker: str = DEFAULT_MARKER) -> str:
    """Wrap every non-overlapping match of ``pattern`` in ``marker``."""
    if pattern is None or not text:
        return text
    return pattern.sub(lambda match: f"{marker}{match.group(0)}{marker}", text)


def build_excerpt(
    content: str,
    query: str,
    *,
    context_chars: int = DEFAULT_CONTEXT_CHARS,
    marker: str = DEFAULT_MARKER,
) -> str:
    """Build a highlighted excerpt of ``content`` for ``query``.

    Args:
        content: Raw document content.
        query: The raw query string, matched literally and case-insensitively.
        context_chars: Characters kept on each side of the first match.
        marker: Emphasis marker wrapped around each occurrence.

    Returns:
        The window of ``content`` around the first occurrence, with every
        occurrence inside it highlighted.
    """
    if not content:
        return ""
    if context_chars < 0:
        raise ValueError("context_chars must be non-negative")

    pattern = compile_query_pattern(query)
    start, end = excerpt_window(content, pattern, context_chars=context_chars, query_length=len(query))
    return highlight_matches(content[start:end], pattern, marker)
