"""Generic length capping that prefers line boundaries."""

from __future__ import annotations

TRUNCATION_MARKER = "\n\n// ... (content truncated)"

# Fallback length used when structural extraction fails or finds nothing
FALLBACK_LENGTH = 1000

# Cut at the last newline only if it keeps at least this share of the text
_LINE_BOUNDARY_RATIO = 0.8


def truncate_content(content: str, max_len: int) -> str:
    """Cap `content` at `max_len` characters, marker included.

    Text already within the limit is returned unchanged, so applying this
    twice with the same limit is a no-op.
    """
    if len(content) <= max_len:
        return content
    if max_len <= len(TRUNCATION_MARKER):
        return content[:max(max_len, 0)]

    budget = max_len - len(TRUNCATION_MARKER)
    truncated = content[:budget]
    last_newline = truncated.rfind("\n")
    if last_newline > budget * _LINE_BOUNDARY_RATIO:
        truncated = truncated[:last_newline]
    return truncated + TRUNCATION_MARKER
