"""Text normalization helpers shared by the extractors and models."""

from __future__ import annotations

import re

HORIZONTAL_SPACE_PATTERN = re.compile(r"[^\S\n]+")
NEWLINE_RUN_PATTERN = re.compile(r" ?\n[ \n]*")


def normalize_text(text: str) -> str:
    """Collapse whitespace runs to one space and newline runs to one newline, then trim.

    Applying it to already-normalized text returns the text unchanged.
    """
    collapsed = HORIZONTAL_SPACE_PATTERN.sub(" ", text)
    collapsed = NEWLINE_RUN_PATTERN.sub("\n", collapsed)
    return collapsed.strip()


def count_words(text: str) -> int:
    return len(text.split())


def make_preview(text: str, max_length: int = 200) -> str:
    """Return the first ``max_length`` characters, suffixed with an ellipsis when cut."""
    trimmed = text.strip()
    if len(trimmed) <= max_length:
        return trimmed
    return trimmed[:max_length] + "..."
