from __future__ import annotations

import re

_NUMBERED_LINE = re.compile(r"^\s*\d+\.\s*(.*)$")
# Line-leading markdown bullets, sentence ends followed by whitespace,
# semicolons, or inline bullet glyphs.
_DEGRADED_SPLIT = re.compile(r"^[ \t]*[-*][ \t]+|(?<=[.!?])\s+|;|[•●▪◦‣]", re.MULTILINE)
_LEADING_BULLET = re.compile(r"^[-*][ \t]+")
_BARE_MARKER = re.compile(r"^\d+\.?$")
_QUOTES = "\"'“”"


def split_sentences(text: str) -> list[str]:
    """Recovery path for prose that ignored the requested list format."""
    pieces = (_LEADING_BULLET.sub("", p.strip()).strip() for p in _DEGRADED_SPLIT.split(text or ""))
    return [p for p in pieces if p and not _BARE_MARKER.match(p)]


def parse_numbered_list(text: str) -> list[str]:
    """Split generated text into ordered items.

    Lines starting with ``N.`` open a new item; other non-blank lines are
    joined onto the item in progress. A marker with nothing after it still
    yields an (empty) item when another marker follows, so callers should
    drop empties. With one item or fewer, the original text is re-split on
    sentence boundaries instead.
    """
    if not text:
        return []

    items: list[str] = []
    current: str | None = None
    for line in text.splitlines():
        match = _NUMBERED_LINE.match(line)
        if match:
            if current is not None:
                items.append(current.strip())
            current = match.group(1)
            continue
        stripped = line.strip()
        if not stripped:
            continue
        current = f"{current or ''} {stripped}".strip()

    if current is not None and current.strip():
        items.append(current.strip())

    if len(items) <= 1:
        return split_sentences(text)
    return items


def clean_title(text: str) -> str:
    lines = (text or "").strip().splitlines()
    if not lines:
        return ""
    return lines[0].strip().strip(_QUOTES).strip()


def fallback_title(item: str, limit: int = 80) -> str:
    lines = (item or "").strip().splitlines()
    first = lines[0].strip() if lines else ""
    return first[:limit]
