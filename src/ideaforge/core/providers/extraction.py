"""Response-shape normalization.

Each backend declares an ordered tuple of extraction strategies. A strategy is
a pure function ``payload -> str | None``; the first non-empty string wins.
When nothing matches, the payload itself is serialized so callers always get
text back.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

ExtractionStrategy = Callable[[Any], "str | None"]

PathKey = str | int


def dig(payload: Any, *path: PathKey) -> Any | None:
    node = payload
    for key in path:
        if isinstance(key, int):
            if not isinstance(node, list) or not -len(node) <= key < len(node):
                return None
            node = node[key]
        else:
            if not isinstance(node, dict):
                return None
            node = node.get(key)
        if node is None:
            return None
    return node


def text_at(*path: PathKey) -> ExtractionStrategy:
    def _strategy(payload: Any) -> str | None:
        value = dig(payload, *path)
        if isinstance(value, str) and value:
            return value
        return None

    _strategy.__name__ = "text_at_" + "_".join(str(p) for p in path)
    return _strategy


def extract_first(payload: Any, strategies: tuple[ExtractionStrategy, ...]) -> str | None:
    for strategy in strategies:
        try:
            value = strategy(payload)
        except (AttributeError, IndexError, KeyError, TypeError):
            continue
        if isinstance(value, str) and value:
            return value
    return None


def serialize(payload: Any) -> str:
    try:
        return json.dumps(payload, ensure_ascii=False)
    except (TypeError, ValueError):
        return str(payload)


def decode(body_text: str) -> tuple[bool, Any]:
    try:
        return True, json.loads(body_text)
    except (RecursionError, ValueError):
        return False, None


def normalize_payload(payload: Any, strategies: tuple[ExtractionStrategy, ...]) -> str:
    found = extract_first(payload, strategies)
    if found is not None:
        return found
    return serialize(payload)


def normalize_body(body_text: str, strategies: tuple[ExtractionStrategy, ...]) -> str:
    ok, payload = decode(body_text)
    if not ok:
        return body_text
    return normalize_payload(payload, strategies)
