"""
Typed accessors over untrusted hook payloads.

Payloads are whatever the CLI wrote to stdin: nested dicts, lists and
scalars with no guaranteed shape. Every accessor walks a path of dict keys
and list indexes and returns None when a step is missing or has the wrong
type, so callers never repeat isinstance checks.

Usage:
    get_string(payload, "llm_response", "candidates", 0, "finishReason")
    get_array(payload, "transcript")
"""
from typing import Any

import msgspec

from ai_notifier.config import fast_json_loads

PathKey = str | int


def get_path(data: Any, *path: PathKey) -> Any:
    """Walk path through dicts (str keys) and lists (int indexes)."""
    node = data
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


def get_string(data: Any, *path: PathKey) -> str | None:
    value = get_path(data, *path)
    return value if isinstance(value, str) else None


def get_text(data: Any, *path: PathKey) -> str | None:
    """Like get_string, but blank strings count as absent."""
    value = get_string(data, *path)
    return value if value and value.strip() else None


def get_object(data: Any, *path: PathKey) -> dict | None:
    value = get_path(data, *path)
    return value if isinstance(value, dict) else None


def get_array(data: Any, *path: PathKey) -> list | None:
    value = get_path(data, *path)
    return value if isinstance(value, list) else None


def first_text(data: Any, *keys: str) -> str | None:
    """First non-blank string among alternative top-level keys."""
    for key in keys:
        value = get_text(data, key)
        if value is not None:
            return value
    return None


def parse_payload(raw: bytes | str | None) -> dict | None:
    """Parse raw input into a payload dict.

    Malformed JSON, or JSON that is not an object, counts as no input.
    """
    if raw is None:
        return None
    raw = raw.strip()
    if not raw:
        return None
    try:
        data = fast_json_loads(raw)
    except msgspec.DecodeError:
        return None
    return data if isinstance(data, dict) else None
