"""
Transcript utilities - find the latest assistant text for a response preview.

Search order, first non-empty hit wins:
1. An inline response object in the payload (string, {"text": ...}, or
   Gemini candidates -> content -> parts -> text)
2. An embedded transcript/messages array in the payload
3. The transcript file referenced by transcript_path

Transcripts are append-ordered, so scans always run from the end and take
the last assistant turn.

Usage:
    from ai_notifier.transcript import extract_response_text
    text = extract_response_text(payload, inline_keys=("llm_response",))
"""
from pathlib import Path
from typing import Any, Iterable, Iterator

from ai_notifier.config import Limits
from ai_notifier.notifier_utils.io import iter_jsonl, safe_load_json
from ai_notifier.payload import get_array, get_object, get_path, get_string, get_text

ASSISTANT_ROLES = frozenset({"assistant", "model", "gemini"})
EMBEDDED_TRANSCRIPT_KEYS = ("transcript", "messages")


def _is_text(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def block_text(block: Any) -> str | None:
    """Text of one content block: a bare string or a {"type": "text"} dict."""
    if _is_text(block):
        return block
    if isinstance(block, dict):
        block_type = block.get("type")
        if block_type not in (None, "text", "output_text"):
            return None
        text = block.get("text")
        if _is_text(text):
            return text
    return None


def content_text(content: Any) -> str | None:
    """Last text block of a content value (string or list of blocks)."""
    if _is_text(content):
        return content
    if isinstance(content, list):
        for block in reversed(content):
            text = block_text(block)
            if text:
                return text
    return None


def is_assistant_entry(entry: Any) -> bool:
    if not isinstance(entry, dict):
        return False
    for role in (
        get_string(entry, "type"),
        get_string(entry, "role"),
        get_string(entry, "message", "role"),
    ):
        if role and role.lower() in ASSISTANT_ROLES:
            return True
    return False


def entry_text(entry: dict) -> str | None:
    """Last text content of a transcript entry, whatever its layout."""
    for value in (
        get_path(entry, "message", "content"),
        get_path(entry, "content"),
        get_path(entry, "parts"),
        get_path(entry, "message", "parts"),
        get_path(entry, "text"),
    ):
        text = content_text(value)
        if text:
            return text
    return None


def last_assistant_text(entries: Iterable) -> str | None:
    """Scan entries (newest first) for the first assistant turn with text."""
    for entry in entries:
        if is_assistant_entry(entry):
            text = entry_text(entry)
            if text:
                return text
    return None


# =============================================================================
# Inline response objects
# =============================================================================

def response_object_text(value: Any) -> str | None:
    """Text of an inline response: string, {"text": ...} or Gemini candidates."""
    if _is_text(value):
        return value
    if not isinstance(value, dict):
        return None
    text = get_text(value, "text")
    if text:
        return text
    candidate = get_object(value, "candidates", 0)
    parts = get_array(candidate, "content", "parts")
    if parts:
        texts = [t for t in (block_text(part) for part in parts) if t]
        if texts:
            return "".join(texts)
    return None


# =============================================================================
# Transcript files
# =============================================================================

def iter_transcript_file(path: str | Path) -> Iterator:
    """Yield entries of a transcript file, newest first.

    Handles JSONL (Claude) and whole-document JSON (list, or object with
    a "messages" array, as Gemini writes).
    """
    path = Path(path)
    if path.suffix != ".jsonl":
        document = safe_load_json(path)
        if isinstance(document, dict):
            document = get_array(document, "messages")
        if isinstance(document, list):
            yield from reversed(document)
            return
    yield from iter_jsonl(path, tail=Limits.TRANSCRIPT_TAIL, reverse=True)


# =============================================================================
# Combined search
# =============================================================================

def extract_response_text(payload: dict | None, inline_keys: Iterable[str] = ()) -> str | None:
    """Latest response text from the payload, searching in priority order."""
    if not isinstance(payload, dict):
        return None

    for key in inline_keys:
        text = response_object_text(payload.get(key))
        if text:
            return text

    for key in EMBEDDED_TRANSCRIPT_KEYS:
        entries = get_array(payload, key)
        if entries:
            text = last_assistant_text(reversed(entries))
            if text:
                return text

    transcript_path = get_text(payload, "transcript_path")
    if transcript_path:
        return last_assistant_text(iter_transcript_file(transcript_path))
    return None

