"""
File I/O utilities with graceful error handling.

Includes:
- JSON I/O (safe_load_json, atomic_write_bytes, atomic_write_json)
- JSONL iteration (iter_jsonl)
- Safe file operations (safe_mtime)
"""
import os
import tempfile
from pathlib import Path
from typing import Iterator

import msgspec

from ai_notifier.config import fast_json_loads, fast_json_dumps

PathLike = str | Path


# =============================================================================
# JSONL Utilities
# =============================================================================

def iter_jsonl(
    path: PathLike,
    tail: int | None = None,
    reverse: bool = False,
) -> Iterator:
    """Iterate over a JSONL file, yielding each parsed line.

    Lines that fail to parse are skipped.

    Args:
        path: Path to JSONL file
        tail: If set, only consider the last N lines (like tail -n)
        reverse: Yield newest line first

    Example:
        for entry in iter_jsonl(transcript_path, tail=100, reverse=True):
            if entry.get("type") == "assistant":
                return entry
    """
    try:
        with open(path, "rb") as f:
            lines = f.readlines()
    except (OSError, ValueError):
        return

    if tail:
        lines = lines[-tail:]
    if reverse:
        lines.reverse()

    for line in lines:
        line = line.strip()
        if not line:
            continue
        try:
            yield fast_json_loads(line)
        except msgspec.DecodeError:
            continue


# =============================================================================
# JSON Utilities
# =============================================================================

def safe_load_json(path: PathLike, default=None):
    """Load JSON file with graceful fallback."""
    try:
        return fast_json_loads(Path(path).read_bytes())
    except (OSError, msgspec.DecodeError):
        return default


def atomic_write_bytes(path: PathLike, data: bytes) -> bool:
    """
    Write bytes atomically using temp file + rename.
    Concurrent writers of the same path: last rename wins.
    """
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, temp_path = tempfile.mkstemp(
            dir=path.parent, prefix=f".{path.stem}_", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(temp_path, path)
            return True
        except Exception:
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise
    except OSError:
        return False


def atomic_write_json(path: PathLike, data) -> bool:
    """Write JSON atomically. Returns False on failure."""
    try:
        payload = fast_json_dumps(data)
    except (TypeError, msgspec.EncodeError):
        return False
    return atomic_write_bytes(path, payload)


# =============================================================================
# Safe File Operations
# =============================================================================

def safe_mtime(path: PathLike, default: float = 0.0) -> float:
    """Get file modification time safely, return default on error."""
    try:
        return os.path.getmtime(path)
    except OSError:
        return default
