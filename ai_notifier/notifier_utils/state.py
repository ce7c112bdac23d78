"""
Key/value state shared between invocations.

The debouncer only needs read(key)/write(key, value). Production state lives
as one small file per key under the scratch directory; tests swap in
MemoryStateStore.

No locking: two invocations writing the same key race and the last
writer wins.
"""
import hashlib
import re
import time
from pathlib import Path
from typing import Protocol

from .io import atomic_write_bytes, safe_mtime
from .logging import log_event
from ai_notifier.config import SCRATCH_DIR, Limits

_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9._-]")


class StateStore(Protocol):
    def read(self, key: str) -> str | None: ...

    def write(self, key: str, value: str) -> None: ...


class MemoryStateStore:
    """In-process store. Used by tests and for dry runs."""

    def __init__(self, initial: dict[str, str] | None = None):
        self.data: dict[str, str] = dict(initial or {})

    def read(self, key: str) -> str | None:
        return self.data.get(key)

    def write(self, key: str, value: str) -> None:
        self.data[key] = value


class FileStateStore:
    """One overwrite-whole-file record per key under a scratch directory."""

    def __init__(self, directory: Path = SCRATCH_DIR):
        self.directory = Path(directory)

    def path_for(self, key: str) -> Path:
        """Map a key to its file. Keys come from payloads, so sanitize.

        Keys that differ only in unsafe characters ("a/b" vs "a_b") get
        distinct files via a short hash of the raw key.
        """
        safe = _UNSAFE_KEY_CHARS.sub("_", key)
        digest = hashlib.md5(key.encode("utf-8")).hexdigest()[:12]
        return self.directory / f"{safe}.{digest}"

    def read(self, key: str) -> str | None:
        try:
            return self.path_for(key).read_text(encoding="utf-8").strip()
        except (OSError, UnicodeDecodeError):
            return None

    def write(self, key: str, value: str) -> None:
        if not atomic_write_bytes(self.path_for(key), value.encode("utf-8")):
            log_event("state", "write_failed", {"key": key}, "warning")

    def prune(
        self,
        prefix: str,
        max_age_secs: float = Limits.DEBOUNCE_RECORD_MAX_AGE,
        now: float | None = None,
    ) -> int:
        """Delete records with the given prefix untouched for max_age_secs.

        Returns:
            Number of files removed
        """
        if now is None:
            now = time.time()
        cutoff = now - max_age_secs
        removed = 0
        try:
            candidates = list(self.directory.glob(f"{prefix}*"))
        except OSError:
            return 0
        for path in candidates:
            if safe_mtime(path, default=now) < cutoff:
                try:
                    path.unlink()
                    removed += 1
                except OSError:
                    continue
        if removed:
            log_event("state", "pruned", {"prefix": prefix, "removed": removed})
        return removed

    def prune_if_due(
        self,
        prefix: str,
        marker: Path | None = None,
        interval_secs: float = Limits.PRUNE_INTERVAL,
    ) -> int:
        """Rate-limited prune: at most one pass per interval across all invocations."""
        marker = marker or self.directory / ".last-prune"
        now = time.time()
        if now - safe_mtime(marker) < interval_secs:
            return 0
        atomic_write_bytes(marker, str(int(now)).encode("ascii"))
        return self.prune(prefix, now=now)
