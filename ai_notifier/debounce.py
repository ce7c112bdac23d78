"""
Duplicate suppression for Gemini CLI model responses.

Gemini fires its after-model hook once per streamed chunk and once more when
the response finishes. Chunks are dropped outright; final responses for the
same session are collapsed with a sliding window:

- every final response rewrites the session's timestamp, suppressed or not
- a final response notifies only if the previous one was at least
  DEBOUNCE_WINDOW_MS earlier

A burst of final responses closer together than the window therefore stays
silent until the burst ends and a full window of quiet passes.
"""
import time
from typing import Callable

from ai_notifier.config import Timeouts
from ai_notifier.notifier_utils import log_event
from ai_notifier.notifier_utils.state import StateStore, FileStateStore
from ai_notifier.payload import first_text, get_string

FINAL_FINISH_REASON = "STOP"
RECORD_PREFIX = "debounce-"

# Locations of the finish reason, checked in order
_FINISH_REASON_PATHS = (
    ("finishReason",),
    ("llm_response", "candidates", 0, "finishReason"),
    ("modelResponse", "candidates", 0, "finishReason"),
)


def finish_reason(payload: dict | None) -> str | None:
    for path in _FINISH_REASON_PATHS:
        value = get_string(payload, *path)
        if value is not None:
            return value
    return None


def session_id(payload: dict | None) -> str | None:
    return first_text(payload, "session_id", "sessionId")


def _now_ms() -> int:
    return int(time.time() * 1000)


class Debouncer:
    """Sliding-window suppressor backed by a StateStore.

    Usage:
        debouncer = Debouncer(FileStateStore())
        if debouncer.should_notify(payload):
            ...
    """

    def __init__(
        self,
        store: StateStore | None = None,
        window_ms: int = Timeouts.DEBOUNCE_WINDOW_MS,
        clock: Callable[[], int] = _now_ms,
    ):
        self.store = store if store is not None else FileStateStore()
        self.window_ms = window_ms
        self.clock = clock

    def should_notify(self, payload: dict | None) -> bool:
        reason = finish_reason(payload)
        if reason != FINAL_FINISH_REASON:
            return False

        sid = session_id(payload)
        if not sid:
            return True

        key = RECORD_PREFIX + sid
        now = self.clock()
        last = self._read_timestamp(key)
        self.store.write(key, str(now))

        if last is not None and now - last < self.window_ms:
            log_event("debounce", "suppressed", {"session": sid, "elapsed_ms": now - last})
            return False

        self._prune()
        return True

    def _read_timestamp(self, key: str) -> int | None:
        raw = self.store.read(key)
        if not raw:
            return None
        try:
            return int(raw)
        except ValueError:
            return None

    def _prune(self) -> None:
        prune = getattr(self.store, "prune_if_due", None)
        if prune is not None:
            prune(RECORD_PREFIX)
