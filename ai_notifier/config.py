"""
Centralized configuration for the AI notifier.

All configurable constants in one place for easy tuning.
Individual modules import from here for consistency.

Categories:
- Paths: Data, scratch and icon locations
- Timeouts: Bounded waits and the debounce window
- Limits: Preview sizes and cleanup ages
- Labels: Fixed notification strings
- EnvMarkers: Environment variables that identify a producer
"""
import os
import tempfile
from pathlib import Path

import msgspec

# =============================================================================
# Paths
# =============================================================================

DATA_DIR = Path(os.environ.get("AI_NOTIFIER_DATA_DIR", Path.home() / ".ai-notifier"))
LOG_FILE = DATA_DIR / "notifier-events.jsonl"

# Shared between invocations: debounce markers and the last terminal context
SCRATCH_DIR = Path(os.environ.get(
    "AI_NOTIFIER_SCRATCH_DIR", Path(tempfile.gettempdir()) / "ai-notifier"
))
LAST_SESSION_FILE = SCRATCH_DIR / "last-session.json"

ICON_DIR = Path(os.environ.get("AI_NOTIFIER_ICON_DIR", Path(__file__).parent / "icons"))

URI_SCHEME = "ai-notifier"
APP_NAME = "AI Notifier"


# =============================================================================
# Timeouts (seconds unless noted)
# =============================================================================

class Timeouts:
    """Bounded waits. Every blocking point in the pipeline has one."""
    STDIN_POLL = 0.1  # Piped input readiness check, and max gap between chunks
    STDIN_READ = 1.0  # Whole piped read, even if the writer never closes
    DELIVERY = 3.0  # Wait for the notification service to acknowledge
    CLICK = 3.0  # Wait for a click callback after a relaunch
    HELPER = 5.0  # osascript, editor CLI, ps

    try:
        DEBOUNCE_WINDOW_MS = int(os.environ.get("AI_NOTIFIER_DEBOUNCE_MS", "2000"))
    except ValueError:
        DEBOUNCE_WINDOW_MS = 2000


# =============================================================================
# Limits
# =============================================================================

class Limits:
    """Size limits and cleanup ages."""
    PREVIEW_MAX_LINES = 2
    PREVIEW_MAX_CHARS = 120

    DEBOUNCE_RECORD_MAX_AGE = 86400  # Prune markers untouched for a day
    PRUNE_INTERVAL = 3600  # At most one prune pass per hour

    TRANSCRIPT_TAIL = 500  # JSONL lines scanned from the end of a transcript


# =============================================================================
# Labels
# =============================================================================

class Labels:
    """Fixed subtitles and placeholder bodies."""
    RESPONSE_COMPLETE = "Response complete"
    PERMISSION_REQUESTED = "Permission requested"
    APPROVAL_REQUESTED = "Approval requested"
    WAITING_FOR_INPUT = "Waiting for input"
    WAITING_BODY = "Waiting for your input"
    NOTIFICATION = "Notification"

    ELLIPSIS = "…"


# =============================================================================
# Producer Markers
# =============================================================================

class EnvMarkers:
    """Environment variables that pin the producer regardless of payload.

    Gemini is checked before Claude because Gemini CLI exports
    CLAUDE_PROJECT_DIR as a compatibility alias.
    """
    OVERRIDE = "AI_NOTIFIER_SOURCE"
    GEMINI = ("GEMINI_CLI", "GEMINI_PROJECT_DIR", "GEMINI_SESSION_ID")
    CODEX = ("CODEX_SANDBOX", "CODEX_THREAD_ID")
    CLAUDE = ("CLAUDECODE", "CLAUDE_CODE", "CLAUDE_PROJECT_ROOT")

    # Checked in order when looking for the project directory
    PROJECT_DIRS = ("CLAUDE_PROJECT_DIR", "GEMINI_PROJECT_DIR", "PWD")


# =============================================================================
# JSON
# =============================================================================

_decoder = msgspec.json.Decoder()
_encoder = msgspec.json.Encoder()


def fast_json_loads(data: bytes | str):
    """Decode JSON with msgspec. Raises msgspec.DecodeError on bad input."""
    return _decoder.decode(data)


def fast_json_dumps(obj) -> bytes:
    """Encode JSON with msgspec."""
    return _encoder.encode(obj)
