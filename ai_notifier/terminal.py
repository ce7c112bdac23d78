"""
Terminal context - which terminal window/session invoked the CLI.

The context is captured when the notification is built and must survive
until the user clicks it, usually in a different process. It travels as a
flat string map: inside the notification's user info, in an
ai-notifier:// activation URI, and in the last-session scratch file.
"""
import os
import subprocess
from dataclasses import dataclass
from enum import Enum
from typing import Mapping
from urllib.parse import parse_qsl, urlencode, urlsplit

from ai_notifier.config import EnvMarkers, LAST_SESSION_FILE, Timeouts, URI_SCHEME
from ai_notifier.notifier_utils import log_event
from ai_notifier.notifier_utils.io import atomic_write_json, safe_load_json


class TerminalKind(str, Enum):
    ITERM = "iterm"
    VSCODE = "vscode"
    APPLE_TERMINAL = "terminal"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: str | None) -> "TerminalKind":
        try:
            return cls(value or "")
        except ValueError:
            return cls.UNKNOWN


# TERM_PROGRAM values
_TERM_PROGRAMS = {
    "iTerm.app": TerminalKind.ITERM,
    "vscode": TerminalKind.VSCODE,
    "Apple_Terminal": TerminalKind.APPLE_TERMINAL,
}

# Serialized field names
KIND = "kind"
SESSION_ID = "session_id"
CWD = "cwd"
TTY = "tty"


@dataclass(frozen=True)
class TerminalContext:
    kind: TerminalKind = TerminalKind.UNKNOWN
    session_id: str | None = None
    working_directory: str | None = None
    tty_device: str | None = None

    @property
    def project_name(self) -> str | None:
        if not self.working_directory:
            return None
        return os.path.basename(self.working_directory.rstrip("/\\")) or None


# =============================================================================
# Capture
# =============================================================================

def query_tty(ppid: int | None = None) -> str | None:
    """Controlling terminal of the parent process via ps, e.g. /dev/ttys003."""
    ppid = ppid or os.getppid()
    try:
        result = subprocess.run(
            ["ps", "-o", "tty=", "-p", str(ppid)],
            capture_output=True,
            text=True,
            timeout=Timeouts.HELPER,
        )
    except (OSError, subprocess.TimeoutExpired):
        return None
    if result.returncode != 0:
        return None
    return _normalize_tty(result.stdout)


def _normalize_tty(value: str | None) -> str | None:
    value = (value or "").strip()
    if not value or value in ("?", "??"):
        return None
    if not value.startswith("/dev/"):
        value = "/dev/" + value
    return value


def capture(
    working_directory_hint: str | None = None,
    env: Mapping[str, str] | None = None,
    tty_query=query_tty,
) -> TerminalContext:
    """Snapshot the invoking terminal from environment and process state."""
    env = os.environ if env is None else env
    kind = _TERM_PROGRAMS.get(env.get("TERM_PROGRAM", ""), TerminalKind.UNKNOWN)

    session_id = None
    if kind in (TerminalKind.ITERM, TerminalKind.UNKNOWN):
        session_id = env.get("ITERM_SESSION_ID") or None

    working_directory = working_directory_hint or None
    if not working_directory:
        for name in EnvMarkers.PROJECT_DIRS:
            if env.get(name):
                working_directory = env[name]
                break
        else:
            try:
                working_directory = os.getcwd()
            except OSError:
                working_directory = None

    tty_device = None
    if kind in (TerminalKind.APPLE_TERMINAL, TerminalKind.UNKNOWN):
        tty_device = _normalize_tty(env.get("TTY")) or tty_query()

    return TerminalContext(
        kind=kind,
        session_id=session_id,
        working_directory=working_directory,
        tty_device=tty_device,
    )


# =============================================================================
# Serialization
# =============================================================================

def serialize(context: TerminalContext) -> dict[str, str]:
    """Flat map with the kind and only the fields that are present."""
    data = {KIND: context.kind.value}
    if context.session_id:
        data[SESSION_ID] = context.session_id
    if context.working_directory:
        data[CWD] = context.working_directory
    if context.tty_device:
        data[TTY] = context.tty_device
    return data


def deserialize(data: Mapping | None) -> TerminalContext:
    """Inverse of serialize. Empty or non-string values count as absent."""
    data = data if isinstance(data, Mapping) else {}

    def field_value(key: str) -> str | None:
        value = data.get(key)
        return value if isinstance(value, str) and value else None

    return TerminalContext(
        kind=TerminalKind.parse(field_value(KIND)),
        session_id=field_value(SESSION_ID),
        working_directory=field_value(CWD),
        tty_device=field_value(TTY),
    )


def to_uri(context: TerminalContext) -> str:
    """ai-notifier://activate?kind=...&session_id=..."""
    return f"{URI_SCHEME}://activate?{urlencode(serialize(context))}"


def is_activation_uri(value: str | None) -> bool:
    return bool(value) and value.startswith(f"{URI_SCHEME}://")


def from_uri(uri: str) -> TerminalContext:
    parts = urlsplit(uri)
    return deserialize(dict(parse_qsl(parts.query)))


# =============================================================================
# Last-session fallback
# =============================================================================

def save_last_session(context: TerminalContext, path=LAST_SESSION_FILE) -> bool:
    ok = atomic_write_json(path, serialize(context))
    if not ok:
        log_event("terminal", "save_failed", {"path": str(path)}, "warning")
    return ok


def load_last_session(path=LAST_SESSION_FILE) -> TerminalContext | None:
    data = safe_load_json(path)
    if not isinstance(data, dict):
        return None
    return deserialize(data)
