"""
Producer detection - decide which CLI wrote the payload.

First match wins; the order is precedence, not confidence:
1. Environment markers (explicit configuration always wins)
2. Payload fields unique to one producer's schema
3. Producer directory in the transcript path
4. hook_event_name / notification_type combinations
5. Parent process name
6. Default: Claude Code
"""
import os
import subprocess
from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping

from ai_notifier.config import EnvMarkers, Timeouts
from ai_notifier.payload import get_string


class Producer(str, Enum):
    CLAUDE = "claude"
    GEMINI = "gemini"
    CODEX = "codex"
    UNKNOWN = "unknown"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @property
    def icon_name(self) -> str:
        return _ICON_NAMES[self]

    @classmethod
    def parse(cls, name: str | None) -> "Producer":
        """Map a name such as "gemini" to a producer, UNKNOWN otherwise."""
        try:
            return cls((name or "").strip().lower())
        except ValueError:
            return cls.UNKNOWN


_DISPLAY_NAMES = {
    Producer.CLAUDE: "Claude Code",
    Producer.GEMINI: "Gemini CLI",
    Producer.CODEX: "Codex CLI",
    Producer.UNKNOWN: "AI CLI",
}

_ICON_NAMES = {
    Producer.CLAUDE: "claude-logo",
    Producer.GEMINI: "gemini-logo",
    Producer.CODEX: "codex-logo",
    Producer.UNKNOWN: "claude-logo",
}

GEMINI_RESPONSE_FIELDS = ("llm_response", "modelResponse", "finishReason", "prompt_response")
CODEX_EVENTS = frozenset({"agent-turn-complete", "approval-requested"})

GEMINI_ONLY_EVENTS = frozenset({
    "BeforeAgent", "AfterAgent", "BeforeModel", "AfterModel",
    "BeforeToolSelection", "BeforeTool", "AfterTool", "PreCompress",
})
GEMINI_NOTIFICATION_TYPES = frozenset({"ToolPermission"})

CLAUDE_EVENTS = frozenset({
    "Stop", "SubagentStop", "Notification", "PreToolUse", "PostToolUse",
    "UserPromptSubmit", "SessionStart", "SessionEnd", "PreCompact",
})
CLAUDE_NOTIFICATION_TYPES = frozenset({
    "permission_prompt", "idle_prompt", "auth_success", "elicitation_dialog",
})

PATH_HINTS = (
    ("/.gemini/", Producer.GEMINI),
    ("/.codex/", Producer.CODEX),
    ("/.claude/", Producer.CLAUDE),
)

PROCESS_KEYWORDS = (
    ("gemini", Producer.GEMINI),
    ("codex", Producer.CODEX),
    ("claude", Producer.CLAUDE),
)


@dataclass(frozen=True)
class EnvironmentView:
    """Environment and parent process name, captured once per invocation."""
    env: Mapping[str, str] = field(default_factory=dict)
    parent_process_name: str = ""

    @classmethod
    def from_os(cls) -> "EnvironmentView":
        return cls(env=dict(os.environ), parent_process_name=parent_process_name())

    def has_any(self, names) -> bool:
        return any(self.env.get(name) for name in names)


def parent_process_name(ppid: int | None = None) -> str:
    """Command name of the parent process via ps, or "" if unavailable."""
    ppid = ppid or os.getppid()
    try:
        result = subprocess.run(
            ["ps", "-o", "comm=", "-p", str(ppid)],
            capture_output=True,
            text=True,
            timeout=Timeouts.HELPER,
        )
    except (OSError, subprocess.TimeoutExpired):
        return ""
    if result.returncode != 0:
        return ""
    return os.path.basename(result.stdout.strip())


def hook_event_name(payload: dict | None) -> str:
    """Event name from current (hook_event_name) or legacy (hook_name) field."""
    return get_string(payload, "hook_event_name") or get_string(payload, "hook_name") or ""


def codex_event_name(payload: dict | None) -> str:
    """Codex notify uses "type"; older builds sent "event"."""
    return get_string(payload, "type") or get_string(payload, "event") or ""


def _from_environment(env: EnvironmentView) -> Producer | None:
    override = Producer.parse(env.env.get(EnvMarkers.OVERRIDE))
    if override is not Producer.UNKNOWN:
        return override
    if env.has_any(EnvMarkers.GEMINI):
        return Producer.GEMINI
    if env.has_any(EnvMarkers.CODEX):
        return Producer.CODEX
    if env.has_any(EnvMarkers.CLAUDE):
        return Producer.CLAUDE
    return None


def _from_fingerprint(payload: dict) -> Producer | None:
    if any(key in payload for key in GEMINI_RESPONSE_FIELDS):
        return Producer.GEMINI
    if codex_event_name(payload) in CODEX_EVENTS or "last-assistant-message" in payload:
        return Producer.CODEX
    return None


def _from_path_hint(payload: dict) -> Producer | None:
    transcript_path = get_string(payload, "transcript_path")
    if not transcript_path:
        return None
    normalized = transcript_path.replace("\\", "/")
    for segment, producer in PATH_HINTS:
        if segment in normalized:
            return producer
    return None


def _from_event_name(payload: dict) -> Producer | None:
    event = hook_event_name(payload)
    if not event:
        return None
    notification_type = get_string(payload, "notification_type") or ""
    if event in GEMINI_ONLY_EVENTS or notification_type in GEMINI_NOTIFICATION_TYPES:
        return Producer.GEMINI
    if event in CLAUDE_EVENTS or notification_type in CLAUDE_NOTIFICATION_TYPES:
        return Producer.CLAUDE
    return None


def _from_process_name(env: EnvironmentView) -> Producer | None:
    name = env.parent_process_name.lower()
    for keyword, producer in PROCESS_KEYWORDS:
        if keyword in name:
            return producer
    return None


def detect(payload: dict | None, env: EnvironmentView) -> Producer:
    """Decide which producer generated this invocation. Never raises."""
    producer = _from_environment(env)
    if producer:
        return producer

    if payload:
        for check in (_from_fingerprint, _from_path_hint, _from_event_name):
            producer = check(payload)
            if producer:
                return producer

    return _from_process_name(env) or Producer.CLAUDE


def has_producer_context(env: EnvironmentView) -> bool:
    """True when an environment marker names a producer."""
    return _from_environment(env) is not None
