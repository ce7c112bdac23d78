"""
Codex CLI handler - the notify program payload.

Codex passes one JSON argument such as:
    {"type": "agent-turn-complete", "last-assistant-message": "...", "cwd": "..."}
Older builds used "event" and "response" instead.
"""
from ai_notifier.config import Labels
from ai_notifier.detector import Producer, codex_event_name
from ai_notifier.events import (
    NotificationEvent,
    generic_event,
    permission_event,
    response_event,
)
from ai_notifier.payload import get_text
from ai_notifier.terminal import TerminalContext
from ai_notifier.transcript import extract_response_text

INLINE_RESPONSE_KEYS = ("last-assistant-message", "response")


def handle_codex(payload: dict, context: TerminalContext) -> NotificationEvent | None:
    event = codex_event_name(payload)

    if event in ("agent-turn-complete", ""):
        text = extract_response_text(payload, INLINE_RESPONSE_KEYS)
        return response_event(Producer.CODEX, context, text)

    message = get_text(payload, "message")
    if event == "approval-requested":
        return permission_event(Producer.CODEX, context, message, Labels.APPROVAL_REQUESTED)

    return generic_event(Producer.CODEX, context, event, message)
