"""
Claude Code handler - Stop, SubagentStop and Notification hooks.

Notification types:
- permission_prompt: Permission dialog shown
- idle_prompt: Claude idle for 60+ seconds
- anything else: shown with the raw type as subtitle

Older Claude Code builds omit notification_type; the message text is used
to tell permission prompts from idle prompts.
"""
from ai_notifier.detector import Producer, hook_event_name
from ai_notifier.events import (
    NotificationEvent,
    generic_event,
    idle_event,
    permission_event,
    response_event,
)
from ai_notifier.payload import get_text
from ai_notifier.terminal import TerminalContext
from ai_notifier.transcript import extract_response_text

RESPONSE_EVENTS = frozenset({"Stop", "SubagentStop", ""})
INLINE_RESPONSE_KEYS = ("last_assistant_message",)


def classify_notification(payload: dict) -> str:
    """notification_type, or a guess from the message for older payloads."""
    notification_type = get_text(payload, "notification_type")
    if notification_type:
        return notification_type
    message = (get_text(payload, "message") or "").lower()
    if "permission" in message:
        return "permission_prompt"
    if "waiting for your input" in message:
        return "idle_prompt"
    return ""


def handle_claude(payload: dict, context: TerminalContext) -> NotificationEvent | None:
    event = hook_event_name(payload)

    if event in RESPONSE_EVENTS:
        text = extract_response_text(payload, INLINE_RESPONSE_KEYS) or get_text(payload, "message")
        return response_event(Producer.CLAUDE, context, text)

    message = get_text(payload, "message")
    if event == "Notification":
        notification_type = classify_notification(payload)
        if notification_type == "permission_prompt":
            return permission_event(Producer.CLAUDE, context, message)
        if notification_type == "idle_prompt":
            return idle_event(Producer.CLAUDE, context)
        return generic_event(Producer.CLAUDE, context, notification_type, message)

    return generic_event(Producer.CLAUDE, context, event, message)
