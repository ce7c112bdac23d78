"""
Event normalizer - route a payload to its producer's handler.

Returns None (suppress) when there is no payload at all, when the
debouncer vetoes a Gemini response, or when the payload is an
intermediate update that must never surface.
"""
from ai_notifier.debounce import Debouncer
from ai_notifier.detector import Producer, hook_event_name
from ai_notifier.events import NotificationEvent, generic_event
from ai_notifier.handlers import handle_claude, handle_codex, handle_gemini
from ai_notifier.notifier_utils import log_event
from ai_notifier.payload import first_text, get_text
from ai_notifier.terminal import TerminalContext


def handle_unknown(payload: dict, context: TerminalContext) -> NotificationEvent:
    """Minimal event for payloads no handler claims."""
    subtype = hook_event_name(payload) or first_text(payload, "type", "event")
    return generic_event(Producer.UNKNOWN, context, subtype, get_text(payload, "message"))


def normalize(
    payload: dict | None,
    producer: Producer,
    context: TerminalContext,
    debouncer: Debouncer | None = None,
) -> NotificationEvent | None:
    """Build the notification for one payload, or None to stay silent."""
    if payload is None:
        return None

    if producer is Producer.CLAUDE:
        event = handle_claude(payload, context)
    elif producer is Producer.GEMINI:
        event = handle_gemini(payload, context, debouncer)
    elif producer is Producer.CODEX:
        event = handle_codex(payload, context)
    else:
        event = handle_unknown(payload, context)

    log_event("normalizer", "normalized" if event else "suppressed", {
        "producer": producer.value,
        "kind": event.kind.value if event else None,
    })
    return event
