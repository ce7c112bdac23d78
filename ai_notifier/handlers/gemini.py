"""
Gemini CLI handler - AfterModel, AfterAgent and Notification hooks.

AfterModel fires for every streamed chunk, so model responses go through
the debouncer before anything is shown.
"""
from ai_notifier.debounce import Debouncer
from ai_notifier.detector import Producer, hook_event_name
from ai_notifier.events import (
    NotificationEvent,
    generic_event,
    permission_event,
    response_event,
)
from ai_notifier.notifier_utils import log_event
from ai_notifier.payload import get_text
from ai_notifier.terminal import TerminalContext
from ai_notifier.transcript import extract_response_text

MODEL_RESPONSE_FIELDS = ("llm_response", "modelResponse", "finishReason")
INLINE_RESPONSE_KEYS = ("llm_response", "modelResponse", "prompt_response")
PERMISSION_TYPES = frozenset({"ToolPermission"})


def is_model_response(payload: dict, event: str) -> bool:
    if event == "AfterModel":
        return True
    return not event and any(key in payload for key in MODEL_RESPONSE_FIELDS)


def handle_gemini(
    payload: dict,
    context: TerminalContext,
    debouncer: Debouncer | None = None,
) -> NotificationEvent | None:
    event = hook_event_name(payload)

    if is_model_response(payload, event):
        debouncer = debouncer or Debouncer()
        if not debouncer.should_notify(payload):
            log_event("gemini", "skipped", {"reason": "debounce_or_partial"}, "debug")
            return None
        text = extract_response_text(payload, INLINE_RESPONSE_KEYS)
        return response_event(Producer.GEMINI, context, text)

    if event in ("AfterAgent", ""):
        text = extract_response_text(payload, INLINE_RESPONSE_KEYS)
        return response_event(Producer.GEMINI, context, text)

    message = get_text(payload, "message")
    if event == "Notification":
        notification_type = get_text(payload, "notification_type") or ""
        if notification_type in PERMISSION_TYPES:
            return permission_event(Producer.GEMINI, context, message)
        return generic_event(Producer.GEMINI, context, notification_type, message)

    return generic_event(Producer.GEMINI, context, event, message)
