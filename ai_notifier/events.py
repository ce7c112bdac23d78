"""
Notification events - the normalized output of every producer handler.

Handlers build events through the helpers here so that every event gets
a title with the producer and project, and a non-empty body.
"""
import os
from dataclasses import dataclass
from enum import Enum

from ai_notifier.config import Labels
from ai_notifier.detector import Producer
from ai_notifier.preview import preview
from ai_notifier.terminal import TerminalContext


class EventKind(str, Enum):
    RESPONSE = "response"
    PERMISSION = "permission"
    IDLE = "idle"
    OTHER = "other"


@dataclass(frozen=True)
class NotificationEvent:
    title: str
    subtitle: str
    body: str
    producer: Producer
    terminal_context: TerminalContext
    kind: EventKind = EventKind.OTHER

    @property
    def urgency(self) -> str:
        if self.kind is EventKind.PERMISSION:
            return "critical"
        if self.kind is EventKind.IDLE:
            return "low"
        return "normal"


def project_label(context: TerminalContext) -> str:
    name = context.project_name
    if name:
        return name
    try:
        return os.path.basename(os.getcwd()) or "~"
    except OSError:
        return "~"


def make_title(producer: Producer, context: TerminalContext) -> str:
    return f"{producer.display_name} · {project_label(context)}"


def _event(
    producer: Producer,
    context: TerminalContext,
    kind: EventKind,
    subtitle: str,
    body: str | None,
    placeholder: str,
) -> NotificationEvent:
    body = (body or "").strip() or placeholder
    return NotificationEvent(
        title=make_title(producer, context),
        subtitle=subtitle,
        body=body,
        producer=producer,
        terminal_context=context,
        kind=kind,
    )


def response_event(producer: Producer, context: TerminalContext, text: str | None) -> NotificationEvent:
    """Response finished: body is a preview of the latest assistant text."""
    return _event(
        producer, context, EventKind.RESPONSE,
        Labels.RESPONSE_COMPLETE, preview(text), Labels.RESPONSE_COMPLETE,
    )


def permission_event(
    producer: Producer,
    context: TerminalContext,
    message: str | None,
    label: str = Labels.PERMISSION_REQUESTED,
) -> NotificationEvent:
    return _event(producer, context, EventKind.PERMISSION, label, message, label)


def idle_event(producer: Producer, context: TerminalContext) -> NotificationEvent:
    return _event(
        producer, context, EventKind.IDLE,
        Labels.WAITING_FOR_INPUT, None, Labels.WAITING_BODY,
    )


def generic_event(
    producer: Producer,
    context: TerminalContext,
    subtype: str | None,
    message: str | None,
) -> NotificationEvent:
    """Unrecognized subtype: the raw subtype becomes the subtitle."""
    subtitle = (subtype or "").strip() or Labels.NOTIFICATION
    return _event(producer, context, EventKind.OTHER, subtitle, message, Labels.NOTIFICATION)
