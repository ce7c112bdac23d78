"""
Dispatch controller - the ai-notifier entry point.

States:
    AwaitingInput -> Classifying -> (Suppressed | Ready) -> Delivering
        -> (Delivered | TimedOut)
    no input -> AwaitingClick -> (Activated | ClickTimedOut)
    interactive launch -> Setup

Every wait is bounded (stdin poll, delivery, click) because the CLI that
invoked us is usually blocked until we exit.

Exit codes:
    0: delivered, suppressed, timed out, activated
    1: delivery failed, or setup found no way to notify
"""
import argparse
import io
import os
import select
import sys
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, TextIO

import msgspec

from ai_notifier.activator import activate
from ai_notifier.config import LAST_SESSION_FILE, Timeouts, fast_json_loads
from ai_notifier.debounce import Debouncer
from ai_notifier.detector import EnvironmentView, detect, has_producer_context
from ai_notifier.events import NotificationEvent
from ai_notifier.normalizer import normalize
from ai_notifier.notifier_utils import (
    HostNotificationService,
    NotificationRequest,
    OneShot,
    graceful_main,
    log_event,
)
from ai_notifier.notifier_utils.notify import find_icon
from ai_notifier.payload import get_text, parse_payload
from ai_notifier.setup_mode import run_setup
from ai_notifier.terminal import (
    TerminalContext,
    capture,
    deserialize,
    from_uri,
    is_activation_uri,
    load_last_session,
    save_last_session,
    serialize,
)


class DispatchState(str, Enum):
    AWAITING_INPUT = "awaiting_input"
    CLASSIFYING = "classifying"
    SUPPRESSED = "suppressed"
    READY = "ready"
    DELIVERING = "delivering"
    DELIVERED = "delivered"
    DELIVERY_FAILED = "delivery_failed"
    TIMED_OUT = "timed_out"
    AWAITING_CLICK = "awaiting_click"
    ACTIVATED = "activated"
    CLICK_TIMED_OUT = "click_timed_out"
    SETUP = "setup"


# =============================================================================
# Input
# =============================================================================

def read_stdin(
    stdin: TextIO | None,
    timeout: float = Timeouts.STDIN_POLL,
    limit: float = Timeouts.STDIN_READ,
) -> bytes | None:
    """Read piped input, bounded even if the writer keeps the pipe open.

    Stops at EOF, when no new data arrives for timeout seconds, or after
    limit seconds overall. Never blocks on a tty.

    Returns:
        The bytes read (b"" for an empty pipe), or None if nothing arrived
    """
    if stdin is None or stdin.closed or stdin.isatty():
        return None
    try:
        fd = stdin.fileno()
        select.select([fd], [], [], 0)
    except (OSError, ValueError, io.UnsupportedOperation):
        # select() cannot poll pipes on Windows
        return _read_on_thread(stdin, limit)
    return _read_polled(fd, timeout, limit)


def _read_polled(fd: int, timeout: float, limit: float) -> bytes | None:
    deadline = time.monotonic() + limit
    chunks: list[bytes] = []
    eof = False
    while True:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            log_event("dispatch", "stdin_limit", {"bytes": sum(map(len, chunks))}, "warning")
            break
        ready, _, _ = select.select([fd], [], [], min(timeout, remaining))
        if not ready:
            break
        try:
            chunk = os.read(fd, 65536)
        except OSError:
            break
        if not chunk:
            eof = True
            break
        chunks.append(chunk)
    if not chunks and not eof:
        return None
    return b"".join(chunks)


def _read_on_thread(stdin: TextIO, limit: float) -> bytes | None:
    """Blocking read on a daemon thread; abandoned after limit seconds."""
    done = OneShot()

    def reader():
        try:
            data = getattr(stdin, "buffer", stdin).read()
        except (OSError, ValueError):
            data = None
        if isinstance(data, str):
            data = data.encode("utf-8")
        done.set(data)

    threading.Thread(target=reader, name="stdin-read", daemon=True).start()
    if not done.wait(limit):
        log_event("dispatch", "stdin_limit", {}, "warning")
        return None
    return done.value


def is_interactive(stdin: TextIO | None) -> bool:
    try:
        return stdin is not None and not stdin.closed and stdin.isatty()
    except (OSError, ValueError):
        return False


def parse_user_info(raw: str | None) -> dict[str, str]:
    """Click hand-off payload; anything malformed becomes empty."""
    if not raw:
        return {}
    try:
        data = fast_json_loads(raw)
    except msgspec.DecodeError:
        return {}
    if not isinstance(data, dict):
        return {}
    return {k: v for k, v in data.items() if isinstance(k, str) and isinstance(v, str)}


# =============================================================================
# Controller
# =============================================================================

@dataclass
class Dispatcher:
    """Runs one invocation through the state machine.

    Collaborators are injectable so tests can drive every branch without
    touching the OS.
    """
    service: HostNotificationService
    env: EnvironmentView
    debouncer: Debouncer = field(default_factory=Debouncer)
    activate: Callable[[TerminalContext], None] = activate
    setup: Callable[..., int] = run_setup
    capture_context: Callable[[str | None], TerminalContext] = capture
    last_session_path: Path = LAST_SESSION_FILE
    delivery_timeout: float = Timeouts.DELIVERY
    click_timeout: float = Timeouts.CLICK
    state: DispatchState = DispatchState.AWAITING_INPUT

    def _enter(self, state: DispatchState, **data) -> None:
        self.state = state
        log_event("dispatch", state.value, data or None, "debug")

    def run(self, payload: dict | None, interactive: bool = False, clicked: bool = False) -> int:
        if payload is None and (clicked or not has_producer_context(self.env)):
            if interactive and not clicked:
                self._enter(DispatchState.SETUP)
                return self.setup()
            return self.await_click()

        self._enter(DispatchState.CLASSIFYING)
        if payload is None:
            # A CLI invoked us with nothing to report
            self._enter(DispatchState.SUPPRESSED, reason="no_input")
            return 0

        context = self.capture_context(get_text(payload, "cwd"))
        producer = detect(payload, self.env)
        event = normalize(payload, producer, context, self.debouncer)
        if event is None:
            self._enter(DispatchState.SUPPRESSED, producer=producer.value)
            return 0

        self._enter(DispatchState.READY, producer=producer.value)
        return self.deliver(event)

    def deliver(self, event: NotificationEvent) -> int:
        context = event.terminal_context
        request = NotificationRequest(
            title=event.title,
            subtitle=event.subtitle,
            body=event.body,
            icon=find_icon(event.producer.icon_name),
            user_info=serialize(context),
            urgency=event.urgency,
        )
        save_last_session(context, self.last_session_path)

        self._enter(DispatchState.DELIVERING)
        done = OneShot()
        self.service.deliver(request, done.set)
        if not done.wait(self.delivery_timeout):
            # May still be in flight
            self._enter(DispatchState.TIMED_OUT)
            return 0

        if done.value:
            self._enter(DispatchState.DELIVERED)
            return 0
        self._enter(DispatchState.DELIVERY_FAILED)
        log_event("dispatch", "delivery_failed", {"producer": event.producer.value}, "error")
        return 1

    def await_click(self) -> int:
        self._enter(DispatchState.AWAITING_CLICK)
        clicked = OneShot()
        self.service.listen_for_click(clicked.set)
        if not clicked.wait(self.click_timeout):
            self._enter(DispatchState.CLICK_TIMED_OUT)
            return self.setup(send_test=False)

        user_info = clicked.value or {}
        if user_info:
            context = deserialize(user_info)
        else:
            context = load_last_session(self.last_session_path)
        if context is None:
            log_event("dispatch", "no_terminal_context", {}, "warning")
            return 0

        self.activate(context)
        self._enter(DispatchState.ACTIVATED, kind=context.kind.value)
        return 0


# =============================================================================
# CLI
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ai-notifier",
        description="Desktop notifications for Claude Code, Gemini CLI and Codex CLI hooks.",
    )
    parser.add_argument(
        "payload", nargs="?",
        help="Hook payload as JSON, or an ai-notifier://activate URI (default: read stdin)",
    )
    parser.add_argument("-s", "--setup", action="store_true", help="Show setup status and hook configuration")
    parser.add_argument("--clicked", action="store_true", help=argparse.SUPPRESS)
    parser.add_argument("--user-info", help=argparse.SUPPRESS)
    return parser


@graceful_main("dispatch")
def main(argv: list[str] | None = None, stdin: TextIO | None = None) -> int:
    args = build_parser().parse_args(argv)
    stdin = sys.stdin if stdin is None else stdin

    if args.setup:
        return run_setup()

    if is_activation_uri(args.payload):
        log_event("dispatch", "uri_handoff", {})
        activate(from_uri(args.payload))
        return 0

    raw = args.payload if args.payload is not None else read_stdin(stdin)
    payload = parse_payload(raw)

    service = HostNotificationService(
        clicked_user_info=parse_user_info(args.user_info) if args.clicked else None,
    )
    dispatcher = Dispatcher(service=service, env=EnvironmentView.from_os())
    return dispatcher.run(payload, interactive=is_interactive(stdin), clicked=args.clicked)


if __name__ == "__main__":
    sys.exit(main())
