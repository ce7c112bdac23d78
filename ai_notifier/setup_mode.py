"""
Setup mode - what a person sees when running the notifier by hand.

Reports whether a notification backend is available and prints the hook
configuration for each supported CLI. Does not edit any settings file.
"""
import json
import shlex
import shutil
import sys
from typing import TextIO

from ai_notifier.config import APP_NAME
from ai_notifier.detector import Producer
from ai_notifier.notifier_utils import log_event
from ai_notifier.notifier_utils.notify import (
    NotificationRequest,
    available_backend,
    get_platform,
    send_notification,
)


def notifier_command() -> str:
    """How the CLIs should invoke us: the console script if installed."""
    return shutil.which("ai-notifier") or shlex.join([sys.executable, "-m", "ai_notifier"])


def _command_hook(command: str) -> list[dict]:
    return [{"hooks": [{"type": "command", "command": command}]}]


def hook_snippets(command: str) -> dict[Producer, str]:
    claude = {"hooks": {
        "Stop": _command_hook(command),
        "Notification": _command_hook(command),
    }}
    gemini = {"hooks": {
        "AfterModel": _command_hook(command),
        "Notification": _command_hook(command),
    }}
    codex = f"notify = {json.dumps(shlex.split(command))}"
    return {
        Producer.CLAUDE: "~/.claude/settings.json\n" + json.dumps(claude, indent=2),
        Producer.GEMINI: "~/.gemini/settings.json\n" + json.dumps(gemini, indent=2),
        Producer.CODEX: "~/.codex/config.toml\n" + codex,
    }


def run_setup(out: TextIO | None = None, send_test: bool = True) -> int:
    """Print status and configuration. Returns 0 if notifications work, else 1."""
    out = out or sys.stdout
    backend = available_backend()
    log_event("setup", "run", {"backend": backend, "platform": get_platform()})

    print(f"{APP_NAME}", file=out)
    if backend is None:
        print(f"No notification tool found for {get_platform()}.", file=out)
        if get_platform() == "macos":
            print("Install one with: brew install terminal-notifier", file=out)
        elif get_platform() == "linux":
            print("Install libnotify (notify-send).", file=out)
        return 1

    print(f"Notifications are delivered with {backend}.", file=out)
    for producer, snippet in hook_snippets(notifier_command()).items():
        print(f"\n{producer.display_name}: add to {snippet}", file=out)

    if send_test:
        ok = send_notification(NotificationRequest(
            title=APP_NAME,
            subtitle="Setup",
            body="Notifications are enabled.",
        ))
        if not ok:
            print("\nThe test notification could not be delivered.", file=out)
            return 1
    return 0
