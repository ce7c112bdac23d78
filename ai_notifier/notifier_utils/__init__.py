"""
Shared utilities for the notifier.

Usage:
    from ai_notifier.notifier_utils import log_event, graceful_main
    # or
    from ai_notifier.notifier_utils.state import FileStateStore
"""
from .logging import (
    log_event,
    graceful_main,
)

from .io import (
    iter_jsonl,
    safe_load_json,
    atomic_write_bytes,
    atomic_write_json,
    safe_mtime,
)

from .state import (
    StateStore,
    MemoryStateStore,
    FileStateStore,
)

from .notify import (
    NotificationRequest,
    HostNotificationService,
    OneShot,
    send_notification,
)

__all__ = [
    # Logging
    "log_event",
    "graceful_main",
    # I/O
    "iter_jsonl",
    "safe_load_json",
    "atomic_write_bytes",
    "atomic_write_json",
    "safe_mtime",
    # State
    "StateStore",
    "MemoryStateStore",
    "FileStateStore",
    # Notifications
    "NotificationRequest",
    "HostNotificationService",
    "OneShot",
    "send_notification",
]
